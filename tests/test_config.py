import logging

import pytest
from pydantic import ValidationError

from shift_factory.config import (
    DEFAULT_EMPLOYEES,
    ModelConfig,
    PipelineConfig,
    SchedulerSettings,
    config,
)
from shift_factory.diagnostics import LoggingSink, get_sink
from shift_factory.errors import MissingCredentialError


def test_defaults():
    assert config.pipeline.percentile == 75.0
    assert config.pipeline.bucketing == "day_of_month"
    assert config.pipeline.delimiter == ";"
    assert config.pipeline.employee_names == DEFAULT_EMPLOYEES
    assert config.model.temperature == 0.5


def test_settings_read_api_key_from_given_env():
    settings = SchedulerSettings.from_env({"OPENAI_API_KEY": "  sk-abc  "})

    assert settings.require_api_key() == "sk-abc"


def test_blank_api_key_is_missing():
    settings = SchedulerSettings.from_env({"OPENAI_API_KEY": "   "})

    with pytest.raises(MissingCredentialError, match="OPENAI_API_KEY"):
        settings.require_api_key()


def test_settings_keep_given_model():
    model = ModelConfig(default_model="gpt-4o", timeout_seconds=5)

    settings = SchedulerSettings.from_env({}, model=model)

    assert settings.api_key is None
    assert settings.model.default_model == "gpt-4o"


@pytest.mark.parametrize(
    "update",
    [{"percentile": 101}, {"percentile": -0.5}, {"bucketing": "hourly"}, {"delimiter": ";;"}],
)
def test_invalid_pipeline_values_are_rejected(update):
    with pytest.raises(ValidationError):
        PipelineConfig(**update)


def test_logging_sink_forwards_fields(caplog):
    sink = LoggingSink("shift_factory.test")

    with caplog.at_level(logging.INFO, logger="shift_factory.test"):
        sink.warning("row_dropped", line=3)

    assert caplog.records[0].levelno == logging.WARNING
    assert caplog.records[0].getMessage() == "row_dropped line=3"
    assert caplog.records[0].event == "row_dropped"


def test_get_sink_prefers_injected_sink(sink):
    assert get_sink(sink, "x") is sink
    assert isinstance(get_sink(None, "x"), LoggingSink)
