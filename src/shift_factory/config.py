import os
from typing import List, Literal, Mapping, Optional

from pydantic import BaseModel, Field

from shift_factory.errors import MissingCredentialError

Bucketing = Literal["day_of_month", "month_day", "iso_week"]

DEFAULT_EMPLOYEES = [
    "Alice",
    "Bob",
    "Charlie",
    "David",
    "Eva",
    "Frank",
    "Grace",
    "Hannah",
    "Mbuso",
]


class ModelConfig(BaseModel):
    default_model: str = "gpt-4o-mini"
    temperature: float = Field(default=0.5, ge=0.0, le=2.0)
    timeout_seconds: float = Field(default=120.0, gt=0)


class PipelineConfig(BaseModel):
    percentile: float = Field(default=75.0, ge=0.0, le=100.0)
    bucketing: Bucketing = Field(
        default="day_of_month",
        description="day_of_month keeps the lossy day-only buckets",
    )
    delimiter: str = Field(default=";", min_length=1, max_length=1)
    output_dir: str = "."
    employee_names: List[str] = Field(default_factory=lambda: list(DEFAULT_EMPLOYEES))


class SchedulerSettings(BaseModel):
    """Explicit credentials for the scheduling model, never read implicitly."""

    api_key: Optional[str] = None
    model: ModelConfig = Field(default_factory=ModelConfig)

    @classmethod
    def from_env(
        cls, env: Optional[Mapping[str, str]] = None, model: Optional[ModelConfig] = None
    ) -> "SchedulerSettings":
        source = os.environ if env is None else env
        api_key = (source.get("OPENAI_API_KEY") or "").strip() or None
        return cls(api_key=api_key, model=model or ModelConfig())

    def require_api_key(self) -> str:
        if not self.api_key:
            raise MissingCredentialError("OPENAI_API_KEY not set")
        return self.api_key


class AppConfig(BaseModel):
    model: ModelConfig = Field(default_factory=ModelConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)


config = AppConfig()
