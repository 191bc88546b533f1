import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

from pydantic import ValidationError

from shift_factory.agents.call_volume.detect_high_volume.agents import (
    HighVolumeDayDetectorAgent,
)
from shift_factory.agents.shift_scheduler.build_week_tables.agents import (
    write_week_tables,
)
from shift_factory.agents.shift_scheduler.generate_schedule.agents import (
    request_schedule,
)
from shift_factory.agents.shift_scheduler.generate_schedule.prompts import (
    build_prompt,
)
from shift_factory.agents.shift_scheduler.group_by_week.agents import (
    group_objects_by_week,
)
from shift_factory.config import PipelineConfig, SchedulerSettings, config
from shift_factory.diagnostics import DiagnosticSink, get_sink, setup_logging
from shift_factory.errors import ShiftFactoryError

Scheduler = Callable[[str, SchedulerSettings], Awaitable[str]]

logger = logging.getLogger(__name__)


async def orchestrate(
    *,
    csv_path: str,
    settings: SchedulerSettings,
    pipeline: Optional[PipelineConfig] = None,
    employee_names: Optional[Sequence[str]] = None,
    scheduler: Scheduler = request_schedule,
    sink: Optional[DiagnosticSink] = None,
) -> Dict[str, Any]:
    """
    calls CSV -> high volume days -> scheduler prompt -> model reply
    -> week groups -> one CSV per week.

    Any ShiftFactoryError aborts the run; week files are only written once the
    whole reply has been decoded and grouped.
    """
    pipeline = pipeline or config.pipeline
    employees = list(employee_names or pipeline.employee_names)
    sink = get_sink(sink, __name__)

    # credentials are checked before any work is done
    settings.require_api_key()

    # 1) call volume
    detector = HighVolumeDayDetectorAgent(
        percentile=pipeline.percentile,
        bucketing=pipeline.bucketing,
        delimiter=pipeline.delimiter,
    )
    volume = await detector.run(csv_path, sink=sink)
    sink.info("records_processed", count=volume["stats"]["total_records"])
    high_volume_days = volume["high_volume_days"]

    # 2) scheduler
    prompt = build_prompt(employees, high_volume_days)
    response = await scheduler(prompt, settings)
    sink.info("scheduler_response", chars=len(response))

    # 3) decode + group, then write
    groups = group_objects_by_week(response)
    written = write_week_tables(groups, output_dir=pipeline.output_dir, sink=sink)

    return {
        "stats": volume["stats"],
        "threshold": volume["threshold"],
        "high_volume_days": high_volume_days,
        "weeks": [g.label for g in groups],
        "files": written,
    }


def _split_names(raw: Optional[str]) -> Optional[List[str]]:
    if raw is None:
        return None
    names = [n.strip() for n in raw.split(",") if n.strip()]
    return names or None


# ---- CLI ----
def _parse_args(argv: Optional[Sequence[str]] = None):
    defaults = config.pipeline
    ap = argparse.ArgumentParser(
        description="Shift scheduler: call volume -> LLM schedule -> weekly CSVs"
    )
    ap.add_argument("--csv", required=True, help="Call log CSV (or a folder of them)")
    ap.add_argument(
        "--employees", default=None, help="Comma separated names, e.g. 'Alice,Bob'"
    )
    ap.add_argument("--percentile", type=float, default=defaults.percentile)
    ap.add_argument(
        "--bucketing",
        choices=["day_of_month", "month_day", "iso_week"],
        default=defaults.bucketing,
    )
    ap.add_argument("--output-dir", default=defaults.output_dir)
    ap.add_argument("--model", default=config.model.default_model)
    ap.add_argument("--log-level", default="INFO")
    return ap.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    setup_logging(args.log_level)

    try:
        pipeline = PipelineConfig.model_validate(
            {
                **config.pipeline.model_dump(),
                "percentile": args.percentile,
                "bucketing": args.bucketing,
                "output_dir": args.output_dir,
            }
        )
    except ValidationError as e:
        logger.error("invalid arguments: %s", e)
        return 2
    model = config.model.model_copy(update={"default_model": args.model})
    settings = SchedulerSettings.from_env(model=model)

    try:
        summary = asyncio.run(
            orchestrate(
                csv_path=args.csv,
                settings=settings,
                pipeline=pipeline,
                employee_names=_split_names(args.employees),
                scheduler=request_schedule,
            )
        )
    except ShiftFactoryError as e:
        logger.error("run aborted: %s", e)
        return 1
    except KeyboardInterrupt:
        return 130

    print(json.dumps(summary, ensure_ascii=False, indent=2, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
