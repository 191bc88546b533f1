import os
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from google.adk.agents import Agent

from shift_factory.agents.call_volume.ingest_records.agents import get_records
from shift_factory.agents.call_volume.ingest_records.schemas import CallEventRecord
from shift_factory.config import Bucketing
from shift_factory.diagnostics import get_sink
from shift_factory.utils import get_file_list

BucketKey = Union[int, str]


def bucket_key(record: CallEventRecord, bucketing: Bucketing = "day_of_month") -> BucketKey:
    """
    day_of_month drops month and year, so the 3rd of March and the 3rd of April
    land in the same bucket. month_day and iso_week keep them apart.
    """
    called = record.called_time
    if bucketing == "day_of_month":
        return called.day
    if bucketing == "month_day":
        return called.strftime("%m-%d")
    if bucketing == "iso_week":
        year, week, _ = called.isocalendar()
        return f"{year:04d}-W{week:02d}"
    raise ValueError(f"Unknown bucketing: {bucketing!r}")


def compute_day_counts(
    records: Iterable[CallEventRecord], bucketing: Bucketing = "day_of_month"
) -> Dict[BucketKey, int]:
    counts: Dict[BucketKey, int] = {}
    for rec in records:
        day = bucket_key(rec, bucketing)
        counts[day] = counts.get(day, 0) + 1
    return counts


def compute_threshold(values: Sequence[int], percentile: float) -> float:
    """
    Nearest-rank percentile: the value at floor(p/100 * n) of the sorted
    sample, clamped to the last index. Never interpolates.
    """
    if not values:
        raise ValueError("Cannot compute a threshold over no values")
    if not 0 <= percentile <= 100:
        raise ValueError(f"percentile must be within [0, 100], got {percentile}")

    ordered = sorted(values)
    index = int((percentile / 100.0) * len(ordered))
    if index >= len(ordered):
        index = len(ordered) - 1
    return float(ordered[index])


def select_high_volume_days(
    counts: Dict[BucketKey, int], threshold: float
) -> List[BucketKey]:
    # ties with the threshold are not high volume
    return sorted(day for day, count in counts.items() if count > threshold)


def get_high_volume_day_numbers(
    records: Iterable[CallEventRecord],
    percentile: float,
    bucketing: Bucketing = "day_of_month",
) -> List[BucketKey]:
    counts = compute_day_counts(records, bucketing)
    if not counts:
        return []
    threshold = compute_threshold(list(counts.values()), percentile)
    return select_high_volume_days(counts, threshold)


def _records_from_path(path: str, delimiter: str, sink) -> List[CallEventRecord]:
    if os.path.isdir(path):
        records: List[CallEventRecord] = []
        for file_path in get_file_list(path):
            records.extend(get_records(file_path, delimiter=delimiter, sink=sink))
        return records
    return get_records(path, delimiter=delimiter, sink=sink)


class HighVolumeDayDetectorAgent(Agent):
    """
    High Volume Day Detector (no LLM)

    Input (.run): path to a ';' delimited call log, or a folder of them.

    Output:
      {
        "stats": {"total_records", "buckets", "flagged"},
        "day_counts": {bucket -> count},
        "threshold": float | None,
        "high_volume_days": [bucket, ...]  (ascending)
      }
    """

    name: str = "high_volume_day_detector_agent"
    description: str = (
        "Flags days whose call count is strictly above the nearest-rank percentile."
    )
    percentile: float = 75.0
    bucketing: Bucketing = "day_of_month"
    delimiter: str = ";"

    async def run(self, input: str, sink=None, **kwargs) -> Dict[str, Any]:
        if not isinstance(input, str):
            raise ValueError("Input must be a path to a call log CSV or folder.")
        sink = get_sink(sink, __name__)

        records = _records_from_path(input, self.delimiter, sink)
        counts = compute_day_counts(records, self.bucketing)

        threshold: Optional[float] = None
        high_volume_days: List[BucketKey] = []
        if counts:
            threshold = compute_threshold(list(counts.values()), self.percentile)
            high_volume_days = select_high_volume_days(counts, threshold)

        sink.info(
            "high_volume_days",
            percentile=self.percentile,
            threshold=threshold,
            days=high_volume_days,
        )

        return {
            "stats": {
                "total_records": len(records),
                "buckets": len(counts),
                "flagged": len(high_volume_days),
            },
            "day_counts": counts,
            "threshold": threshold,
            "high_volume_days": high_volume_days,
        }
