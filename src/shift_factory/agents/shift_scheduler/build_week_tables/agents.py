import os
import re
from typing import Dict, List, Optional, Sequence

from shift_factory.agents.shift_scheduler.group_by_week.schemas import (
    RESERVED_KEYS,
    FlatScheduleEntry,
    WeekGroup,
)
from shift_factory.diagnostics import DiagnosticSink, get_sink
from shift_factory.errors import OutputWriteError
from shift_factory.utils import write_csv_rows

FILENAME_TEMPLATE = "generated_schedule_{week}.csv"


def extract_day_number(key: str) -> int:
    """
    "Wednesday (3rd March)" -> 3. Keys without a second token or without
    digits in it give 0, so they sort before every dated column.
    """
    parts = key.split()
    if len(parts) < 2:
        return 0
    digits = re.sub(r"\D", "", parts[1])
    if not digits:
        return 0
    return int(digits)


def build_header_for_week(entries: Sequence[FlatScheduleEntry]) -> List[str]:
    key_set = set()
    for entry in entries:
        key_set.update(entry.keys())

    day_keys: List[str] = []
    other_keys: List[str] = []
    for key in key_set:
        if key in RESERVED_KEYS:
            continue
        if "(" in key:
            day_keys.append(key)
        else:
            other_keys.append(key)

    # name breaks ties so the header does not depend on entry order
    day_keys.sort(key=lambda k: (extract_day_number(k), k))
    other_keys.sort()

    return list(RESERVED_KEYS) + day_keys + other_keys


def build_table_for_week(
    header: Sequence[str], entries: Sequence[FlatScheduleEntry]
) -> List[List[str]]:
    table = [list(header)]
    for entry in entries:
        table.append([entry.get(key, "") for key in header])
    return table


def schedule_filename(week_label: str) -> str:
    return FILENAME_TEMPLATE.format(week=week_label.replace(" ", ""))


def build_week_tables(groups: Sequence[WeekGroup]) -> Dict[str, List[List[str]]]:
    """filename -> table (header row first) for every week group."""
    tables: Dict[str, List[List[str]]] = {}
    for group in groups:
        header = build_header_for_week(group.entries)
        tables[schedule_filename(group.label)] = build_table_for_week(
            header, group.entries
        )
    return tables


def _check_filename(filename: str, week_label: str) -> None:
    # week labels come from the model; they may only name a file in output_dir
    unsafe = [sep for sep in (os.sep, os.altsep, "\x00") if sep and sep in filename]
    if unsafe:
        raise OutputWriteError(
            f"week label {week_label!r} cannot be used as a file name"
        )


def write_week_tables(
    groups: Sequence[WeekGroup],
    output_dir: str = ".",
    sink: Optional[DiagnosticSink] = None,
) -> List[str]:
    sink = get_sink(sink, __name__)
    # every table is built and every name checked before the first file is touched
    tables = build_week_tables(groups)

    labels: Dict[str, str] = {}
    for group in groups:
        filename = schedule_filename(group.label)
        _check_filename(filename, group.label)
        previous = labels.get(filename)
        if previous is not None and previous != group.label:
            sink.warning(
                "schedule_overwritten",
                week=group.label,
                previous_week=previous,
                filename=filename,
            )
        labels[filename] = group.label

    try:
        os.makedirs(output_dir, exist_ok=True)
    except OSError as e:
        raise OutputWriteError(f"Error creating {output_dir}: {e}") from e

    written: List[str] = []
    for filename, week_label in labels.items():
        path = os.path.join(output_dir, filename)
        write_csv_rows(path, tables[filename])
        sink.info("schedule_saved", week=week_label, path=path)
        written.append(path)
    return written
