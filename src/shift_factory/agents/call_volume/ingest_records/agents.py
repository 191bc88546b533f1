import csv
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple

from shift_factory.agents.call_volume.ingest_records.schemas import CallEventRecord
from shift_factory.diagnostics import DiagnosticSink, get_sink
from shift_factory.errors import FieldParseError, IngestionFileError

TIME_FORMAT = "%Y/%m/%d %H:%M"
REQUIRED_COLUMN = "called_time"


def parse_time(column: str, value: str) -> datetime:
    try:
        return datetime.strptime(value, TIME_FORMAT)
    except ValueError as e:
        raise FieldParseError(column, value, str(e)) from e


def parse_seconds(column: str, value: str) -> float:
    try:
        return float(value)
    except ValueError as e:
        raise FieldParseError(column, value, str(e)) from e


# csv column -> (record field, parser)
OPTIONAL_COLUMNS: Dict[str, Tuple[str, Callable[[str, str], object]]] = {
    "answered_time": ("answered_time", parse_time),
    "hangup_time": ("hangup_time", parse_time),
    "event_timestamp": ("event_time", parse_time),
    "wait_duration": ("wait_duration", parse_seconds),
    "talked_duration": ("talked_duration", parse_seconds),
}


def _column_index(header: List[str]) -> Dict[str, int]:
    col_idx: Dict[str, int] = {}
    for i, col in enumerate(header):
        col_idx[col.strip().lower()] = i
    return col_idx


def _parse_row(
    row: List[str], col_idx: Dict[str, int], line: int, sink: DiagnosticSink
) -> Optional[CallEventRecord]:
    called_str = row[col_idx[REQUIRED_COLUMN]].strip()
    try:
        called_time = parse_time(REQUIRED_COLUMN, called_str)
    except FieldParseError as e:
        sink.warning("row_dropped", line=line, error=str(e))
        return None

    fields: Dict[str, object] = {"called_time": called_time}
    for column, (field_name, parser) in OPTIONAL_COLUMNS.items():
        idx = col_idx.get(column)
        if idx is None:
            continue
        raw = row[idx].strip()
        if not raw:
            continue
        try:
            fields[field_name] = parser(column, raw)
        except FieldParseError as e:
            # keep the row, field stays at its zero value
            sink.warning("field_skipped", line=line, error=str(e))

    return CallEventRecord(**fields)


def get_records(
    csv_file_path: str,
    *,
    delimiter: str = ";",
    sink: Optional[DiagnosticSink] = None,
) -> List[CallEventRecord]:
    """
    Read call events from a delimited file.

    File and header problems raise IngestionFileError. Bad rows and bad
    optional fields are reported to the sink and skipped.
    """
    sink = get_sink(sink, __name__)
    try:
        # undecodable bytes survive as surrogates and fail in the field parsers
        f = open(
            csv_file_path,
            "r",
            newline="",
            encoding="utf-8-sig",
            errors="surrogateescape",
        )
    except OSError as e:
        raise IngestionFileError(f"error opening CSV file: {e}") from e

    records: List[CallEventRecord] = []
    with f:
        reader = csv.reader(f, delimiter=delimiter)
        try:
            header = next(reader)
        except StopIteration:
            raise IngestionFileError(
                f"error reading CSV header: {csv_file_path} is empty"
            ) from None
        except csv.Error as e:
            raise IngestionFileError(f"error reading CSV header: {e}") from e

        col_idx = _column_index(header)
        if REQUIRED_COLUMN not in col_idx:
            raise IngestionFileError(
                f"CSV header of {csv_file_path} has no {REQUIRED_COLUMN} column"
            )

        while True:
            try:
                row = next(reader)
            except StopIteration:
                break
            except csv.Error as e:
                sink.warning("row_unreadable", line=reader.line_num, error=str(e))
                continue

            if not row or (len(row) == 1 and not row[0].strip()):
                continue
            if len(row) != len(header):
                sink.warning(
                    "row_dropped",
                    line=reader.line_num,
                    error=f"expected {len(header)} fields, got {len(row)}",
                )
                continue

            record = _parse_row(row, col_idx, reader.line_num, sink)
            if record is not None:
                records.append(record)

    sink.info("records_ingested", path=csv_file_path, count=len(records))
    return records
