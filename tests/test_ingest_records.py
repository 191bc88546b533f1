from datetime import datetime

import pytest

from shift_factory.agents.call_volume.ingest_records.agents import (
    get_records,
    parse_seconds,
    parse_time,
)
from shift_factory.errors import FieldParseError, IngestionFileError


def test_full_row_is_parsed(write_calls, sink):
    path = write_calls(
        ["2024/03/01 09:00;2024/03/01 09:01;2024/03/01 09:10;2024/03/01 09:11;12.5;540"]
    )

    records = get_records(path, sink=sink)

    assert len(records) == 1
    rec = records[0]
    assert rec.called_time == datetime(2024, 3, 1, 9, 0)
    assert rec.answered_time == datetime(2024, 3, 1, 9, 1)
    assert rec.hangup_time == datetime(2024, 3, 1, 9, 10)
    assert rec.event_time == datetime(2024, 3, 1, 9, 11)
    assert rec.wait_duration == 12.5
    assert rec.talked_duration == 540.0
    assert sink.named("records_ingested")[0]["count"] == 1


def test_one_bad_called_time_drops_only_that_row(write_calls, sink):
    path = write_calls(
        [
            "2024/03/01 09:00;;;;;",
            "not a date;;;;;",
            "2024/03/02 10:30;;;;;",
            "2024/03/03 11:45;;;;;",
        ]
    )

    records = get_records(path, sink=sink)

    assert [r.called_time.day for r in records] == [1, 2, 3]
    dropped = sink.named("row_dropped")
    assert len(dropped) == 1
    assert dropped[0]["line"] == 3
    assert "called_time" in dropped[0]["error"]


def test_bad_optional_field_keeps_row_at_zero_value(write_calls, sink):
    path = write_calls(["2024/03/01 09:00;yesterday;;;abc;60"])

    records = get_records(path, sink=sink)

    assert len(records) == 1
    assert records[0].answered_time is None
    assert records[0].wait_duration == 0.0
    assert records[0].talked_duration == 60.0
    skipped = sink.named("field_skipped")
    assert len(skipped) == 2


def test_empty_optional_cells_are_zero_without_warnings(write_calls, sink):
    path = write_calls(["2024/03/01 09:00; ; ;;;"])

    records = get_records(path, sink=sink)

    assert records[0].hangup_time is None
    assert records[0].talked_duration == 0.0
    assert sink.named("field_skipped") == []


def test_header_is_case_insensitive_and_optional_columns_may_be_missing(
    write_calls, sink
):
    path = write_calls(
        ["Wait_Duration ;CALLED_TIME", "3.5;2024/03/05 14:00"], header=None
    )

    records = get_records(path, sink=sink)

    assert records[0].called_time == datetime(2024, 3, 5, 14, 0)
    assert records[0].wait_duration == 3.5
    assert records[0].answered_time is None


def test_byte_order_mark_is_ignored(tmp_path, sink):
    path = tmp_path / "bom.csv"
    path.write_text("\ufeffcalled_time\n2024/03/05 14:00\n", encoding="utf-8")

    assert len(get_records(str(path), sink=sink)) == 1


def test_rows_with_wrong_field_count_and_blank_lines_are_skipped(write_calls, sink):
    path = write_calls(
        [
            "2024/03/01 09:00;;;;;",
            "",
            "2024/03/02 09:00;;",
            "2024/03/03 09:00;;;;;",
        ]
    )

    records = get_records(path, sink=sink)

    assert [r.called_time.day for r in records] == [1, 3]
    assert len(sink.named("row_dropped")) == 1


def test_custom_delimiter(write_calls, sink):
    path = write_calls(["2024/03/01 09:00,7"], header="called_time,wait_duration")

    records = get_records(path, delimiter=",", sink=sink)

    assert records[0].wait_duration == 7.0


def test_missing_file_is_fatal(tmp_path, sink):
    with pytest.raises(IngestionFileError):
        get_records(str(tmp_path / "nope.csv"), sink=sink)


def test_empty_file_is_fatal(tmp_path, sink):
    path = tmp_path / "empty.csv"
    path.write_text("", encoding="utf-8")

    with pytest.raises(IngestionFileError):
        get_records(str(path), sink=sink)


def test_header_without_called_time_is_fatal(write_calls, sink):
    path = write_calls(["2024/03/01 09:00;5"], header="answered_time;wait_duration")

    with pytest.raises(IngestionFileError, match="called_time"):
        get_records(path, sink=sink)


def test_field_parsers_raise_field_parse_error():
    with pytest.raises(FieldParseError) as exc:
        parse_time("hangup_time", "2024-03-01 09:00")
    assert exc.value.column == "hangup_time"

    with pytest.raises(FieldParseError):
        parse_seconds("wait_duration", "12s")

    assert parse_seconds("wait_duration", "1e2") == 100.0


def test_undecodable_byte_in_unparsed_column_keeps_every_row(tmp_path, sink):
    path = tmp_path / "latin1.csv"
    path.write_bytes(b"called_time;agent\n2024/03/01 09:00;Jos\xe9\n2024/03/02 09:00;Bob\n")

    records = get_records(str(path), sink=sink)

    assert [r.called_time.day for r in records] == [1, 2]
    assert sink.named("row_dropped") == []


def test_undecodable_bytes_in_parsed_fields_are_reported_per_row(tmp_path, sink):
    path = tmp_path / "latin1.csv"
    path.write_bytes(
        b"called_time;wait_duration\n"
        b"2024/03/01 09:00;5\n"
        b"2024/03/0\xe9 09:00;1\n"
        b"2024/03/02 09:00;1\xe9\n"
    )

    records = get_records(str(path), sink=sink)

    assert [r.wait_duration for r in records] == [5.0, 0.0]
    assert [d["line"] for d in sink.named("row_dropped")] == [3]
    assert [d["line"] for d in sink.named("field_skipped")] == [4]
