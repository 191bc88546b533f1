from typing import Any, Dict, List, Tuple

import pytest

HEADER = "called_time;answered_time;hangup_time;event_timestamp;wait_duration;talked_duration"


class RecordingSink:
    def __init__(self) -> None:
        self.events: List[Tuple[str, str, Dict[str, Any]]] = []

    def info(self, event: str, **fields: Any) -> None:
        self.events.append(("info", event, fields))

    def warning(self, event: str, **fields: Any) -> None:
        self.events.append(("warning", event, fields))

    def error(self, event: str, **fields: Any) -> None:
        self.events.append(("error", event, fields))

    def named(self, event: str) -> List[Dict[str, Any]]:
        return [fields for _, name, fields in self.events if name == event]


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def write_calls(tmp_path):
    def _write(lines, name="calls.csv", header=HEADER):
        path = tmp_path / name
        body = "\n".join([header, *lines]) if header is not None else "\n".join(lines)
        path.write_text(body + "\n", encoding="utf-8")
        return str(path)

    return _write
