import json
from typing import Dict, Iterable, List, Optional

from pydantic import TypeAdapter, ValidationError

from shift_factory.agents.shift_scheduler.group_by_week.schemas import (
    FlatScheduleEntry,
    WeekGroup,
)
from shift_factory.errors import DecodeError

_ENTRIES_ADAPTER = TypeAdapter(List[FlatScheduleEntry])

OPENERS = {"[": "]", "{": "}"}


def _is_container(payload: str) -> bool:
    try:
        return isinstance(json.loads(payload), (list, dict))
    except ValueError:
        return False


def _balanced_end(text: str, start: int) -> Optional[int]:
    """Index of the bracket closing text[start], honoring JSON strings."""
    stack: List[str] = []
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch in OPENERS:
            stack.append(OPENERS[ch])
        elif ch in ("]", "}"):
            if not stack or stack.pop() != ch:
                return None
            if not stack:
                return i
    return None


def _is_schedule(payload: str) -> bool:
    try:
        _ENTRIES_ADAPTER.validate_json(payload)
    except ValidationError:
        return False
    return True


def extract_json_payload(response: str) -> str:
    """
    Pull the JSON document out of a free-form model reply.

    The whole reply is tried first (minus whitespace and code fences); then
    every '[' / '{' is tried as the start of a bracket-balanced JSON value.
    A value that decodes as schedule entries beats any earlier container, so
    an echoed day list such as [4, 17] does not hide the schedule after it.
    """
    trimmed = response.strip(" \t\r\n`")
    if trimmed and _is_container(trimmed):
        return trimmed

    starts = [i for i, ch in enumerate(response) if ch in OPENERS]
    if not starts:
        raise DecodeError("No JSON array or object found in the response")

    first_container: Optional[str] = None
    for start in starts:
        end = _balanced_end(response, start)
        if end is None:
            continue
        candidate = response[start : end + 1]
        if not _is_container(candidate):
            continue
        if _is_schedule(candidate):
            return candidate
        if first_container is None:
            first_container = candidate

    # nothing decodes; hand back the first container so decoding reports why
    if first_container is not None:
        return first_container

    raise DecodeError(
        f"No well-formed JSON value found in the response "
        f"(first bracket at offset {starts[0]}, {len(starts)} candidate(s) tried)"
    )


def decode_schedule_entries(payload: str) -> List[FlatScheduleEntry]:
    try:
        return _ENTRIES_ADAPTER.validate_json(payload)
    except ValidationError as e:
        raise DecodeError(f"error unmarshaling JSON array: {e}") from e


def group_entries_by_week(entries: Iterable[FlatScheduleEntry]) -> List[WeekGroup]:
    weeks: Dict[str, WeekGroup] = {}
    for entry in entries:
        week_key = entry.week
        if week_key is None:
            continue
        if week_key not in weeks:
            weeks[week_key] = WeekGroup(label=week_key)
        weeks[week_key].entries.append(entry)
    return list(weeks.values())


def group_objects_by_week(response: str) -> List[WeekGroup]:
    payload = extract_json_payload(response)
    return group_entries_by_week(decode_schedule_entries(payload))
