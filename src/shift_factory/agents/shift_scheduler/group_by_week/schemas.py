from typing import Dict, KeysView, List, Optional

from pydantic import BaseModel, Field, RootModel

WEEK_KEY = "Week"
EMPLOYEE_KEY = "Employee"
RESERVED_KEYS = (WEEK_KEY, EMPLOYEE_KEY)


class FlatScheduleEntry(RootModel[Dict[str, str]]):
    """
    One employee-week as returned by the scheduler. Only "Week" and
    "Employee" have a meaning here; every other key is opaque and keeps the
    order it was decoded in.
    """

    @property
    def week(self) -> Optional[str]:
        return self.root.get(WEEK_KEY)

    @property
    def employee(self) -> Optional[str]:
        return self.root.get(EMPLOYEE_KEY)

    def keys(self) -> KeysView[str]:
        return self.root.keys()

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.root.get(key, default)

    def __contains__(self, key: object) -> bool:
        return key in self.root

    def __getitem__(self, key: str) -> str:
        return self.root[key]


class WeekGroup(BaseModel):
    label: str = Field(description="Value of the Week key shared by every entry")
    entries: List[FlatScheduleEntry] = Field(default_factory=list)
