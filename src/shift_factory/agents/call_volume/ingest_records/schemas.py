from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class CallEventRecord(BaseModel):
    called_time: datetime = Field(description="When the call came in")
    answered_time: Optional[datetime] = Field(default=None)
    hangup_time: Optional[datetime] = Field(default=None)
    event_time: Optional[datetime] = Field(
        default=None, description="Generic event timestamp, if present"
    )
    wait_duration: float = Field(default=0.0, description="Seconds in queue")
    talked_duration: float = Field(default=0.0, description="Seconds on the call")
