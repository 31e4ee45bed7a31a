from datetime import datetime
from pydantic import model_validator
from typing import Optional

from shifttree.core.schemas import CamelModel
from shifttree.core.timestamps import parse_db_timestamp


def check_time_order(start_time: datetime, end_time: datetime) -> None:
    if parse_db_timestamp(start_time) >= parse_db_timestamp(end_time):
        raise ValueError("startTime must be before endTime")


class ShiftCreate(CamelModel):
    start_time: datetime
    end_time: datetime
    name: Optional[str] = None
    description: Optional[str] = None

    @model_validator(mode="after")
    def validate_times(self):
        check_time_order(self.start_time, self.end_time)
        return self


class ShiftUpdate(CamelModel):
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    name: Optional[str] = None
    description: Optional[str] = None


class ShiftResponse(CamelModel):
    id: str
    name: str = ""
    description: str = ""
    start_time: str
    end_time: str
