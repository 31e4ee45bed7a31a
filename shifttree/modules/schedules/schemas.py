from enum import Enum
from pydantic import EmailStr, Field
from typing import Literal, Optional

from shifttree.core.schemas import CamelModel, UserResponse


class ScheduleRole(str, Enum):
    owner = "owner"
    manager = "manager"
    member = "member"


class ScheduleCreate(CamelModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None


class ScheduleCreateResponse(CamelModel):
    schedule_id: str


class ScheduleResponse(CamelModel):
    id: str
    name: str
    description: str = ""
    owner: UserResponse
    role: ScheduleRole
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    state: str = "open"


class MemberAdd(CamelModel):
    email: EmailStr
    role: Literal["manager", "member"] = "member"
