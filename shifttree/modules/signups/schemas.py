from pydantic import Field
from typing import List, Optional
from uuid import UUID

from shifttree.core.schemas import CamelModel, UserResponse
from shifttree.modules.shifts.schemas import ShiftResponse


class SignupCreate(CamelModel):
    user_id: Optional[UUID] = None  # sign up someone else (owner/manager only)
    weight: Optional[int] = Field(default=None, ge=0)


class SignupResponse(CamelModel):
    id: str
    weight: int
    user: UserResponse


class ShiftWithSignupsResponse(ShiftResponse):
    signups: List[SignupResponse] = []
