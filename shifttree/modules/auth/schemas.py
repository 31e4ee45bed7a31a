from pydantic import BaseModel
from typing import List


class TokenPayload(BaseModel):
    email: str
    name: str


class RoleAction(BaseModel):
    name: str
    roles: List[str]
    description: str


class PermissionMatrixResponse(BaseModel):
    roles: List[str]
    actions: List[RoleAction]
