from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for API bodies: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserResponse(CamelModel):
    id: str
    display_name: str
    email: str
    profile_image_url: str = ""

    @classmethod
    def from_row(cls, row: dict) -> "UserResponse":
        """Build from a user_account row"""
        return cls(id=row["id"], display_name=row["username"], email=row["email"])
