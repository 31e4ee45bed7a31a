import logging
from datetime import datetime
from supabase import Client
from postgrest.exceptions import APIError
from typing import Any, Dict, List

from shifttree.config.permissions_config import MANAGER, role_allows
from shifttree.core.dependencies import DENIED_MESSAGES
from shifttree.core.errors import Conflict, Forbidden, InternalError, NotFound
from shifttree.core.schemas import UserResponse
from shifttree.core.timestamps import parse_db_timestamp, to_iso_utc
from shifttree.modules.schedules.schemas import (
    MemberAdd, ScheduleCreate, ScheduleCreateResponse, ScheduleResponse
)
from shifttree.modules.users.service import UserService

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"


def _sort_key(info: Dict[str, Any]):
    # schedules without shifts sort last
    start = info.get("start_time")
    return (
        start is None,
        parse_db_timestamp(start) if start is not None else datetime.min,
        info["schedule_name"],
    )


class ScheduleService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.users = UserService(supabase)

    def _to_response(self, info: Dict[str, Any], owners: Dict[str, UserResponse]) -> ScheduleResponse:
        return ScheduleResponse(
            id=info["schedule_id"],
            name=info["schedule_name"],
            description=info.get("schedule_description") or "",
            owner=owners[info["owner_id"]],
            role=info["user_role"],
            start_time=to_iso_utc(info.get("start_time")),
            end_time=to_iso_utc(info.get("end_time")),
        )

    def create_schedule(self, schedule_data: ScheduleCreate, user_id: str) -> ScheduleCreateResponse:
        """Create a schedule owned by the user"""
        result = self.supabase.table("schedule").insert({
            "owner_id": user_id,
            "schedule_name": schedule_data.name,
            "schedule_description": schedule_data.description
        }).execute()

        if not result.data:
            logger.error("Failed to create schedule for user %s", user_id)
            raise InternalError()

        schedule_id = result.data[0]["id"]
        logger.info("User %s created schedule %s", user_id, schedule_id)
        return ScheduleCreateResponse(schedule_id=schedule_id)

    def list_schedules(self, user_id: str, roles: List[str]) -> List[ScheduleResponse]:
        """Schedules where the user holds one of the roles, earliest first"""
        if not roles:
            return []
        result = self.supabase.table("schedule_info")\
            .select("*")\
            .eq("user_id", user_id)\
            .in_("user_role", sorted(set(roles)))\
            .execute()

        rows = sorted(result.data or [], key=_sort_key)
        owners = self.users.get_users_by_ids(r["owner_id"] for r in rows)
        return [self._to_response(r, owners) for r in rows]

    def get_schedule(self, info: Dict[str, Any]) -> ScheduleResponse:
        """Schedule as seen by the caller whose schedule_info row is given"""
        owners = self.users.get_users_by_ids([info["owner_id"]])
        return self._to_response(info, owners)

    def delete_schedule(self, schedule_id: str, user_id: str) -> None:
        """Soft delete: sets schedule.removed"""
        result = self.supabase.rpc("remove_schedule", {
            "p_user_id": user_id,
            "p_schedule_id": schedule_id
        }).execute()
        if not result.data:
            raise Forbidden(DENIED_MESSAGES["schedules:delete"])
        logger.info("User %s removed schedule %s", user_id, schedule_id)

    def list_members(self, schedule_id: str) -> List[UserResponse]:
        """Users holding a membership (manager or member) on the schedule"""
        result = self.supabase.table("user_schedule_membership")\
            .select("user_id")\
            .eq("schedule_id", schedule_id)\
            .execute()
        return self.users.list_users([m["user_id"] for m in result.data or []])

    def add_member(
        self,
        schedule_id: str,
        member_data: MemberAdd,
        info: Dict[str, Any],
        user_id: str
    ) -> UserResponse:
        """Add an existing account to the schedule with the given role"""
        if member_data.role == MANAGER and not role_allows(info["user_role"], "members:grant_manager"):
            raise Forbidden(DENIED_MESSAGES["members:grant_manager"])

        user = self.users.get_user_by_email(member_data.email)
        if user is None:
            raise NotFound("User not found")
        if user["id"] == info["owner_id"]:
            raise Conflict("User is the owner of this schedule")

        try:
            result = self.supabase.rpc("add_schedule_member", {
                "p_user_id": user_id,
                "p_schedule_id": schedule_id,
                "p_member_id": user["id"],
                "p_role": member_data.role
            }).execute()
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                raise Conflict("User is already a member of this schedule")
            raise

        if not result.data:
            raise Forbidden(DENIED_MESSAGES["members:grant_manager" if member_data.role == MANAGER else "members:add"])
        logger.info("Added %s to schedule %s as %s", user["id"], schedule_id, member_data.role)
        return UserResponse.from_row(user)

    def remove_member(self, schedule_id: str, member_id: str, info: Dict[str, Any], user_id: str) -> None:
        """Remove a membership and the member's signups; managers can only be removed by the owner"""
        result = self.supabase.table("user_schedule_membership")\
            .select("user_role")\
            .eq("schedule_id", schedule_id)\
            .eq("user_id", member_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise NotFound("Member not found")
        denied = "members:grant_manager" if result.data[0]["user_role"] == MANAGER else "members:remove"
        if not role_allows(info["user_role"], denied):
            raise Forbidden(DENIED_MESSAGES[denied])

        removed = self.supabase.rpc("remove_schedule_member", {
            "p_user_id": user_id,
            "p_schedule_id": schedule_id,
            "p_member_id": member_id
        }).execute()
        if not removed.data:
            raise Forbidden(DENIED_MESSAGES[denied])
        logger.info("Removed %s from schedule %s", member_id, schedule_id)
