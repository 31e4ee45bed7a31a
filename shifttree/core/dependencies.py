"""
Core dependencies for route protection and schedule role checks
"""

from fastapi import Depends, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from shifttree.config.permissions_config import role_allows
from shifttree.config.settings import Settings, get_settings
from shifttree.core.errors import Forbidden, NotFound, Unauthenticated
from shifttree.database.supabase_client import get_supabase
from shifttree.modules.auth.service import AuthService
from supabase import Client
from typing import Any, Dict, Optional, Tuple
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

# Messages returned with 403 per denied action
DENIED_MESSAGES = {
    "schedules:delete": "You do not have permission to delete this schedule",
    "shifts:create": "You do not have permission to create shifts for this schedule",
    "shifts:update": "You do not have permission to edit this shift",
    "shifts:delete": "You do not have permission to delete this shift",
    "members:read": "You do not have permission to view members of this schedule",
    "members:add": "You do not have permission to add members to this schedule",
    "members:remove": "You do not have permission to remove members from this schedule",
    "members:grant_manager": "Only the schedule owner can add or remove managers",
    "signups:read": "You do not have permission to view signups for this schedule",
}


def get_auth_service(
    supabase: Client = Depends(get_supabase),
    settings: Settings = Depends(get_settings)
) -> AuthService:
    return AuthService(supabase, settings)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> Dict[str, Any]:
    """Resolve the bearer token to the caller's user_account row"""
    if credentials is None or not credentials.credentials:
        raise Unauthenticated("Missing token")
    return auth_service.get_current_user(credentials.credentials)


def get_schedule_info(schedule_id: str, user_id: str, supabase: Client) -> Optional[Dict[str, Any]]:
    """The user's schedule_info row for a schedule, or None when the schedule is invisible to them"""
    result = supabase.table("schedule_info")\
        .select("*")\
        .eq("user_id", user_id)\
        .eq("schedule_id", schedule_id)\
        .limit(1)\
        .execute()
    if not result.data:
        return None
    return result.data[0]


def get_shift_row(shift_id: str, supabase: Client) -> Optional[Dict[str, Any]]:
    result = supabase.table("shift")\
        .select("*")\
        .eq("id", shift_id)\
        .limit(1)\
        .execute()
    if not result.data:
        return None
    return result.data[0]


def ensure_role(info: Dict[str, Any], action: str, user_id: str) -> None:
    """Raise Forbidden unless the role on the info row allows the action"""
    if not role_allows(info["user_role"], action):
        logger.info(
            "Denied %s on schedule %s for user %s (role %s)",
            action, info["schedule_id"], user_id, info["user_role"]
        )
        raise Forbidden(DENIED_MESSAGES.get(action, f"Insufficient permissions. Required: {action}"))


def check_schedule_access(
    schedule_id: str,
    user_data: Dict[str, Any],
    supabase: Client,
    action: Optional[str] = None
) -> Dict[str, Any]:
    """Existence first (404), then role (403). Returns the caller's schedule_info row."""
    info = get_schedule_info(schedule_id, user_data["id"], supabase)
    if info is None:
        raise NotFound("Schedule not found")
    if action is not None:
        ensure_role(info, action, user_data["id"])
    return info


def check_shift_access(
    shift_id: str,
    user_data: Dict[str, Any],
    supabase: Client,
    action: Optional[str] = None
) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """Like check_schedule_access, for the schedule owning the shift. Returns (shift, info)."""
    shift = get_shift_row(shift_id, supabase)
    if shift is None:
        raise NotFound("Shift not found")
    info = get_schedule_info(shift["schedule_id"], user_data["id"], supabase)
    if info is None:
        raise NotFound("Shift not found")
    if action is not None:
        ensure_role(info, action, user_data["id"])
    return shift, info
