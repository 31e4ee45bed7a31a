import logging
from supabase import Client
from typing import Any, Dict, List, Optional

from shifttree.config.permissions_config import MEMBER, role_allows
from shifttree.core.dependencies import get_schedule_info
from shifttree.core.errors import BadRequest, Forbidden
from shifttree.modules.shifts.service import ShiftService, shift_to_response
from shifttree.modules.signups.schemas import ShiftWithSignupsResponse, SignupResponse
from shifttree.modules.users.service import UserService

logger = logging.getLogger(__name__)

DEFAULT_WEIGHT = 1

ADD_DENIED = {
    "signups:self": "You are not allowed to sign up for this shift",
    "signups:delegate": "You do not have permission to sign users up for this shift",
}
REMOVE_DENIED = {
    "signups:self": "You are not allowed to give up this shift",
    "signups:delegate": "You do not have permission to remove other users from this shift",
}
NOT_A_MEMBER = "Target user does not exist or is not a member of the schedule"


class SignupService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.users = UserService(supabase)
        self.shifts = ShiftService(supabase)

    def list_schedule_signups(self, schedule_id: str) -> List[ShiftWithSignupsResponse]:
        """Every shift of the schedule with the users signed up for it"""
        shift_rows = self.shifts.list_shift_rows(schedule_id)
        if not shift_rows:
            return []

        result = self.supabase.table("user_shift_signup")\
            .select("id, user_id, shift_id, user_weighting")\
            .in_("shift_id", [s["id"] for s in shift_rows])\
            .execute()
        signups = result.data or []
        users = self.users.get_users_by_ids(s["user_id"] for s in signups)

        by_shift: Dict[str, List[SignupResponse]] = {}
        for signup in signups:
            user = users.get(signup["user_id"])
            if user is None:
                continue
            by_shift.setdefault(signup["shift_id"], []).append(SignupResponse(
                id=signup["id"],
                weight=signup["user_weighting"],
                user=user,
            ))

        return [
            ShiftWithSignupsResponse(
                **shift_to_response(row).model_dump(),
                signups=by_shift.get(row["id"], []),
            )
            for row in shift_rows
        ]

    def authorize(
        self,
        shift: Dict[str, Any],
        info: Dict[str, Any],
        user_id: str,
        target_user_id: Optional[str],
        denied: Dict[str, str]
    ) -> str:
        """
        Decide whose signup the caller may change and return that user id.

        Delegated when a different target is named: the caller must be allowed
        signups:delegate and the target must hold the member role on the same
        schedule as the shift. Otherwise the caller acts for themselves and must
        be allowed signups:self.
        """
        if target_user_id and target_user_id != user_id:
            if not role_allows(info["user_role"], "signups:delegate"):
                logger.info("User %s (role %s) denied delegated signup change on shift %s",
                            user_id, info["user_role"], shift["id"])
                raise Forbidden(denied["signups:delegate"])
            target_info = get_schedule_info(shift["schedule_id"], target_user_id, self.supabase)
            if target_info is None or target_info["user_role"] != MEMBER:
                raise BadRequest(NOT_A_MEMBER)
            return target_user_id

        if not role_allows(info["user_role"], "signups:self"):
            logger.info("User %s (role %s) denied signup change on shift %s",
                        user_id, info["user_role"], shift["id"])
            raise Forbidden(denied["signups:self"])
        return user_id

    def add_signup(
        self,
        shift: Dict[str, Any],
        info: Dict[str, Any],
        user_id: str,
        target_user_id: Optional[str] = None,
        weight: Optional[int] = None
    ) -> None:
        """Sign the caller (or a member, when delegated) up; existing signups are left as they are"""
        signup_user_id = self.authorize(shift, info, user_id, target_user_id, ADD_DENIED)
        result = self.supabase.rpc("add_shift_signup", {
            "p_user_id": user_id,
            "p_target_user_id": signup_user_id,
            "p_shift_id": shift["id"],
            "p_weight": DEFAULT_WEIGHT if weight is None else weight
        }).execute()
        if not result.data:
            action = "signups:delegate" if signup_user_id != user_id else "signups:self"
            raise self.shifts.refused(shift["id"], ADD_DENIED[action])
        logger.info("User %s signed %s up for shift %s", user_id, signup_user_id, shift["id"])

    def delete_signup(
        self,
        shift: Dict[str, Any],
        info: Dict[str, Any],
        user_id: str,
        target_user_id: Optional[str] = None
    ) -> None:
        """Remove the caller's (or a member's, when delegated) signup if there is one"""
        signup_user_id = self.authorize(shift, info, user_id, target_user_id, REMOVE_DENIED)
        result = self.supabase.rpc("remove_shift_signup", {
            "p_user_id": user_id,
            "p_target_user_id": signup_user_id,
            "p_shift_id": shift["id"]
        }).execute()
        if not result.data:
            action = "signups:delegate" if signup_user_id != user_id else "signups:self"
            raise self.shifts.refused(shift["id"], REMOVE_DENIED[action])
        logger.info("User %s removed %s from shift %s", user_id, signup_user_id, shift["id"])
