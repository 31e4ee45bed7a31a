import logging
from fastapi import HTTPException
from supabase import Client
from typing import Any, Dict, List

from shifttree.core.dependencies import DENIED_MESSAGES, get_shift_row
from shifttree.core.errors import BadRequest, Forbidden, NotFound
from shifttree.core.timestamps import parse_db_timestamp, to_db_timestamp, to_iso_utc
from shifttree.modules.shifts.schemas import ShiftCreate, ShiftResponse, ShiftUpdate, check_time_order

logger = logging.getLogger(__name__)


def shift_to_response(row: Dict[str, Any]) -> ShiftResponse:
    return ShiftResponse(
        id=row["id"],
        name=row.get("shift_name") or "",
        description=row.get("shift_description") or "",
        start_time=to_iso_utc(row["start_time"]),
        end_time=to_iso_utc(row["end_time"]),
    )


class ShiftService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def refused(self, shift_id: str, message: str) -> HTTPException:
        """Error for a guarded write that came back empty: 404 if the shift is gone by now, else 403"""
        if get_shift_row(shift_id, self.supabase) is None:
            return NotFound("Shift not found")
        return Forbidden(message)

    def list_shift_rows(self, schedule_id: str) -> List[Dict[str, Any]]:
        result = self.supabase.table("shift")\
            .select("*")\
            .eq("schedule_id", schedule_id)\
            .order("start_time")\
            .execute()
        return result.data or []

    def list_shifts(self, schedule_id: str) -> List[ShiftResponse]:
        """Shifts of a schedule, earliest first"""
        return [shift_to_response(row) for row in self.list_shift_rows(schedule_id)]

    def create_shift(self, schedule_id: str, shift_data: ShiftCreate, user_id: str) -> ShiftResponse:
        """Create a shift; the database re-checks the caller's role in the same call"""
        result = self.supabase.rpc("create_shift", {
            "p_user_id": user_id,
            "p_schedule_id": schedule_id,
            "p_start_time": to_db_timestamp(shift_data.start_time),
            "p_end_time": to_db_timestamp(shift_data.end_time),
            "p_shift_name": shift_data.name,
            "p_shift_description": shift_data.description
        }).execute()

        if not result.data:
            raise Forbidden(DENIED_MESSAGES["shifts:create"])

        shift = result.data[0]
        logger.info("User %s created shift %s in schedule %s", user_id, shift["id"], schedule_id)
        return shift_to_response(shift)

    def update_shift(self, shift: Dict[str, Any], shift_data: ShiftUpdate, user_id: str) -> None:
        """Apply a partial update; omitted fields keep their stored value, an explicit null clears name or description"""
        start_time = shift_data.start_time or parse_db_timestamp(shift["start_time"])
        end_time = shift_data.end_time or parse_db_timestamp(shift["end_time"])
        try:
            check_time_order(start_time, end_time)
        except ValueError as e:
            raise BadRequest(str(e))

        sent = shift_data.model_fields_set
        name = shift_data.name if "name" in sent else shift.get("shift_name")
        description = shift_data.description if "description" in sent else shift.get("shift_description")

        result = self.supabase.rpc("update_shift", {
            "p_user_id": user_id,
            "p_shift_id": shift["id"],
            "p_start_time": to_db_timestamp(start_time),
            "p_end_time": to_db_timestamp(end_time),
            "p_shift_name": name,
            "p_shift_description": description
        }).execute()

        if not result.data:
            raise self.refused(shift["id"], DENIED_MESSAGES["shifts:update"])
        logger.info("User %s updated shift %s", user_id, shift["id"])

    def delete_shift(self, shift_id: str, user_id: str) -> None:
        """Hard delete; signups go with it (on delete cascade)"""
        result = self.supabase.rpc("delete_shift", {
            "p_user_id": user_id,
            "p_shift_id": shift_id
        }).execute()
        if not result.data:
            raise self.refused(shift_id, DENIED_MESSAGES["shifts:delete"])
        logger.info("User %s deleted shift %s", user_id, shift_id)
