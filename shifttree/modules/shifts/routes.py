from fastapi import APIRouter, Depends
from shifttree.database.supabase_client import get_supabase
from shifttree.core.dependencies import get_current_user, check_shift_access
from shifttree.modules.shifts.schemas import ShiftUpdate
from shifttree.modules.shifts.service import ShiftService
from supabase import Client
from typing import Dict
from uuid import UUID

router = APIRouter(prefix="/shifts", tags=["shifts"])


def get_shift_service(supabase: Client = Depends(get_supabase)) -> ShiftService:
    return ShiftService(supabase)


@router.delete("/{shift_id}", status_code=204)
async def delete_shift(
    shift_id: UUID,
    user_data: Dict = Depends(get_current_user),
    service: ShiftService = Depends(get_shift_service),
    supabase: Client = Depends(get_supabase)
):
    """Delete a shift (owner or manager of its schedule)"""
    check_shift_access(str(shift_id), user_data, supabase, "shifts:delete")
    service.delete_shift(str(shift_id), user_data["id"])
    return None


@router.patch("/{shift_id}", status_code=204)
async def edit_shift(
    shift_id: UUID,
    shift_data: ShiftUpdate,
    user_data: Dict = Depends(get_current_user),
    service: ShiftService = Depends(get_shift_service),
    supabase: Client = Depends(get_supabase)
):
    """Edit shift times, name or description (owner or manager of its schedule)"""
    shift, _ = check_shift_access(str(shift_id), user_data, supabase, "shifts:update")
    service.update_shift(shift, shift_data, user_data["id"])
    return None
