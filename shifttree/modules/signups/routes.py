from fastapi import APIRouter, Depends, Query
from shifttree.database.supabase_client import get_supabase
from shifttree.core.dependencies import get_current_user, check_shift_access
from shifttree.modules.signups.schemas import SignupCreate
from shifttree.modules.signups.service import SignupService
from supabase import Client
from typing import Dict, Optional
from uuid import UUID

router = APIRouter(prefix="/shifts", tags=["signups"])


def get_signup_service(supabase: Client = Depends(get_supabase)) -> SignupService:
    return SignupService(supabase)


@router.post("/{shift_id}/signups", status_code=204)
async def add_signup(
    shift_id: UUID,
    signup_data: Optional[SignupCreate] = None,
    user_data: Dict = Depends(get_current_user),
    service: SignupService = Depends(get_signup_service),
    supabase: Client = Depends(get_supabase)
):
    """Sign up for a shift (member), or sign a member up (owner or manager, with userId)"""
    signup_data = signup_data or SignupCreate()
    shift, info = check_shift_access(str(shift_id), user_data, supabase)
    target_user_id = str(signup_data.user_id) if signup_data.user_id else None
    service.add_signup(shift, info, user_data["id"], target_user_id, signup_data.weight)
    return None


@router.delete("/{shift_id}/signups", status_code=204)
async def delete_signup(
    shift_id: UUID,
    user_id: Optional[UUID] = Query(default=None, alias="userId"),
    user_data: Dict = Depends(get_current_user),
    service: SignupService = Depends(get_signup_service),
    supabase: Client = Depends(get_supabase)
):
    """Give up a shift (member), or remove a member from it (owner or manager, with userId)"""
    shift, info = check_shift_access(str(shift_id), user_data, supabase)
    target_user_id = str(user_id) if user_id else None
    service.delete_signup(shift, info, user_data["id"], target_user_id)
    return None
