from fastapi import APIRouter, Depends, Query
from shifttree.database.supabase_client import get_supabase
from shifttree.core.dependencies import get_current_user, check_schedule_access
from shifttree.core.schemas import UserResponse
from shifttree.modules.schedules.schemas import (
    MemberAdd, ScheduleCreate, ScheduleCreateResponse, ScheduleResponse, ScheduleRole
)
from shifttree.modules.schedules.service import ScheduleService
from shifttree.modules.shifts.schemas import ShiftCreate, ShiftResponse
from shifttree.modules.shifts.service import ShiftService
from shifttree.modules.signups.schemas import ShiftWithSignupsResponse
from shifttree.modules.signups.service import SignupService
from supabase import Client
from typing import Dict, List
from uuid import UUID

router = APIRouter(prefix="/schedules", tags=["schedules"])


def get_schedule_service(supabase: Client = Depends(get_supabase)) -> ScheduleService:
    return ScheduleService(supabase)


def get_shift_service(supabase: Client = Depends(get_supabase)) -> ShiftService:
    return ShiftService(supabase)


def get_signup_service(supabase: Client = Depends(get_supabase)) -> SignupService:
    return SignupService(supabase)


@router.post("", response_model=ScheduleCreateResponse, status_code=201)
async def create_schedule(
    schedule_data: ScheduleCreate,
    user_data: Dict = Depends(get_current_user),
    service: ScheduleService = Depends(get_schedule_service)
):
    """Create a schedule owned by the caller"""
    return service.create_schedule(schedule_data, user_data["id"])


@router.get("", response_model=List[ScheduleResponse])
async def list_schedules(
    role: List[ScheduleRole] = Query(default=list(ScheduleRole)),
    user_data: Dict = Depends(get_current_user),
    service: ScheduleService = Depends(get_schedule_service)
):
    """List schedules where the caller holds one of the given roles (all roles by default)"""
    return service.list_schedules(user_data["id"], [r.value for r in role])


@router.get("/{schedule_id}", response_model=ScheduleResponse)
async def get_schedule(
    schedule_id: UUID,
    user_data: Dict = Depends(get_current_user),
    service: ScheduleService = Depends(get_schedule_service),
    supabase: Client = Depends(get_supabase)
):
    """Get schedule by ID (any role)"""
    info = check_schedule_access(str(schedule_id), user_data, supabase, "schedules:read")
    return service.get_schedule(info)


@router.delete("/{schedule_id}", status_code=204)
async def delete_schedule(
    schedule_id: UUID,
    user_data: Dict = Depends(get_current_user),
    service: ScheduleService = Depends(get_schedule_service),
    supabase: Client = Depends(get_supabase)
):
    """Soft delete a schedule (owner or manager)"""
    check_schedule_access(str(schedule_id), user_data, supabase, "schedules:delete")
    service.delete_schedule(str(schedule_id), user_data["id"])
    return None


@router.get("/{schedule_id}/shifts", response_model=List[ShiftResponse])
async def get_shifts(
    schedule_id: UUID,
    user_data: Dict = Depends(get_current_user),
    service: ShiftService = Depends(get_shift_service),
    supabase: Client = Depends(get_supabase)
):
    """List shifts of a schedule (any role)"""
    check_schedule_access(str(schedule_id), user_data, supabase, "shifts:read")
    return service.list_shifts(str(schedule_id))


@router.post("/{schedule_id}/shifts", response_model=ShiftResponse, status_code=201)
async def create_shift(
    schedule_id: UUID,
    shift_data: ShiftCreate,
    user_data: Dict = Depends(get_current_user),
    service: ShiftService = Depends(get_shift_service),
    supabase: Client = Depends(get_supabase)
):
    """Create a shift (owner or manager)"""
    check_schedule_access(str(schedule_id), user_data, supabase, "shifts:create")
    return service.create_shift(str(schedule_id), shift_data, user_data["id"])


@router.get("/{schedule_id}/members", response_model=List[UserResponse])
async def get_members(
    schedule_id: UUID,
    user_data: Dict = Depends(get_current_user),
    service: ScheduleService = Depends(get_schedule_service),
    supabase: Client = Depends(get_supabase)
):
    """List members of a schedule (owner or manager)"""
    check_schedule_access(str(schedule_id), user_data, supabase, "members:read")
    return service.list_members(str(schedule_id))


@router.post("/{schedule_id}/members", response_model=UserResponse, status_code=201)
async def add_member(
    schedule_id: UUID,
    member_data: MemberAdd,
    user_data: Dict = Depends(get_current_user),
    service: ScheduleService = Depends(get_schedule_service),
    supabase: Client = Depends(get_supabase)
):
    """Add an existing account to the schedule (owner or manager; managers only by the owner)"""
    info = check_schedule_access(str(schedule_id), user_data, supabase, "members:add")
    return service.add_member(str(schedule_id), member_data, info, user_data["id"])


@router.delete("/{schedule_id}/members/{user_id}", status_code=204)
async def remove_member(
    schedule_id: UUID,
    user_id: UUID,
    user_data: Dict = Depends(get_current_user),
    service: ScheduleService = Depends(get_schedule_service),
    supabase: Client = Depends(get_supabase)
):
    """Remove a member from the schedule (owner or manager; managers only by the owner)"""
    info = check_schedule_access(str(schedule_id), user_data, supabase, "members:remove")
    service.remove_member(str(schedule_id), str(user_id), info, user_data["id"])
    return None


@router.get("/{schedule_id}/signups", response_model=List[ShiftWithSignupsResponse])
async def get_signups(
    schedule_id: UUID,
    user_data: Dict = Depends(get_current_user),
    service: SignupService = Depends(get_signup_service),
    supabase: Client = Depends(get_supabase)
):
    """List all shifts with their signups (owner or manager)"""
    check_schedule_access(str(schedule_id), user_data, supabase, "signups:read")
    return service.list_schedule_signups(str(schedule_id))
