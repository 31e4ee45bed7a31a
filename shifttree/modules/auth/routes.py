from fastapi import APIRouter, Depends
from shifttree.config.permissions_config import get_permission_matrix
from shifttree.core.dependencies import get_current_user
from shifttree.core.schemas import UserResponse
from shifttree.modules.auth.schemas import PermissionMatrixResponse
from typing import Dict

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: Dict = Depends(get_current_user)):
    """Get the account the bearer token resolves to"""
    return UserResponse.from_row(current_user)


@router.get("/permissions", response_model=PermissionMatrixResponse)
async def get_permissions(current_user: Dict = Depends(get_current_user)):
    """Role matrix for schedules (for frontend UI)"""
    return get_permission_matrix()
