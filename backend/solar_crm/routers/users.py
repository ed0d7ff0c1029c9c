"""
Users router for user management (admin only).
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from ..dependencies import get_current_user, get_user_service, require_admin
from ..schemas.user import User, UserCreate, UserUpdate
from ..services.user_service import UserService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/users", tags=["users"])


def _raise_failure(user_service: UserService):
    raise HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail=user_service.last_message
    )


@router.get("/", response_model=List[User])
async def list_users(
    admin: User = Depends(require_admin),
    user_service: UserService = Depends(get_user_service)
):
    """List every CRM user."""
    if not await user_service.refetch():
        _raise_failure(user_service)
    return user_service.users


# NOTE: Not admin-only, the lead form needs it
@router.get("/ambassadors", response_model=List[User])
async def list_ambassadors(
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service)
):
    """Users that can be assigned to a lead."""
    return await user_service.list_ambassadors()


@router.post("/", response_model=List[User], status_code=status.HTTP_201_CREATED)
async def create_user(
    user: UserCreate,
    admin: User = Depends(require_admin),
    user_service: UserService = Depends(get_user_service)
):
    """Create a user and return the refreshed list."""
    if not await user_service.create(user):
        _raise_failure(user_service)
    return user_service.users


@router.patch("/{user_id}", response_model=List[User])
async def update_user(
    user_id: str,
    changes: UserUpdate,
    admin: User = Depends(require_admin),
    user_service: UserService = Depends(get_user_service)
):
    """Update a user."""
    if not await user_service.update(user_id, changes):
        _raise_failure(user_service)
    return user_service.users


@router.delete("/{user_id}", response_model=List[User])
async def delete_user(
    user_id: str,
    admin: User = Depends(require_admin),
    user_service: UserService = Depends(get_user_service)
):
    """Delete a user. Leads keep citing the old ambassador name."""
    if not await user_service.delete(user_id):
        _raise_failure(user_service)
    return user_service.users
