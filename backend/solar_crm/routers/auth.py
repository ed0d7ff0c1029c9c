"""
Authentication router: login, logout and current actor.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status

from ..dependencies import get_auth_service, get_current_user, get_lead_repository, get_session
from ..schemas.user import User, UserLogin
from ..services.auth_service import AuthService, SessionContext
from ..services.lead_repository import LeadRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


@router.post("/login", response_model=User)
async def login(
    credentials: UserLogin,
    session: SessionContext = Depends(get_session),
    auth_service: AuthService = Depends(get_auth_service),
    repository: LeadRepository = Depends(get_lead_repository)
):
    """
    Login with email and password.

    The lead snapshot is reloaded for the new actor.
    """
    ok = await auth_service.login(session, credentials.email, credentials.password)
    if not ok:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=auth_service.last_message
        )

    repository.clear()
    await repository.refetch(session)
    return session.user


@router.post("/logout")
def logout(
    session: SessionContext = Depends(get_session),
    auth_service: AuthService = Depends(get_auth_service),
    repository: LeadRepository = Depends(get_lead_repository)
):
    """Clear the session and the cached leads."""
    auth_service.logout(session)
    repository.clear()
    return {"message": "Logged out"}


@router.get("/me", response_model=User)
def get_me(current_user: User = Depends(get_current_user)):
    """Get the logged-in actor."""
    return current_user
