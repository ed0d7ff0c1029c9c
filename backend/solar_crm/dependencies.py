"""
FastAPI dependencies for the shared services and authorization.
"""
import logging

from fastapi import Depends, HTTPException, Request, status

from .schemas.user import User
from .services.auth_service import AuthService, SessionContext
from .services.lead_repository import LeadRepository
from .services.notifier import NotificationCenter
from .services.sheets_gateway import SheetsGateway
from .services.user_service import UserService

logger = logging.getLogger(__name__)


def get_gateway(request: Request) -> SheetsGateway:
    return request.app.state.gateway


def get_session(request: Request) -> SessionContext:
    return request.app.state.session


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_lead_repository(request: Request) -> LeadRepository:
    return request.app.state.lead_repository


def get_user_service(request: Request) -> UserService:
    return request.app.state.user_service


def get_notifications(request: Request) -> NotificationCenter:
    return request.app.state.notifications


async def get_current_user(session: SessionContext = Depends(get_session)) -> User:
    """
    Dependency to get the logged-in actor.

    Raises:
        HTTPException 401: If nobody is logged in
    """
    if session.user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated"
        )
    return session.user


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    """Dependency that only lets administrators through (user management)."""
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin role required"
        )
    return current_user
