"""
API routers.
"""
from .auth import router as auth_router
from .leads import router as leads_router
from .analytics import router as analytics_router
from .users import router as users_router

__all__ = ["auth_router", "leads_router", "analytics_router", "users_router"]
