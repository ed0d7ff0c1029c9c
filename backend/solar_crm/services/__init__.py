"""
Business logic services.
"""
from .sheets_gateway import SheetsGateway, SheetsApiError, SheetsHTTPError, SheetsNetworkError
from .auth_service import AuthService, SessionContext, MemorySessionStorage
from .lead_repository import LeadRepository
from .user_service import UserService
from .notifier import Notification, NotificationCenter

__all__ = [
    "SheetsGateway", "SheetsApiError", "SheetsHTTPError", "SheetsNetworkError",
    "AuthService", "SessionContext", "MemorySessionStorage",
    "LeadRepository", "UserService",
    "Notification", "NotificationCenter",
]
