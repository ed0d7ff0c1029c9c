"""
Authentication service and the session context of the current actor.
"""
import logging
from typing import Dict, Optional, Protocol

from pydantic import ValidationError

from ..config import get_settings
from ..schemas.user import User
from .notifier import DESTRUCTIVE, Notification, Notifier, log_notifier
from .sheets_gateway import SheetsApiError, SheetsGateway

logger = logging.getLogger(__name__)

settings = get_settings()


class SessionStorage(Protocol):
    """Key-value storage scoped to the lifetime of one client (a browser tab)."""

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemorySessionStorage:
    """Session storage that lives as long as the process."""

    def __init__(self):
        self._items: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove(self, key: str) -> None:
        self._items.pop(key, None)


class SessionContext:
    """
    The authenticated actor, if any.

    Passed explicitly to the repositories so that listing is scoped to the
    actor: an ambassador only ever sees the leads assigned to their name.
    """

    def __init__(self, storage: Optional[SessionStorage] = None, storage_key: Optional[str] = None):
        self.storage = storage if storage is not None else MemorySessionStorage()
        self.storage_key = storage_key or settings.session_storage_key
        self.user: Optional[User] = None
        self.loading = True

    def restore(self) -> Optional[User]:
        """Load the saved session; a malformed one is discarded."""
        saved = self.storage.get(self.storage_key)
        if saved:
            try:
                self.user = User.model_validate_json(saved)
            except ValidationError as e:
                logger.warning(f"Discarding malformed saved session: {e}")
                self.storage.remove(self.storage_key)
                self.user = None
        self.loading = False
        return self.user

    def start(self, user: User) -> None:
        """Replace the current actor and persist it."""
        self.user = user
        self.storage.set(self.storage_key, user.model_dump_json())

    def clear(self) -> None:
        self.user = None
        self.storage.remove(self.storage_key)

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def is_admin(self) -> bool:
        return self.user is not None and self.user.is_admin

    @property
    def ambassador_filter(self) -> Optional[str]:
        """Name used to scope lead listing, only for ambassadors."""
        if self.user is not None and self.user.is_ambassador:
            return self.user.nombre
        return None


class AuthService:
    """Service for login/logout against the users sheet."""

    def __init__(self, gateway: SheetsGateway, notify: Notifier = log_notifier):
        self.gateway = gateway
        self.notify = notify
        self.last_message: Optional[str] = None

    async def login(self, session: SessionContext, email: str, password: str) -> bool:
        """
        Authenticate and, on success, replace the session's actor.

        Returns:
            True if the credentials were accepted
        """
        try:
            res = await self.gateway.call("login", {"email": email, "password": password})
        except SheetsApiError as e:
            logger.error(f"Login failed for {email}: {e.message}")
            self.last_message = "No se pudo conectar con el servicio de autenticación."
            self.notify(Notification("Error de servidor", self.last_message, DESTRUCTIVE))
            return False

        if res.ok and res.datos:
            try:
                user = User.model_validate(res.datos)
            except ValidationError as e:
                logger.error(f"Invalid user returned by login: {e}")
                self.last_message = "Respuesta de login inválida"
                self.notify(Notification("Error de acceso", self.last_message, DESTRUCTIVE))
                return False
            session.start(user)
            self.last_message = None
            logger.info(f"User logged in: {user.email} ({user.rol.value})")
            self.notify(Notification("Bienvenido", f"Hola, {user.nombre}"))
            return True

        self.last_message = res.mensaje or "Credenciales incorrectas"
        self.notify(Notification("Error de acceso", self.last_message, DESTRUCTIVE))
        return False

    def logout(self, session: SessionContext) -> None:
        session.clear()
        self.notify(Notification("Sesión cerrada"))
