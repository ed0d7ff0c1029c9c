"""
User management over the users sheet (admin screens).
"""
import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ..schemas.user import Rol, User, UserCreate, UserUpdate
from .notifier import DESTRUCTIVE, Notification, Notifier, log_notifier
from .sheets_gateway import SheetsApiError, SheetsGateway

logger = logging.getLogger(__name__)


class UserService:
    """Service for listing and editing CRM users."""

    def __init__(self, gateway: SheetsGateway, notify: Notifier = log_notifier):
        self.gateway = gateway
        self.notify = notify
        self.users: List[User] = []
        self.loading = False
        self.last_message: Optional[str] = None

    async def refetch(self) -> bool:
        self.loading = True
        try:
            res = await self.gateway.call("listarUsuarios")
            if not res.ok:
                logger.warning(f"listarUsuarios refused: {res.mensaje}")
                self.last_message = res.mensaje or "No se pudieron cargar los usuarios"
                self.notify(Notification("Error", self.last_message, DESTRUCTIVE))
                return False
            if isinstance(res.datos, list):
                users = []
                for row in res.datos:
                    try:
                        users.append(User.model_validate(row))
                    except ValidationError as e:
                        logger.warning(f"Skipping malformed user row: {e}")
                self.users = users
            return True
        except SheetsApiError as e:
            logger.error(f"Error listing users: {e.message}")
            self.last_message = "No se pudieron cargar los usuarios"
            self.notify(Notification("Error", self.last_message, DESTRUCTIVE))
            return False
        finally:
            self.loading = False

    async def list_ambassadors(self) -> List[User]:
        """Users that can be assigned to a lead."""
        await self.refetch()
        return [user for user in self.users if user.rol == Rol.EMBAJADOR]

    async def _mutate(self, action: str, datos: Dict[str, Any], success_message: str, error_message: str) -> bool:
        try:
            res = await self.gateway.call(action, datos)
        except SheetsApiError as e:
            logger.error(f"{action} failed: {e.message}")
            self.last_message = error_message
            self.notify(Notification("Error", error_message, DESTRUCTIVE))
            return False

        if not res.ok:
            self.last_message = res.mensaje or error_message
            self.notify(Notification("Error", self.last_message, DESTRUCTIVE))
            return False

        self.last_message = success_message
        self.notify(Notification("Éxito", success_message))
        await self.refetch()
        return True

    async def create(self, user: UserCreate) -> bool:
        datos = user.model_dump(mode="json")
        return await self._mutate("crearUsuario", datos, "Usuario creado correctamente", "Fallo al crear usuario")

    async def update(self, user_id: str, changes: UserUpdate) -> bool:
        datos = {"id": user_id, "changes": changes.model_dump(exclude_unset=True, exclude_none=True, mode="json")}
        return await self._mutate(
            "actualizarUsuario", datos, "Usuario actualizado correctamente", "Fallo al actualizar usuario"
        )

    async def delete(self, user_id: str) -> bool:
        return await self._mutate(
            "eliminarUsuario", {"id": user_id}, "Usuario eliminado correctamente", "Fallo al eliminar usuario"
        )
