"""
Lead repository over the spreadsheet gateway.

The remote sheet is the only source of truth. `leads` is a disposable
projection: every successful mutation is followed by a full refetch, and a
failed one leaves the previous snapshot untouched.
"""
import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ..schemas.lead import Etapa, Lead, LeadCreate, LeadUpdate
from .auth_service import SessionContext
from .notifier import DESTRUCTIVE, Notification, Notifier, log_notifier
from .sheets_gateway import SheetsApiError, SheetsGateway
from .stage_machine import can_transition

logger = logging.getLogger(__name__)

NO_ROW_MESSAGE = "El cliente no tiene fila asignada y no puede modificarse"


class LeadRepository:
    """Typed lead operations plus the current snapshot (`leads`, `loading`, `error`)."""

    def __init__(self, gateway: SheetsGateway, notify: Notifier = log_notifier):
        self.gateway = gateway
        self.notify = notify
        self.leads: List[Lead] = []
        self.loading = False
        self.error: Optional[str] = None
        self.last_message: Optional[str] = None
        self.loaded = False

    def _parse_rows(self, rows: Any) -> List[Lead]:
        if not isinstance(rows, list):
            logger.warning(f"leerTodos returned {type(rows).__name__}, expected a list")
            return []
        leads = []
        for index, row in enumerate(rows):
            try:
                leads.append(Lead.model_validate(row))
            except ValidationError as e:
                logger.warning(f"Skipping malformed lead row #{index}: {e}")
        return leads

    async def list_all(self, embajador: Optional[str] = None) -> List[Lead]:
        """
        Fetch every lead, optionally only those assigned to an ambassador.

        Raises:
            SheetsApiError: On transport errors or an `ok: False` envelope
        """
        datos = {"embajador": embajador} if embajador else None
        res = await self.gateway.call("leerTodos", datos)
        if not res.ok:
            raise SheetsApiError(res.mensaje or "Error al leer clientes")

        leads = self._parse_rows(res.datos or [])
        if embajador:
            leads = [lead for lead in leads if lead.embajador == embajador]
        return leads

    async def refetch(self, session: SessionContext) -> bool:
        """Replace the snapshot with a fresh listing scoped to the session."""
        self.loading = True
        self.error = None
        try:
            self.leads = await self.list_all(session.ambassador_filter)
            self.loaded = True
            logger.info(f"Loaded {len(self.leads)} leads")
            return True
        except SheetsApiError as e:
            self.error = e.message
            self.notify(Notification("Error de conexión", e.message, DESTRUCTIVE))
            return False
        finally:
            self.loading = False

    def clear(self) -> None:
        """Forget the snapshot (logout)."""
        self.leads = []
        self.error = None
        self.last_message = None
        self.loaded = False

    def find(self, fila: int) -> Optional[Lead]:
        for lead in self.leads:
            if lead.fila == fila:
                return lead
        return None

    async def read_row(self, fila: int) -> Optional[Lead]:
        """
        Read a single row straight from the sheet.

        Raises:
            SheetsApiError: On transport errors
        """
        res = await self.gateway.call("leerFila", {"fila": fila})
        if not res.ok or not res.datos:
            return None
        try:
            return Lead.model_validate(res.datos)
        except ValidationError as e:
            logger.warning(f"Malformed row {fila}: {e}")
            return None

    def _fail(self, message: str) -> bool:
        self.last_message = message
        self.notify(Notification("Error", message, DESTRUCTIVE))
        return False

    async def _mutate(
        self,
        session: SessionContext,
        action: str,
        datos: Dict[str, Any],
        success_title: str,
        error_message: str
    ) -> bool:
        try:
            res = await self.gateway.call(action, datos)
        except SheetsApiError as e:
            return self._fail(e.message)

        if not res.ok:
            return self._fail(res.mensaje or error_message)

        self.last_message = res.mensaje
        self.notify(Notification(success_title, res.mensaje))
        await self.refetch(session)
        return True

    async def create(self, session: SessionContext, lead: LeadCreate) -> bool:
        datos = lead.model_dump(by_alias=True, mode="json")
        return await self._mutate(session, "crear", datos, "Cliente creado", "Error al crear")

    async def update(self, session: SessionContext, fila: Optional[int], cambios: LeadUpdate) -> bool:
        if fila is None:
            return self._fail(NO_ROW_MESSAGE)
        datos = {
            "fila": fila,
            "cambios": cambios.model_dump(by_alias=True, exclude_unset=True, mode="json"),
        }
        return await self._mutate(session, "actualizar", datos, "Cliente actualizado", "Error al actualizar")

    async def update_stage(self, session: SessionContext, fila: Optional[int], etapa: Etapa) -> bool:
        """Move a lead to any stage; every move is allowed."""
        if fila is None:
            return self._fail(NO_ROW_MESSAGE)
        current = self.find(fila)
        if current is not None:
            if not can_transition(current.etapa, etapa):
                return self._fail(f"No se puede mover de {current.etapa.value} a {etapa.value}")
            logger.info(f"Moving row {fila} from {current.etapa.value} to {etapa.value}")
        datos = {"fila": fila, "etapa": etapa.value}
        return await self._mutate(
            session, "actualizarEtapa", datos, "Etapa actualizada", "Error al actualizar etapa"
        )

    async def delete(self, session: SessionContext, fila: Optional[int]) -> bool:
        if fila is None:
            return self._fail(NO_ROW_MESSAGE)
        return await self._mutate(session, "eliminar", {"fila": fila}, "Cliente eliminado", "Error al eliminar")
