"""
Gateway to the Google Apps Script web app that fronts the CRM spreadsheet.

Every action is a GET on a single endpoint with `action` and an optional
JSON-encoded `datos` query parameter. Apps Script answers POST with a redirect
that breaks CORS preflight, so POST is never used.
"""
import json
import logging
from typing import Any, Dict, Optional

import httpx

from ..config import get_settings
from ..schemas.api import ApiResult

logger = logging.getLogger(__name__)
settings = get_settings()

NETWORK_ERROR_MESSAGE = (
    "Error de red/CORS: Verifica que el Script esté publicado como "
    "'Cualquier persona' y que hayas aceptado los permisos con el botón 'Ejecutar'."
)


class SheetsApiError(Exception):
    """Base error for failed gateway calls."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class SheetsHTTPError(SheetsApiError):
    """The endpoint answered with a non-2xx status."""

    def __init__(self, status_code: int, reason: str = ""):
        super().__init__(f"HTTP {status_code}: {reason}".rstrip(": "))
        self.status_code = status_code


class SheetsNetworkError(SheetsApiError):
    """The endpoint could not be reached at all."""

    def __init__(self, detail: str = ""):
        super().__init__(NETWORK_ERROR_MESSAGE)
        self.detail = detail


class SheetsGateway:
    """Client for the spreadsheet action endpoint."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = base_url or settings.sheets_api_url
        self._transport = transport

    def build_params(self, action: str, datos: Optional[Dict[str, Any]] = None) -> Dict[str, str]:
        """Query parameters for an action; `datos` only when there is a payload."""
        params = {"action": action}
        if datos:
            params["datos"] = json.dumps(datos, ensure_ascii=False)
        return params

    async def call(self, action: str, datos: Optional[Dict[str, Any]] = None) -> ApiResult:
        """
        Run one remote action.

        Args:
            action: Action name understood by the Apps Script
            datos: Optional action arguments

        Returns:
            The decoded envelope, including application failures (`ok: False`)

        Raises:
            SheetsNetworkError: The endpoint is unreachable
            SheetsHTTPError: The endpoint answered with a non-2xx status
            SheetsApiError: The body is not a JSON envelope
        """
        params = self.build_params(action, datos)
        logger.info(f"[API] Llamando a: {action} {datos or ''}")

        try:
            async with httpx.AsyncClient(transport=self._transport, follow_redirects=True) as client:
                response = await client.get(self.base_url, params=params)
        except httpx.TransportError as e:
            logger.error(f"[API] Fallo de red para {action}: {e}")
            raise SheetsNetworkError(str(e)) from e

        if not response.is_success:
            logger.error(f"[API] Error HTTP: {response.status_code} {response.reason_phrase}")
            raise SheetsHTTPError(response.status_code, response.reason_phrase)

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"[API] Respuesta no JSON para {action}: {response.text[:200]}")
            raise SheetsApiError("Respuesta inválida del servidor") from e

        if not isinstance(data, dict):
            logger.error(f"[API] Respuesta inesperada para {action}: {data!r}")
            raise SheetsApiError("Respuesta inválida del servidor")

        result = ApiResult.model_validate(data)
        logger.debug(f"[API] Respuesta de {action}: {data}")
        return result

    async def ping(self) -> ApiResult:
        """Check that the script is published and reachable."""
        return await self.call("ping")
