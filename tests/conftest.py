import json
from typing import Any, Dict, List, Optional

import httpx
import pytest

from solar_crm.schemas.user import Rol, User
from solar_crm.services.auth_service import SessionContext
from solar_crm.services.lead_repository import LeadRepository
from solar_crm.services.notifier import NotificationCenter
from solar_crm.services.sheets_gateway import SheetsGateway
from solar_crm.services.user_service import UserService

BASE_URL = "https://script.google.com/macros/s/TEST/exec"

# First data row of the sheet; row 1 holds the headers
FIRST_ROW = 2


def sample_rows() -> List[Dict[str, Any]]:
    return [
        {
            "fecha": "2024-03-15",
            "nombre": "Carlos Pérez",
            "telefono": 3001234567,
            "ubicacion": "Pasto",
            "motivo": "Cliente Potencial detectado (>300 kWh)",
            "tipoAlerta": "OPORTUNIDAD VENTA",
            "valorPropuesta": 12000000,
            "potencia": "5 kWp",
            "ahorro": 350000,
            "beneficios": 42000000,
            "paneles": 10,
            "produccionAnual": "7.200 kWh/año",
            "etapa": "contacto",
            "notas": ["Llamar el lunes"],
            "embajador": "Ana",
        },
        {
            "fecha": "15/04/24",
            "nombre": "María Gómez",
            "telefono": "3109876543",
            "ubicacion": "pasto",
            "motivo": "Consumo alto",
            "tipoAlerta": "OPORTUNIDAD VENTA",
            "valorPropuesta": 8000000,
            "potencia": "3 kWp",
            "ahorro": 200000,
            "beneficios": 30000000,
            "paneles": 8,
            "produccionAnual": "4.300 kWh/año",
            "etapa": "negociacion",
            "embajador": "Luis",
        },
        {
            "fecha": "2024-04-02 10:30",
            "nombre": "Jorge Ruiz",
            "telefono": "3205550000",
            "ubicacion": "Ipiales",
            "motivo": "Referido",
            "tipoAlerta": "OPORTUNIDAD VENTA",
            "valorPropuesta": "$ 20.000.000",
            "potencia": "8 kWp",
            "ahorro": "",
            "beneficios": 65000000,
            "paneles": "16",
            "produccionAnual": "11.000 kWh/año",
            "etapa": "cierre_ganado",
            "embajador": "Ana",
        },
    ]


def sample_users() -> List[Dict[str, Any]]:
    return [
        {"id": 1, "email": "admin@solarcrm.co", "nombre": "Admin", "rol": "ADMIN", "activo": "Si", "password": "admin123"},
        {"id": 2, "email": "ana@solarcrm.co", "nombre": "Ana", "rol": "EMBAJADOR", "activo": "Si", "password": "ana123"},
        {"id": 3, "email": "luis@solarcrm.co", "nombre": "Luis", "rol": "EMBAJADOR", "activo": "No", "password": "luis123"},
        {"id": 4, "email": "sofia@solarcrm.co", "nombre": "Sofía", "rol": "USER", "activo": "Si", "password": "sofia123"},
    ]


class FakeSheet:
    """
    In-memory stand-in for the Apps Script web app.

    Row positions are recomputed on every read, like a real sheet where
    deleting a row shifts the ones below it.
    """

    def __init__(
        self,
        rows: Optional[List[Dict[str, Any]]] = None,
        users: Optional[List[Dict[str, Any]]] = None,
        honor_filter: bool = True
    ):
        self.rows = [dict(row) for row in rows or []]
        self.users = [dict(user) for user in users or []]
        self.honor_filter = honor_filter
        self.calls: List[tuple] = []
        self.requests: List[httpx.Request] = []
        self.failures: Dict[str, str] = {}
        self.http_errors: Dict[str, int] = {}
        self.network_errors: set = set()

    def count(self, action: str) -> int:
        return sum(1 for name, _ in self.calls if name == action)

    def actions(self) -> List[str]:
        return [name for name, _ in self.calls]

    def handler(self, request: httpx.Request) -> httpx.Response:
        action = request.url.params.get("action")
        raw = request.url.params.get("datos")
        datos = json.loads(raw) if raw else {}
        self.requests.append(request)
        self.calls.append((action, datos))

        if action in self.network_errors:
            raise httpx.ConnectError("Failed to fetch", request=request)
        if action in self.http_errors:
            return httpx.Response(self.http_errors[action], text="Script error")
        if action in self.failures:
            return httpx.Response(200, json={"ok": False, "mensaje": self.failures[action]})

        method = getattr(self, f"_{action}", None)
        if method is None:
            return httpx.Response(200, json={"ok": False, "mensaje": f"Acción desconocida: {action}"})
        return httpx.Response(200, json=method(datos))

    def listed_rows(self) -> List[Dict[str, Any]]:
        return [{**row, "_fila": index + FIRST_ROW} for index, row in enumerate(self.rows)]

    def _row_index(self, fila: Any) -> Optional[int]:
        index = int(fila) - FIRST_ROW
        if 0 <= index < len(self.rows):
            return index
        return None

    def _ping(self, datos):
        return {"ok": True, "mensaje": "pong"}

    def _leerTodos(self, datos):
        rows = self.listed_rows()
        embajador = datos.get("embajador")
        if embajador and self.honor_filter:
            rows = [row for row in rows if row.get("embajador") == embajador]
        return {"ok": True, "datos": rows}

    def _leerFila(self, datos):
        index = self._row_index(datos["fila"])
        if index is None:
            return {"ok": False, "mensaje": "Fila no encontrada"}
        return {"ok": True, "datos": self.listed_rows()[index]}

    def _crear(self, datos):
        self.rows.append(dict(datos))
        fila = len(self.rows) - 1 + FIRST_ROW
        return {"ok": True, "mensaje": f"Cliente creado en fila {fila}", "datos": {"fila": fila}, "fila": fila}

    def _actualizar(self, datos):
        index = self._row_index(datos["fila"])
        if index is None:
            return {"ok": False, "mensaje": "Fila no encontrada"}
        self.rows[index].update(datos["cambios"])
        return {"ok": True, "mensaje": "Cliente actualizado"}

    def _actualizarEtapa(self, datos):
        index = self._row_index(datos["fila"])
        if index is None:
            return {"ok": False, "mensaje": "Fila no encontrada"}
        self.rows[index]["etapa"] = datos["etapa"]
        return {"ok": True}

    def _eliminar(self, datos):
        index = self._row_index(datos["fila"])
        if index is None:
            return {"ok": False, "mensaje": "Fila no encontrada"}
        del self.rows[index]
        return {"ok": True, "mensaje": "Cliente eliminado"}

    def _public_user(self, user):
        return {key: value for key, value in user.items() if key != "password"}

    def _login(self, datos):
        for user in self.users:
            if user["email"] == datos.get("email") and user["password"] == datos.get("password"):
                return {"ok": True, "datos": self._public_user(user)}
        return {"ok": False, "mensaje": "Credenciales incorrectas"}

    def _listarUsuarios(self, datos):
        return {"ok": True, "datos": [self._public_user(user) for user in self.users]}

    def _crearUsuario(self, datos):
        if any(user["email"] == datos["email"] for user in self.users):
            return {"ok": False, "mensaje": "El email ya existe"}
        next_id = max((int(user["id"]) for user in self.users), default=0) + 1
        self.users.append({**datos, "id": next_id})
        return {"ok": True, "mensaje": "Usuario creado"}

    def _actualizarUsuario(self, datos):
        for user in self.users:
            if str(user["id"]) == str(datos["id"]):
                user.update(datos["changes"])
                return {"ok": True}
        return {"ok": False, "mensaje": "Usuario no encontrado"}

    def _eliminarUsuario(self, datos):
        before = len(self.users)
        self.users = [user for user in self.users if str(user["id"]) != str(datos["id"])]
        if len(self.users) == before:
            return {"ok": False, "mensaje": "Usuario no encontrado"}
        return {"ok": True}


def make_session(nombre: str = "Admin", rol: Rol = Rol.ADMIN) -> SessionContext:
    session = SessionContext()
    session.start(User(id="99", email="someone@solarcrm.co", nombre=nombre, rol=rol))
    return session


@pytest.fixture
def sheet():
    return FakeSheet(rows=sample_rows(), users=sample_users())


@pytest.fixture
def gateway(sheet):
    return SheetsGateway(base_url=BASE_URL, transport=httpx.MockTransport(sheet.handler))


@pytest.fixture
def notifications():
    return NotificationCenter(max_history=100)


@pytest.fixture
def repository(gateway, notifications):
    return LeadRepository(gateway, notifications)


@pytest.fixture
def user_service(gateway, notifications):
    return UserService(gateway, notifications)


@pytest.fixture
def admin_session():
    return make_session()
