"""
Lead schemas: the sheet row as seen by the CRM.
"""
import re
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class Etapa(str, Enum):
    """Pipeline stage of a lead."""
    CONTACTO = "contacto"
    COTIZACION = "cotizacion"
    NEGOCIACION = "negociacion"
    CIERRE_GANADO = "cierre_ganado"
    CIERRE_PERDIDO = "cierre_perdido"


# Stage configuration with labels and colors
ETAPAS_CONFIG = {
    Etapa.CONTACTO: {"label": "Contacto", "color": "bg-info", "order": 1},
    Etapa.COTIZACION: {"label": "Cotización", "color": "bg-warning", "order": 2},
    Etapa.NEGOCIACION: {"label": "Negociación", "color": "bg-accent", "order": 3},
    Etapa.CIERRE_GANADO: {"label": "Cierre Ganado", "color": "bg-success", "order": 4},
    Etapa.CIERRE_PERDIDO: {"label": "Cierre Perdido", "color": "bg-destructive", "order": 5},
}

TEXT_FIELDS = (
    "fecha", "nombre", "telefono", "ubicacion", "motivo",
    "tipo_alerta", "potencia", "produccion_anual",
)

_THOUSANDS_NUMBER = re.compile(r"^-?\d{1,3}(\.\d{3})+(,\d+)?$")
_PLAIN_NUMBER = re.compile(r"^-?\d+(\.\d+)?$")


def parse_sheet_number(value: Any) -> float:
    """
    Parse a numeric sheet cell.

    Cells may be blank, plain numbers or es-CO formatted currency
    ("$ 1.200.000", "1.200.000,50").
    """
    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return value
    text = str(value).strip().replace("$", "").replace(" ", "")
    if not text:
        return 0
    # "350.000" is three hundred fifty thousand, never 350.0
    if _THOUSANDS_NUMBER.match(text):
        return float(text.replace(".", "").replace(",", "."))
    if _PLAIN_NUMBER.match(text):
        return float(text)
    integer_part, _, decimal_part = text.partition(",")
    digits = re.sub(r"[^\d\-]", "", integer_part)
    if not digits or digits == "-":
        raise ValueError(f"Valor numérico inválido: {value!r}")
    decimals = re.sub(r"\D", "", decimal_part)
    return float(f"{digits}.{decimals}") if decimals else float(digits)


class LeadBase(BaseModel):
    """Fields shared by every lead representation."""
    fecha: str = ""
    nombre: str = ""
    telefono: str = ""
    ubicacion: str = ""
    motivo: str = ""
    tipo_alerta: str = Field("", alias="tipoAlerta")
    valor_propuesta: int = Field(0, alias="valorPropuesta")
    potencia: str = ""
    ahorro: float = 0
    beneficios: float = 0
    paneles: int = 0
    produccion_anual: str = Field("", alias="produccionAnual")
    etapa: Etapa = Etapa.CONTACTO
    notas: List[str] = Field(default_factory=list)
    embajador: Optional[str] = None

    class Config:
        populate_by_name = True

    @field_validator(*TEXT_FIELDS, mode="before")
    @classmethod
    def _text_cell(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value)

    @field_validator("valor_propuesta", "paneles", mode="before")
    @classmethod
    def _integer_cell(cls, value: Any) -> int:
        return int(round(parse_sheet_number(value)))

    @field_validator("ahorro", "beneficios", mode="before")
    @classmethod
    def _decimal_cell(cls, value: Any) -> float:
        return parse_sheet_number(value)

    @field_validator("etapa", mode="before")
    @classmethod
    def _stage_cell(cls, value: Any) -> Any:
        # Blank cells default to contacto; unknown stages still fail validation
        if value is None or (isinstance(value, str) and not value.strip()):
            return Etapa.CONTACTO
        return value

    @field_validator("notas", mode="before")
    @classmethod
    def _notes_cell(cls, value: Any) -> List[str]:
        if value is None or value == "":
            return []
        if isinstance(value, str):
            return [value]
        return value

    @field_validator("embajador", mode="before")
    @classmethod
    def _ambassador_cell(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        value = str(value).strip()
        return value or None


class LeadCreate(LeadBase):
    """Schema for creating a new lead (the remote assigns the row)."""
    motivo: str = "Cliente Potencial detectado (>300 kWh)"
    tipo_alerta: str = Field("OPORTUNIDAD VENTA", alias="tipoAlerta")


class LeadUpdate(BaseModel):
    """Partial update of a lead; only the fields that were set are sent."""
    fecha: Optional[str] = None
    nombre: Optional[str] = None
    telefono: Optional[str] = None
    ubicacion: Optional[str] = None
    motivo: Optional[str] = None
    tipo_alerta: Optional[str] = Field(None, alias="tipoAlerta")
    valor_propuesta: Optional[int] = Field(None, alias="valorPropuesta")
    potencia: Optional[str] = None
    ahorro: Optional[float] = None
    beneficios: Optional[float] = None
    paneles: Optional[int] = None
    produccion_anual: Optional[str] = Field(None, alias="produccionAnual")
    etapa: Optional[Etapa] = None
    notas: Optional[List[str]] = None
    embajador: Optional[str] = None

    class Config:
        populate_by_name = True


class Lead(LeadBase):
    """
    A lead as listed by the remote sheet.

    `fila` is the sheet row position, the only handle the remote store has for
    a record. `id` is derived from it; rows without a position have no id and
    cannot be edited.
    """
    fila: Optional[int] = Field(None, alias="_fila")
    id: Optional[str] = None

    @model_validator(mode="after")
    def _derive_id(self) -> "Lead":
        self.id = str(self.fila) if self.fila is not None else None
        return self

    @property
    def editable(self) -> bool:
        return self.fila is not None


class LeadStageUpdate(BaseModel):
    """Schema for moving a lead to another stage."""
    etapa: Etapa


class StageInfo(BaseModel):
    """Schema for stage information."""
    value: str
    label: str
    color: str
    order: int


class LeadListResponse(BaseModel):
    """Schema for the lead list snapshot."""
    total: int
    loading: bool
    error: Optional[str] = None
    leads: List[Lead]
