"""
Envelope returned by every action of the Apps Script gateway.
"""
from typing import Any, Optional
from pydantic import BaseModel


class ApiResult(BaseModel):
    """Uniform `{ok, mensaje?, datos?, fila?}` response."""
    ok: bool = False
    mensaje: Optional[str] = None
    datos: Optional[Any] = None
    fila: Optional[int] = None

    class Config:
        extra = "ignore"
