"""
Pydantic schemas for CRM users and authentication.
"""
from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, EmailStr, Field, field_validator


class Rol(str, Enum):
    """Role of a CRM user."""
    ADMIN = "ADMIN"
    USER = "USER"
    EMBAJADOR = "EMBAJADOR"


class User(BaseModel):
    """User as stored in the users sheet."""
    id: str
    email: str
    nombre: str = ""
    rol: Rol = Rol.USER
    activo: str = "Si"

    @field_validator("id", mode="before")
    @classmethod
    def _id_cell(cls, value: Any) -> str:
        return str(value)

    @property
    def is_admin(self) -> bool:
        return self.rol == Rol.ADMIN

    @property
    def is_ambassador(self) -> bool:
        return self.rol == Rol.EMBAJADOR

    @property
    def is_active(self) -> bool:
        return self.activo == "Si"


# Request schemas
class UserLogin(BaseModel):
    """Schema for user login."""
    email: EmailStr
    password: str


class UserCreate(BaseModel):
    """Schema for creating a user (admin only)."""
    email: EmailStr
    password: str = Field(..., min_length=1)
    nombre: str
    rol: Rol = Rol.USER
    activo: str = "Si"


class UserUpdate(BaseModel):
    """Schema for updating a user; password is optional."""
    email: Optional[EmailStr] = None
    nombre: Optional[str] = None
    rol: Optional[Rol] = None
    activo: Optional[str] = None
    password: Optional[str] = None
