"""
Configuración centralizada de la aplicación.
"""
from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Configuración de la aplicación cargada desde variables de entorno."""

    # App
    app_name: str = "CRM Solar"
    debug: bool = False

    # Google Apps Script web app (hoja de cálculo remota)
    sheets_api_url: str = "https://script.google.com/macros/s/CHANGE_ME/exec"

    # Sesión
    session_storage_key: str = "crm_user"

    # UI
    recent_leads_limit: int = 10
    notifications_history: int = 50

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    """Obtiene la configuración cacheada de la aplicación."""
    return Settings()
