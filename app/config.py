"""
Configuración del servicio de cancelaciones.
Carga variables de entorno y define settings globales.
"""

from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Literal


class Settings(BaseSettings):
    """Configuración principal del servicio."""

    # Aplicación
    APP_NAME: str = "CancelReady Cancellation Service"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"

    # Base de datos (vendors + registro de cancelaciones)
    DATABASE_URL: str

    # Secret para cifrar credenciales de procesadores (sin valor por defecto)
    ENCRYPTION_SECRET: str

    # Paddle Billing API
    PADDLE_API_URL: str = "https://sandbox-api.paddle.com"

    # Límite de la llamada saliente al procesador
    PROCESSOR_TIMEOUT_SECONDS: float = 15.0

    # Token para endpoints de gestión de vendors (vacío = deshabilitados)
    ADMIN_API_TOKEN: str = ""

    # El endpoint se invoca desde sitios arbitrarios de vendors
    CORS_ALLOW_ORIGINS: list[str] = ["*"]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Retorna instancia cacheada de settings."""
    return Settings()


settings = get_settings()
