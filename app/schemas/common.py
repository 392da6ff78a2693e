"""
Schemas comunes y base para reutilización.
"""

from datetime import datetime
from typing import Generic, TypeVar
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


# TypeVar para respuestas genéricas
T = TypeVar("T")


class BaseSchema(BaseModel):
    """Schema base con configuración común."""

    model_config = ConfigDict(
        from_attributes=True,  # Permite crear desde ORM models
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class CamelSchema(BaseSchema):
    """Schema expuesto al widget/dashboard con claves camelCase."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        str_strip_whitespace=True,
        alias_generator=to_camel,
    )


class TimestampMixin(BaseModel):
    """Mixin para campos de timestamp."""

    created_at: datetime
    updated_at: datetime | None = None


class APIResponse(BaseModel, Generic[T]):
    """Respuesta estándar de la API."""

    success: bool = True
    message: str | None = None
    data: T | None = None
    errors: list[str] | None = None
