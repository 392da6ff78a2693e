"""
Schemas para peticiones y registros de cancelación.
"""

from enum import Enum

from pydantic import Field

from app.schemas.common import CamelSchema


class Processor(str, Enum):
    """Procesadores de pago que un vendor puede configurar."""

    STRIPE = "stripe"
    PADDLE = "paddle"
    NONE = "none"


class CancellationStatus(str, Enum):
    """Estados de un registro de cancelación."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class CancellationState(str, Enum):
    """Etapas por las que pasa una petición de cancelación."""

    RECEIVED = "received"
    VALIDATED = "validated"
    VENDOR_RESOLVED = "vendor_resolved"
    DISPATCHED = "dispatched"
    COMPLETED = "completed"
    FAILED = "failed"
    RECORDED = "recorded"
    RESPONDED = "responded"


# ============================================
# Request Schemas
# ============================================

class CancelRequest(CamelSchema):
    """
    Body de ``POST /cancel`` enviado por el widget embebido.

    Todos los campos son opcionales a nivel de schema; la obligatoriedad
    de ``vendorKey`` y ``userId`` la valida el request validator para
    responder 400 en lugar de 422.
    """

    # Límites iguales a las columnas de `cancels`, validados antes del procesador
    vendor_key: str | None = Field(None, max_length=64)
    user_id: str | None = Field(None, max_length=255)
    email: str | None = Field(None, max_length=255)
    reason: str | None = None
    feedback: str | None = None


# ============================================
# Response Schemas
# ============================================

class CancelSuccessResponse(CamelSchema):
    """Respuesta 200 de una cancelación completada."""

    status: str = "success"
    processor: Processor
    cancellation_id: str
    message: str


class CancelErrorResponse(CamelSchema):
    """Respuesta de error; ``cancellationId`` solo si se escribió un registro."""

    error: str
    cancellation_id: str | None = None
