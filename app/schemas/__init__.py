"""
Schemas del servicio de cancelaciones.
Exporta todos los schemas para fácil acceso.
"""

# Common
from app.schemas.common import (
    APIResponse,
    BaseSchema,
    CamelSchema,
    TimestampMixin,
)

# Cancellation
from app.schemas.cancellation import (
    CancelErrorResponse,
    CancelRequest,
    CancelSuccessResponse,
    CancellationState,
    CancellationStatus,
    Processor,
)

# Vendor
from app.schemas.vendor import (
    VendorRegisterRequest,
    VendorResponse,
    VendorUpdateRequest,
)

__all__ = [
    # Common
    "APIResponse",
    "BaseSchema",
    "CamelSchema",
    "TimestampMixin",
    # Cancellation
    "CancelErrorResponse",
    "CancelRequest",
    "CancelSuccessResponse",
    "CancellationState",
    "CancellationStatus",
    "Processor",
    # Vendor
    "VendorRegisterRequest",
    "VendorResponse",
    "VendorUpdateRequest",
]
