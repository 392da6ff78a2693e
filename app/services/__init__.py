"""
Servicios de negocio del servicio de cancelaciones.
"""

from app.services.cancellation_service import CancellationOutcome, CancellationService
from app.services.outcome_recorder import OutcomeRecorder
from app.services.request_validator import validate_cancel_request
from app.services.vendor_service import VendorService

__all__ = [
    "CancellationOutcome",
    "CancellationService",
    "OutcomeRecorder",
    "validate_cancel_request",
    "VendorService",
]
