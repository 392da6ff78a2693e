"""
Servicio principal de cancelaciones.
Orquesta el flujo: validación → vendor → dispatcher → adapter → registro.
"""

from dataclasses import dataclass
from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.adapters import ProcessorDispatcher
from app.db.models import Cancellation
from app.schemas.cancellation import CancelRequest, CancellationState, Processor
from app.services.outcome_recorder import OutcomeRecorder
from app.services.request_validator import validate_cancel_request
from app.services.vendor_service import VendorService
from app.utils.exceptions import (
    CancellationServiceError,
    ConfigurationError,
    UnsupportedProcessorError,
    UpstreamProcessorError,
)


logger = structlog.get_logger(__name__)

SUCCESS_MESSAGES = {
    Processor.STRIPE: "Stripe subscription cancelled successfully.",
    Processor.PADDLE: "Paddle subscription cancelled",
}

UPSTREAM_FAILURE_MESSAGES = {
    Processor.STRIPE: "Failed to cancel Stripe subscription.",
    Processor.PADDLE: "Failed to cancel Paddle subscription.",
}


@dataclass
class CancellationOutcome:
    """Cancelación completada y su registro de auditoría."""

    processor: Processor
    record: Cancellation
    message: str

    @property
    def cancellation_id(self) -> str:
        return str(self.record.id)


class CancellationService:
    """
    Servicio para procesar cancelaciones.

    Cada invocación hace como máximo una llamada al procesador y escribe
    exactamente un registro una vez resuelto el vendor, incluso cuando
    el dispatcher o el adapter fallan.
    """

    def __init__(
        self,
        db: AsyncSession,
        vendor_service: VendorService,
        dispatcher: ProcessorDispatcher,
    ):
        self.db = db
        self.vendors = vendor_service
        self.dispatcher = dispatcher
        self.recorder = OutcomeRecorder(db)

    async def cancel_subscription(
        self,
        payload: Any,
        context: dict[str, Any] | None = None,
    ) -> CancellationOutcome:
        """
        Procesa una petición de cancelación.

        Args:
            payload: Body JSON crudo recibido por el endpoint
            context: Datos del request para auditoría (origin, user agent)

        Returns:
            CancellationOutcome con el registro completado

        Raises:
            ValidationError: Faltan vendorKey o userId (sin registro)
            NotFoundError: Vendor key desconocida (sin registro)
            UnsupportedProcessorError: Registro fallido escrito
            ConfigurationError: Registro fallido escrito
            UpstreamProcessorError: Registro fallido escrito
            PersistenceError: No se pudo escribir el registro
        """
        logger.info("Cancellation state", state=CancellationState.RECEIVED.value)

        request = validate_cancel_request(payload)
        log = logger.bind(vendor_key=request.vendor_key)
        log.info("Cancellation state", state=CancellationState.VALIDATED.value)

        vendor = await self.vendors.resolve(request.vendor_key)
        log.info(
            "Cancellation state",
            state=CancellationState.VENDOR_RESOLVED.value,
            company_name=vendor.company_name,
        )

        try:
            provider = self.dispatcher.dispatch(vendor)
            log.info(
                "Cancellation state",
                state=CancellationState.DISPATCHED.value,
                processor=provider.provider_name,
            )
            result = await provider.cancel_subscription(request.user_id)
        except (UnsupportedProcessorError, ConfigurationError) as e:
            processor = e.processor or "unknown"
            log.warning(
                "Cancellation state",
                state=CancellationState.FAILED.value,
                processor=processor,
                error=e.message,
            )
            await self._record_failure(request, processor, e, context)
            raise
        except Exception as e:
            # Cualquier otra falla antes del registro queda auditada igual
            log.exception("Unexpected error processing cancellation")
            error = CancellationServiceError("Internal server error", code="INTERNAL_ERROR")
            await self._record_failure(
                request,
                vendor.processor or "unknown",
                error,
                context,
                detail=str(e) or type(e).__name__,
            )
            raise error from e

        log.info(
            "Cancellation state",
            state=result.status.value,
            processor=result.provider,
        )

        record = await self.recorder.record_result(request, result, context)
        log = log.bind(cancellation_id=str(record.id))
        log.info("Cancellation state", state=CancellationState.RECORDED.value)

        processor = Processor(result.provider)

        if not result.succeeded:
            error = UpstreamProcessorError(
                result.provider,
                UPSTREAM_FAILURE_MESSAGES[processor],
            )
            error.cancellation_id = str(record.id)
            raise error

        return CancellationOutcome(
            processor=processor,
            record=record,
            message=SUCCESS_MESSAGES[processor],
        )

    async def _record_failure(
        self,
        request: CancelRequest,
        processor: str,
        error: CancellationServiceError,
        context: dict[str, Any] | None,
        detail: str | None = None,
    ) -> None:
        """Escribe el registro fallido y asocia su ID al error."""
        record = await self.recorder.record_failure(
            request,
            processor=processor,
            error=detail or error.message,
            context=context,
        )
        error.cancellation_id = str(record.id)
        logger.info(
            "Cancellation state",
            state=CancellationState.RECORDED.value,
            vendor_key=request.vendor_key,
            cancellation_id=error.cancellation_id,
        )
