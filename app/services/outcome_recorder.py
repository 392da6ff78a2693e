"""
Registro de resultados de cancelación para auditoría.
"""

from typing import Any

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.adapters.base import CancellationResult
from app.db.models import Cancellation
from app.db.repositories import CancellationRepository
from app.schemas.cancellation import CancelRequest, CancellationStatus
from app.utils.exceptions import PersistenceError


logger = structlog.get_logger(__name__)


class OutcomeRecorder:
    """
    Persiste exactamente un registro por intento de cancelación.

    Si el store falla se lanza PersistenceError: es el único caso en que
    no hay cancellationId que devolver.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repo = CancellationRepository(db)

    async def record_result(
        self,
        request: CancelRequest,
        result: CancellationResult,
        context: dict[str, Any] | None = None,
    ) -> Cancellation:
        """Registra el resultado devuelto por un adapter."""
        metadata = {
            **(context or {}),
            **result.metadata,
        }
        if result.upstream_status_code is not None:
            metadata["upstream_status_code"] = result.upstream_status_code
        if result.upstream_subscription_status is not None:
            metadata["upstream_subscription_status"] = result.upstream_subscription_status

        return await self._write(
            request,
            processor=result.provider,
            status=result.status,
            error=result.error,
            processor_reference=result.processor_reference,
            metadata=metadata,
        )

    async def record_failure(
        self,
        request: CancelRequest,
        processor: str,
        error: str,
        context: dict[str, Any] | None = None,
    ) -> Cancellation:
        """Registra un fallo ocurrido antes de llegar a un adapter."""
        return await self._write(
            request,
            processor=processor,
            status=CancellationStatus.FAILED,
            error=error,
            metadata=dict(context or {}),
        )

    async def _write(
        self,
        request: CancelRequest,
        processor: str,
        status: CancellationStatus,
        error: str | None = None,
        processor_reference: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> Cancellation:
        try:
            return await self.repo.create(
                vendor_key=request.vendor_key,
                user_id=request.user_id,
                processor=processor,
                status=status.value,
                email=request.email,
                reason=request.reason,
                feedback=request.feedback,
                error=error,
                processor_reference=processor_reference,
                metadata=metadata,
            )
        except SQLAlchemyError as e:
            logger.error(
                "Failed to persist cancellation record",
                vendor_key=request.vendor_key,
                status=status.value,
                error=str(e),
            )
            try:
                await self.db.rollback()
            except SQLAlchemyError as rollback_error:
                logger.error("Rollback after failed record write failed", error=str(rollback_error))
            raise PersistenceError(str(e))
