"""
Repositorio para registros de cancelación (append-only).
"""

from typing import Any, Sequence

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import Cancellation


logger = structlog.get_logger(__name__)


class CancellationRepository:
    """
    Repositorio del log de auditoría de cancelaciones.

    Solo expone inserción y lectura: los registros son inmutables.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(
        self,
        vendor_key: str,
        user_id: str,
        processor: str,
        status: str,
        email: str | None = None,
        reason: str | None = None,
        feedback: str | None = None,
        error: str | None = None,
        processor_reference: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> Cancellation:
        """
        Inserta y confirma un registro de cancelación.

        El commit se hace aquí para que el registro sea durable antes
        de construir la respuesta.
        """
        cancellation = Cancellation(
            vendor_key=vendor_key,
            user_id=user_id,
            email=email or "Not provided",
            reason=reason or "Not specified",
            feedback=feedback or "",
            processor=processor,
            status=status,
            error=error,
            processor_reference=processor_reference,
            record_metadata=metadata or {},
        )

        self.db.add(cancellation)
        await self.db.flush()
        await self.db.commit()
        await self.db.refresh(cancellation)

        logger.info(
            "Cancellation record created",
            cancellation_id=str(cancellation.id),
            vendor_key=vendor_key,
            status=status,
        )
        return cancellation

    async def list_by_vendor(self, vendor_key: str) -> Sequence[Cancellation]:
        """Lista los registros de un vendor, más recientes primero."""
        result = await self.db.execute(
            select(Cancellation)
            .where(Cancellation.vendor_key == vendor_key)
            .order_by(Cancellation.created_at.desc())
        )
        return result.scalars().all()
