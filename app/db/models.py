"""
Modelos SQLAlchemy para el servicio de cancelaciones.
"""

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    String,
    Text,
    Uuid,
    event,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from app.schemas.cancellation import CancellationStatus, Processor


# JSONB en PostgreSQL, JSON genérico en el resto (SQLite en tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


class Base(DeclarativeBase):
    """Base para todos los modelos."""

    type_annotation_map = {
        dict[str, Any]: JSONType,
    }


class TimestampMixin:
    """Mixin para campos de timestamp."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )


class Vendor(Base, TimestampMixin):
    """Configuración de un vendor que embebe el botón de cancelación."""

    __tablename__ = "vendors"

    # La vendor key es el identificador público con el que autentica el widget
    vendor_key: Mapped[str] = mapped_column(String(64), primary_key=True)

    company_name: Mapped[str] = mapped_column(String(200), nullable=False)
    domain: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Procesador de pagos
    processor: Mapped[str] = mapped_column(
        String(20),
        default=Processor.NONE.value,
        nullable=False,
    )
    # {"iv", "encryptedData", "tag"}; un str indica credencial legacy sin cifrar
    credential: Mapped[Any | None] = mapped_column(JSONType, nullable=True)
    paddle_vendor_id: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Personalización del botón
    button_text: Mapped[str] = mapped_column(
        String(100),
        default="Cancel subscription",
        nullable=False,
    )
    button_color: Mapped[str] = mapped_column(
        String(20),
        default="#ef4444",
        nullable=False,
    )
    test_mode: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        onupdate=func.now(),
        nullable=True,
    )

    @property
    def has_credential(self) -> bool:
        return bool(self.credential)

    def __repr__(self) -> str:
        return f"<Vendor {self.vendor_key} ({self.processor})>"


class Cancellation(Base, TimestampMixin):
    """Registro de auditoría de un intento de cancelación (append-only)."""

    __tablename__ = "cancels"

    # Primary key (se devuelve al cliente como cancellationId)
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    vendor_key: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    # ID de suscripción en el procesador, tal como lo envía el vendor
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    # Datos opcionales del usuario final
    email: Mapped[str] = mapped_column(String(255), default="Not provided", nullable=False)
    reason: Mapped[str] = mapped_column(Text, default="Not specified", nullable=False)
    feedback: Mapped[str] = mapped_column(Text, default="", nullable=False)

    # Resultado
    processor: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        default=CancellationStatus.PENDING.value,
        nullable=False,
        index=True,
    )
    error: Mapped[str | None] = mapped_column(Text, nullable=True)
    processor_reference: Mapped[str | None] = mapped_column(String(255), nullable=True)

    record_metadata: Mapped[dict[str, Any]] = mapped_column(
        "metadata",
        JSONType,
        default=dict,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Cancellation {self.id} - {self.vendor_key}/{self.user_id} ({self.status})>"


@event.listens_for(Cancellation, "before_update")
def _reject_cancellation_update(mapper, connection, target: Cancellation) -> None:
    raise ValueError(f"Cancellation records are append-only: {target.id}")
