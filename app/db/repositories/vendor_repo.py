"""
Repositorio para operaciones de Vendor.
"""

import secrets
from typing import Any, Sequence

import structlog
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import Vendor


logger = structlog.get_logger(__name__)


class VendorRepository:
    """Repositorio para operaciones CRUD de vendors."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def generate_vendor_key() -> str:
        """Genera una vendor key opaca de 32 caracteres hex."""
        return secrets.token_hex(16)

    async def create(
        self,
        company_name: str,
        processor: str,
        credential: dict[str, str] | None = None,
        paddle_vendor_id: str | None = None,
        domain: str | None = None,
        button_text: str | None = None,
        button_color: str | None = None,
        test_mode: bool = False,
    ) -> Vendor:
        """Crea un vendor con una vendor key nueva."""
        vendor = Vendor(
            vendor_key=self.generate_vendor_key(),
            company_name=company_name,
            domain=domain,
            processor=processor,
            credential=credential,
            paddle_vendor_id=paddle_vendor_id,
            test_mode=test_mode,
        )
        if button_text is not None:
            vendor.button_text = button_text
        if button_color is not None:
            vendor.button_color = button_color

        self.db.add(vendor)
        await self.db.flush()
        await self.db.refresh(vendor)

        logger.info("Vendor created", vendor_key=vendor.vendor_key, processor=processor)
        return vendor

    async def get_by_key(self, vendor_key: str) -> Vendor | None:
        """Obtiene un vendor por vendor key."""
        result = await self.db.execute(
            select(Vendor).where(Vendor.vendor_key == vendor_key)
        )
        return result.scalar_one_or_none()

    async def list_all(self) -> Sequence[Vendor]:
        """Lista todos los vendors."""
        result = await self.db.execute(select(Vendor).order_by(Vendor.created_at))
        return result.scalars().all()

    async def update(self, vendor_key: str, **values: Any) -> Vendor | None:
        """Actualiza los campos indicados de un vendor."""
        if values:
            await self.db.execute(
                update(Vendor)
                .where(Vendor.vendor_key == vendor_key)
                .values(**values)
                .execution_options(synchronize_session="fetch")
            )
            await self.db.flush()

        vendor = await self.get_by_key(vendor_key)
        if vendor is not None:
            await self.db.refresh(vendor)

        logger.info("Vendor updated", vendor_key=vendor_key, fields=sorted(values))
        return vendor
