"""
Servicio para configuración de vendors.
Incluye el vendor resolver del flujo de cancelación.
"""

from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.adapters.base import VendorConfig
from app.db.models import Vendor
from app.db.repositories import VendorRepository
from app.schemas.cancellation import Processor
from app.schemas.vendor import (
    VendorRegisterRequest,
    VendorResponse,
    VendorUpdateRequest,
)
from app.utils.crypto import CredentialCipher, is_encrypted_credential
from app.utils.exceptions import NotFoundError, ValidationError


logger = structlog.get_logger(__name__)


class VendorService:
    """
    Servicio para vendors.

    Resuelve la configuración normalizada que consume el dispatcher y
    gestiona el alta/actualización cifrando siempre la credencial.
    """

    def __init__(self, db: AsyncSession, cipher: CredentialCipher):
        self.db = db
        self.repo = VendorRepository(db)
        self._cipher = cipher

    async def resolve(self, vendor_key: str) -> VendorConfig:
        """
        Carga la configuración de un vendor por vendor key.

        Raises:
            NotFoundError: Si la vendor key no existe
        """
        vendor = await self.repo.get_by_key(vendor_key)

        if not vendor:
            logger.warning("Unknown vendor key", vendor_key=vendor_key)
            raise NotFoundError(vendor_key)

        return self._to_config(vendor)

    async def register_vendor(self, request: VendorRegisterRequest) -> VendorResponse:
        """
        Registra un vendor al completar el onboarding.

        La credencial se cifra antes de persistir y no se devuelve.
        """
        credential = None
        if request.processor != Processor.NONE:
            credential = self._cipher.encrypt(request.credential)

        vendor = await self.repo.create(
            company_name=request.company_name,
            processor=request.processor.value,
            credential=credential,
            paddle_vendor_id=request.paddle_vendor_id,
            domain=request.domain,
            button_text=request.button_text,
            button_color=request.button_color,
            test_mode=request.test_mode,
        )

        logger.info(
            "Vendor registered",
            vendor_key=vendor.vendor_key,
            company_name=vendor.company_name,
            processor=vendor.processor,
        )

        return VendorResponse.model_validate(vendor)

    async def get_vendor(self, vendor_key: str) -> VendorResponse:
        """
        Obtiene la configuración pública de un vendor.

        Raises:
            NotFoundError: Si el vendor no existe
        """
        vendor = await self.repo.get_by_key(vendor_key)

        if not vendor:
            raise NotFoundError(vendor_key)

        return VendorResponse.model_validate(vendor)

    async def update_vendor(
        self,
        vendor_key: str,
        request: VendorUpdateRequest,
    ) -> VendorResponse:
        """
        Actualiza la configuración desde la página de settings.

        Raises:
            NotFoundError: Si el vendor no existe
            ValidationError: Si el resultado deja un procesador sin credencial
        """
        vendor = await self.repo.get_by_key(vendor_key)

        if not vendor:
            raise NotFoundError(vendor_key)

        values: dict[str, Any] = request.model_dump(
            exclude_unset=True,
            exclude_none=True,
            exclude={"credential"},
        )
        if request.processor is not None:
            values["processor"] = request.processor.value
        if request.credential:
            values["credential"] = self._cipher.encrypt(request.credential)

        processor = values.get("processor", vendor.processor)
        has_credential = bool(values.get("credential", vendor.credential))
        paddle_vendor_id = values.get("paddle_vendor_id", vendor.paddle_vendor_id)

        if processor != Processor.NONE.value and not has_credential:
            raise ValidationError(f"credential is required for processor '{processor}'")
        if processor == Processor.PADDLE.value and not paddle_vendor_id:
            raise ValidationError("paddleVendorId is required for processor 'paddle'")

        updated = await self.repo.update(vendor_key, **values)

        return VendorResponse.model_validate(updated)

    async def encrypt_plaintext_credentials(self) -> int:
        """
        Cifra las credenciales que siguen almacenadas en claro.

        Returns:
            Número de vendors migrados
        """
        migrated = 0

        for vendor in await self.repo.list_all():
            if not isinstance(vendor.credential, str) or not vendor.credential.strip():
                continue

            await self.repo.update(
                vendor.vendor_key,
                credential=self._cipher.encrypt(vendor.credential.strip()),
            )
            migrated += 1

            logger.info(
                "Vendor credential encrypted",
                vendor_key=vendor.vendor_key,
                processor=vendor.processor,
            )

        return migrated

    def _to_config(self, vendor: Vendor) -> VendorConfig:
        """Normaliza el modelo de BD a la forma que consume el dispatcher."""
        processor = (vendor.processor or "").strip().lower() or None

        credential = None
        credential_is_plaintext = False
        if is_encrypted_credential(vendor.credential):
            credential = dict(vendor.credential)
        elif isinstance(vendor.credential, str) and vendor.credential.strip():
            credential_is_plaintext = True

        return VendorConfig(
            vendor_key=vendor.vendor_key,
            processor=processor,
            credential=credential,
            paddle_vendor_id=vendor.paddle_vendor_id or None,
            company_name=vendor.company_name,
            credential_is_plaintext=credential_is_plaintext,
        )
