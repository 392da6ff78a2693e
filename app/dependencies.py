"""
Dependencies compartidas entre routers.
"""

import secrets
from functools import lru_cache

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.adapters import ProcessorDispatcher
from app.config import settings
from app.db.database import get_db
from app.services import CancellationService, VendorService
from app.utils.crypto import CredentialCipher
from app.utils.exceptions import AdminAuthenticationError


@lru_cache()
def get_credential_cipher() -> CredentialCipher:
    """Cipher construido con el secret inyectado desde el entorno."""
    return CredentialCipher(settings.ENCRYPTION_SECRET)


def get_processor_dispatcher(
    cipher: CredentialCipher = Depends(get_credential_cipher),
) -> ProcessorDispatcher:
    """Dependency para obtener el dispatcher de procesadores."""
    return ProcessorDispatcher(
        cipher=cipher,
        timeout=settings.PROCESSOR_TIMEOUT_SECONDS,
        paddle_api_url=settings.PADDLE_API_URL,
    )


async def get_vendor_service(
    db: AsyncSession = Depends(get_db),
    cipher: CredentialCipher = Depends(get_credential_cipher),
) -> VendorService:
    """Dependency para obtener VendorService."""
    return VendorService(db, cipher)


async def get_cancellation_service(
    db: AsyncSession = Depends(get_db),
    vendor_service: VendorService = Depends(get_vendor_service),
    dispatcher: ProcessorDispatcher = Depends(get_processor_dispatcher),
) -> CancellationService:
    """Dependency para obtener CancellationService."""
    return CancellationService(db, vendor_service, dispatcher)


async def require_admin_token(
    x_admin_token: str | None = Header(None, alias="X-Admin-Token"),
) -> None:
    """
    Protege los endpoints de gestión de vendors.

    Sin ADMIN_API_TOKEN configurado se rechaza toda llamada.
    """
    expected = settings.ADMIN_API_TOKEN
    if not expected or not x_admin_token or not secrets.compare_digest(expected, x_admin_token):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=AdminAuthenticationError().message,
        )
