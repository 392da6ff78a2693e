"""
Endpoints para onboarding y configuración de vendors.
"""

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from app.dependencies import get_vendor_service, require_admin_token
from app.schemas import (
    APIResponse,
    VendorRegisterRequest,
    VendorResponse,
    VendorUpdateRequest,
)
from app.services import VendorService
from app.utils.exceptions import NotFoundError, ValidationError


logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=APIResponse[VendorResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin_token)],
    summary="Registrar un vendor",
    description="""
    Completa el onboarding de un vendor.

    La credencial del procesador se cifra (AES-256-GCM) antes de guardarse
    y nunca se devuelve. La `vendorKey` generada es la que el vendor
    embebe en el widget.
    """,
)
async def register_vendor(
    request: VendorRegisterRequest,
    service: VendorService = Depends(get_vendor_service),
):
    """Registra un nuevo vendor."""
    result = await service.register_vendor(request)

    return APIResponse(
        success=True,
        message="Vendor registered successfully",
        data=result,
    )


@router.get(
    "/{vendor_key}",
    response_model=APIResponse[VendorResponse],
    summary="Obtener la configuración pública de un vendor",
)
async def get_vendor(
    vendor_key: str,
    service: VendorService = Depends(get_vendor_service),
):
    """Obtiene la configuración de un vendor sin credenciales."""
    try:
        vendor = await service.get_vendor(vendor_key)
        return APIResponse(
            success=True,
            data=vendor,
        )
    except NotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Vendor not found",
        )


@router.patch(
    "/{vendor_key}",
    response_model=APIResponse[VendorResponse],
    dependencies=[Depends(require_admin_token)],
    summary="Actualizar la configuración de un vendor",
)
async def update_vendor(
    vendor_key: str,
    request: VendorUpdateRequest,
    service: VendorService = Depends(get_vendor_service),
):
    """Actualiza los settings de un vendor. Una credencial nueva se re-cifra."""
    try:
        vendor = await service.update_vendor(vendor_key, request)
        return APIResponse(
            success=True,
            message="Vendor updated successfully",
            data=vendor,
        )
    except NotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Vendor not found",
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=e.message,
        )
