"""
Validación de peticiones de cancelación.
"""

from typing import Any

import pydantic

from app.schemas.cancellation import CancelRequest
from app.utils.exceptions import ValidationError


def validate_cancel_request(payload: Any) -> CancelRequest:
    """
    Valida el body crudo de ``POST /cancel``.

    Args:
        payload: Body JSON decodificado (puede ser None o no-dict)

    Returns:
        CancelRequest con vendorKey y userId no vacíos

    Raises:
        ValidationError: Si falta vendorKey o userId
    """
    if not isinstance(payload, dict):
        payload = {}

    try:
        request = CancelRequest.model_validate(payload)
    except pydantic.ValidationError as e:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
        raise ValidationError(f"Invalid fields: {', '.join(fields)}")

    if not request.vendor_key or not request.user_id:
        raise ValidationError("vendorKey & userId required")

    return request
