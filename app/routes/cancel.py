"""
Endpoint de cancelación invocado por el widget embebido en sitios de vendors.
"""

import structlog
from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse

from app.dependencies import get_cancellation_service
from app.schemas import CancelErrorResponse, CancelSuccessResponse, CancellationState
from app.services import CancellationService
from app.utils.exceptions import (
    CancellationServiceError,
    ConfigurationError,
    NotFoundError,
    PersistenceError,
    UnsupportedProcessorError,
    ValidationError,
)


logger = structlog.get_logger(__name__)

router = APIRouter()

# El widget se llama directamente desde sitios arbitrarios
CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST,OPTIONS",
    "Access-Control-Allow-Headers": "*",
}


def error_response(
    status_code: int,
    error: str,
    cancellation_id: str | None = None,
) -> JSONResponse:
    """Construye el body de error ``{error, cancellationId?}``."""
    body = CancelErrorResponse(error=error, cancellation_id=cancellation_id)
    logger.info(
        "Cancellation state",
        state=CancellationState.RESPONDED.value,
        status_code=status_code,
        cancellation_id=cancellation_id,
    )
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(by_alias=True, exclude_none=True),
    )


@router.options(
    "",
    status_code=status.HTTP_204_NO_CONTENT,
    include_in_schema=False,
)
async def cancel_preflight():
    """Responde preflights que no llevan cabeceras CORS completas."""
    return Response(status_code=status.HTTP_204_NO_CONTENT, headers=CORS_HEADERS)


@router.post(
    "",
    response_model=CancelSuccessResponse,
    summary="Cancelar una suscripción",
    description="""
    Cancela de inmediato la suscripción indicada en el procesador del vendor
    (Stripe o Paddle) y registra el intento para auditoría.

    - `userId` debe ser el ID de suscripción en el procesador
    - Toda respuesta posterior a resolver el vendor incluye `cancellationId`
    - No es idempotente: cada llamada genera un registro nuevo
    """,
    responses={
        400: {"model": CancelErrorResponse},
        403: {"model": CancelErrorResponse},
        500: {"model": CancelErrorResponse},
    },
)
async def cancel_subscription(
    request: Request,
    service: CancellationService = Depends(get_cancellation_service),
):
    """Procesa una cancelación enviada por el widget."""
    try:
        payload = await request.json()
    except ValueError:
        payload = None

    context = {
        key: value
        for key, value in {
            "origin": request.headers.get("origin"),
            "user_agent": request.headers.get("user-agent"),
            "request_id": request.headers.get("x-request-id"),
        }.items()
        if value
    }

    try:
        outcome = await service.cancel_subscription(payload, context)

    except ValidationError as e:
        return error_response(status.HTTP_400_BAD_REQUEST, e.message)
    except NotFoundError as e:
        return error_response(status.HTTP_403_FORBIDDEN, e.message)
    except UnsupportedProcessorError as e:
        return error_response(status.HTTP_400_BAD_REQUEST, e.message, e.cancellation_id)
    except ConfigurationError as e:
        return error_response(status.HTTP_403_FORBIDDEN, e.message, e.cancellation_id)
    except PersistenceError as e:
        logger.error("Cancellation could not be recorded", error=e.message)
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")
    except CancellationServiceError as e:
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            e.message,
            e.cancellation_id,
        )
    except Exception:
        # Fallos del store antes del registro (p. ej. al resolver el vendor)
        logger.exception("Unhandled error processing cancellation")
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")

    logger.info(
        "Cancellation state",
        state=CancellationState.RESPONDED.value,
        status_code=status.HTTP_200_OK,
        processor=outcome.processor.value,
        cancellation_id=outcome.cancellation_id,
    )

    return CancelSuccessResponse(
        processor=outcome.processor,
        cancellation_id=outcome.cancellation_id,
        message=outcome.message,
    )
