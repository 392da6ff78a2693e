"""
Cancellation Service - CancelReady
FastAPI application entry point.
"""

import logging
import sys
import uuid
from contextlib import asynccontextmanager

import structlog
from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import Headers
from starlette.responses import Response

from app.config import settings
from app.db.database import close_db, get_db, init_db
from app.routes import cancel_router, vendors_router


def configure_logging() -> None:
    """
    Configura structlog sobre el logging estándar.

    JSON en producción, consola legible en el resto de entornos.
    """
    level = logging.DEBUG if settings.DEBUG else logging.INFO
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.ENVIRONMENT == "production"
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging()
logger = structlog.get_logger(__name__)


class PreflightNoContentCORSMiddleware(CORSMiddleware):
    """CORSMiddleware que responde los preflights con 204 en lugar de 200."""

    def preflight_response(self, request_headers: Headers) -> Response:
        response = super().preflight_response(request_headers)
        if response.status_code != 200:
            return response

        headers = {
            key: value
            for key, value in response.headers.items()
            if key.lower() not in ("content-length", "content-type")
        }
        return Response(status_code=204, headers=headers)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Crea las tablas al arrancar y libera el pool al apagar."""
    logger.info(
        "Starting Cancellation Service",
        app_name=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
        paddle_api_url=settings.PADDLE_API_URL,
    )
    await init_db()

    yield

    logger.info("Shutting down Cancellation Service")
    await close_db()


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Cancelación de suscripciones Stripe/Paddle como servicio, con registro de auditoría",
    lifespan=lifespan,
)

# El widget se embebe en sitios arbitrarios de vendors
app.add_middleware(
    PreflightNoContentCORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def bind_request_id(request: Request, call_next):
    """Propaga X-Request-ID (o uno nuevo) a los logs y a la respuesta."""
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(
        request_id=request_id,
        path=request.url.path,
    )

    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


@app.get("/", tags=["Health"])
async def root():
    """Root endpoint."""
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
    }


@app.get("/health", tags=["Health"])
async def health_check(db: AsyncSession = Depends(get_db)):
    """Health check: verifica que el store de vendors/registros responde."""
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error("Health check failed", error=str(e))
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "unhealthy",
                "database": "unavailable",
                "environment": settings.ENVIRONMENT,
            },
        )

    return {
        "status": "healthy",
        "database": "ok",
        "environment": settings.ENVIRONMENT,
    }


app.include_router(cancel_router, prefix="/cancel", tags=["Cancellation"])
app.include_router(vendors_router, prefix="/api/vendors", tags=["Vendors"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=8001, reload=True)
