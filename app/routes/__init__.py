"""
Rutas/Endpoints del servicio de cancelaciones.
"""

from app.routes.cancel import router as cancel_router
from app.routes.vendors import router as vendors_router

__all__ = [
    "cancel_router",
    "vendors_router",
]
