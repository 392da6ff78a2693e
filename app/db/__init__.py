"""
Capa de base de datos del servicio de cancelaciones.
"""

from app.db.database import (
    get_db,
    get_db_context,
    init_db,
    close_db,
    AsyncSessionLocal,
    engine,
)
from app.db.models import (
    Base,
    Cancellation,
    Vendor,
)

__all__ = [
    # Database
    "get_db",
    "get_db_context",
    "init_db",
    "close_db",
    "AsyncSessionLocal",
    "engine",
    # Models
    "Base",
    "Cancellation",
    "Vendor",
]
