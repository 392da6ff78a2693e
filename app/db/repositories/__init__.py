"""
Repositorios para operaciones de base de datos.
"""

from app.db.repositories.cancellation_repo import CancellationRepository
from app.db.repositories.vendor_repo import VendorRepository

__all__ = [
    "CancellationRepository",
    "VendorRepository",
]
