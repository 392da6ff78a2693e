"""
Utilidades del servicio de cancelaciones.
"""

from app.utils.crypto import (
    CredentialCipher,
    is_encrypted_credential,
)

__all__ = [
    # Cifrado de credenciales
    "CredentialCipher",
    "is_encrypted_credential",
]
