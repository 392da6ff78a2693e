"""
Cifrado de credenciales de procesadores (AES-256-GCM).

El formato almacenado es el mismo que escribe el dashboard de vendors:
``{"iv": <hex>, "encryptedData": <hex>, "tag": <hex>}``.
"""

import os
from typing import Any

import structlog
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from app.utils.exceptions import CredentialDecryptionError


logger = structlog.get_logger(__name__)

KEY_SIZE_BYTES = 32
NONCE_SIZE_BYTES = 12
TAG_SIZE_BYTES = 16

ENCRYPTED_FIELDS = ("iv", "encryptedData", "tag")


def derive_key(secret: str) -> bytes:
    """
    Deriva la clave de 32 bytes a partir del secret.

    Trunca o rellena con ceros el secret en UTF-8, igual que el
    dashboard, para poder leer credenciales ya almacenadas.
    """
    raw = secret.encode("utf-8")
    if len(raw) >= KEY_SIZE_BYTES:
        return raw[:KEY_SIZE_BYTES]
    return raw.ljust(KEY_SIZE_BYTES, b"\0")


def is_encrypted_credential(value: Any) -> bool:
    """Indica si un valor almacenado tiene la forma de credencial cifrada."""
    return isinstance(value, dict) and all(
        isinstance(value.get(name), str) and value.get(name)
        for name in ENCRYPTED_FIELDS
    )


class CredentialCipher:
    """
    Cifra y descifra credenciales de vendors.

    El secret se inyecta explícitamente; no existe un valor por defecto
    a nivel de proceso.
    """

    def __init__(self, secret: str):
        if not secret:
            raise ValueError("Encryption secret must not be empty")

        if len(secret.encode("utf-8")) < KEY_SIZE_BYTES:
            logger.warning(
                "Encryption secret shorter than key size, zero-padding",
                key_size=KEY_SIZE_BYTES,
            )

        self._aead = AESGCM(derive_key(secret))

    def encrypt(self, plaintext: str) -> dict[str, str]:
        """
        Cifra una credencial con un nonce aleatorio.

        Args:
            plaintext: Credencial en claro (API key / auth token)

        Returns:
            Dict con iv, encryptedData y tag en hexadecimal
        """
        if not plaintext:
            raise ValueError("Cannot encrypt an empty credential")

        nonce = os.urandom(NONCE_SIZE_BYTES)
        sealed = self._aead.encrypt(nonce, plaintext.encode("utf-8"), None)

        return {
            "iv": nonce.hex(),
            "encryptedData": sealed[:-TAG_SIZE_BYTES].hex(),
            "tag": sealed[-TAG_SIZE_BYTES:].hex(),
        }

    def decrypt(self, encrypted: dict[str, str]) -> str:
        """
        Descifra una credencial almacenada.

        Raises:
            CredentialDecryptionError: Si el formato es inválido, la clave
                no corresponde o el contenido fue alterado
        """
        if not is_encrypted_credential(encrypted):
            raise CredentialDecryptionError("Credential is not in encrypted form")

        try:
            nonce = bytes.fromhex(encrypted["iv"])
            sealed = bytes.fromhex(encrypted["encryptedData"]) + bytes.fromhex(encrypted["tag"])
            plaintext = self._aead.decrypt(nonce, sealed, None)
        except InvalidTag:
            raise CredentialDecryptionError("Credential authentication failed")
        except ValueError as e:
            raise CredentialDecryptionError(f"Malformed encrypted credential: {e}")

        return plaintext.decode("utf-8")
