"""
Interfaz base abstracta para procesadores de pago.
Define el contrato que todos los adapters de cancelación deben implementar.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from app.schemas.cancellation import CancellationStatus
from app.utils.crypto import CredentialCipher


@dataclass(frozen=True)
class VendorConfig:
    """
    Configuración normalizada de un vendor.
    La produce el vendor resolver una sola vez; los adapters no leen
    campos alternativos del modelo.
    """

    vendor_key: str
    processor: str | None
    credential: dict[str, str] | None = field(default=None, repr=False)
    paddle_vendor_id: str | None = None
    company_name: str | None = None
    # Credencial guardada en claro (pendiente de migración)
    credential_is_plaintext: bool = False


@dataclass
class CancellationResult:
    """
    Resultado normalizado de una cancelación.
    Todos los adapters deben retornar esta estructura, nunca lanzar.
    """

    status: CancellationStatus  # COMPLETED o FAILED
    provider: str  # "stripe", "paddle"
    subscription_id: str

    # ID devuelto por el procesador (solo en éxito)
    processor_reference: str | None = None

    # Detalle del fallo tal como lo reporta el procesador
    error: str | None = None

    # Información adicional para auditoría
    upstream_status_code: int | None = None
    upstream_subscription_status: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.status == CancellationStatus.COMPLETED


class CancellationProvider(ABC):
    """
    Interfaz abstracta para procesadores de pago.

    Cada adapter recibe la credencial cifrada del vendor y el cipher;
    la credencial solo se descifra dentro de ``cancel_subscription``.
    """

    def __init__(
        self,
        credential: dict[str, str],
        cipher: CredentialCipher,
        timeout: float,
    ):
        self._credential = credential
        self._cipher = cipher
        self._timeout = timeout

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Nombre del procesador (ej: 'stripe', 'paddle')."""
        pass

    @abstractmethod
    async def cancel_subscription(self, subscription_id: str) -> CancellationResult:
        """
        Cancela una suscripción con efecto inmediato.

        Args:
            subscription_id: ID de la suscripción en el procesador

        Returns:
            CancellationResult con estado COMPLETED o FAILED
        """
        pass

    def failed(self, subscription_id: str, error: str, **extra: Any) -> CancellationResult:
        """Construye un resultado FAILED para este procesador."""
        return CancellationResult(
            status=CancellationStatus.FAILED,
            provider=self.provider_name,
            subscription_id=subscription_id,
            error=error,
            **extra,
        )
