"""
Dispatcher de procesadores.
Implementa el patrón Factory para instanciar el adapter de cada vendor.
"""

import httpx
import structlog

from app.adapters.base import CancellationProvider, VendorConfig
from app.adapters.paddle_adapter import PaddleAdapter
from app.adapters.stripe_adapter import StripeAdapter
from app.utils.crypto import CredentialCipher
from app.utils.exceptions import ConfigurationError, UnsupportedProcessorError


logger = structlog.get_logger(__name__)


# Registro de procesadores disponibles
PROVIDERS: dict[str, type[CancellationProvider]] = {
    "stripe": StripeAdapter,
    "paddle": PaddleAdapter,
}

# Nombre legible para mensajes de configuración
CREDENTIAL_LABELS = {
    "stripe": "Stripe API key",
    "paddle": "Paddle API key",
}


class ProcessorDispatcher:
    """
    Selecciona y construye el adapter según la configuración del vendor.

    No realiza I/O: solo valida la configuración y arma el adapter con
    la credencial todavía cifrada.
    """

    def __init__(
        self,
        cipher: CredentialCipher,
        timeout: float,
        paddle_api_url: str,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._cipher = cipher
        self._timeout = timeout
        self._paddle_api_url = paddle_api_url
        self._http_transport = http_transport

    def dispatch(self, vendor: VendorConfig) -> CancellationProvider:
        """
        Retorna el adapter para el procesador del vendor.

        Raises:
            UnsupportedProcessorError: Si el procesador falta o no está soportado
            ConfigurationError: Si falta la credencial o el Paddle vendor ID
        """
        processor = vendor.processor

        if processor not in PROVIDERS:
            raise UnsupportedProcessorError(processor)

        label = CREDENTIAL_LABELS[processor]
        if vendor.credential_is_plaintext:
            raise ConfigurationError(
                processor,
                f"{label} is stored unencrypted; run the credential migration",
            )
        if not vendor.credential:
            raise ConfigurationError(processor, f"{label} not configured")

        if processor == "paddle":
            if not vendor.paddle_vendor_id:
                raise ConfigurationError(processor, "Paddle configuration incomplete: missing paddleVendorId")

            provider: CancellationProvider = PaddleAdapter(
                credential=vendor.credential,
                cipher=self._cipher,
                timeout=self._timeout,
                vendor_id=vendor.paddle_vendor_id,
                base_url=self._paddle_api_url,
                transport=self._http_transport,
            )
        else:
            provider = PROVIDERS[processor](
                credential=vendor.credential,
                cipher=self._cipher,
                timeout=self._timeout,
            )

        logger.info(
            "Cancellation provider selected",
            vendor_key=vendor.vendor_key,
            provider=processor,
        )
        return provider
