"""
Adapter para Paddle Billing.
Cancela suscripciones vía REST con autenticación Bearer.
"""

import asyncio
from typing import Any
from urllib.parse import quote

import httpx
import structlog

from app.adapters.base import CancellationProvider, CancellationResult
from app.schemas.cancellation import CancellationStatus
from app.utils.crypto import CredentialCipher
from app.utils.exceptions import CredentialDecryptionError


logger = structlog.get_logger(__name__)


class PaddleAdapter(CancellationProvider):
    """
    Adapter para Paddle Billing API.

    Llama a ``POST /subscriptions/{id}/cancel`` con
    ``effective_from=immediately``.

    Un 2xx cuyo estado devuelto no es ``canceled`` se registra como
    completado con un warning (ambigüedad conocida de la API).
    """

    CANCELED_STATUS = "canceled"

    def __init__(
        self,
        credential: dict[str, str],
        cipher: CredentialCipher,
        timeout: float,
        vendor_id: str,
        base_url: str,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Inicializa el adapter de Paddle.

        Args:
            credential: Auth token cifrado del vendor
            cipher: Cipher para descifrar el token al momento de la llamada
            timeout: Límite de la llamada en segundos
            vendor_id: Paddle vendor ID del vendor
            base_url: URL base de la API (sandbox o producción)
            transport: Transport httpx alternativo (tests)
        """
        super().__init__(credential, cipher, timeout)
        self._vendor_id = vendor_id
        self._base_url = base_url.rstrip("/")
        self._transport = transport

    @property
    def provider_name(self) -> str:
        return "paddle"

    async def cancel_subscription(self, subscription_id: str) -> CancellationResult:
        """Cancela una suscripción de Paddle de inmediato."""
        audit = {"paddle_vendor_id": self._vendor_id}

        try:
            auth_token = self._cipher.decrypt(self._credential).strip()
        except CredentialDecryptionError as e:
            logger.error("Failed to decrypt Paddle auth token", error=e.message)
            return self.failed(
                subscription_id,
                "Failed to decrypt Paddle API key.",
                metadata=audit,
            )

        # El id llega del widget: se escapa como un único segmento de path
        if subscription_id in (".", ".."):
            logger.warning("Rejected Paddle subscription id", subscription_id=subscription_id)
            return self.failed(
                subscription_id,
                "Invalid Paddle subscription id",
                metadata=audit,
            )
        url = f"{self._base_url}/subscriptions/{quote(subscription_id, safe='')}/cancel"
        logger.info("Calling Paddle Billing API", url=url, subscription_id=subscription_id)

        try:
            # Límite total: los timeouts de httpx son por fase
            response = await asyncio.wait_for(
                self._post_cancel(url, auth_token),
                timeout=self._timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException):
            logger.error("Paddle cancellation timed out", subscription_id=subscription_id)
            return self.failed(
                subscription_id,
                f"Paddle API request timed out after {self._timeout:g}s",
                metadata=audit,
            )
        except httpx.HTTPError as e:
            logger.error(
                "Network error during Paddle API call",
                subscription_id=subscription_id,
                error=str(e),
            )
            return self.failed(
                subscription_id,
                str(e) or "Network error during Paddle API call",
                metadata=audit,
            )

        body = self._parse_body(response)
        logger.info("Paddle API response", status_code=response.status_code)

        if not response.is_success:
            error = self._extract_error(body, response.status_code)
            logger.error(
                "Paddle API error",
                subscription_id=subscription_id,
                status_code=response.status_code,
                error=error,
            )
            return self.failed(
                subscription_id,
                error,
                upstream_status_code=response.status_code,
                metadata=audit,
            )

        data = body.get("data") if isinstance(body.get("data"), dict) else {}
        returned_status = data.get("status")

        if returned_status != self.CANCELED_STATUS:
            # Un 2xx se registra como completado aunque el estado no sea canceled
            logger.warning(
                "Paddle subscription not canceled after immediate cancel request",
                subscription_id=subscription_id,
                returned_status=returned_status,
                status_code=response.status_code,
            )

        return CancellationResult(
            status=CancellationStatus.COMPLETED,
            provider=self.provider_name,
            subscription_id=subscription_id,
            processor_reference=data.get("id") or subscription_id,
            upstream_status_code=response.status_code,
            upstream_subscription_status=returned_status,
            metadata=audit,
        )

    async def _post_cancel(self, url: str, auth_token: str) -> httpx.Response:
        async with httpx.AsyncClient(
            timeout=self._timeout,
            transport=self._transport,
        ) as client:
            return await client.post(
                url,
                json={"effective_from": "immediately"},
                headers={
                    "Authorization": f"Bearer {auth_token}",
                    "Content-Type": "application/json",
                },
            )

    @staticmethod
    def _parse_body(response: httpx.Response) -> dict[str, Any]:
        """Decodifica el body JSON; un body no-JSON se trata como vacío."""
        try:
            body = response.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}

    @staticmethod
    def _extract_error(body: dict[str, Any], status_code: int) -> str:
        """Extrae el detalle del error de Paddle sin reescribirlo."""
        error = body.get("error")
        if isinstance(error, dict):
            detail = error.get("detail") or error.get("message")
            if detail:
                return str(detail)
        return f"Paddle API request failed with status {status_code}"
