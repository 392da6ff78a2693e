"""
Schemas para onboarding y configuración de vendors.
"""

from pydantic import Field, model_validator

from app.schemas.cancellation import Processor
from app.schemas.common import CamelSchema, TimestampMixin


# ============================================
# Request Schemas
# ============================================

class VendorRegisterRequest(CamelSchema):
    """Request al completar el onboarding de un vendor."""

    company_name: str = Field(..., min_length=1, max_length=200)
    domain: str | None = Field(None, max_length=255)
    processor: Processor = Processor.NONE
    credential: str | None = Field(
        None,
        description="API key de Stripe o auth token de Paddle (se cifra al guardar)",
    )
    paddle_vendor_id: str | None = None

    # Personalización del botón
    button_text: str = Field("Cancel subscription", max_length=100)
    button_color: str = Field("#ef4444", max_length=20)
    test_mode: bool = False

    @model_validator(mode="after")
    def check_processor_credentials(self):
        """Exige credencial (y vendor id en Paddle) si hay procesador."""
        if self.processor != Processor.NONE and not self.credential:
            raise ValueError(f"credential is required for processor '{self.processor.value}'")
        if self.processor == Processor.PADDLE and not self.paddle_vendor_id:
            raise ValueError("paddleVendorId is required for processor 'paddle'")
        return self


class VendorUpdateRequest(CamelSchema):
    """Request de actualización desde la página de settings."""

    company_name: str | None = Field(None, min_length=1, max_length=200)
    domain: str | None = None
    processor: Processor | None = None
    credential: str | None = None
    paddle_vendor_id: str | None = None
    button_text: str | None = Field(None, max_length=100)
    button_color: str | None = Field(None, max_length=20)
    test_mode: bool | None = None


# ============================================
# Response Schemas
# ============================================

class VendorResponse(CamelSchema, TimestampMixin):
    """Configuración pública de un vendor (nunca incluye la credencial)."""

    vendor_key: str
    company_name: str
    domain: str | None = None
    processor: str
    paddle_vendor_id: str | None = None
    has_credential: bool = False
    button_text: str
    button_color: str
    test_mode: bool
