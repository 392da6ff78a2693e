"""
Adapters para procesadores de pago.
Implementación del patrón Adapter para abstraer Stripe y Paddle.
"""

from app.adapters.base import CancellationProvider, CancellationResult, VendorConfig
from app.adapters.stripe_adapter import StripeAdapter
from app.adapters.paddle_adapter import PaddleAdapter
from app.adapters.factory import ProcessorDispatcher

__all__ = [
    "CancellationProvider",
    "CancellationResult",
    "VendorConfig",
    "StripeAdapter",
    "PaddleAdapter",
    "ProcessorDispatcher",
]
