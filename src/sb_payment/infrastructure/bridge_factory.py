"""Pick the payment bridge implementation from settings."""

from functools import lru_cache

from config.settings import settings
from src.sb_payment.domain.bridge import PaymentBridgeProtocol
from src.sb_payment.infrastructure.http_bridge import HttpPaymentBridge
from src.sb_payment.infrastructure.stripe_bridge import StripePaymentBridge


@lru_cache(maxsize=1)
def get_payment_bridge() -> PaymentBridgeProtocol:
    if settings.PAYMENT_BRIDGE_URL:
        return HttpPaymentBridge(settings.PAYMENT_BRIDGE_URL)
    return StripePaymentBridge()
