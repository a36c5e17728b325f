"""StripePaymentBridge — in-process implementation over the stripe SDK.

Separate charges and transfers: the client is charged into the platform
account (PaymentIntent); photographers are paid later by Transfer to their
Express connected account. The SDK is synchronous, so calls run in a worker
thread.
"""

import asyncio
import logging
from typing import Any

import stripe

from config.settings import settings
from src.sb_common.errors import PaymentBridgeError
from src.sb_payment.domain.bridge import (
    ConnectAccountResult,
    IntentMetadata,
    PaymentIntentResult,
    TransferResult,
)

logger = logging.getLogger(__name__)

# PaymentIntent statuses where funds were captured and must be refunded rather than cancelled
_CAPTURED = {"succeeded"}
_ALREADY_RELEASED = {"canceled"}


class StripePaymentBridge:
    def __init__(self, secret_key: str | None = None, currency: str | None = None) -> None:
        self._api_key = secret_key if secret_key is not None else settings.STRIPE_SECRET_KEY
        self._currency = currency or settings.STRIPE_CURRENCY

    async def _call(self, fn: Any, *args: Any, **params: Any) -> Any:
        try:
            return await asyncio.to_thread(fn, *args, api_key=self._api_key, **params)
        except stripe.StripeError as e:
            logger.error("Stripe call %s failed: %s", getattr(fn, "__qualname__", fn), e)
            raise PaymentBridgeError(str(e.user_message or e)) from e

    async def create_intent(
        self, amount_cents: int, metadata: IntentMetadata | None = None
    ) -> PaymentIntentResult:
        intent = await self._call(
            stripe.PaymentIntent.create,
            amount=amount_cents,
            currency=self._currency,
            payment_method_types=["card"],
            metadata=metadata.as_dict() if metadata else {},
        )
        return PaymentIntentResult(client_secret=intent["client_secret"], payment_id=intent["id"])

    async def create_connect_account(self, user_id: str, email: str) -> ConnectAccountResult:
        account = await self._call(
            stripe.Account.create,
            type="express",
            country="US",
            email=email,
            business_type="individual",
            capabilities={
                "card_payments": {"requested": True},
                "transfers": {"requested": True},
            },
            metadata={"user_id": user_id},
        )
        link = await self._call(
            stripe.AccountLink.create,
            account=account["id"],
            refresh_url=f"{settings.APP_BASE_URL}/earnings?reauth=true",
            return_url=f"{settings.APP_BASE_URL}/stripe/return?account_id={account['id']}",
            type="account_onboarding",
        )
        return ConnectAccountResult(url=link["url"], account_id=account["id"])

    async def create_transfer(self, amount_cents: int, destination: str) -> TransferResult:
        tx = await self._call(
            stripe.Transfer.create,
            amount=amount_cents,
            currency=self._currency,
            destination=destination,
        )
        return TransferResult(transfer_id=tx["id"])

    async def release_intent(self, payment_id: str) -> None:
        intent = await self._call(stripe.PaymentIntent.retrieve, payment_id)
        status = intent["status"]
        if status in _ALREADY_RELEASED:
            return
        if status in _CAPTURED:
            await self._call(stripe.Refund.create, payment_intent=payment_id)
        else:
            await self._call(stripe.PaymentIntent.cancel, payment_id)
        logger.info("Released payment intent %s (was %s)", payment_id, status)
