"""HttpPaymentBridge — talks to a remote payment bridge over JSON.

The remote side exposes the same routes as sb_payment.api.router, so another
instance of this service can act as the bridge. Responses may be wrapped in
the ApiResponse envelope or bare.
"""

import logging
from typing import Any

import httpx

from config.settings import settings
from src.sb_common.errors import PaymentBridgeError
from src.sb_payment.domain.bridge import (
    ConnectAccountResult,
    IntentMetadata,
    PaymentIntentResult,
    TransferResult,
)

logger = logging.getLogger(__name__)


class HttpPaymentBridge:
    def __init__(
        self,
        base_url: str,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout if timeout is not None else settings.PAYMENT_BRIDGE_TIMEOUT_SECONDS
        self._transport = transport

    async def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url, timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.post(path, json=payload)
        except httpx.HTTPError as e:
            logger.error("Payment bridge unreachable: POST %s: %s", path, e)
            raise PaymentBridgeError(f"bridge unreachable: {e}") from e

        if response.status_code >= 400:
            logger.error(
                "Payment bridge rejected POST %s: %s %s", path, response.status_code, response.text
            )
            raise PaymentBridgeError(f"bridge returned {response.status_code}")

        try:
            body = response.json()
        except ValueError as e:
            raise PaymentBridgeError("bridge returned a non-JSON body") from e
        if isinstance(body, dict) and "data" in body and "code" in body:
            if body["code"] != 0:
                raise PaymentBridgeError(str(body.get("message", "bridge error")))
            body = body["data"]
        if not isinstance(body, dict):
            raise PaymentBridgeError("bridge returned an unexpected body")
        return body

    async def create_intent(
        self, amount_cents: int, metadata: IntentMetadata | None = None
    ) -> PaymentIntentResult:
        body = await self._post(
            "/payments/intent",
            {"amount_cents": amount_cents, "metadata": metadata.as_dict() if metadata else {}},
        )
        try:
            return PaymentIntentResult(
                client_secret=body["client_secret"], payment_id=body["payment_id"]
            )
        except KeyError as e:
            raise PaymentBridgeError(f"intent response missing {e}") from e

    async def create_connect_account(self, user_id: str, email: str) -> ConnectAccountResult:
        body = await self._post("/payments/connect", {"user_id": user_id, "email": email})
        try:
            return ConnectAccountResult(url=body["url"], account_id=body["account_id"])
        except KeyError as e:
            raise PaymentBridgeError(f"connect response missing {e}") from e

    async def create_transfer(self, amount_cents: int, destination: str) -> TransferResult:
        body = await self._post(
            "/payments/transfer", {"amount_cents": amount_cents, "destination": destination}
        )
        try:
            return TransferResult(transfer_id=body["transfer_id"])
        except KeyError as e:
            raise PaymentBridgeError(f"transfer response missing {e}") from e

    async def release_intent(self, payment_id: str) -> None:
        await self._post(f"/payments/intent/{payment_id}/release", {})
