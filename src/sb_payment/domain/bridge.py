"""Payment bridge contract.

The orchestration depends only on this Protocol. StripePaymentBridge talks to
Stripe in-process; HttpPaymentBridge talks to a remote bridge service exposing
the same operations over JSON.
"""

from dataclasses import dataclass, field
from typing import Protocol


@dataclass(frozen=True)
class PaymentIntentResult:
    client_secret: str
    payment_id: str


@dataclass(frozen=True)
class ConnectAccountResult:
    url: str
    account_id: str


@dataclass(frozen=True)
class TransferResult:
    transfer_id: str


@dataclass(frozen=True)
class IntentMetadata:
    purpose: str  # "acceptance" | "booking" | "adhoc"
    extra: dict[str, str] = field(default_factory=dict)

    def as_dict(self) -> dict[str, str]:
        return {"purpose": self.purpose, **self.extra}


class PaymentBridgeProtocol(Protocol):
    async def create_intent(
        self, amount_cents: int, metadata: IntentMetadata | None = None
    ) -> PaymentIntentResult: ...

    async def create_connect_account(self, user_id: str, email: str) -> ConnectAccountResult: ...

    async def create_transfer(self, amount_cents: int, destination: str) -> TransferResult: ...

    async def release_intent(self, payment_id: str) -> None: ...
