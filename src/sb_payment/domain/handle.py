"""Signed payment handles.

Initiating a bid acceptance or a direct booking returns a short-lived JWT that
binds the pending payment reference to exactly what was quoted. Confirmation
trusts only what the handle carries, never client-supplied amounts.
"""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from config.settings import settings
from src.sb_common.errors import InvalidPaymentHandleError

ACCEPTANCE = "acceptance"
BOOKING = "booking"

_TTL = timedelta(minutes=settings.ACCEPTANCE_HANDLE_EXPIRE_MINUTES)


@dataclass(frozen=True)
class AcceptanceHandle:
    owner_id: str
    request_id: str
    bid_id: str
    photographer_id: str
    amount: int  # cents, photographer payable
    payment_ref: str


@dataclass(frozen=True)
class BookingHandle:
    owner_id: str
    photographer_id: str
    title: str
    description: str
    budget: int  # cents, photographer payable
    payment_ref: str


def _sign(claims: dict[str, Any], handle_type: str) -> str:
    now = datetime.now(UTC)
    payload = {**claims, "type": handle_type, "iat": now, "exp": now + _TTL}
    return str(jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM))


def _verify(token: str, handle_type: str) -> dict[str, Any]:
    try:
        payload: dict[str, Any] = jwt.decode(
            token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM]
        )
    except JWTError:
        raise InvalidPaymentHandleError() from None
    if payload.get("type") != handle_type:
        raise InvalidPaymentHandleError()
    return payload


def sign_acceptance_handle(handle: AcceptanceHandle) -> str:
    return _sign(
        {
            "sub": handle.owner_id,
            "rid": handle.request_id,
            "bid": handle.bid_id,
            "pid": handle.photographer_id,
            "amount": handle.amount,
            "pref": handle.payment_ref,
        },
        ACCEPTANCE,
    )


def verify_acceptance_handle(token: str) -> AcceptanceHandle:
    payload = _verify(token, ACCEPTANCE)
    try:
        return AcceptanceHandle(
            owner_id=str(payload["sub"]),
            request_id=str(payload["rid"]),
            bid_id=str(payload["bid"]),
            photographer_id=str(payload["pid"]),
            amount=int(payload["amount"]),
            payment_ref=str(payload["pref"]),
        )
    except (KeyError, TypeError, ValueError):
        raise InvalidPaymentHandleError() from None


def sign_booking_handle(handle: BookingHandle) -> str:
    return _sign(
        {
            "sub": handle.owner_id,
            "pid": handle.photographer_id,
            "title": handle.title,
            "desc": handle.description,
            "budget": handle.budget,
            "pref": handle.payment_ref,
        },
        BOOKING,
    )


def verify_booking_handle(token: str) -> BookingHandle:
    payload = _verify(token, BOOKING)
    try:
        return BookingHandle(
            owner_id=str(payload["sub"]),
            photographer_id=str(payload["pid"]),
            title=str(payload["title"]),
            description=str(payload["desc"]),
            budget=int(payload["budget"]),
            payment_ref=str(payload["pref"]),
        )
    except (KeyError, TypeError, ValueError):
        raise InvalidPaymentHandleError() from None
