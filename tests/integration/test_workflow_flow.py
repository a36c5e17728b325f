"""Integration tests for hiring, disabling and dispute payouts (requires running PG).

The payment bridge is replaced by an in-memory fake; everything else, guards
and balance writes included, runs against the real schema.
"""

import uuid
from collections.abc import Awaitable, Callable

import pytest
from httpx import AsyncClient, Response
from sqlalchemy import text

from src.sb_common.database import async_session_factory
from src.sb_payment.domain.bridge import (
    ConnectAccountResult,
    IntentMetadata,
    PaymentIntentResult,
    TransferResult,
)
from src.sb_workflow.api import router as workflow_router

Login = Callable[..., Awaitable[dict[str, str]]]

pytestmark = pytest.mark.asyncio(loop_scope="session")


class FakeBridge:
    def __init__(self) -> None:
        self.released: list[str] = []

    async def create_intent(
        self, amount_cents: int, metadata: IntentMetadata | None = None
    ) -> PaymentIntentResult:
        payment_id = f"pi_{uuid.uuid4().hex[:16]}"
        return PaymentIntentResult(client_secret=f"{payment_id}_secret", payment_id=payment_id)

    async def create_connect_account(self, user_id: str, email: str) -> ConnectAccountResult:
        return ConnectAccountResult(url="https://example.com/onboard", account_id="acct_test")

    async def create_transfer(self, amount_cents: int, destination: str) -> TransferResult:
        return TransferResult(transfer_id=f"tr_{uuid.uuid4().hex[:16]}")

    async def release_intent(self, payment_id: str) -> None:
        self.released.append(payment_id)


@pytest.fixture
def bridge(monkeypatch: pytest.MonkeyPatch) -> FakeBridge:
    fake = FakeBridge()
    monkeypatch.setattr(workflow_router._acceptance, "_bridge", fake)
    return fake


async def _user_id(client: AsyncClient, headers: dict[str, str]) -> str:
    resp = await client.get("/api/v1/auth/me", headers=headers)
    return str(resp.json()["data"]["user_id"])


async def _admin(client: AsyncClient, login: Login) -> dict[str, str]:
    headers = await login()
    user_id = await _user_id(client, headers)
    async with async_session_factory() as session:
        await session.execute(
            text("UPDATE users SET role = 'admin' WHERE id = :id"), {"id": user_id}
        )
        await session.commit()
    return headers


async def _balance(client: AsyncClient, headers: dict[str, str]) -> int:
    resp = await client.get("/api/v1/profile/me/balance", headers=headers)
    return int(resp.json()["data"]["balance_cents"])


async def _open_request(client: AsyncClient, owner: dict[str, str]) -> str:
    resp = await client.post(
        "/api/v1/requests",
        json={"title": "Wedding shoot", "description": "Ceremony only", "budget_cents": 15000},
        headers=owner,
    )
    assert resp.status_code == 201
    return str(resp.json()["data"]["id"])


async def _bid(client: AsyncClient, request_id: str, photog: dict[str, str], amount: int) -> str:
    resp = await client.post(
        f"/api/v1/requests/{request_id}/bids",
        json={"amount_cents": amount, "note": ""},
        headers=photog,
    )
    assert resp.status_code == 201
    return str(resp.json()["data"]["id"])


async def _initiate(
    client: AsyncClient, request_id: str, bid_id: str, owner: dict[str, str]
) -> str:
    resp = await client.post(
        f"/api/v1/requests/{request_id}/acceptance", json={"bid_id": bid_id}, headers=owner
    )
    assert resp.status_code == 200
    return str(resp.json()["data"]["handle"])


async def _confirm(client: AsyncClient, handle: str, owner: dict[str, str]) -> Response:
    return await client.post("/api/v1/acceptances/confirm", json={"handle": handle}, headers=owner)


async def _hired(
    client: AsyncClient, login: Login, amount: int = 12000
) -> tuple[str, dict[str, str], dict[str, str]]:
    owner = await login()
    photog = await login()
    request_id = await _open_request(client, owner)
    bid_id = await _bid(client, request_id, photog, amount)
    resp = await _confirm(client, await _initiate(client, request_id, bid_id, owner), owner)
    assert resp.status_code == 200
    assert resp.json()["data"]["request"]["status"] == "In Progress"
    return request_id, owner, photog


class TestAcceptanceRaces:
    async def test_second_acceptance_loses(
        self, client: AsyncClient, login: Login, bridge: FakeBridge
    ) -> None:
        owner = await login()
        first, second = await login(), await login()
        request_id = await _open_request(client, owner)
        bid_a = await _bid(client, request_id, first, 12000)
        bid_b = await _bid(client, request_id, second, 11000)

        # Both holds are taken while the request is still Open
        handle_a = await _initiate(client, request_id, bid_a, owner)
        handle_b = await _initiate(client, request_id, bid_b, owner)

        won = await _confirm(client, handle_a, owner)
        lost = await _confirm(client, handle_b, owner)

        assert won.status_code == 200
        assert lost.status_code == 409
        assert len(bridge.released) == 1

        detail = (await client.get(f"/api/v1/requests/{request_id}", headers=owner)).json()["data"]
        assert detail["status"] == "In Progress"
        assert detail["hired_photographer_id"] == await _user_id(client, first)
        assert detail["accepted_bid_amount_cents"] == 12000

    async def test_repeated_confirmation_is_idempotent(
        self, client: AsyncClient, login: Login, bridge: FakeBridge
    ) -> None:
        owner = await login()
        photog = await login()
        request_id = await _open_request(client, owner)
        bid_id = await _bid(client, request_id, photog, 9000)
        handle = await _initiate(client, request_id, bid_id, owner)

        await _confirm(client, handle, owner)
        again = await _confirm(client, handle, owner)

        assert again.status_code == 200
        assert again.json()["data"]["idempotent_hit"] is True
        assert bridge.released == []

    async def test_cancelled_bid_cannot_be_confirmed(
        self, client: AsyncClient, login: Login, bridge: FakeBridge
    ) -> None:
        owner = await login()
        photog = await login()
        request_id = await _open_request(client, owner)
        bid_id = await _bid(client, request_id, photog, 10000)
        handle = await _initiate(client, request_id, bid_id, owner)

        cancel = await client.post(f"/api/v1/bids/{bid_id}/cancel", headers=photog)
        assert cancel.status_code == 200

        resp = await _confirm(client, handle, owner)

        assert resp.status_code == 409
        assert len(bridge.released) == 1
        detail = (await client.get(f"/api/v1/requests/{request_id}", headers=owner)).json()["data"]
        assert detail["status"] == "Open"
        assert detail["hired_photographer_id"] is None


class TestAdminMoney:
    async def test_disable_in_progress_refunds_owner(
        self, client: AsyncClient, login: Login, bridge: FakeBridge
    ) -> None:
        request_id, owner, photog = await _hired(client, login, amount=12000)
        admin = await _admin(client, login)

        resp = await client.post(f"/api/v1/admin/requests/{request_id}/disable", headers=admin)

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["request"]["status"] == "Disabled"
        assert data["credited_user_id"] == await _user_id(client, owner)
        assert await _balance(client, owner) == 12000
        assert await _balance(client, photog) == 0

        again = await client.post(f"/api/v1/admin/requests/{request_id}/disable", headers=admin)
        assert again.status_code == 422
        assert await _balance(client, owner) == 12000

    async def test_dispute_paid_credits_only_photographer(
        self, client: AsyncClient, login: Login, bridge: FakeBridge
    ) -> None:
        request_id, owner, photog = await _hired(client, login, amount=9500)
        admin = await _admin(client, login)

        dispute = await client.post(
            f"/api/v1/requests/{request_id}/disputes",
            json={"reason": "Missed the ceremony", "details": "Arrived an hour late"},
            headers=owner,
        )
        assert dispute.status_code == 201

        resp = await client.post(
            f"/api/v1/admin/requests/{request_id}/resolve-dispute",
            json={"outcome": "paid"},
            headers=admin,
        )

        assert resp.status_code == 200
        assert resp.json()["data"]["credited_user_id"] == await _user_id(client, photog)
        assert await _balance(client, photog) == 9500
        assert await _balance(client, owner) == 0

        again = await client.post(
            f"/api/v1/admin/requests/{request_id}/resolve-dispute",
            json={"outcome": "refunded"},
            headers=admin,
        )
        assert again.status_code == 422
        assert await _balance(client, owner) == 0
