"""Unit tests for the request lifecycle state machine."""

import pytest

from src.sb_common.enums import RequestStatus
from src.sb_common.errors import InvalidTransitionError
from src.sb_workflow.domain.state_machine import (
    FUNDS_HELD_STATUSES,
    TERMINAL_STATUSES,
    TRANSITIONS,
    RequestAction,
    allowed_from,
    can_apply,
    holds_funds,
    next_status,
    target_status,
)


class TestTransitionTable:
    @pytest.mark.parametrize(
        ("current", "action", "expected"),
        [
            (RequestStatus.OPEN, RequestAction.ACCEPT_BID, RequestStatus.IN_PROGRESS),
            (RequestStatus.PENDING, RequestAction.APPROVE_BOOKING, RequestStatus.IN_PROGRESS),
            (RequestStatus.IN_PROGRESS, RequestAction.DELIVER, RequestStatus.DELIVERED),
            (RequestStatus.DELIVERED, RequestAction.DELIVER, RequestStatus.DELIVERED),
            (RequestStatus.DELIVERED, RequestAction.APPROVE_DELIVERY, RequestStatus.COMPLETED),
            (RequestStatus.IN_PROGRESS, RequestAction.RAISE_DISPUTE, RequestStatus.DISPUTED),
            (RequestStatus.DELIVERED, RequestAction.RAISE_DISPUTE, RequestStatus.DISPUTED),
            (RequestStatus.DISPUTED, RequestAction.RESOLVE_DISPUTE, RequestStatus.COMPLETED),
            (RequestStatus.PENDING, RequestAction.DISABLE, RequestStatus.DISABLED),
            (RequestStatus.DISPUTED, RequestAction.DISABLE, RequestStatus.DISABLED),
        ],
    )
    def test_allowed_transitions(
        self, current: RequestStatus, action: RequestAction, expected: RequestStatus
    ) -> None:
        assert next_status(current, action) is expected

    def test_accepts_raw_status_strings(self) -> None:
        assert next_status("In Progress", RequestAction.DELIVER) is RequestStatus.DELIVERED

    def test_rejected_transition_raises(self) -> None:
        with pytest.raises(InvalidTransitionError) as exc_info:
            next_status(RequestStatus.OPEN, RequestAction.APPROVE_DELIVERY, "req-1")
        assert exc_info.value.status == "Open"
        assert exc_info.value.action == "approve_delivery"
        assert exc_info.value.http_status == 422

    def test_every_action_has_an_entry(self) -> None:
        assert set(TRANSITIONS) == set(RequestAction)

    def test_helpers_read_from_table(self) -> None:
        assert allowed_from(RequestAction.ACCEPT_BID) == frozenset({RequestStatus.OPEN})
        assert target_status(RequestAction.RESOLVE_DISPUTE) is RequestStatus.COMPLETED
        assert can_apply("Delivered", RequestAction.APPROVE_DELIVERY)
        assert not can_apply("In Progress", RequestAction.APPROVE_DELIVERY)


class TestTerminalStates:
    @pytest.mark.parametrize("terminal", sorted(TERMINAL_STATUSES, key=lambda s: s.value))
    @pytest.mark.parametrize("action", list(RequestAction))
    def test_no_action_leaves_a_terminal_state(
        self, terminal: RequestStatus, action: RequestAction
    ) -> None:
        with pytest.raises(InvalidTransitionError):
            next_status(terminal, action)

    def test_terminal_states_never_in_allowed_from(self) -> None:
        for sources, _target in TRANSITIONS.values():
            assert not sources & TERMINAL_STATUSES

    def test_completed_request_cannot_be_disabled(self) -> None:
        assert not can_apply(RequestStatus.COMPLETED, RequestAction.DISABLE)


class TestFundsHeld:
    def test_funds_held_statuses(self) -> None:
        assert FUNDS_HELD_STATUSES == {
            RequestStatus.IN_PROGRESS,
            RequestStatus.DELIVERED,
            RequestStatus.DISPUTED,
        }

    def test_open_and_pending_hold_nothing(self) -> None:
        assert not holds_funds("Open")
        assert not holds_funds(RequestStatus.PENDING)
        assert holds_funds("Disputed")
