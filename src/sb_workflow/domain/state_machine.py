"""Request lifecycle state machine.

Single source of truth for which action may move a request from which status
to which. Every guarded UPDATE in RequestRepository takes its allowed-from set
from here, so the precondition check and the race guard cannot disagree.

    Pending ──approve_booking──▶ In Progress
    Open ─────accept_bid──────▶ In Progress
    In Progress/Delivered ──deliver──▶ Delivered
    Delivered ──approve_delivery──▶ Completed
    In Progress/Delivered ──raise_dispute──▶ Disputed
    Disputed ──resolve_dispute──▶ Completed
    any non-terminal ──disable──▶ Disabled

Completed and Disabled are terminal: they appear in no allowed-from set.
"""

from enum import Enum

from src.sb_common.enums import RequestStatus
from src.sb_common.errors import InvalidTransitionError


class RequestAction(str, Enum):
    ACCEPT_BID = "accept_bid"
    APPROVE_BOOKING = "approve_booking"
    DELIVER = "deliver"
    APPROVE_DELIVERY = "approve_delivery"
    RAISE_DISPUTE = "raise_dispute"
    RESOLVE_DISPUTE = "resolve_dispute"
    DISABLE = "disable"


TERMINAL_STATUSES: frozenset[RequestStatus] = frozenset(
    {RequestStatus.COMPLETED, RequestStatus.DISABLED}
)

# Client money is held by the platform in these states; disabling refunds it
FUNDS_HELD_STATUSES: frozenset[RequestStatus] = frozenset(
    {RequestStatus.IN_PROGRESS, RequestStatus.DELIVERED, RequestStatus.DISPUTED}
)

TRANSITIONS: dict[RequestAction, tuple[frozenset[RequestStatus], RequestStatus]] = {
    RequestAction.ACCEPT_BID: (
        frozenset({RequestStatus.OPEN}),
        RequestStatus.IN_PROGRESS,
    ),
    RequestAction.APPROVE_BOOKING: (
        frozenset({RequestStatus.PENDING}),
        RequestStatus.IN_PROGRESS,
    ),
    RequestAction.DELIVER: (
        frozenset({RequestStatus.IN_PROGRESS, RequestStatus.DELIVERED}),
        RequestStatus.DELIVERED,
    ),
    RequestAction.APPROVE_DELIVERY: (
        frozenset({RequestStatus.DELIVERED}),
        RequestStatus.COMPLETED,
    ),
    RequestAction.RAISE_DISPUTE: (
        frozenset({RequestStatus.IN_PROGRESS, RequestStatus.DELIVERED}),
        RequestStatus.DISPUTED,
    ),
    RequestAction.RESOLVE_DISPUTE: (
        frozenset({RequestStatus.DISPUTED}),
        RequestStatus.COMPLETED,
    ),
    RequestAction.DISABLE: (
        frozenset(
            {
                RequestStatus.PENDING,
                RequestStatus.OPEN,
                RequestStatus.IN_PROGRESS,
                RequestStatus.DELIVERED,
                RequestStatus.DISPUTED,
            }
        ),
        RequestStatus.DISABLED,
    ),
}


def allowed_from(action: RequestAction) -> frozenset[RequestStatus]:
    return TRANSITIONS[action][0]


def target_status(action: RequestAction) -> RequestStatus:
    return TRANSITIONS[action][1]


def can_apply(current: RequestStatus | str, action: RequestAction) -> bool:
    return RequestStatus(current) in allowed_from(action)


def next_status(
    current: RequestStatus | str, action: RequestAction, request_id: str = ""
) -> RequestStatus:
    """Return the status `action` leads to from `current`.

    Raises InvalidTransitionError if the action is not allowed from `current`.
    """
    status = RequestStatus(current)
    sources, target = TRANSITIONS[action]
    if status not in sources:
        raise InvalidTransitionError(request_id, status.value, action.value)
    return target


def holds_funds(status: RequestStatus | str) -> bool:
    return RequestStatus(status) in FUNDS_HELD_STATUSES
