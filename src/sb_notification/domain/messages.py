"""Notification payload builders, one per workflow event."""

from src.sb_common.cents import cents_to_display
from src.sb_common.enums import DisputeResolution, NotificationType
from src.sb_notification.domain.models import NotificationPayload


def _request_link(request_id: str) -> str:
    return f"/requests/{request_id}"


def bid_received(request_id: str, title: str, amount: int) -> NotificationPayload:
    return NotificationPayload(
        title="New Bid Received",
        message=f'You have received a new bid of {cents_to_display(amount)} for "{title}".',
        type=NotificationType.BID_RECEIVED,
        link=_request_link(request_id),
        related_id=request_id,
    )


def hired(request_id: str, title: str) -> NotificationPayload:
    return NotificationPayload(
        title="You have been hired!",
        message=f'Your bid for "{title}" has been accepted.',
        type=NotificationType.HIRED,
        link=_request_link(request_id),
        related_id=request_id,
    )


def gig_hired(request_id: str, title: str) -> NotificationPayload:
    return NotificationPayload(
        title="Hiring Successful",
        message=f'You have successfully hired a photographer for "{title}".',
        type=NotificationType.GIG_HIRED,
        link=_request_link(request_id),
        related_id=request_id,
    )


def direct_booking_request(request_id: str, title: str) -> NotificationPayload:
    return NotificationPayload(
        title="New Booking Request",
        message=f'You have received a new booking request for "{title}". It is awaiting approval.',
        type=NotificationType.DIRECT_BOOKING_REQUEST,
        link=_request_link(request_id),
        related_id=request_id,
    )


def job_approved(request_id: str, title: str, for_photographer: bool) -> NotificationPayload:
    if for_photographer:
        message = f'Your direct booking for "{title}" has been approved. You can now start working on it.'
    else:
        message = f'Your job request "{title}" has been approved and is now in progress.'
    return NotificationPayload(
        title="Booking Approved!",
        message=message,
        type=NotificationType.JOB_APPROVED,
        link=_request_link(request_id),
        related_id=request_id,
    )


def delivery_submitted(request_id: str, title: str) -> NotificationPayload:
    return NotificationPayload(
        title="Content Delivered",
        message=f'The photographer has delivered content for "{title}". Please review it.',
        type=NotificationType.DELIVERY_SUBMITTED,
        link=_request_link(request_id),
        related_id=request_id,
    )


def delivery_approved(request_id: str, title: str, amount: int) -> NotificationPayload:
    return NotificationPayload(
        title="Delivery Approved",
        message=(
            f'Your work for "{title}" has been approved and payment of '
            f"{cents_to_display(amount)} released."
        ),
        type=NotificationType.DELIVERY_APPROVED,
        link=_request_link(request_id),
        related_id=request_id,
    )


def review_request(request_id: str) -> NotificationPayload:
    return NotificationPayload(
        title="Please Review the Client",
        message="Delivery approved! Please verify your payment and leave a review for the client.",
        type=NotificationType.REVIEW_REQUEST,
        link=_request_link(request_id),
        related_id=request_id,
    )


def review_received(request_id: str, title: str) -> NotificationPayload:
    return NotificationPayload(
        title="New Review",
        message=f'You have received a new review for "{title}".',
        type=NotificationType.REVIEW_RECEIVED,
        link=_request_link(request_id),
        related_id=request_id,
    )


def project_disputed(request_id: str, title: str) -> NotificationPayload:
    return NotificationPayload(
        title="Project Disputed",
        message=f'A dispute has been raised on "{title}". An admin will review it.',
        type=NotificationType.PROJECT_DISPUTED,
        link=_request_link(request_id),
        related_id=request_id,
    )


def dispute_resolved(
    request_id: str, title: str, resolution: DisputeResolution
) -> NotificationPayload:
    outcome = (
        "refunded to the client"
        if resolution is DisputeResolution.REFUNDED
        else "paid to the photographer"
    )
    return NotificationPayload(
        title="Dispute Resolved",
        message=f'The dispute on "{title}" was resolved: funds {outcome}.',
        type=NotificationType.DISPUTE_RESOLVED,
        link=_request_link(request_id),
        related_id=request_id,
    )


def project_disabled(request_id: str, title: str, refunded: int) -> NotificationPayload:
    suffix = f" {cents_to_display(refunded)} was refunded to your balance." if refunded else ""
    return NotificationPayload(
        title="Project Disabled",
        message=f'"{title}" was disabled by an administrator.{suffix}',
        type=NotificationType.PROJECT_DISABLED,
        link=_request_link(request_id),
        related_id=request_id,
    )


def new_message(
    room_id: str, request_id: str | None, is_project_chat: bool, sender_name: str
) -> NotificationPayload:
    return NotificationPayload(
        title="New Message",
        message=f"You have a new message from {sender_name or 'User'}",
        type=NotificationType.PROJECT_CHAT if is_project_chat else NotificationType.DIRECT_MESSAGE,
        link=_request_link(request_id) if is_project_chat and request_id else f"/messages/{room_id}",
        related_id=room_id,
    )


def payout_completed(payout_id: str, amount: int) -> NotificationPayload:
    return NotificationPayload(
        title="Payout Sent",
        message=f"Your payout of {cents_to_display(amount)} has been sent to your connected account.",
        type=NotificationType.PAYOUT_COMPLETED,
        link="/payouts",
        related_id=payout_id,
    )
