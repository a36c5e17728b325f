"""Global enums — must match DB CHECK constraints exactly."""

from enum import Enum


class RequestStatus(str, Enum):
    PENDING = "Pending"          # direct booking awaiting admin approval
    OPEN = "Open"                # soliciting bids
    IN_PROGRESS = "In Progress"
    DELIVERED = "Delivered"
    DISPUTED = "Disputed"
    COMPLETED = "Completed"      # terminal
    DISABLED = "Disabled"        # terminal, admin only


class BidStatus(str, Enum):
    ACTIVE = "active"
    CANCELLED = "cancelled"


class EscrowStatus(str, Enum):
    PENDING = "pending"
    RELEASED = "released"
    REFUNDED = "refunded"


class PayoutStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"


class DisputeResolution(str, Enum):
    REFUNDED = "refunded"
    PAID = "paid"


class ReportStatus(str, Enum):
    OPEN = "open"
    RESOLVED = "resolved"


class ReportContext(str, Enum):
    USER = "user"
    REQUEST = "request"         # the only context a dispute can have


class FavoriteType(str, Enum):
    PHOTOGRAPHER = "photographer"
    REQUEST = "request"


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


class MediaType(str, Enum):
    IMAGE = "image"
    VIDEO = "video"


class NotificationType(str, Enum):
    BID_RECEIVED = "bid_received"
    HIRED = "hired"
    GIG_HIRED = "gig_hired"
    JOB_APPROVED = "job_approved"
    DIRECT_BOOKING_REQUEST = "direct_booking_request"
    DELIVERY_SUBMITTED = "delivery_submitted"
    DELIVERY_APPROVED = "delivery_approved"
    REVIEW_REQUEST = "review_request"
    REVIEW_RECEIVED = "review_received"
    PROJECT_DISPUTED = "project_disputed"
    DISPUTE_RESOLVED = "dispute_resolved"
    PROJECT_DISABLED = "project_disabled"
    PROJECT_CHAT = "project_chat"
    DIRECT_MESSAGE = "direct_message"
    PAYOUT_COMPLETED = "payout_completed"
