"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/User
  2xxx: Profile/Balance
  3xxx: Request lifecycle
  4xxx: Bid
  5xxx: Payment bridge / escrow
  6xxx: Payout
  7xxx: Chat
  9xxx: System
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Auth/User ---

class UsernameExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "Username already exists", 409)


class EmailExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1002, "Email already exists", 409)


class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid username or password", 401)


class AccountDisabledError(AppError):
    def __init__(self) -> None:
        super().__init__(1004, "Account is disabled", 403)


class InvalidRefreshTokenError(AppError):
    def __init__(self) -> None:
        super().__init__(1005, "Refresh token is invalid or expired", 401)


class AdminRequiredError(AppError):
    def __init__(self) -> None:
        super().__init__(1006, "Admin role required", 403)


class NotPermittedError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(1007, f"Not permitted: {detail}", 403)


# --- 2xxx: Profile/Balance ---

class InsufficientBalanceError(AppError):
    def __init__(self, required: int, available: int) -> None:
        super().__init__(
            2001,
            f"Insufficient balance: required {required} cents, available {available} cents",
            422,
        )


class ProfileNotFoundError(AppError):
    def __init__(self, user_id: str) -> None:
        super().__init__(2002, f"Profile not found for user {user_id}", 404)


class PhotographerUnavailableError(AppError):
    def __init__(self, user_id: str) -> None:
        super().__init__(2003, f"Photographer {user_id} is not accepting requests", 422)


# --- 3xxx: Request lifecycle ---

class RequestNotFoundError(AppError):
    def __init__(self, request_id: str) -> None:
        super().__init__(3001, f"Request not found: {request_id}", 404)


class InvalidTransitionError(AppError):
    """Precondition violation: the action is not allowed from the current status."""

    def __init__(self, request_id: str, status: str, action: str) -> None:
        self.status = status
        self.action = action
        super().__init__(
            3002,
            f"Request {request_id} in status '{status}' does not allow {action}",
            422,
        )


class RequestNoLongerAvailableError(AppError):
    """Race loss: a guarded write found the request had already moved on."""

    def __init__(self, request_id: str) -> None:
        super().__init__(
            3003,
            f"Request {request_id} is no longer available (already accepted or changed)",
            409,
        )


class MissingPaymentDataError(AppError):
    def __init__(self, request_id: str) -> None:
        super().__init__(
            3004,
            f"Request {request_id} is missing the hired photographer or payment amount",
            422,
        )


class AlreadyReviewedError(AppError):
    def __init__(self, request_id: str) -> None:
        super().__init__(3005, f"Review already submitted for request {request_id}", 409)


class ReportNotFoundError(AppError):
    def __init__(self, report_id: str) -> None:
        super().__init__(3006, f"Report not found: {report_id}", 404)


class ReportNotOpenError(AppError):
    def __init__(self, report_id: str) -> None:
        super().__init__(3007, f"Report {report_id} is already resolved", 422)


# --- 4xxx: Bid ---

class BidNotFoundError(AppError):
    def __init__(self, bid_id: str) -> None:
        super().__init__(4001, f"Bid not found: {bid_id}", 404)


class BidNotActiveError(AppError):
    def __init__(self, bid_id: str, status: str) -> None:
        super().__init__(4002, f"Bid {bid_id} in status '{status}' is not active", 422)


class DuplicateBidError(AppError):
    def __init__(self, request_id: str) -> None:
        super().__init__(4003, f"You already have an active bid on request {request_id}", 409)


class BidAmountOutOfRangeError(AppError):
    def __init__(self, amount: int, max_amount: int) -> None:
        super().__init__(
            4004, f"Bid amount {amount} cents out of range [1, {max_amount}]", 422
        )


class SelfBidError(AppError):
    def __init__(self) -> None:
        super().__init__(4005, "Request owners cannot bid on their own request", 422)


class BidRequestMismatchError(AppError):
    def __init__(self, bid_id: str, request_id: str) -> None:
        super().__init__(4006, f"Bid {bid_id} does not belong to request {request_id}", 422)


# --- 5xxx: Payment bridge / escrow ---

class PaymentInitiationError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(5001, f"Payment initiation failed: {detail}", 502)


class InvalidPaymentHandleError(AppError):
    def __init__(self) -> None:
        super().__init__(5002, "Payment handle is invalid or expired", 422)


class ReconciliationGapError(AppError):
    """Payment succeeded externally but the local state change did not land.

    No automated compensation exists; operators recover manually from the
    payment reference and request id carried here.
    """

    def __init__(self, payment_ref: str, request_id: str, detail: str) -> None:
        self.payment_ref = payment_ref
        self.request_id = request_id
        super().__init__(
            5003,
            f"Payment {payment_ref} succeeded but request {request_id} was not updated: {detail}",
            500,
        )


class PaymentBridgeError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(5004, f"Payment bridge error: {detail}", 502)


class PayoutAccountMissingError(AppError):
    def __init__(self, user_id: str) -> None:
        super().__init__(5005, f"User {user_id} has not connected a payout account", 422)


# --- 6xxx: Payout ---

class PendingPayoutExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(6001, "pending payout already exists", 409)


class NothingToPayoutError(AppError):
    def __init__(self) -> None:
        super().__init__(6002, "Balance must be greater than zero to request a payout", 422)


class PayoutNotFoundError(AppError):
    def __init__(self, payout_id: str) -> None:
        super().__init__(6003, f"Payout request not found: {payout_id}", 404)


class PayoutNotPendingError(AppError):
    def __init__(self, payout_id: str, status: str) -> None:
        super().__init__(6004, f"Payout {payout_id} in status '{status}' is not pending", 422)


# --- 7xxx: Chat ---

class ChatRoomNotFoundError(AppError):
    def __init__(self, room_id: str) -> None:
        super().__init__(7001, f"Chat room not found: {room_id}", 404)


class NotRoomParticipantError(AppError):
    def __init__(self, room_id: str) -> None:
        super().__init__(7002, f"Not a participant of chat room {room_id}", 403)


class EmptyMessageError(AppError):
    def __init__(self) -> None:
        super().__init__(7003, "Message must contain text or media", 422)


class UnresolvedSendTargetError(AppError):
    def __init__(self, room_id: str) -> None:
        super().__init__(7004, f"Cannot send into unified room {room_id} directly", 422)


# --- 9xxx: System ---

class RateLimitError(AppError):
    def __init__(self) -> None:
        super().__init__(9001, "Rate limit exceeded", 429)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
