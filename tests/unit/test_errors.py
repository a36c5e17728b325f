"""Tests for sb_common.errors and sb_common.response."""

from src.sb_common.errors import (
    AppError,
    InsufficientBalanceError,
    InvalidTransitionError,
    PendingPayoutExistsError,
    ReconciliationGapError,
    ReportNotFoundError,
    ReportNotOpenError,
    RequestNoLongerAvailableError,
    RequestNotFoundError,
)
from src.sb_common.response import ApiResponse, error_response, success_response


class TestAppError:
    def test_base_error(self) -> None:
        err = AppError(code=9002, message="Internal error")
        assert err.code == 9002
        assert err.message == "Internal error"
        assert err.http_status == 500

    def test_is_exception(self) -> None:
        assert isinstance(AppError(code=1001, message="test"), Exception)


class TestSpecificErrors:
    def test_insufficient_balance(self) -> None:
        err = InsufficientBalanceError(required=6500, available=3000)
        assert err.code == 2001
        assert err.http_status == 422
        assert "6500" in err.message
        assert "3000" in err.message

    def test_request_not_found(self) -> None:
        err = RequestNotFoundError("req-1")
        assert err.code == 3001
        assert err.http_status == 404

    def test_precondition_and_race_are_distinct(self) -> None:
        precondition = InvalidTransitionError("req-1", "Completed", "disable")
        race = RequestNoLongerAvailableError("req-1")
        assert precondition.http_status == 422
        assert race.http_status == 409
        assert precondition.code != race.code

    def test_pending_payout_message(self) -> None:
        err = PendingPayoutExistsError()
        assert err.http_status == 409
        assert err.message == "pending payout already exists"

    def test_reconciliation_gap_carries_references(self) -> None:
        err = ReconciliationGapError("pi_1", "req-1", "connection reset")
        assert err.payment_ref == "pi_1"
        assert err.request_id == "req-1"
        assert "pi_1" in err.message
        assert err.http_status >= 500

    def test_report_errors(self) -> None:
        assert ReportNotFoundError("rep-1").http_status == 404
        err = ReportNotOpenError("rep-1")
        assert err.http_status == 422
        assert "rep-1" in err.message


class TestApiResponse:
    def test_success_response(self) -> None:
        resp = success_response(data={"id": "req-1"})
        assert resp.code == 0
        assert resp.message == "success"
        assert resp.data == {"id": "req-1"}
        assert resp.request_id.startswith("req_")

    def test_error_response(self) -> None:
        resp = error_response(3003, "Request no longer available")
        assert resp.code == 3003
        assert resp.data is None

    def test_serialization(self) -> None:
        dumped = ApiResponse(data=[1, 2]).model_dump()
        assert set(dumped) == {"code", "message", "data", "timestamp", "request_id"}
