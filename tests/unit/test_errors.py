"""Tests for sb_common.errors and sb_common.response."""

from src.sb_common.enums import ErrorKind
from src.sb_common.errors import (
    AppError,
    BetLockedError,
    BetNotFoundError,
    BetNotOpenError,
    ConcurrencyError,
    InsufficientBalanceError,
    InvalidAmountError,
    InvalidFeeError,
    InvalidStateError,
    ParticipantLimitReachedError,
    SideConflictError,
    UserNotActiveError,
)
from src.sb_common.response import ApiResponse, error_response, success_response


class TestAppError:
    def test_base_error_defaults(self) -> None:
        err = AppError(code=9002, message="Internal error")
        assert err.code == 9002
        assert err.message == "Internal error"
        assert err.http_status == 500
        assert err.kind == ErrorKind.INTERNAL

    def test_is_exception(self) -> None:
        assert isinstance(AppError(code=1, message="x"), Exception)


class TestSpecificErrors:
    def test_insufficient_balance(self) -> None:
        err = InsufficientBalanceError(required=60, available=50)
        assert err.code == 2001
        assert err.http_status == 422
        assert err.kind == ErrorKind.INSUFFICIENT_RESOURCE
        assert "60" in err.message
        assert "50" in err.message

    def test_invalid_amount_is_validation(self) -> None:
        assert InvalidAmountError("zero").kind == ErrorKind.VALIDATION

    def test_bet_not_found(self) -> None:
        err = BetNotFoundError("bet-1")
        assert err.code == 3001
        assert err.http_status == 404
        assert err.kind == ErrorKind.NOT_FOUND

    def test_state_conflicts(self) -> None:
        for err in (
            BetNotOpenError("b", "VOID"),
            BetLockedError("b"),
            SideConflictError("FOR", "AGAINST"),
            ParticipantLimitReachedError(10),
            InvalidStateError("b", "RESOLVED"),
        ):
            assert err.kind == ErrorKind.STATE_CONFLICT
            assert err.http_status == 409

    def test_locked_message(self) -> None:
        assert "locked" in BetLockedError("b").message

    def test_user_not_active_is_authorization(self) -> None:
        err = UserNotActiveError("BANNED")
        assert err.kind == ErrorKind.AUTHORIZATION
        assert "BANNED" in err.message

    def test_invalid_fee(self) -> None:
        err = InvalidFeeError(10001)
        assert err.kind == ErrorKind.VALIDATION
        assert "10001" in err.message

    def test_concurrency_is_503(self) -> None:
        err = ConcurrencyError()
        assert err.http_status == 503
        assert err.kind == ErrorKind.CONCURRENCY

    def test_codes_are_unique(self) -> None:
        errors = [
            InsufficientBalanceError(1, 0), InvalidAmountError("x"), BetNotFoundError("b"),
            BetNotOpenError("b", "VOID"), BetLockedError("b"), SideConflictError("FOR", "AGAINST"),
            ParticipantLimitReachedError(2), InvalidStateError("b", "VOID"), InvalidFeeError(-1),
            UserNotActiveError("PENDING"), ConcurrencyError(),
        ]
        codes = [e.code for e in errors]
        assert len(codes) == len(set(codes))


class TestApiResponse:
    def test_success(self) -> None:
        resp = success_response({"balance": 100})
        assert resp.code == 0
        assert resp.data == {"balance": 100}
        assert resp.error_kind is None
        assert resp.request_id.startswith("req_")

    def test_error_carries_kind(self) -> None:
        resp = error_response(2001, "Insufficient balance", "INSUFFICIENT_RESOURCE")
        assert resp.code == 2001
        assert resp.data is None
        assert resp.error_kind == "INSUFFICIENT_RESOURCE"

    def test_serializes(self) -> None:
        dumped = ApiResponse().model_dump()
        assert set(dumped) == {"code", "message", "data", "error_kind", "timestamp", "request_id"}
