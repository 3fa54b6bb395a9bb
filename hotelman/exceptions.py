"""Hotelman exceptions."""


class BaseError(Exception):
    """
    Structured exception with a machine-readable code.

    Subclasses provide ``_default_messages`` keyed by code. Extra keyword
    arguments are kept in ``data`` and travel with the error to the caller.
    """

    _default_messages: dict[str, str] = {}

    def __init__(self, code: str, message: str | None = None, **data):
        self.code = code
        self.message = message or self._default_messages.get(code, code)
        self.data = data
        super().__init__(f"[{code}] {self.message}")

    def as_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "data": self.data}


class HotelmanError(BaseError):
    """
    Structured exception for loyalty operations.

    Usage:
        try:
            LoyaltyService.redeem_points("GST-001", 500)
        except HotelmanError as e:
            if e.code == "INSUFFICIENT_POINTS":
                show_balance(e.data["available"])
    """

    default_code = "LOYALTY_ERROR"
    http_status = 400

    _default_messages = {
        "LOYALTY_ERROR": "Loyalty operation failed",
        "INVALID_INPUT": "Invalid request",
        "INVALID_POINTS": "Points must be a positive integer",
        "INVALID_AMOUNT": "Amount must be a positive value",
        "INVALID_TIER": "Valid tier required (bronze, silver, gold, platinum)",
        "INVALID_ACTION": "Invalid action",
        "MISSING_POINTS_OR_AMOUNT": "Either points or amount is required",
        "GUEST_NOT_FOUND": "Guest not found",
        "BRANCH_NOT_FOUND": "Branch not found",
        "INSUFFICIENT_POINTS": "Insufficient points",
        "CONCURRENT_UPDATE": "Guest was modified concurrently, retry the operation",
        "INTERNAL_ERROR": "Failed to process loyalty operation",
    }

    def __init__(self, code: str | None = None, message: str | None = None, **data):
        super().__init__(code or self.default_code, message, **data)


class ValidationError(HotelmanError):
    """Malformed, missing or out-of-range input."""

    default_code = "INVALID_INPUT"
    http_status = 400


class NotFoundError(HotelmanError):
    """Referenced guest (or branch) does not exist."""

    default_code = "GUEST_NOT_FOUND"
    http_status = 404


class InsufficientBalanceError(HotelmanError):
    """Requested points exceed the guest's balance."""

    default_code = "INSUFFICIENT_POINTS"
    http_status = 400


class ConcurrencyConflict(HotelmanError):
    """Optimistic update lost the race. Retry the whole operation."""

    default_code = "CONCURRENT_UPDATE"
    http_status = 409


class InternalError(HotelmanError):
    """Persistence or unexpected failure."""

    default_code = "INTERNAL_ERROR"
    http_status = 500
