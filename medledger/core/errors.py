from fastapi import HTTPException, status


class LedgerError(HTTPException):
    """Base class for refused ledger operations.

    Each subclass carries a fixed HTTP status and a stable ``code`` that the
    API renders next to the human readable detail.
    """

    code = "ledger_error"
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Operation refused"

    def __init__(self, detail: str = None):
        super().__init__(
            status_code=self.status_code,
            detail=detail or self.default_detail,
        )


class AccessDenied(LedgerError):
    code = "access_denied"
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Not permitted to read these records"


class Unauthorized(LedgerError):
    code = "unauthorized"
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Caller does not hold the required role"


class InvalidState(LedgerError):
    code = "invalid_state"
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Operation not allowed in the current state"


class PaymentRequired(LedgerError):
    code = "payment_required"
    status_code = status.HTTP_402_PAYMENT_REQUIRED
    default_detail = "A positive amount is required"


class InsufficientFunds(LedgerError):
    code = "insufficient_funds"
    status_code = status.HTTP_402_PAYMENT_REQUIRED
    default_detail = "Insufficient funds"


class NotFound(LedgerError):
    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Resource not found"
