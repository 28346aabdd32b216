"""Application error taxonomy.

Every error raised deliberately by the application derives from
``PizzeriaError`` and carries the HTTP status it maps to at the API boundary.
Protean's own ``ValidationError`` and ``ObjectNotFoundError`` are translated
at the boundary as well (see ``pizzeria.shared.api``).
"""


class PizzeriaError(Exception):
    status_code = 500
    kind = "InternalFailure"
    default_message = "Internal server error"

    def __init__(self, message: str | None = None, errors: list[dict] | None = None) -> None:
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)


class InternalFailure(PizzeriaError):
    pass


# ---------------------------------------------------------------------------
# 400
# ---------------------------------------------------------------------------
class ValidationFailure(PizzeriaError):
    status_code = 400
    kind = "ValidationFailure"
    default_message = "Validation failed"


class InvalidSize(ValidationFailure):
    kind = "InvalidSize"
    default_message = "Size not available"


class PaymentVerificationFailed(ValidationFailure):
    kind = "PaymentVerificationFailed"
    default_message = "Payment verification failed"


# ---------------------------------------------------------------------------
# 401 / 403
# ---------------------------------------------------------------------------
class Unauthorized(PizzeriaError):
    status_code = 401
    kind = "Unauthorized"
    default_message = "Not authorized to access this route"


class TokenMissing(Unauthorized):
    kind = "TokenMissing"
    default_message = "Not authorized to access this route"


class TokenInvalid(Unauthorized):
    kind = "TokenInvalid"
    default_message = "Invalid token"


class TokenExpired(Unauthorized):
    kind = "TokenExpired"
    default_message = "Token expired"


class AccountInactive(Unauthorized):
    kind = "AccountInactive"
    default_message = "User account is deactivated"


class Forbidden(PizzeriaError):
    status_code = 403
    kind = "Forbidden"
    default_message = "Not authorized to access this resource"


# ---------------------------------------------------------------------------
# 404 / 409
# ---------------------------------------------------------------------------
class NotFound(PizzeriaError):
    status_code = 404
    kind = "NotFound"
    default_message = "Resource not found"


class Conflict(PizzeriaError):
    status_code = 409
    kind = "Conflict"
    default_message = "Conflict"


class DuplicateEntry(Conflict):
    kind = "DuplicateEntry"
    default_message = "Duplicate field value entered"


class InvalidTransition(Conflict):
    kind = "InvalidTransition"
    default_message = "Invalid status transition"


class AlreadyProcessed(Conflict):
    kind = "AlreadyProcessed"
    default_message = "Already processed"


class CancellationRequiresSupport(Conflict):
    kind = "CancellationRequiresSupport"
    default_message = "Order is out for delivery and cannot be cancelled. Please contact support."


# ---------------------------------------------------------------------------
# 429 / 5xx
# ---------------------------------------------------------------------------
class RateLimited(PizzeriaError):
    status_code = 429
    kind = "RateLimited"
    default_message = "Too many attempts, please try again later"

    def __init__(self, retry_after: int, message: str | None = None) -> None:
        self.retry_after = retry_after
        super().__init__(message)


class UpstreamFailure(PizzeriaError):
    status_code = 502
    kind = "UpstreamFailure"
    default_message = "An upstream service is unavailable. Please try again later."
