from typing import Any, List, Optional


class ShortLinkError(Exception):
    """Base error; carries the HTTP status and a machine-readable code."""

    status_code = 500
    code = "INTERNAL_ERROR"
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"message": self.message, "code": self.code}


class ValidationError(ShortLinkError):
    status_code = 400
    code = "VALIDATION_ERROR"
    default_message = "Validation error"

    def __init__(self, message: Optional[str] = None, errors: Optional[List[Any]] = None):
        super().__init__(message)
        self.errors = errors or []

    def to_dict(self) -> dict:
        data = super().to_dict()
        if self.errors:
            data["errors"] = self.errors
        return data


class ReservedSlugError(ShortLinkError):
    status_code = 400
    code = "RESERVED_SLUG"
    default_message = "This URL slug is reserved and cannot be used. Please choose a different one."


class SlugTakenError(ShortLinkError):
    status_code = 409
    code = "SLUG_TAKEN"
    default_message = "This custom URL is already taken. Please choose a different one."


class QuotaExceededError(ShortLinkError):
    status_code = 429
    code = "ANONYMOUS_LIMIT_REACHED"
    default_message = "Anonymous user limit reached. Please sign up to continue."


class AllocationExhaustedError(ShortLinkError):
    status_code = 500
    code = "ALLOCATION_EXHAUSTED"
    default_message = "Unable to generate unique short code. Please try again."


class NotFoundError(ShortLinkError):
    status_code = 404
    code = "NOT_FOUND"
    default_message = "URL not found"


class UnauthorizedError(ShortLinkError):
    status_code = 401
    code = "UNAUTHORIZED"
    default_message = "Authentication required"
