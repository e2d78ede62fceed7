"""
SheetRelay Backend — Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for the three failure classes the
       service reports: bad input, missing rows/sheets, and upstream failures.
How:   Each exception carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with the matching status code.
Who:   Raised by services, the Google client wrapper and middleware.

Exception Hierarchy:
    SheetRelayError (base)
    ├── ValidationError          → 400 Bad Request (client can fix)
    ├── NotFoundError            → 404 Not Found
    ├── UpstreamServiceError     → 500 (raw Google API message exposed)
    ├── FileStorageError         → 500 Internal Server Error
    └── RateLimitExceededError   → 429 Too Many Requests
"""

from typing import Any, Dict, Optional


class SheetRelayError(Exception):
    """
    Base exception for all SheetRelay application errors.

    Attributes:
        message:  User-facing error description (returned in the API response)
        context:  Additional debug info (logged, and returned as `details`
                  only for validation errors)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(SheetRelayError):
    """
    Raised when client input fails validation.

    When:    Required body/query field missing or empty, unsupported upload type,
             upload too large, operation not supported by the sheet layout.
    HTTP:    400 Bad Request

    Raised BEFORE any Google API call, so a rejected request never mutates
    the spreadsheet.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(SheetRelayError):
    """
    Raised when a requested row or sheet does not exist.

    When:    Identifier absent from the key column, sheet title absent from
             spreadsheet metadata, or the sheet holds no data at all.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"The requested {resource} was not found"
            if resource_id:
                message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class UpstreamServiceError(SheetRelayError):
    """
    Raised when a Google Sheets or Drive API call fails.

    What:    Wraps HttpError, auth failures, quota errors and transport errors.
    HTTP:    500 Internal Server Error

    The raw upstream message is kept as `message` and returned to the caller
    verbatim. There is no retry: every failure is terminal for its request.
    """

    def __init__(
        self,
        message: str = "Google API request failed",
        status: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if status:
            ctx["upstream_status"] = status
        super().__init__(message=message, context=ctx)
        self.status = status


class FileStorageError(SheetRelayError):
    """
    Raised when an image cannot be stored.

    When:    Drive folder not configured, MIME sniffing failed.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(SheetRelayError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    HTTP:    429 Too Many Requests (with Retry-After header)
    """

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
