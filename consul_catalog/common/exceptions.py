"""
Exceptions raised by catalog queries.
"""

from typing import Optional, Dict

from consul_catalog.common.error_codes import ErrorCode, get_error_message


class CatalogError(Exception):
    """Base exception for catalog query errors."""

    def __init__(
        self,
        message: str = "",
        error_code: ErrorCode = ErrorCode.TRANSPORT_ERROR,
        detail: Optional[Dict] = None,
    ):
        self.error_code = error_code
        self.detail = detail if detail is not None else {}

        # Use standard error message if no custom message provided
        if not message:
            detail_str = str(detail) if detail else None
            message = get_error_message(error_code, detail_str)
        self.message = message

        super().__init__(self.message)


class TransportError(CatalogError):
    """The HTTP exchange itself failed (connection refused, timeout, DNS)."""

    def __init__(
        self,
        message: str = "",
        error_code: ErrorCode = ErrorCode.TRANSPORT_ERROR,
        url: Optional[str] = None,
    ):
        self.url = url
        super().__init__(
            message=message,
            error_code=error_code,
            detail={"url": url} if url else None,
        )


class InvalidIndexHeaderError(CatalogError):
    """The X-Consul-Index header is missing or not an unsigned 64-bit integer."""

    def __init__(self, header_value: Optional[str] = None):
        self.header_value = header_value
        if header_value is None:
            error_code = ErrorCode.MISSING_INDEX_HEADER
            message = get_error_message(error_code)
        else:
            error_code = ErrorCode.INVALID_INDEX_HEADER
            message = get_error_message(error_code, repr(header_value))
        super().__init__(
            message=message,
            error_code=error_code,
            detail={"header_value": header_value},
        )


class UnexpectedStatusError(CatalogError):
    """The server answered with a status code other than 200 or 404."""

    def __init__(self, status_code: int):
        self.status_code = status_code
        super().__init__(
            message=get_error_message(ErrorCode.UNEXPECTED_STATUS, str(status_code)),
            error_code=ErrorCode.UNEXPECTED_STATUS,
            detail={"status_code": status_code},
        )


class DecodeError(CatalogError):
    """The response body does not match the shape expected for the endpoint."""

    def __init__(self, endpoint: str, reason: str = ""):
        self.endpoint = endpoint
        detail = f"{endpoint}: {reason}" if reason else endpoint
        super().__init__(
            message=get_error_message(ErrorCode.DECODE_ERROR, detail),
            error_code=ErrorCode.DECODE_ERROR,
            detail={"endpoint": endpoint},
        )


def sanitize_error_message(error: Exception, include_details: bool = False) -> str:
    """
    Sanitize error message for display.

    Args:
        error: The exception
        include_details: Whether to include detailed information (for logging)

    Returns:
        Sanitized error message
    """
    error_type = type(error).__name__
    error_message = str(error)

    if include_details:
        # For logging, include full details
        return f"{error_type}: {error_message}"

    if isinstance(error, CatalogError):
        return get_error_message(error.error_code)

    # User-friendly messages for common errors
    user_messages = {
        "ValueError": "Invalid input provided",
        "ValidationError": "Invalid input provided",
        "FileNotFoundError": "Required file not found",
        "PermissionError": "Permission denied",
        "KeyError": "Required parameter missing",
        "TypeError": "Invalid parameter type",
    }

    return user_messages.get(error_type, "An error occurred")
