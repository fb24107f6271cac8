"""
Standardized error codes for catalog queries.
"""
from enum import Enum
from typing import Dict, Optional


class ErrorCode(str, Enum):
    """Standardized error codes."""

    # Transport errors (1xxx)
    TRANSPORT_ERROR = "ERR_1000"
    CONNECTION_FAILED = "ERR_1001"
    TIMEOUT = "ERR_1002"

    # Protocol errors (2xxx)
    INVALID_INDEX_HEADER = "ERR_2000"
    MISSING_INDEX_HEADER = "ERR_2001"
    UNEXPECTED_STATUS = "ERR_2002"

    # Decode errors (3xxx)
    DECODE_ERROR = "ERR_3000"

    # Usage / configuration errors (4xxx)
    INVALID_QUERY = "ERR_4000"
    INVALID_CONFIG = "ERR_4001"


# Error code metadata
ERROR_MESSAGES: Dict[ErrorCode, str] = {
    ErrorCode.TRANSPORT_ERROR: "Catalog request failed",
    ErrorCode.CONNECTION_FAILED: "Failed to connect to catalog server",
    ErrorCode.TIMEOUT: "Catalog request timed out",

    ErrorCode.INVALID_INDEX_HEADER: "Invalid X-Consul-Index header",
    ErrorCode.MISSING_INDEX_HEADER: "Missing X-Consul-Index header",
    ErrorCode.UNEXPECTED_STATUS: "Unexpected response code",

    ErrorCode.DECODE_ERROR: "Failed to decode catalog response",

    ErrorCode.INVALID_QUERY: "Invalid catalog query",
    ErrorCode.INVALID_CONFIG: "Invalid configuration",
}


def get_error_message(error_code: ErrorCode, detail: Optional[str] = None) -> str:
    """
    Get error message for error code.

    Args:
        error_code: Error code
        detail: Optional additional detail

    Returns:
        Error message string
    """
    base_message = ERROR_MESSAGES.get(error_code, "Unknown error")
    if detail:
        return f"{base_message}: {detail}"
    return base_message


def get_error_category(error_code: ErrorCode) -> str:
    """
    Map error code to its category name.

    Args:
        error_code: Error code

    Returns:
        Category name ('transport', 'protocol', 'decode' or 'usage')
    """
    code_prefix = error_code.value.split('_')[1][0]

    category_map = {
        '1': 'transport',
        '2': 'protocol',
        '3': 'decode',
        '4': 'usage',
    }

    return category_map.get(code_prefix, 'unknown')
