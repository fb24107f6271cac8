"""
Tests for error codes.
"""
import pytest
from consul_catalog.common.error_codes import (
    ErrorCode,
    get_error_message,
    get_error_category,
    ERROR_MESSAGES
)


def test_error_code_enum():
    """Test ErrorCode enum."""
    assert ErrorCode.TRANSPORT_ERROR == "ERR_1000"
    assert ErrorCode.INVALID_INDEX_HEADER == "ERR_2000"
    assert ErrorCode.DECODE_ERROR == "ERR_3000"


def test_every_code_has_a_message():
    """Test that every error code has a standard message."""
    for code in ErrorCode:
        assert code in ERROR_MESSAGES


def test_get_error_message():
    """Test get_error_message function."""
    message = get_error_message(ErrorCode.UNEXPECTED_STATUS)
    assert message == ERROR_MESSAGES[ErrorCode.UNEXPECTED_STATUS]

    message_with_detail = get_error_message(ErrorCode.UNEXPECTED_STATUS, "500")
    assert message_with_detail == "Unexpected response code: 500"


@pytest.mark.parametrize("code,category", [
    (ErrorCode.TRANSPORT_ERROR, "transport"),
    (ErrorCode.CONNECTION_FAILED, "transport"),
    (ErrorCode.TIMEOUT, "transport"),
    (ErrorCode.MISSING_INDEX_HEADER, "protocol"),
    (ErrorCode.UNEXPECTED_STATUS, "protocol"),
    (ErrorCode.DECODE_ERROR, "decode"),
    (ErrorCode.INVALID_CONFIG, "usage"),
])
def test_get_error_category(code, category):
    """Test get_error_category function."""
    assert get_error_category(code) == category
