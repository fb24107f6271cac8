"""
Tests for catalog exceptions.
"""
import pytest
from pydantic import BaseModel, ValidationError

from consul_catalog.common.exceptions import (
    CatalogError,
    TransportError,
    InvalidIndexHeaderError,
    UnexpectedStatusError,
    DecodeError,
    sanitize_error_message
)
from consul_catalog.common.error_codes import ErrorCode


def test_catalog_error_default_message():
    """Test CatalogError falls back to the standard message."""
    exc = CatalogError(error_code=ErrorCode.TIMEOUT)
    assert exc.message == "Catalog request timed out"
    assert str(exc) == exc.message
    assert exc.detail == {}


def test_catalog_error_custom_message():
    """Test CatalogError with a custom message."""
    exc = CatalogError("Something broke", error_code=ErrorCode.DECODE_ERROR)
    assert exc.message == "Something broke"
    assert exc.error_code == ErrorCode.DECODE_ERROR


def test_transport_error():
    """Test TransportError keeps the request URL."""
    exc = TransportError(error_code=ErrorCode.CONNECTION_FAILED, url="http://catalog.test/v1/catalog/nodes")
    assert isinstance(exc, CatalogError)
    assert exc.url == "http://catalog.test/v1/catalog/nodes"
    assert exc.detail == {"url": "http://catalog.test/v1/catalog/nodes"}
    assert exc.message.startswith("Failed to connect to catalog server")


def test_missing_index_header_error():
    """Test InvalidIndexHeaderError for a missing header."""
    exc = InvalidIndexHeaderError()
    assert exc.error_code == ErrorCode.MISSING_INDEX_HEADER
    assert exc.header_value is None
    assert exc.message == "Missing X-Consul-Index header"


def test_invalid_index_header_error():
    """Test InvalidIndexHeaderError for a malformed header."""
    exc = InvalidIndexHeaderError("-1")
    assert exc.error_code == ErrorCode.INVALID_INDEX_HEADER
    assert exc.header_value == "-1"
    assert exc.message == "Invalid X-Consul-Index header: '-1'"


def test_unexpected_status_error():
    """Test UnexpectedStatusError."""
    exc = UnexpectedStatusError(503)
    assert exc.status_code == 503
    assert exc.error_code == ErrorCode.UNEXPECTED_STATUS
    assert "503" in exc.message


def test_decode_error():
    """Test DecodeError."""
    exc = DecodeError("services", "Input should be a valid string")
    assert exc.endpoint == "services"
    assert exc.error_code == ErrorCode.DECODE_ERROR
    assert exc.message == "Failed to decode catalog response: services: Input should be a valid string"


def test_sanitize_error_message_catalog_error():
    """Test sanitize_error_message hides details of catalog errors."""
    exc = TransportError(error_code=ErrorCode.TIMEOUT, url="http://secret.internal/v1/catalog/nodes")
    message = sanitize_error_message(exc, include_details=False)
    assert message == "Catalog request timed out"
    assert "secret" not in message


def test_sanitize_error_message_with_details():
    """Test sanitize_error_message with details."""
    exc = UnexpectedStatusError(500)
    message = sanitize_error_message(exc, include_details=True)
    assert message == "UnexpectedStatusError: Unexpected response code: 500"


def test_sanitize_error_message_common_errors():
    """Test sanitize_error_message for common errors."""
    assert sanitize_error_message(ValueError("bad")) == "Invalid input provided"
    assert sanitize_error_message(KeyError("key")) == "Required parameter missing"
    assert sanitize_error_message(RuntimeError("boom")) == "An error occurred"


def test_sanitize_error_message_validation_error():
    """Test sanitize_error_message for pydantic validation errors."""
    class Model(BaseModel):
        port: int

    with pytest.raises(ValidationError) as exc_info:
        Model(port="not-a-port")

    assert sanitize_error_message(exc_info.value) == "Invalid input provided"
