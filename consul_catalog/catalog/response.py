"""
Response classification for catalog queries.

The catalog server answers 404 for a resource that legitimately does not
exist and still sends a valid index to watch from, so 404 is a valid-empty
result rather than an error.
"""
import logging
import re

import requests

from consul_catalog.catalog.decoder import decode_payload
from consul_catalog.catalog.models import RESULT_TYPES, CatalogResult
from consul_catalog.common.catalog_protocol import (
    INDEX_HEADER,
    MAX_INDEX,
    CatalogEndpoint,
    CatalogMeta,
)
from consul_catalog.common.exceptions import InvalidIndexHeaderError, UnexpectedStatusError

logger = logging.getLogger(__name__)

STATUS_OK = 200
STATUS_NOT_FOUND = 404

_DIGITS = re.compile(r"[0-9]+")


def parse_catalog_meta(response: requests.Response) -> CatalogMeta:
    """
    Extract the catalog meta from a response.

    Args:
        response: Completed HTTP response

    Returns:
        CatalogMeta: Meta carrying the modify index

    Raises:
        InvalidIndexHeaderError: If the index header is missing or is not an
            unsigned 64-bit decimal integer
    """
    raw = response.headers.get(INDEX_HEADER)
    if raw is None:
        raise InvalidIndexHeaderError(None)

    # int() would also accept signs, whitespace and underscores
    if not _DIGITS.fullmatch(raw):
        raise InvalidIndexHeaderError(raw)

    index = int(raw)
    if index > MAX_INDEX:
        raise InvalidIndexHeaderError(raw)

    return CatalogMeta(modify_index=index)


def classify_response(endpoint: CatalogEndpoint, response: requests.Response) -> CatalogResult:
    """
    Turn a completed response into a catalog result.

    Args:
        endpoint: Endpoint the request was issued against
        response: Completed HTTP response

    Returns:
        CatalogResult: Valid-empty result for 404, decoded result for 200

    Raises:
        InvalidIndexHeaderError: If the index header is missing or malformed
        UnexpectedStatusError: For any status other than 200 and 404
        DecodeError: If a 200 body does not match the endpoint's shape
    """
    endpoint = CatalogEndpoint(endpoint)
    result_type = RESULT_TYPES[endpoint]

    # Without an index the caller cannot keep watching, whatever the status
    meta = parse_catalog_meta(response)

    if response.status_code == STATUS_NOT_FOUND:
        logger.debug(f"{endpoint.value} not found (index {meta.modify_index})")
        return result_type(endpoint=endpoint, meta=meta, payload=None, found=False)

    if response.status_code != STATUS_OK:
        raise UnexpectedStatusError(response.status_code)

    payload = decode_payload(endpoint, response.content)

    # The server answers an unknown node with a null document
    if endpoint == CatalogEndpoint.NODE and payload is None:
        return result_type(endpoint=endpoint, meta=meta, payload=None, found=False)

    return result_type(endpoint=endpoint, meta=meta, payload=payload, found=True)
