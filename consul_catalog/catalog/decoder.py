"""
Typed payload decoder.

The payload shape is chosen by the endpoint being queried, never by
inspecting the body. Every shape is validated in full before anything is
returned, so a body that fails half way through yields no partial result.
"""
import logging
from typing import Any, Dict, List, Optional

from pydantic import StrictStr, TypeAdapter, ValidationError

from consul_catalog.catalog.models import CatalogNode
from consul_catalog.common.catalog_protocol import CatalogEndpoint
from consul_catalog.common.exceptions import DecodeError

logger = logging.getLogger(__name__)


_DATACENTERS = TypeAdapter(List[StrictStr])
_SERVICES = TypeAdapter(Dict[StrictStr, Optional[List[StrictStr]]])
_SERVICE_NODES = TypeAdapter(List[CatalogNode])
_NODES = TypeAdapter(List[Dict[str, Any]])
_NODE = TypeAdapter(Optional[Dict[str, Any]])


def _decode_datacenters(body: bytes):
    return tuple(_DATACENTERS.validate_json(body))


def _decode_services(body: bytes):
    services = _SERVICES.validate_json(body)
    return {name: tuple(tags or ()) for name, tags in services.items()}


def _decode_service_nodes(body: bytes):
    return tuple(_SERVICE_NODES.validate_json(body))


def _decode_nodes(body: bytes):
    return tuple(_NODES.validate_json(body))


def _decode_node(body: bytes):
    return _NODE.validate_json(body)


_DECODERS = {
    CatalogEndpoint.DATACENTERS: _decode_datacenters,
    CatalogEndpoint.SERVICES: _decode_services,
    CatalogEndpoint.SERVICE: _decode_service_nodes,
    CatalogEndpoint.NODES: _decode_nodes,
    CatalogEndpoint.NODE: _decode_node,
}


def decode_payload(endpoint: CatalogEndpoint, body: bytes) -> Any:
    """
    Decode a JSON body into the payload shape of the given endpoint.

    Args:
        endpoint: Endpoint that produced the body
        body: Raw JSON response body

    Returns:
        tuple of names (datacenters), dict of name -> tags tuple (services),
        tuple of CatalogNode (service), tuple of dicts (nodes) or an
        optional dict (node)

    Raises:
        DecodeError: If the body is not valid JSON or does not match the shape
    """
    endpoint = CatalogEndpoint(endpoint)
    decoder = _DECODERS[endpoint]
    try:
        payload = decoder(body)
    except ValidationError as e:
        reason = e.errors()[0]["msg"] if e.errors() else str(e)
        logger.debug(f"Failed to decode {endpoint.value} payload: {e}")
        raise DecodeError(endpoint.value, reason) from e

    logger.debug(f"Decoded {endpoint.value} payload ({len(body)} bytes)")
    return payload
