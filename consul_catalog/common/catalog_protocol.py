"""
Catalog protocol definitions shared by the client and the watch loop.
"""

from dataclasses import dataclass
from enum import Enum

# Header carrying the catalog modify index on every response, 404 included.
INDEX_HEADER = "X-Consul-Index"

# Header carrying the ACL token on requests.
TOKEN_HEADER = "X-Consul-Token"

CATALOG_PREFIX = "/v1/catalog"

# Largest value representable by the server's unsigned 64-bit index.
MAX_INDEX = 2 ** 64 - 1


class CatalogEndpoint(str, Enum):
    """Catalog sub-resource being queried. Selects the decoded payload shape."""

    DATACENTERS = "datacenters"
    SERVICES = "services"
    SERVICE = "service"
    NODES = "nodes"
    NODE = "node"

    @property
    def requires_name(self) -> bool:
        """Whether the endpoint is addressed by a resource name."""
        return self in (CatalogEndpoint.SERVICE, CatalogEndpoint.NODE)


@dataclass(frozen=True)
class CatalogMeta:
    """Freshness marker returned by every catalog query."""

    modify_index: int

    def to_dict(self) -> dict:
        return {"modify_index": self.modify_index}
