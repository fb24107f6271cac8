"""
Data models for catalog queries.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, field_validator

from consul_catalog.common.catalog_protocol import MAX_INDEX, CatalogEndpoint, CatalogMeta


class QueryOptions(BaseModel):
    """Per-call query parameters."""

    model_config = ConfigDict(frozen=True)

    datacenter: Optional[str] = None
    wait_index: int = Field(default=0, ge=0)
    wait_time: Optional[float] = Field(default=None, ge=0)

    @field_validator("wait_index")
    @classmethod
    def _index_range(cls, value):
        if value > MAX_INDEX:
            raise ValueError("wait_index must fit in an unsigned 64-bit integer")
        return value


class CatalogNode(BaseModel):
    """A node providing a service, as listed by /v1/catalog/service/<name>."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    node_name: StrictStr = Field(default="", alias="Node")
    address: StrictStr = Field(default="", alias="Address")
    service_id: StrictStr = Field(default="", alias="ServiceID")
    service_name: StrictStr = Field(default="", alias="ServiceName")
    service_tags: Tuple[StrictStr, ...] = Field(default=(), alias="ServiceTags")
    service_port: StrictInt = Field(default=0, alias="ServicePort")

    @field_validator("service_tags", mode="before")
    @classmethod
    def _null_tags(cls, value):
        # The server sends null for a service registered without tags
        return () if value is None else value


@dataclass(frozen=True)
class CatalogResult:
    """
    Outcome of a catalog query.

    ``found`` is False when the server signaled that the resource does not
    exist (valid-empty); ``meta`` is present either way.
    """

    endpoint: CatalogEndpoint
    meta: CatalogMeta
    payload: Any = None
    found: bool = True

    @property
    def is_valid(self) -> bool:
        return self.found

    @property
    def modify_index(self) -> int:
        return self.meta.modify_index

    def _payload_dict(self) -> Any:
        return self.payload

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "endpoint": self.endpoint.value,
            "modify_index": self.meta.modify_index,
            "found": self.found,
            "payload": self._payload_dict() if self.found else None,
        }


@dataclass(frozen=True)
class DatacentersResult(CatalogResult):
    """Datacenter names, in server order."""

    @property
    def names(self) -> Tuple[str, ...]:
        return self.payload or ()

    def _payload_dict(self) -> Any:
        return list(self.names)


@dataclass(frozen=True)
class ServicesResult(CatalogResult):
    """Service name to declared tags."""

    @property
    def services(self) -> Dict[str, Tuple[str, ...]]:
        return self.payload or {}

    def _payload_dict(self) -> Any:
        return {name: list(tags) for name, tags in self.services.items()}


@dataclass(frozen=True)
class ServiceNodesResult(CatalogResult):
    """Nodes providing one service, in server order."""

    @property
    def nodes(self) -> Tuple[CatalogNode, ...]:
        return self.payload or ()

    def node_at(self, index: int) -> CatalogNode:
        return self.nodes[index]

    def _payload_dict(self) -> Any:
        return [node.model_dump(by_alias=True, mode="json") for node in self.nodes]


@dataclass(frozen=True)
class NodesResult(CatalogResult):
    """All catalog nodes as opaque JSON objects."""

    @property
    def nodes(self) -> Tuple[Dict[str, Any], ...]:
        return self.payload or ()

    def _payload_dict(self) -> Any:
        return list(self.nodes)


@dataclass(frozen=True)
class NodeResult(CatalogResult):
    """One node's detail as an opaque JSON object."""

    @property
    def detail(self) -> Dict[str, Any]:
        return self.payload or {}


RESULT_TYPES = {
    CatalogEndpoint.DATACENTERS: DatacentersResult,
    CatalogEndpoint.SERVICES: ServicesResult,
    CatalogEndpoint.SERVICE: ServiceNodesResult,
    CatalogEndpoint.NODES: NodesResult,
    CatalogEndpoint.NODE: NodeResult,
}
