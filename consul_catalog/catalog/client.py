"""
Catalog Client.
Provides read access to the catalog HTTP API with blocking query support.
"""
import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import requests

from consul_catalog.catalog.models import (
    CatalogResult,
    DatacentersResult,
    NodeResult,
    NodesResult,
    QueryOptions,
    ServiceNodesResult,
    ServicesResult,
)
from consul_catalog.catalog.response import classify_response
from consul_catalog.catalog.watcher import CatalogWatcher
from consul_catalog.common.catalog_protocol import TOKEN_HEADER, CatalogEndpoint
from consul_catalog.common.error_codes import ErrorCode
from consul_catalog.common.exceptions import TransportError
from consul_catalog.common.utils import base_url, catalog_path, format_wait

logger = logging.getLogger(__name__)

DEFAULT_ADDRESS = "127.0.0.1:8500"

# Wait applied by the server to a blocking query that sends no wait parameter
DEFAULT_SERVER_WAIT = 300.0


@dataclass(frozen=True)
class CatalogConfig:
    """Configuration used to create a CatalogClient."""

    # Address of the catalog server, 'host:port' or a full URL
    address: str = DEFAULT_ADDRESS

    # Datacenter to query. The agent's own datacenter is used when unset.
    datacenter: Optional[str] = None

    # Default limit, in seconds, on how long a blocking query may block
    wait_time: Optional[float] = None

    # Transport timeout in seconds, extended by the wait for blocking queries
    timeout: Optional[float] = 5.0

    # ACL token sent with every request
    token: Optional[str] = None

    scheme: str = "http"

    # Transport handle, shared by every query issued through the client
    http_client: requests.Session = field(default_factory=requests.Session, repr=False)


def default_config() -> CatalogConfig:
    """Return a default configuration with its own HTTP session."""
    return CatalogConfig()


def build_query_params(config: CatalogConfig, options: QueryOptions) -> Dict[str, str]:
    """
    Build the query string parameters of a catalog request.

    Args:
        config: Client configuration supplying the defaults
        options: Per-call query parameters

    Returns:
        Dict[str, str]: 'dc', 'index' and 'wait' parameters as applicable
    """
    params: Dict[str, str] = {}

    datacenter = options.datacenter or config.datacenter
    if datacenter:
        params["dc"] = datacenter

    if options.wait_index > 0:
        params["index"] = str(options.wait_index)

        wait_time = _effective_wait(config, options)
        if wait_time:
            params["wait"] = format_wait(wait_time)

    return params


def _effective_wait(config: CatalogConfig, options: QueryOptions) -> Optional[float]:
    if options.wait_time:
        return options.wait_time
    return config.wait_time or None


class CatalogClient:
    """Client for reading the service catalog."""

    def __init__(self, config: CatalogConfig):
        """
        Initialize catalog client.

        Args:
            config: Client configuration, copied so later changes do not apply
        """
        self.config = dataclasses.replace(config)
        self.base_url = base_url(self.config.address, self.config.scheme)
        self.session = self.config.http_client

    def build_request(
        self,
        endpoint: CatalogEndpoint,
        name: Optional[str] = None,
        options: Optional[QueryOptions] = None,
    ) -> requests.Request:
        """
        Build the GET request for a catalog query.

        Args:
            endpoint: Catalog endpoint to query
            name: Resource name for endpoints addressed by name
            options: Per-call query parameters

        Returns:
            requests.Request: Unprepared request

        Raises:
            ValueError: If the endpoint needs a name and none was given
        """
        endpoint = CatalogEndpoint(endpoint)
        options = options or QueryOptions()

        if endpoint.requires_name and not (name and name.strip("/")):
            raise ValueError(f"Endpoint '{endpoint.value}' requires a name")

        headers = {}
        if self.config.token:
            headers[TOKEN_HEADER] = self.config.token

        return requests.Request(
            method="GET",
            url=self.base_url + catalog_path(endpoint.value, name),
            params=build_query_params(self.config, options),
            headers=headers,
        )

    def transport_timeout(self, options: QueryOptions) -> Optional[float]:
        """
        Timeout handed to the transport for a query.

        A blocking query may be held by the server for its wait time plus up
        to 1/16 of it as jitter, on top of the regular request timeout.
        """
        if self.config.timeout is None:
            return None
        if options.wait_index <= 0:
            return self.config.timeout

        wait_time = _effective_wait(self.config, options) or DEFAULT_SERVER_WAIT
        return self.config.timeout + wait_time + wait_time / 16

    def query(
        self,
        endpoint: CatalogEndpoint,
        name: Optional[str] = None,
        options: Optional[QueryOptions] = None,
    ) -> CatalogResult:
        """
        Issue one catalog query.

        Args:
            endpoint: Catalog endpoint to query
            name: Resource name for endpoints addressed by name
            options: Per-call query parameters

        Returns:
            CatalogResult: Result typed after the endpoint

        Raises:
            TransportError: If the HTTP exchange fails
            InvalidIndexHeaderError: If the index header is missing or malformed
            UnexpectedStatusError: For any status other than 200 and 404
            DecodeError: If the body does not match the endpoint's shape
        """
        endpoint = CatalogEndpoint(endpoint)
        options = options or QueryOptions()
        prepared = self.session.prepare_request(self.build_request(endpoint, name, options))
        # Proxy and CA bundle settings from the environment, as Session.request applies them
        send_kwargs = self.session.merge_environment_settings(prepared.url, {}, None, None, None)

        try:
            response = self.session.send(
                prepared, timeout=self.transport_timeout(options), **send_kwargs
            )
        except requests.exceptions.Timeout as e:
            logger.warning(f"Catalog request timed out: {prepared.url}")
            raise TransportError(error_code=ErrorCode.TIMEOUT, url=prepared.url) from e
        except requests.exceptions.ConnectionError as e:
            logger.warning(f"Could not connect to catalog at {self.base_url}: {e}")
            raise TransportError(error_code=ErrorCode.CONNECTION_FAILED, url=prepared.url) from e
        except requests.exceptions.RequestException as e:
            logger.error(f"Catalog request failed: {e}")
            raise TransportError(url=prepared.url) from e

        try:
            result = classify_response(endpoint, response)
        finally:
            response.close()

        logger.debug(
            f"Queried {prepared.url}: found={result.found} index={result.modify_index}"
        )
        return result

    def get_datacenters(self, options: Optional[QueryOptions] = None) -> DatacentersResult:
        """List known datacenters."""
        return self.query(CatalogEndpoint.DATACENTERS, options=options)

    def get_services(self, options: Optional[QueryOptions] = None) -> ServicesResult:
        """List services with their tags."""
        return self.query(CatalogEndpoint.SERVICES, options=options)

    def get_service(self, service: str, options: Optional[QueryOptions] = None) -> ServiceNodesResult:
        """List the nodes providing a service."""
        return self.query(CatalogEndpoint.SERVICE, service, options)

    def get_nodes(self, options: Optional[QueryOptions] = None) -> NodesResult:
        """List all nodes."""
        return self.query(CatalogEndpoint.NODES, options=options)

    def get_node(self, node: str, options: Optional[QueryOptions] = None) -> NodeResult:
        """Get one node with the services it provides."""
        return self.query(CatalogEndpoint.NODE, node, options)

    def watch(
        self, endpoint: CatalogEndpoint, name: Optional[str] = None, **kwargs: Any
    ) -> CatalogWatcher:
        """
        Create a watcher observing changes of one endpoint.

        Keyword arguments are passed to CatalogWatcher.
        """
        return CatalogWatcher(self, endpoint, name, **kwargs)

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self.session.close()
