"""
Pytest configuration and fixtures.
"""
import logging
import pytest
import sys
from pathlib import Path

import requests

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from consul_catalog.catalog.client import CatalogClient, CatalogConfig


CATALOG_ADDRESS = "catalog.test:8500"
CATALOG_URL = f"http://{CATALOG_ADDRESS}/v1/catalog"


@pytest.fixture
def catalog_url():
    """Base URL of the mocked catalog API."""
    return CATALOG_URL


@pytest.fixture
def catalog_config():
    """Client configuration pointing at the mocked catalog server."""
    return CatalogConfig(address=CATALOG_ADDRESS, http_client=requests.Session())


@pytest.fixture
def client(catalog_config):
    """Catalog client for testing."""
    catalog_client = CatalogClient(catalog_config)
    yield catalog_client
    catalog_client.close()


@pytest.fixture
def consul_node():
    """Node entry as returned by /v1/catalog/service/consul."""
    return {
        "Node": "localhost",
        "Address": "127.0.0.1",
        "ServiceID": "consul",
        "ServiceName": "consul",
        "ServiceTags": None,
        "ServicePort": 8000,
    }


@pytest.fixture
def clean_env(monkeypatch):
    """Remove catalog and logging settings from the environment."""
    for env_var in (
        'CONSUL_HTTP_ADDR',
        'CONSUL_HTTP_SCHEME',
        'CONSUL_DATACENTER',
        'CONSUL_HTTP_TOKEN',
        'CONSUL_CATALOG_WAIT',
        'CONSUL_CATALOG_TIMEOUT',
        'CONSUL_CATALOG_BACKOFF_INITIAL',
        'CONSUL_CATALOG_BACKOFF_MAX',
        'CONSUL_CATALOG_BACKOFF_FACTOR',
        'CONSUL_CATALOG_MAX_FAILURES',
        'LOG_LEVEL',
        'LOG_DIR',
        'LOG_MAX_BYTES',
        'LOG_BACKUP_COUNT',
        'LOG_ROTATION_STRATEGY',
    ):
        monkeypatch.delenv(env_var, raising=False)


@pytest.fixture
def restore_root_logger():
    """Restore root logger handlers and level after the test."""
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level
    yield root_logger
    for handler in root_logger.handlers:
        handler.close()
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)
