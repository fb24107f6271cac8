"""
Command line interface for querying and watching the service catalog.

Examples:
    consul-catalog datacenters
    consul-catalog --dc dc2 service web
    consul-catalog --wait 30 service web --watch
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from pydantic import ValidationError

from consul_catalog.catalog.client import CatalogClient
from consul_catalog.catalog.models import CatalogResult, QueryOptions
from consul_catalog.common.catalog_protocol import CatalogEndpoint
from consul_catalog.common.error_codes import ErrorCode, get_error_category, get_error_message
from consul_catalog.common.exceptions import CatalogError, sanitize_error_message
from consul_catalog.runtime.config_manager import ConfigManager
from consul_catalog.runtime.logging_config import setup_logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_QUERY_FAILED = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="consul-catalog",
        description="Query the service catalog, optionally watching for changes",
    )
    parser.add_argument("--config", help="Configuration file (YAML or JSON)")
    parser.add_argument("--address", help="Catalog server address (host:port or URL)")
    parser.add_argument("--dc", dest="datacenter", help="Datacenter to query")
    parser.add_argument("--wait", dest="wait_time", type=float, help="Blocking wait in seconds")
    parser.add_argument("--token", help="ACL token")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    parser.add_argument("--log-dir", help="Write rotating log files to this directory")
    parser.add_argument(
        "endpoint",
        choices=[endpoint.value for endpoint in CatalogEndpoint],
        help="Catalog endpoint to query",
    )
    parser.add_argument("name", nargs="?", help="Service or node name (service and node endpoints)")
    parser.add_argument("--index", type=int, default=0, help="Block until the index moves past this value")
    parser.add_argument("--watch", action="store_true", help="Print every change until interrupted")
    parser.add_argument(
        "--max-failures",
        type=int,
        help="Stop watching after this many consecutive failures (0 = never)",
    )
    return parser


def _print_result(result: CatalogResult):
    print(json.dumps(result.to_dict()), flush=True)


def _print_error(error: Exception):
    body = {"message": sanitize_error_message(error, include_details=True)}
    if isinstance(error, CatalogError):
        body["error"] = error.error_code.value
        body["category"] = get_error_category(error.error_code)
    print(json.dumps(body), file=sys.stderr, flush=True)


def _print_usage_error(error_code: ErrorCode, detail: str):
    body = {
        "message": get_error_message(error_code, detail),
        "error": error_code.value,
        "category": get_error_category(error_code),
    }
    print(json.dumps(body), file=sys.stderr, flush=True)


def _watch(client: CatalogClient, manager: ConfigManager, endpoint: CatalogEndpoint, name: Optional[str]) -> int:
    max_failures = manager.get("max_failures")
    gave_up = []

    def on_error(error: CatalogError, attempt: int) -> bool:
        _print_error(error)
        if max_failures and attempt >= max_failures:
            gave_up.append(attempt)
            return False
        return True

    watcher = client.watch(endpoint, name, backoff=manager.build_backoff())
    try:
        watcher.run(_print_result, on_error)
    except KeyboardInterrupt:
        watcher.stop()
        logger.info("Interrupted")
        return EXIT_INTERRUPTED

    return EXIT_QUERY_FAILED if gave_up else EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    manager = ConfigManager(args.config)
    manager.override(
        address=args.address,
        datacenter=args.datacenter,
        wait_time=args.wait_time,
        token=args.token,
        log_level=args.log_level,
        log_dir=args.log_dir,
        max_failures=args.max_failures,
    )

    errors = manager.validate()
    if errors:
        for error in errors:
            _print_usage_error(ErrorCode.INVALID_CONFIG, error)
        return EXIT_USAGE

    setup_logging(
        log_dir=manager.get("log_dir"),
        log_level=manager.get("log_level"),
        enable_file=manager.get("log_dir") is not None,
        max_bytes=manager.get("log_max_bytes"),
        backup_count=manager.get("log_backup_count"),
        rotation_strategy=manager.get("log_rotation_strategy"),
    )

    endpoint = CatalogEndpoint(args.endpoint)
    if endpoint.requires_name and not (args.name and args.name.strip("/")):
        _print_usage_error(ErrorCode.INVALID_QUERY, f"the {endpoint.value} endpoint requires a name")
        return EXIT_USAGE

    try:
        options = QueryOptions(wait_index=args.index)
    except ValidationError as e:
        _print_usage_error(ErrorCode.INVALID_QUERY, e.errors()[0]["msg"])
        return EXIT_USAGE

    client = CatalogClient(manager.to_catalog_config())
    try:
        if args.watch:
            return _watch(client, manager, endpoint, args.name)

        result = client.query(endpoint, args.name, options)
        _print_result(result)
        return EXIT_OK
    except CatalogError as e:
        logger.debug(f"Query failed: {e}")
        _print_error(e)
        return EXIT_QUERY_FAILED
    finally:
        client.close()

