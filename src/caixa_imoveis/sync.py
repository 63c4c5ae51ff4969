"""Forward the city index to the WordPress import endpoint.

The site runs a plugin exposing ``POST /wp-json/imoveis/v1/import`` that
accepts ``{"urlsPorCidade": <city index>}`` with a Bearer token.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import requests

from .config import Config
from .output.files import (
    city_index_to_dict,
    find_latest_city_index,
    find_latest_properties_file,
    load_city_index,
)

logger = logging.getLogger(__name__)

IMPORT_PATH = "/wp-json/imoveis/v1/import"
REQUEST_TIMEOUT_SECONDS = 60


class SyncError(RuntimeError):
    """The city index could not be delivered."""

    def __init__(self, message: str, status_code: int | None = None, body: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


@dataclass
class SyncResult:
    """Outcome of a successful import."""

    city_index_path: Path
    properties_path: Path | None
    status_code: int
    body: str


def import_url(endpoint: str) -> str:
    return f"{endpoint.rstrip('/')}{IMPORT_PATH}"


def push_city_index(endpoint: str, token: str, city_index: dict[str, Any]) -> requests.Response:
    """POST the city index once, no retries.

    Raises:
        SyncError: On a non-2xx response (body kept verbatim) or a transport error.
    """
    url = import_url(endpoint)
    try:
        response = requests.post(
            url,
            json={"urlsPorCidade": city_index},
            headers={"Authorization": f"Bearer {token}"},
            timeout=REQUEST_TIMEOUT_SECONDS,
        )
    except requests.RequestException as e:
        raise SyncError(f"Request to {url} failed: {e}") from e

    if not response.ok:
        raise SyncError(
            f"Import failed with HTTP {response.status_code}: {response.text}",
            status_code=response.status_code,
            body=response.text,
        )
    return response


def sync_to_wordpress(config: Config, directory: Path | None = None) -> SyncResult:
    """Find the newest city-index file and send it to the import endpoint.

    Args:
        config: Must carry import_endpoint and import_token.
        directory: Where to look for the file (defaults to config.output_dir).

    Raises:
        ConfigError: If WP_URL or WP_TOKEN is missing.
        SyncError: If no city-index file exists or the import fails.
    """
    endpoint, token = config.require_import_settings()
    directory = directory or config.output_dir

    city_index_path = find_latest_city_index(directory)
    if city_index_path is None:
        raise SyncError(f"No city-index file found in {directory}. Run the scraper first.")

    properties_path = find_latest_properties_file(directory)
    logger.info(f"Sending data to {endpoint}")
    logger.info(f"City index: {city_index_path.name}")
    if properties_path is not None:
        logger.info(f"Details spreadsheet (not uploaded): {properties_path.name}")

    try:
        city_index = load_city_index(city_index_path)
    except ValueError as e:
        raise SyncError(f"Invalid city-index file {city_index_path.name}: {e}") from e

    response = push_city_index(endpoint, token, city_index_to_dict(city_index))
    logger.info(f"Import OK: {response.text}")

    return SyncResult(
        city_index_path=city_index_path,
        properties_path=properties_path,
        status_code=response.status_code,
        body=response.text,
    )
