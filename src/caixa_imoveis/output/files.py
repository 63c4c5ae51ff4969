"""Dataset file operations."""

import json
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from openpyxl import Workbook

from ..models.property import CityUrlIndex, CityUrls, PropertyRecord, PROPERTY_COLUMNS
from ..parsing.text import sanitize_cell

logger = logging.getLogger(__name__)

CITY_INDEX_GLOB = "urls_*_por_cidade.json"
PROPERTIES_GLOB = "imoveis_*_detalhes.xlsx"


def city_index_to_dict(city_index: CityUrlIndex) -> dict[str, Any]:
    """Serialize a city index to its JSON shape ({code: {cidade, urls}})."""
    return {
        code: city.model_dump(by_alias=True)
        for code, city in city_index.items()
    }


def write_city_index(city_index: CityUrlIndex, path: Path) -> Path:
    """Write the city index as JSON.

    Args:
        city_index: City code -> collected URLs.
        path: Destination file.

    Returns:
        The written path.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(city_index_to_dict(city_index), ensure_ascii=False, indent=2),
        encoding="utf-8",
    )
    logger.info(f"City index saved to {path}")
    return path


def read_city_index(path: Path) -> dict[str, Any]:
    """Read a city-index file as plain JSON data."""
    return json.loads(path.read_text(encoding="utf-8"))


def load_city_index(path: Path) -> CityUrlIndex:
    """Read a city-index file into models.

    Raises:
        ValueError: If the file is not valid JSON or not shaped
            ``{code: {cidade, urls}}`` (pydantic's ValidationError included).
    """
    data = read_city_index(path)
    if not isinstance(data, dict):
        raise ValueError(f"expected an object keyed by city code, got {type(data).__name__}")
    return {
        code: CityUrls.model_validate(entry)
        for code, entry in data.items()
    }


def write_properties(
    properties: Iterable[PropertyRecord],
    path: Path,
    sheet_name: str = "Imoveis",
) -> Path:
    """Write all records to a single-sheet XLSX file.

    The header is PROPERTY_COLUMNS and every row has exactly those columns,
    in that order, with sanitized values.

    Returns:
        The written path.
    """
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = sheet_name
    sheet.append(list(PROPERTY_COLUMNS))

    count = 0
    for record in properties:
        row = record.to_row()
        sheet.append([sanitize_cell(row.get(column)) for column in PROPERTY_COLUMNS])
        count += 1

    path.parent.mkdir(parents=True, exist_ok=True)
    workbook.save(path)
    logger.info(f"{count} properties saved to {path}")
    return path


def _latest(directory: Path, pattern: str) -> Path | None:
    candidates = [p for p in directory.glob(pattern) if p.is_file()]
    if not candidates:
        return None
    return max(candidates, key=lambda p: p.stat().st_mtime)


def find_latest_city_index(directory: Path) -> Path | None:
    """Most recently modified urls_<region>_por_cidade.json in directory."""
    return _latest(directory, CITY_INDEX_GLOB)


def find_latest_properties_file(directory: Path) -> Path | None:
    """Most recently modified imoveis_<region>_detalhes.xlsx in directory."""
    return _latest(directory, PROPERTIES_GLOB)
