"""Scrapers module."""

from .base import BaseScraper, CrawlResult, ScrapeError
from .caixa import CaixaScraper, CityOptionsTimeout

__all__ = [
    "BaseScraper",
    "CrawlResult",
    "ScrapeError",
    "CaixaScraper",
    "CityOptionsTimeout",
]
