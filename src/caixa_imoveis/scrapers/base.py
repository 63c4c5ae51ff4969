"""Base scraper class."""

import asyncio
import logging
import traceback
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, UTC

from playwright.async_api import Browser, BrowserContext, Page, async_playwright

from ..config import Config
from ..models.property import CityUrlIndex, PropertyRecord
from ..parsing.detail import ListingContext

logger = logging.getLogger(__name__)

BROWSER_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
]


@dataclass
class ScrapeError:
    """Record of a scraping error."""

    url: str
    error_type: str
    error_message: str
    traceback: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def from_exception(cls, url: str, exc: Exception) -> "ScrapeError":
        """Create a ScrapeError from an exception."""
        return cls(
            url=url,
            error_type=type(exc).__name__,
            error_message=str(exc),
            traceback=traceback.format_exc(),
        )


@dataclass
class CrawlResult:
    """Result of a crawl: the city index, the extracted records and failures."""

    city_index: CityUrlIndex = field(default_factory=dict)
    properties: list[PropertyRecord] = field(default_factory=list)
    errors: list[ScrapeError] = field(default_factory=list)

    @property
    def url_count(self) -> int:
        return sum(len(city.urls) for city in self.city_index.values())

    @property
    def success_count(self) -> int:
        return len(self.properties)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    def __repr__(self) -> str:
        return (
            f"CrawlResult({len(self.city_index)} cities, {self.url_count} urls, "
            f"{self.success_count} succeeded, {self.error_count} failed)"
        )


class BaseScraper(ABC):
    """Base class for browser-driven scrapers.

    One browser session is opened in setup() and reused for every step until
    teardown().
    """

    def __init__(self, config: Config):
        self.config = config
        self.errors: list[ScrapeError] = []
        self._playwright = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self._page: Page | None = None

    async def setup(self) -> None:
        """Initialize Playwright browser."""
        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(
            headless=self.config.headless,
            executable_path=self.config.browser_path,
            args=BROWSER_ARGS,
        )
        self._context = await self._browser.new_context(
            user_agent=self.config.user_agent,
            viewport={
                "width": self.config.viewport_width,
                "height": self.config.viewport_height,
            },
        )
        self._page = await self._context.new_page()
        self._page.set_default_timeout(self.config.timeouts.selector_ms)

    async def teardown(self) -> None:
        """Cleanup browser resources."""
        if self._page:
            await self._page.close()
        if self._context:
            await self._context.close()
        if self._browser:
            await self._browser.close()
        if self._playwright:
            await self._playwright.stop()
        self._page = None
        self._context = None
        self._browser = None
        self._playwright = None

    @property
    def page(self) -> Page:
        """Get the current page, raising if not initialized."""
        if self._page is None:
            raise RuntimeError("Scraper not initialized. Call setup() first.")
        return self._page

    @abstractmethod
    async def collect_city_index(self, max_cities: int | None = None) -> CityUrlIndex:
        """Collect detail-page URLs for every city of the configured region.

        Override in subclass to implement source-specific navigation.

        Returns:
            Mapping of city code to its collected URLs.
        """
        raise NotImplementedError

    @abstractmethod
    async def scrape_listing(self, url: str, context: ListingContext) -> PropertyRecord | None:
        """Extract data from a single detail page.

        Override in subclass to implement source-specific extraction.

        Returns:
            The extracted record, or None if the page could not be scraped.
        """
        raise NotImplementedError

    async def scrape_city_index(
        self,
        city_index: CityUrlIndex,
        max_listings: int | None = None,
    ) -> list[PropertyRecord]:
        """Visit every collected URL in order, pausing between fetches."""
        properties: list[PropertyRecord] = []
        visited = 0

        for city_code, city in city_index.items():
            logger.info(f"Extracting details for {city.city_name} ({city_code})")
            if not city.urls:
                logger.info("No URLs for this city")
                continue

            context = ListingContext(
                region=self.config.region,
                city_code=city_code,
                city_name=city.city_name,
            )
            for url in city.urls:
                if max_listings is not None and visited >= max_listings:
                    return properties
                visited += 1

                record = await self.scrape_listing(url, context)
                if record is not None:
                    properties.append(record)
                else:
                    logger.warning(f"No record extracted from {url}")
                # Be polite to the server
                await asyncio.sleep(self.config.request_delay_seconds)

        return properties

    async def run(
        self,
        max_cities: int | None = None,
        max_listings: int | None = None,
        on_city_index: Callable[[CityUrlIndex], None] | None = None,
    ) -> CrawlResult:
        """Orchestrate a full crawl.

        Args:
            max_cities: Optional limit on the number of cities to collect.
            max_listings: Optional limit on the number of detail pages to visit.
            on_city_index: Called with the city index once collection is done,
                before any detail page is visited.

        Returns:
            CrawlResult containing the index, records and any errors encountered.
        """
        self.errors = []
        await self.setup()
        try:
            city_index = await self.collect_city_index(max_cities=max_cities)
            if on_city_index is not None:
                on_city_index(city_index)

            properties = await self.scrape_city_index(city_index, max_listings=max_listings)
            return CrawlResult(
                city_index=city_index,
                properties=properties,
                errors=list(self.errors),
            )
        finally:
            await self.teardown()

    async def __aenter__(self):
        await self.setup()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.teardown()
