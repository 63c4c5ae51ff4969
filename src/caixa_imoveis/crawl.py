"""Full crawl: collect URLs, persist the index, extract details, persist records."""

import logging

from .config import Config
from .models.property import CityUrlIndex
from .output.files import write_city_index, write_properties
from .scrapers.base import CrawlResult
from .scrapers.caixa import CaixaScraper

logger = logging.getLogger(__name__)


async def run_crawl(
    config: Config,
    max_cities: int | None = None,
    max_listings: int | None = None,
    scraper: CaixaScraper | None = None,
) -> CrawlResult:
    """Run the scraper and write both output files.

    The city index is written as soon as collection finishes, so it survives
    a failure during the detail phase.

    Args:
        config: Run configuration.
        max_cities: Optional limit on cities collected.
        max_listings: Optional limit on detail pages visited.
        scraper: Scraper to use (a CaixaScraper for config by default).

    Returns:
        CrawlResult with the collected index, records and errors.
    """
    config.ensure_dirs()
    scraper = scraper or CaixaScraper(config)

    def save_index(city_index: CityUrlIndex) -> None:
        write_city_index(city_index, config.city_index_path)

    logger.info(f"Starting CAIXA scrape ({config.region})")
    result = await scraper.run(
        max_cities=max_cities,
        max_listings=max_listings,
        on_city_index=save_index,
    )

    write_properties(
        result.properties,
        config.properties_path,
        sheet_name=f"Imoveis_{config.region.upper()}",
    )
    logger.info(f"Scrape finished: {result!r}")
    return result
