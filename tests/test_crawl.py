"""Tests for the crawl pipeline and output files."""

import asyncio
import json

import pytest
from openpyxl import load_workbook

from caixa_imoveis.crawl import run_crawl
from caixa_imoveis.models.property import CityUrls, PropertyRecord
from caixa_imoveis.scrapers.base import ScrapeError
from caixa_imoveis.scrapers.caixa import CaixaScraper


class StubScraper(CaixaScraper):
    """CaixaScraper with the browser and site replaced by canned data."""

    def __init__(self, config, fail_details=False, broken_urls=()):
        super().__init__(config)
        self.fail_details = fail_details
        self.broken_urls = set(broken_urls)
        self.torn_down = False

    async def setup(self):
        self.torn_down = False

    async def teardown(self):
        self.torn_down = True

    async def collect_city_index(self, max_cities=None):
        return {
            "7171": CityUrls(city_name="PORTO VELHO", urls=["https://x/1", "https://x/2"]),
            "7001": CityUrls(city_name="ARIQUEMES"),
        }

    async def scrape_listing(self, url, context):
        if self.fail_details:
            raise RuntimeError("browser crashed")
        if url in self.broken_urls:
            self.errors.append(ScrapeError.from_exception(url, TimeoutError("detail page timed out")))
            return None
        return PropertyRecord(codigo_imovel=url.rsplit("/", 1)[1], cidade=context.city_name)


class TestRunCrawl:
    """Tests for run_crawl."""

    def test_writes_index_and_spreadsheet(self, fast_config):
        scraper = StubScraper(fast_config)
        result = asyncio.run(run_crawl(fast_config, scraper=scraper))

        assert result.success_count == 2
        assert scraper.torn_down

        index = json.loads(fast_config.city_index_path.read_text(encoding="utf-8"))
        assert index["7171"]["urls"] == ["https://x/1", "https://x/2"]
        assert index["7001"] == {"cidade": "ARIQUEMES", "urls": []}

        workbook = load_workbook(fast_config.properties_path)
        assert workbook.sheetnames == ["Imoveis_RO"]
        assert workbook["Imoveis_RO"].max_row == 3

    def test_index_survives_detail_failure(self, fast_config):
        scraper = StubScraper(fast_config, fail_details=True)

        with pytest.raises(RuntimeError):
            asyncio.run(run_crawl(fast_config, scraper=scraper))

        assert scraper.torn_down
        assert fast_config.city_index_path.exists()
        assert not fast_config.properties_path.exists()


class TestScraperRun:
    """Tests for BaseScraper.run."""

    def test_errors_do_not_leak_between_runs(self, fast_config):
        scraper = StubScraper(fast_config, broken_urls={"https://x/2"})

        first = asyncio.run(scraper.run())
        second = asyncio.run(scraper.run())

        assert first.error_count == 1
        assert second.error_count == 1
        assert [err.url for err in second.errors] == ["https://x/2"]
        assert second.success_count == 1
