"""CAIXA foreclosure property scraper (venda-imoveis.caixa.gov.br).

Search flow:
- Entry page: /sistema/busca-imovel.asp?sltTipoBusca=imoveis
- State dropdown `#cmb_estado`; choosing a state fires a change handler that
  loads `#cmb_cidade` over AJAX (a sentinel option "0" is always present)
- Wizard buttons `#btn_next0` / `#btn_next1` lead to the result list
- Results: `#listaimoveispaginacao .group-block-item`, page count in the
  hidden `#hdnQtdPag`, other pages loaded by `carregaListaImoveis(n)`
- Each item opens its detail page through `detalhe_imovel(<id>)`
"""

import asyncio
import logging

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeout

from .base import BaseScraper, ScrapeError
from ..config import Config
from ..models.property import CityEntry, CityUrlIndex, CityUrls, PropertyRecord
from ..parsing.detail import DETAIL_CONTAINER_SELECTOR, ListingContext, parse_detail_page
from ..parsing.listing import (
    LISTING_ITEM_SELECTOR,
    build_detail_url,
    parse_listing_ids,
    parse_page_count,
)

logger = logging.getLogger(__name__)


SEARCH_URL = "https://venda-imoveis.caixa.gov.br/sistema/busca-imovel.asp?sltTipoBusca=imoveis"

# Consent/cookie dialogs; any of them may be absent
OVERLAY_SELECTORS = (
    "#onetrust-accept-btn-handler",
    ".cookie-accept",
    ".close, .fechar, .btn-close",
)

STATE_SELECT = "#cmb_estado"
CITY_SELECT = "#cmb_cidade"
NEXT_BUTTONS = ("#btn_next0", "#btn_next1")
PAGE_COUNT_INPUT = "#hdnQtdPag"

# JS run inside the page
_DISPATCH_CHANGE_JS = """([selector, value]) => {
    const select = document.querySelector(selector);
    if (select) {
        select.value = value;
        select.dispatchEvent(new Event("change", { bubbles: true }));
    }
}"""

_CITY_OPTIONS_READY_JS = """(selector) => {
    const select = document.querySelector(selector);
    if (!select) return false;
    return Array.from(select.options || []).some(
        (o) => o.value && o.value !== "0" && (o.textContent || "").trim()
    );
}"""

_READ_CITY_OPTIONS_JS = """(selector) => {
    const select = document.querySelector(selector);
    if (!select) return [];
    return Array.from(select.querySelectorAll("option"))
        .map((o) => ({ value: o.value, text: (o.textContent || "").trim() }))
        .filter((o) => o.value && o.value !== "0");
}"""

_AFTER_FIRST_STEP_JS = """() =>
    document.querySelector("#btn_next1") ||
    document.querySelector("#listaimoveispaginacao") ||
    document.querySelector("#divImoveisLista")
"""

_RESULTS_OR_EMPTY_JS = """() =>
    document.querySelector("#listaimoveispaginacao .group-block-item") ||
    document.body.innerText.toUpperCase().includes("NENHUM IMÓVEL ENCONTRADO")
"""

_HAS_LISTINGS_JS = """(selector) => document.querySelectorAll(selector).length > 0"""

_PAGE_COUNT_JS = """(selector) => {
    const input = document.querySelector(selector);
    return input ? input.value : null;
}"""

_LOAD_PAGE_JS = """(page) => {
    if (typeof window.carregaListaImoveis === "function") {
        window.carregaListaImoveis(page);
    }
}"""


class CityOptionsTimeout(RuntimeError):
    """The city dropdown never received an eligible option."""

    def __init__(self, region: str, timeout_ms: int):
        super().__init__(f"No cities loaded for region {region} within {timeout_ms / 1000:.0f}s")
        self.region = region
        self.timeout_ms = timeout_ms


class CaixaScraper(BaseScraper):
    """Scraper for the CAIXA property sale site.

    Walks state -> cities -> result pages -> detail pages in a single
    browser session.
    """

    def __init__(self, config: Config | None = None):
        super().__init__(config or Config())

    # =========================================================================
    # Navigation
    # =========================================================================

    async def open_search(self) -> None:
        """Load the search entry page and dismiss overlays."""
        await self.page.goto(
            SEARCH_URL,
            wait_until="networkidle",
            timeout=self.config.timeouts.page_load_ms,
        )
        await self.close_overlays()

    async def close_overlays(self) -> None:
        """Click away cookie/consent dialogs if any are present."""
        for selector in OVERLAY_SELECTORS:
            try:
                element = await self.page.query_selector(selector)
                if element is None:
                    continue
                await element.click()
            except PlaywrightError as e:
                logger.debug(f"Overlay {selector} not dismissed: {e}")
                continue
            await asyncio.sleep(self.config.delays.after_overlay_click)

    async def select_state(self, region: str | None = None) -> None:
        """Choose the state and block until its cities are loaded.

        Raises:
            CityOptionsTimeout: If no eligible city option appears in time.
        """
        region = region or self.config.region
        timeout_ms = self.config.timeouts.selector_ms

        await self.page.wait_for_selector(STATE_SELECT, timeout=timeout_ms)
        await self.page.select_option(STATE_SELECT, region)
        # The city list is filled by the page's own change handler
        await self.page.evaluate(_DISPATCH_CHANGE_JS, [STATE_SELECT, region])

        try:
            await self.page.wait_for_function(
                _CITY_OPTIONS_READY_JS, arg=CITY_SELECT, timeout=timeout_ms
            )
        except PlaywrightTimeout as e:
            raise CityOptionsTimeout(region, timeout_ms) from e

    async def get_cities(self) -> list[CityEntry]:
        """Read the city options currently in the dropdown."""
        options = await self.page.evaluate(_READ_CITY_OPTIONS_JS, CITY_SELECT)
        return [CityEntry(code=o["value"], name=o["text"]) for o in options]

    async def list_cities(self) -> list[CityEntry]:
        """Open the search, choose the region and return its cities."""
        await self.open_search()
        await self.select_state()
        await asyncio.sleep(self.config.delays.after_state_select)
        cities = await self.get_cities()
        logger.info(f"Found {len(cities)} cities in {self.config.region}")
        return cities

    async def _wait_best_effort(self, expression: str, description: str) -> None:
        try:
            await self.page.wait_for_function(
                expression, timeout=self.config.timeouts.wizard_ms
            )
        except PlaywrightTimeout:
            logger.warning(f"Timeout waiting for {description}; continuing")

    async def select_city(self, city: CityEntry) -> None:
        """Choose a city and click through the search wizard.

        Wizard timeouts are logged and ignored; has_listings() re-checks the
        outcome.
        """
        await self.page.evaluate(_DISPATCH_CHANGE_JS, [CITY_SELECT, city.code])
        await asyncio.sleep(self.config.delays.after_city_select)

        first, second = NEXT_BUTTONS
        button = await self.page.query_selector(first)
        if button is not None:
            await button.click()
            await self._wait_best_effort(_AFTER_FIRST_STEP_JS, f"step after {first}")

        button = await self.page.query_selector(second)
        if button is not None:
            await button.click()
        await self._wait_best_effort(_RESULTS_OR_EMPTY_JS, "result list or empty message")

    async def has_listings(self) -> bool:
        return bool(await self.page.evaluate(_HAS_LISTINGS_JS, LISTING_ITEM_SELECTOR))

    async def open_city(self, city: CityEntry) -> bool:
        """Re-run the search for one city.

        Returns:
            True if the result list has at least one item.
        """
        await self.open_search()
        await self.select_state()
        await asyncio.sleep(self.config.delays.after_state_reselect)
        await self.select_city(city)
        return await self.has_listings()

    # =========================================================================
    # Listing collection
    # =========================================================================

    async def get_page_count(self) -> int:
        raw = await self.page.evaluate(_PAGE_COUNT_JS, PAGE_COUNT_INPUT)
        return parse_page_count(raw)

    async def _load_result_page(self, page_number: int) -> None:
        await self.page.evaluate(_LOAD_PAGE_JS, page_number)
        try:
            await self.page.wait_for_function(
                _HAS_LISTINGS_JS,
                arg=LISTING_ITEM_SELECTOR,
                timeout=self.config.timeouts.pagination_ms,
            )
        except PlaywrightTimeout:
            logger.warning(f"Timeout loading result page {page_number}; waiting a fixed delay")
            await asyncio.sleep(self.config.delays.pagination_fallback)

    async def collect_listing_urls(self) -> list[str]:
        """Collect detail URLs from every result page of the loaded city.

        Returns:
            De-duplicated detail URLs (order not significant).
        """
        total_pages = await self.get_page_count()
        listing_ids: set[str] = set()

        for page_number in range(1, total_pages + 1):
            if page_number > 1:
                logger.info(f"Loading result page {page_number}/{total_pages}")
                await self._load_result_page(page_number)

            html = await self.page.content()
            listing_ids.update(parse_listing_ids(html))

        return [build_detail_url(listing_id) for listing_id in listing_ids]

    async def collect_city_index(self, max_cities: int | None = None) -> CityUrlIndex:
        """Collect detail URLs for every city of the configured region.

        A failing city is logged, recorded as an error and kept with an
        empty URL list; failing to list the cities at all propagates.
        """
        cities = await self.list_cities()
        if max_cities is not None:
            cities = cities[:max_cities]

        city_index: CityUrlIndex = {}
        for city in cities:
            logger.info(f"City: {city.name} ({city.code})")
            try:
                if not await self.open_city(city):
                    logger.info(f"No properties found for {city.name}")
                    city_index[city.code] = CityUrls(city_name=city.name)
                    continue

                urls = await self.collect_listing_urls()
                logger.info(f"{len(urls)} properties found in {city.name}")
                city_index[city.code] = CityUrls(city_name=city.name, urls=urls)
            except Exception as e:
                logger.error(f"Failed to process city {city.name}: {e}")
                self.errors.append(ScrapeError.from_exception(f"city:{city.code}", e))
                city_index[city.code] = CityUrls(city_name=city.name)

        return city_index

    # =========================================================================
    # Detail pages
    # =========================================================================

    async def scrape_listing(self, url: str, context: ListingContext) -> PropertyRecord | None:
        """Load one detail page and extract its record.

        Returns:
            The record, or None if the page failed to load or parse.
        """
        logger.info(f"Details: {url}")
        try:
            await self.page.goto(
                url,
                wait_until="networkidle",
                timeout=self.config.timeouts.page_load_ms,
            )
            await self.page.wait_for_selector(
                DETAIL_CONTAINER_SELECTOR,
                timeout=self.config.timeouts.selector_ms,
            )
            html = await self.page.content()
            return parse_detail_page(html, self.page.url, context)
        except Exception as e:
            logger.error(f"Failed to extract {url}: {e}")
            self.errors.append(ScrapeError.from_exception(url, e))
            return None
