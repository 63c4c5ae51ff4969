"""Listing (search result) page parsing."""

import re

from bs4 import BeautifulSoup

DETAIL_URL_TEMPLATE = "https://venda-imoveis.caixa.gov.br/sistema/detalhe-imovel.asp?hdnimovel={listing_id}"

LISTING_ITEM_SELECTOR = "#listaimoveispaginacao .group-block-item"
DETAIL_LINK_SELECTOR = "a[onclick*='detalhe_imovel']"

_DETAIL_HANDLER_RE = re.compile(r"detalhe_imovel\((\d+)\)")


def build_detail_url(listing_id: str) -> str:
    """Canonical detail-page URL for a numeric listing id."""
    return DETAIL_URL_TEMPLATE.format(listing_id=listing_id)


def parse_page_count(raw: str | None) -> int:
    """Parse the page-count hint, falling back to 1 if absent or invalid."""
    if raw is None:
        return 1
    try:
        count = int(str(raw).strip())
    except ValueError:
        return 1
    return count if count > 0 else 1


def parse_listing_ids(html: str) -> list[str]:
    """Extract listing ids from the result items on a listing page.

    The id lives in each item's inline click handler, e.g.
    ``onclick="detalhe_imovel(1444419970935)"``. Items without that pattern
    are skipped.

    Args:
        html: Rendered page HTML.

    Returns:
        Listing ids in page order (may contain repeats).
    """
    soup = BeautifulSoup(html, "html.parser")
    ids = []
    for item in soup.select(LISTING_ITEM_SELECTOR):
        link = item.select_one(DETAIL_LINK_SELECTOR)
        if link is None:
            continue
        match = _DETAIL_HANDLER_RE.search(link.get("onclick") or "")
        if match:
            ids.append(match.group(1))
    return ids
