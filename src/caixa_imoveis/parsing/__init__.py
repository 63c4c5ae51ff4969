"""HTML parsing for search result and detail pages."""

from .detail import ListingContext, LabelRule, parse_detail_page, split_address
from .listing import build_detail_url, parse_listing_ids, parse_page_count
from .text import compute_discount, normalize_text, parse_brl, sanitize_cell

__all__ = [
    "ListingContext",
    "LabelRule",
    "parse_detail_page",
    "split_address",
    "build_detail_url",
    "parse_listing_ids",
    "parse_page_count",
    "compute_discount",
    "normalize_text",
    "parse_brl",
    "sanitize_cell",
]
