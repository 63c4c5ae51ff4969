"""Tests for result page parsing."""

import pytest

from caixa_imoveis.parsing.listing import (
    build_detail_url,
    parse_listing_ids,
    parse_page_count,
)

from conftest import listing_page_html


class TestParseListingIds:
    """Tests for extracting listing ids from result items."""

    def test_ids_in_page_order(self):
        html = listing_page_html("111", "222", "333")
        assert parse_listing_ids(html) == ["111", "222", "333"]

    def test_items_without_id_are_skipped(self):
        html = listing_page_html("111", broken=2)
        assert parse_listing_ids(html) == ["111"]

    def test_items_outside_result_list_are_ignored(self):
        html = (
            '<div><a onclick="detalhe_imovel(999)">x</a></div>'
            + listing_page_html("111")
        )
        assert parse_listing_ids(html) == ["111"]

    def test_empty_page(self):
        assert parse_listing_ids("<html></html>") == []


class TestPageCount:
    """Tests for the page-count hint."""

    @pytest.mark.parametrize("raw, expected", [
        ("3", 3),
        (" 12 ", 12),
        (None, 1),
        ("", 1),
        ("abc", 1),
        ("0", 1),
        ("-2", 1),
    ])
    def test_parse(self, raw, expected):
        assert parse_page_count(raw) == expected


def test_build_detail_url():
    assert build_detail_url("1444419970935") == (
        "https://venda-imoveis.caixa.gov.br/sistema/detalhe-imovel.asp?hdnimovel=1444419970935"
    )
