"""CAIXA foreclosure property scraper."""

__version__ = "0.1.0"
