"""Command-line entry points: caixa-scrape and caixa-sync."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from .config import Config, ConfigError
from .crawl import run_crawl
from .scrapers.base import CrawlResult
from .sync import SyncError, sync_to_wordpress

logger = logging.getLogger(__name__)

console = Console()

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format=LOG_FORMAT)


def show_summary(result: CrawlResult, config: Config) -> None:
    """Print per-city counts and any errors."""
    table = Table(title=f"Properties by city ({config.region})")
    table.add_column("Code", style="cyan")
    table.add_column("City")
    table.add_column("URLs", justify="right")

    for code, city in result.city_index.items():
        table.add_row(code, city.city_name, str(len(city.urls)))

    console.print(table)
    console.print(f"[green]Extracted:[/green] {result.success_count} of {result.url_count} properties")
    console.print(f"  City index:  {config.city_index_path}")
    console.print(f"  Spreadsheet: {config.properties_path}")

    if result.errors:
        console.print(f"\n[bold red]Errors ({result.error_count}):[/bold red]")
        for err in result.errors:
            console.print(f"  [red]✗[/red] {err.url}")
            console.print(f"    {err.error_type}: {err.error_message}")


def scrape_main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Scrape CAIXA foreclosure listings")
    parser.add_argument(
        "--region",
        default=None,
        help="State (UF) to crawl (default: CAIXA_REGION or RO)",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Directory for the JSON and XLSX files (default: current directory)",
    )
    parser.add_argument(
        "--max-cities",
        type=int,
        default=None,
        help="Maximum number of cities to collect (default: all)",
    )
    parser.add_argument(
        "--max-listings",
        type=int,
        default=None,
        help="Maximum number of detail pages to visit (default: all)",
    )
    parser.add_argument(
        "--headed",
        action="store_true",
        help="Show the browser window",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show debug logging",
    )
    args = parser.parse_args(argv)

    load_dotenv(Path.cwd() / ".env")
    _setup_logging(args.verbose)

    config = Config.from_env().with_overrides(
        region=args.region,
        output_dir=args.output_dir,
        headless=False if args.headed else None,
    )

    console.print(f"\n[bold blue]Starting CAIXA scrape[/bold blue]")
    console.print(f"  Region: {config.region}")
    console.print(f"  Headless: {config.headless}")
    console.print(f"  Max cities: {args.max_cities or 'all'}")
    console.print(f"  Max listings: {args.max_listings or 'all'}")
    console.print()

    try:
        result = asyncio.run(run_crawl(
            config,
            max_cities=args.max_cities,
            max_listings=args.max_listings,
        ))
    except Exception as e:
        logger.error(f"Scraper failed: {e}", exc_info=True)
        return 1

    show_summary(result, config)
    return 0


def sync_main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Send the city index to the WordPress import endpoint")
    parser.add_argument(
        "--dir",
        type=Path,
        default=None,
        help="Directory containing urls_*_por_cidade.json (default: current directory)",
    )
    args = parser.parse_args(argv)

    load_dotenv(Path.cwd() / ".env")
    _setup_logging()

    config = Config.from_env()
    try:
        result = sync_to_wordpress(config, directory=args.dir)
    except ConfigError as e:
        logger.error(str(e))
        return 1
    except SyncError as e:
        logger.error(f"WordPress import error: {e}")
        return 1

    console.print(f"[green]Import OK[/green] (HTTP {result.status_code}): {result.body}")
    return 0


def main_scrape() -> None:
    sys.exit(scrape_main())


def main_sync() -> None:
    sys.exit(sync_main())
