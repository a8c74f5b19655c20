#!/usr/bin/env python3
"""
Main CLI entry point for shelf-scanner.
"""
import argparse
import json
import logging
import sys
from typing import Any, Dict, Optional

from rich.console import Console
from rich.table import Table

from .api.enrichment import EnrichmentClient, enrich_books
from .config import SUPPORTED_APIS, load_settings
from .core.errors import NoImagesError, ShelfScanError
from .core.gps import extract_gps
from .core.models import GpsReport, ScanReport
from .core.scan_engine import ShelfScanEngine
from .utils.log_utils import configure_logging, get_logger
from .utils.utils import load_folder

logger = get_logger(__name__)

EXIT_INTERNAL = 1
EXIT_NOT_FOUND = 2


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='List the books visible in photos of a bookshelf')
    parser.add_argument('--root',
                        help='Library root that folder names resolve under (default: $SHELF_LIBRARY_ROOT)')
    parser.add_argument('--json',
                        action='store_true',
                        help='Print the JSON payload instead of a table')
    parser.add_argument('--debug',
                        action='store_true',
                        help='Enable debug mode')
    sub = parser.add_subparsers(dest='command', required=True)

    scan = sub.add_parser('scan', help='Detect the books in a folder of shelf photos')
    scan.add_argument('folder', help='Folder name under the library root')
    scan.add_argument('--api',
                      choices=SUPPORTED_APIS,
                      help='API provider to use for detection (default: gemini)')
    scan.add_argument('--model', help='Model identifier for the chosen provider')
    scan.add_argument('--max-width',
                      type=int,
                      help='Width cap in pixels for images sent to the model (default: 1024)')
    scan.add_argument('--quality',
                      type=int,
                      help='JPEG quality for images sent to the model (default: 80)')
    scan.add_argument('--workers',
                      type=int,
                      help='Images normalized concurrently (default: 4)')
    scan.add_argument('--enrich',
                      action='store_true',
                      help='Look up ISBN, publisher and edition for each detected title')

    gps = sub.add_parser('gps', help='Report GPS positions stored in the photos')
    gps.add_argument('folder', help='Folder name under the library root')
    return parser.parse_args(argv)


def print_books(console: Console, report: ScanReport, enriched: Optional[Dict[str, Dict[str, Any]]] = None):
    table = Table(title=f"{report.folder}: {len(report.result)} book(s) from {report.normalized_count}/{report.image_count} image(s)")
    table.add_column("Title", style="bold")
    table.add_column("Author")
    table.add_column("Sources", style="dim")
    if enriched is not None:
        table.add_column("Details")
    for book in report.result:
        row = [book.title, book.author, ", ".join(book.sources)]
        if enriched is not None:
            details = enriched.get(book.title, {})
            if details.get("error"):
                row.append("[red]Error fetching details[/red]")
            else:
                row.append(" | ".join(f"{k}: {v}" for k, v in details.items() if v))
        table.add_row(*row)
    console.print(table)
    for skipped in report.skipped:
        console.print(f"[yellow]Skipped {skipped.filename}: {skipped.reason}[/yellow]")


def print_gps(console: Console, report: GpsReport):
    table = Table(title=f"{report.folder}: {len(report.records)}/{report.image_count} image(s) with GPS")
    for column in ("File", "Latitude", "Longitude", "Altitude", "Date", "Time"):
        table.add_column(column)
    for r in report.records:
        table.add_row(r.filename, r.latitude, r.longitude, r.altitude or "-", r.date_stamp or "-", r.time_stamp or "-")
    console.print(table)


def run_scan(args, settings, console: Console) -> int:
    # credentials are checked before the model call is paid for
    enricher = EnrichmentClient(model=settings.enrich_model) if args.enrich else None

    engine = ShelfScanEngine(settings)
    report = engine.scan(args.folder)

    enriched = None
    if enricher is not None:
        enriched = enrich_books(report.result, enricher)

    if args.json:
        payload = report.to_dict()
        if enriched is not None:
            payload["details"] = enriched
        print(json.dumps(payload, indent=2, ensure_ascii=False))
    else:
        print_books(console, report, enriched)
    return 0


def run_gps(args, settings, console: Console) -> int:
    sources = load_folder(settings.library_root, args.folder)
    if not sources:
        raise NoImagesError()
    report = extract_gps(sources, folder=args.folder)
    if args.json:
        print(json.dumps(report.to_dict(), indent=2, ensure_ascii=False))
    else:
        print_gps(console, report)
    return 0


def main(argv=None):
    args = parse_args(argv)
    configure_logging(logging.DEBUG if args.debug else logging.INFO)
    console = Console()

    try:
        settings = load_settings().with_overrides(
            library_root=args.root,
            api=getattr(args, 'api', None),
            model=getattr(args, 'model', None),
            image_max_width=getattr(args, 'max_width', None),
            image_quality=getattr(args, 'quality', None),
            max_workers=getattr(args, 'workers', None),
        )
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
        sys.exit(EXIT_INTERNAL)

    try:
        if args.command == 'scan':
            code = run_scan(args, settings, console)
        else:
            code = run_gps(args, settings, console)
    except ShelfScanError as e:
        logger.error("%s", e)
        print(json.dumps(e.to_dict(), indent=2, ensure_ascii=False), file=sys.stderr)
        code = EXIT_INTERNAL if e.category == "internal" else EXIT_NOT_FOUND
    except ValueError as e:
        # missing enrichment credentials
        logger.error("%s", e)
        code = EXIT_INTERNAL
    sys.exit(code)


if __name__ == "__main__":
    main()
