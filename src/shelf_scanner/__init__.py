"""
Shelf Scanner

Turn photographs of a bookshelf into a list of the books on it using a
vision language model.
"""

__version__ = "0.1.0"

# Phone photos are occasionally cut short on sync; decode what is there
from PIL import ImageFile
ImageFile.LOAD_TRUNCATED_IMAGES = True

from .core import (
    ShelfScanEngine,
    ShelfScanError,
    BookDetection,
    ScanResult,
    ScanReport,
    extract_gps,
)
from .api import (
    APIClient,
    GeminiClient,
    OpenAIClient,
    ClaudeClient,
    get_client,
    EnrichmentClient,
    enrich_books,
)
from .config import Settings, load_settings


def main():
    """Entry point for the shelf-scanner command."""
    from .cli import main as cli_main
    cli_main()


__all__ = [
    "ShelfScanEngine",
    "ShelfScanError",
    "BookDetection",
    "ScanResult",
    "ScanReport",
    "extract_gps",
    "APIClient",
    "GeminiClient",
    "OpenAIClient",
    "ClaudeClient",
    "get_client",
    "EnrichmentClient",
    "enrich_books",
    "Settings",
    "load_settings",
]
