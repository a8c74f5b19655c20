#!/usr/bin/env python3
"""
scan_engine.py: Core scan pipeline for shelf-scanner.

Provides ShelfScanEngine, which turns one folder of bookshelf photos into a
ScanResult in a single pass:

    discover -> normalize (concurrently, order restored) -> assemble batch
             -> one model call -> reduce response

Optional callbacks can be attached to monitor normalization progress and the
end of a scan. A scan holds no state shared with other scans.
"""

import asyncio
from typing import Callable, List, Optional

from .batch import assemble_batch
from .errors import InferenceError, NoImagesError
from .models import NormalizationReport, ScanReport, SourceImage
from .reducer import reduce_response
from .workers import AsyncWorkerPool
from ..api.base import APIClient
from ..api.clients import get_client
from ..config import Settings, load_settings
from ..utils.log_utils import get_logger
from ..utils.utils import load_folder

logger = get_logger(__name__)


class ShelfScanEngine:
    """
    Core engine for scanning a folder of shelf photos into a list of books.
    """

    def __init__(self, settings: Optional[Settings] = None, client: Optional[APIClient] = None):
        self.settings = settings or load_settings()
        self._client = client
        # on_normalize_progress(filename, done_count, total_count, succeeded)
        self.on_normalize_progress: Optional[Callable[[str, int, int, bool], None]] = None
        self.on_scan_complete: Optional[Callable[[ScanReport], None]] = None

    @property
    def client(self) -> APIClient:
        if self._client is None:
            try:
                self._client = get_client(self.settings.api, model=self.settings.model)
            except ValueError as err:
                raise InferenceError(str(err)) from err
        return self._client

    def discover(self, folder: str) -> List[SourceImage]:
        """Resolve `folder` under the library root and read its images in enumeration order."""
        return load_folder(self.settings.library_root, folder)

    async def normalize_async(self, sources: List[SourceImage]) -> NormalizationReport:
        pool = AsyncWorkerPool(
            sources,
            max_concurrent=self.settings.max_workers,
            max_width=self.settings.image_max_width,
            quality=self.settings.image_quality,
            on_progress=self.on_normalize_progress,
        )
        return await pool.normalize_all()

    async def scan_sources_async(
        self, sources: List[SourceImage], folder: Optional[str] = None
    ) -> ScanReport:
        """
        Run the pipeline over already-loaded sources.

        Raises:
            NoImagesError: no sources, or none survived normalization.
            InferenceError: the model call failed.
            ResponseParseError: the model answer is not a usable book list.
        """
        if not sources:
            raise NoImagesError()

        normalized = await self.normalize_async(sources)
        if not normalized.succeeded:
            raise NoImagesError(len(sources))

        batch = assemble_batch(normalized.succeeded)
        client = self.client
        loop = asyncio.get_running_loop()
        raw = await loop.run_in_executor(None, client.generate, batch)
        result = reduce_response(raw)

        report = ScanReport(
            folder=folder,
            image_count=len(sources),
            normalized_count=len(normalized.succeeded),
            skipped=normalized.skipped,
            result=result,
        )
        logger.info(
            "Scan of %s done: %d book(s) from %d/%d image(s)",
            folder or "sources", len(result), report.normalized_count, report.image_count,
        )
        if self.on_scan_complete:
            self.on_scan_complete(report)
        return report

    async def scan_async(self, folder: str) -> ScanReport:
        sources = self.discover(folder)
        return await self.scan_sources_async(sources, folder=folder)

    def scan_sources(self, sources: List[SourceImage], folder: Optional[str] = None) -> ScanReport:
        return asyncio.run(self.scan_sources_async(sources, folder=folder))

    def scan(self, folder: str) -> ScanReport:
        """Scan one folder end to end. Blocks until the model has answered."""
        return asyncio.run(self.scan_async(folder))
