import asyncio
import time
from typing import Callable, Dict, List, Optional, Union

from .errors import NormalizationError
from .image_encoder import DEFAULT_MAX_WIDTH, DEFAULT_QUALITY, normalize_image
from .models import NormalizationReport, NormalizedImage, SkippedImage, SourceImage
from ..utils.log_utils import get_logger

logger = get_logger(__name__)

# on_progress(filename, done_count, total_count, succeeded)
ProgressCallback = Callable[[str, int, int, bool], None]


class AsyncWorkerPool:
    """
    Async worker pool that normalizes the images of one scan concurrently.

    Decoding and resizing are CPU-bound, so each file runs in the default thread
    executor; a semaphore bounds how many are in flight. Results are stored by
    enumeration index and the report is rebuilt in that order, so the order of
    completion never leaks into the batch.
    """

    def __init__(
        self,
        sources: List[SourceImage],
        max_concurrent: int = 4,
        max_width: int = DEFAULT_MAX_WIDTH,
        quality: int = DEFAULT_QUALITY,
        on_progress: Optional[ProgressCallback] = None,
    ) -> None:
        self.sources = list(sources)
        self.max_concurrent = max(1, max_concurrent)
        self.max_width = max_width
        self.quality = quality
        self.on_progress = on_progress

        self.results: Dict[int, Union[NormalizedImage, SkippedImage]] = {}
        self.completed_count = 0
        self.total_count = len(self.sources)

    async def normalize_all(self) -> NormalizationReport:
        """
        Normalize every source image, isolating per-file failures.

        Returns:
            NormalizationReport with succeeded images and skipped files, both in
            enumeration order.
        """
        logger.info(
            "Normalizing %d image(s) with max %d concurrent workers",
            self.total_count, self.max_concurrent,
        )
        semaphore = asyncio.Semaphore(self.max_concurrent)
        await asyncio.gather(
            *(self._normalize_single(position, source, semaphore)
              for position, source in enumerate(self.sources))
        )

        report = NormalizationReport()
        for position in range(self.total_count):
            outcome = self.results[position]
            if isinstance(outcome, NormalizedImage):
                report.succeeded.append(outcome)
            else:
                report.skipped.append(outcome)
        logger.info(
            "Normalized %d/%d image(s), skipped %d",
            len(report.succeeded), self.total_count, len(report.skipped),
        )
        return report

    async def _normalize_single(
        self, position: int, source: SourceImage, semaphore: asyncio.Semaphore
    ) -> None:
        start_time = time.time()
        async with semaphore:
            loop = asyncio.get_running_loop()
            try:
                outcome = await loop.run_in_executor(
                    None, normalize_image, source, self.max_width, self.quality
                )
            except NormalizationError as err:
                logger.warning("Skipping '%s': %s", err.filename, err.reason)
                outcome = SkippedImage(filename=source.filename, reason=err.reason)

        self.results[position] = outcome
        self.completed_count += 1
        succeeded = isinstance(outcome, NormalizedImage)
        if succeeded:
            logger.debug("Completed %s in %.2fs", source.filename, time.time() - start_time)
        if self.on_progress:
            self.on_progress(source.filename, self.completed_count, self.total_count, succeeded)
