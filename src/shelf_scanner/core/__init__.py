"""
Core functionality for normalizing shelf photos and reducing model output.
"""

from .errors import (
    ShelfScanError,
    InvalidFolderError,
    FolderNotFoundError,
    NoImagesError,
    InferenceError,
    ResponseParseError,
    NormalizationError,
)
from .models import (
    SourceImage,
    NormalizedImage,
    SkippedImage,
    NormalizationReport,
    BookDetection,
    ScanResult,
    ScanReport,
    GpsRecord,
    GpsReport,
)
from .image_encoder import normalize_image
from .batch import BatchPart, BatchRequest, assemble_batch
from .reducer import reduce_response, strip_code_fences
from .workers import AsyncWorkerPool
from .scan_engine import ShelfScanEngine
from .gps import extract_gps

__all__ = [
    "ShelfScanError",
    "InvalidFolderError",
    "FolderNotFoundError",
    "NoImagesError",
    "InferenceError",
    "ResponseParseError",
    "NormalizationError",
    "SourceImage",
    "NormalizedImage",
    "SkippedImage",
    "NormalizationReport",
    "BookDetection",
    "ScanResult",
    "ScanReport",
    "GpsRecord",
    "GpsReport",
    "normalize_image",
    "BatchPart",
    "BatchRequest",
    "assemble_batch",
    "reduce_response",
    "strip_code_fences",
    "AsyncWorkerPool",
    "ShelfScanEngine",
    "extract_gps",
]
