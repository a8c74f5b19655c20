"""
Data model of a shelf scan.

SourceImage and NormalizedImage are plain dataclasses owned by one scan.
BookDetection is a pydantic model because it is parsed out of untrusted model
output and needs validation with tolerant defaults.
"""

import base64
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator


@dataclass(frozen=True)
class SourceImage:
    """One photo as read from the folder. `index` is its enumeration position."""
    filename: str
    data: bytes = field(repr=False)
    format: str
    index: int = 0

    @classmethod
    def from_bytes(cls, filename: str, data: bytes, index: int = 0) -> "SourceImage":
        ext = os.path.splitext(filename)[1].lower().lstrip(".")
        return cls(filename=filename, data=data, format=ext, index=index)

    @property
    def is_heic(self) -> bool:
        return self.format == "heic"


@dataclass(frozen=True)
class NormalizedImage:
    """A SourceImage re-encoded for transport: width-capped, fixed quality."""
    filename: str
    data: bytes = field(repr=False)
    width: int
    height: int
    index: int = 0
    mime_type: str = "image/jpeg"

    def to_b64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")


@dataclass(frozen=True)
class SkippedImage:
    filename: str
    reason: str


@dataclass
class NormalizationReport:
    """Partition of a scan's sources into normalized images and skipped files."""
    succeeded: List[NormalizedImage] = field(default_factory=list)
    skipped: List[SkippedImage] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.succeeded) + len(self.skipped)


class BookDetection(BaseModel):
    """One book reported by the model, with the filenames it was seen in."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    title: str
    author: str = ""
    sources: List[str] = []

    @field_validator("title", mode="before")
    @classmethod
    def _title_as_text(cls, value: Any) -> Any:
        # a missing or null title is still rejected
        if value is None or isinstance(value, str):
            return value
        return str(value)

    @field_validator("author", mode="before")
    @classmethod
    def _author_default(cls, value: Any) -> Any:
        if value is None:
            return ""
        if isinstance(value, (list, tuple)):
            return ", ".join(str(v) for v in value if v is not None)
        return value if isinstance(value, str) else str(value)

    @field_validator("sources", mode="before")
    @classmethod
    def _sources_default(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, (list, tuple)):
            return [v if isinstance(v, str) else str(v) for v in value if v is not None]
        return [value if isinstance(value, str) else str(value)]

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()


@dataclass(frozen=True)
class ScanResult:
    """Ordered, immutable list of detections produced once per scan."""
    books: Tuple[BookDetection, ...] = ()

    def __len__(self) -> int:
        return len(self.books)

    def __iter__(self) -> Iterator[BookDetection]:
        return iter(self.books)

    def __getitem__(self, index: int) -> BookDetection:
        return self.books[index]

    def titles(self) -> List[str]:
        return [book.title for book in self.books]

    def to_list(self) -> List[Dict[str, Any]]:
        return [book.to_dict() for book in self.books]


@dataclass
class ScanReport:
    """
    Outcome of a whole scan.

    image_count counts every recognized file discovered; normalized_count
    counts only the images that made it into the batch.
    """
    folder: Optional[str]
    image_count: int
    normalized_count: int
    skipped: List[SkippedImage]
    result: ScanResult

    def to_dict(self) -> Dict[str, Any]:
        return {
            "folder": self.folder,
            "imageCount": self.image_count,
            "normalizedCount": self.normalized_count,
            "skipped": [{"filename": s.filename, "reason": s.reason} for s in self.skipped],
            "books": self.result.to_list(),
        }


@dataclass(frozen=True)
class GpsRecord:
    """Human-readable GPS tags of one image."""
    filename: str
    latitude: str
    longitude: str
    altitude: Optional[str] = None
    date_stamp: Optional[str] = None
    time_stamp: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fileName": self.filename,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "altitude": self.altitude,
            "dateStamp": self.date_stamp,
            "timeStamp": self.time_stamp,
        }


@dataclass
class GpsReport:
    folder: Optional[str]
    image_count: int
    records: List[GpsRecord] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "folder": self.folder,
            "imageCount": self.image_count,
            "gpsData": [r.to_dict() for r in self.records],
        }
