"""
Error taxonomy for a shelf scan.

Every error that can end a scan derives from ShelfScanError and knows how it
should be reported to a caller: `category` classifies it (not found, invalid
request, internal failure) and `to_dict()` builds the diagnostic payload.
NormalizationError is the exception: it is recovered per file and never
escapes a scan.
"""

from typing import Any, Dict, Optional


class ShelfScanError(Exception):
    """Base class for errors surfaced to the caller of a scan."""

    category = "internal"
    message = "Internal server error"

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail
        super().__init__(detail or self.message)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"message": self.message}
        if self.detail and self.detail != self.message:
            payload["error"] = self.detail
        return payload


class InvalidFolderError(ShelfScanError):
    category = "invalid"
    message = "Invalid folder"

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.detail or self.message}


class FolderNotFoundError(ShelfScanError):
    category = "not_found"
    message = "Folder not found"

    def __init__(self, folder: str):
        self.folder = folder
        super().__init__(f"Folder not found: {folder}")

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message}


class NoImagesError(ShelfScanError):
    """No recognized image was found, or none survived normalization."""

    category = "not_found"
    message = "No images found in folder"

    def __init__(self, image_count: int = 0):
        self.image_count = image_count
        if image_count:
            detail = f"None of the {image_count} image(s) could be prepared"
        else:
            detail = self.message
        super().__init__(detail)


class InferenceError(ShelfScanError):
    """The model call failed in transport or on the service side."""


class ResponseParseError(ShelfScanError):
    """The model answered, but its text is not a usable JSON book list."""

    message = "Failed to parse model response"

    def __init__(self, raw: str, reason: str = ""):
        self.raw = raw
        self.reason = reason
        super().__init__(reason or self.message)

    def to_dict(self) -> Dict[str, Any]:
        payload = {"message": self.message, "raw": self.raw}
        if self.reason:
            payload["error"] = self.reason
        return payload


class NormalizationError(Exception):
    """A single source image could not be decoded, resized or re-encoded."""

    def __init__(self, filename: str, reason: str):
        self.filename = filename
        self.reason = reason
        super().__init__(f"{filename}: {reason}")
