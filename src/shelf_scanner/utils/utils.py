"""
Filesystem helpers: the image extension allow-list and folder resolution.

A folder identifier is an opaque string resolved under the library root into
an ordered list of (filename, raw bytes) pairs. Nothing below the folder is
visited; the shelf photos of one location live side by side.
"""

import os
from pathlib import Path
from typing import Iterator, List

from ..core.errors import FolderNotFoundError, InvalidFolderError
from ..core.models import SourceImage
from .log_utils import get_logger

logger = get_logger(__name__)

IMAGE_EXTS = {'.heic', '.jpg', '.jpeg', '.png', '.webp'}


def is_image_file(name: str) -> bool:
    """Return True when `name` carries a recognized image extension (case-insensitive)."""
    if name.startswith("._") or name == ".DS_Store":
        return False
    return os.path.splitext(name)[1].lower() in IMAGE_EXTS


def resolve_folder(library_root: Path, folder: str) -> Path:
    """
    Map a folder identifier onto a directory under `library_root`.

    Raises:
        InvalidFolderError: empty identifier, or one that escapes the root.
        FolderNotFoundError: the directory does not exist.
    """
    if not folder or not folder.strip():
        raise InvalidFolderError("Folder name is required")
    root = Path(library_root).expanduser().resolve()
    target = (root / folder).resolve()
    if target != root and root not in target.parents:
        raise InvalidFolderError(f"Folder '{folder}' is outside the library root")
    if not target.is_dir():
        raise FolderNotFoundError(folder)
    return target


def iter_image_files(directory: Path) -> Iterator[Path]:
    """
    Yield recognized image files directly inside `directory`, sorted by filename.
    """
    with os.scandir(directory) as it:
        names = sorted(
            entry.name for entry in it
            if entry.is_file() and is_image_file(entry.name)
        )
    for name in names:
        yield directory / name


def load_folder(library_root: Path, folder: str) -> List[SourceImage]:
    """Resolve `folder` and read every recognized image into a SourceImage, in enumeration order."""
    directory = resolve_folder(library_root, folder)
    sources = []
    for path in iter_image_files(directory):
        logger.debug("Reading '%s'", path)
        try:
            data = path.read_bytes()
        except OSError as e:
            logger.warning("Skipping unreadable file '%s': %s", path.name, e)
            continue
        sources.append(SourceImage.from_bytes(path.name, data, index=len(sources)))
    logger.info("Found %d image(s) in '%s'", len(sources), directory)
    return sources
