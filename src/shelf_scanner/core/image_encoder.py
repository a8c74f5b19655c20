"""
image_encoder.py: Normalize shelf photos for transport to a vision model.

Each source image is decoded (HEIC is first transcoded to a Pillow raster at
full fidelity via pillow-heif), downscaled so its width does not exceed a cap
while keeping the aspect ratio, and re-encoded as JPEG at a fixed quality.
Images narrower than the cap are never enlarged.

Supports input formats JPEG, PNG, WebP and HEIC (requires pillow-heif).
"""

import io

import pillow_heif
from PIL import Image, ImageOps

from .errors import NormalizationError
from .models import NormalizedImage, SourceImage
from ..utils.log_utils import get_logger

logger = get_logger(__name__)

pillow_heif.register_heif_opener()

DEFAULT_MAX_WIDTH = 1024
DEFAULT_QUALITY = 80


def transcode_heic(data: bytes) -> Image.Image:
    """Decode HEIC bytes into a Pillow image without any quality loss."""
    heif_file = pillow_heif.open_heif(io.BytesIO(data), convert_hdr_to_8bit=True)
    return heif_file.to_pillow()


def decode_image(source: SourceImage) -> Image.Image:
    """Return a fully loaded, upright raster for `source`."""
    if source.is_heic:
        try:
            img = transcode_heic(source.data)
        except Exception as err:
            raise NormalizationError(source.filename, f"HEIC conversion failed: {err}") from err
    else:
        img = Image.open(io.BytesIO(source.data))
    img.load()
    return ImageOps.exif_transpose(img)


def resize_to_width(img: Image.Image, max_width: int) -> Image.Image:
    """Shrink `img` so that its width is at most `max_width`; never upscale."""
    w, h = img.size
    if w <= max_width:
        return img
    new_h = max(1, round(h * max_width / w))
    return img.resize((max_width, new_h), resample=Image.Resampling.LANCZOS)


def encode_jpeg(img: Image.Image, quality: int) -> bytes:
    if img.mode != "RGB":
        img = img.convert("RGB")
    buffer = io.BytesIO()
    img.save(buffer, format="JPEG", quality=quality, optimize=True)
    out = buffer.getvalue()
    if not out:
        raise RuntimeError("encoding produced empty output")
    return out


def normalize_image(
    source: SourceImage,
    max_width: int = DEFAULT_MAX_WIDTH,
    quality: int = DEFAULT_QUALITY,
) -> NormalizedImage:
    """
    Decode, downscale and re-encode a single source image.

    Args:
        source: The image as read from disk.
        max_width: Width cap in pixels.
        quality: JPEG quality used for the transport encoding.

    Returns:
        The NormalizedImage, carrying the source filename and index.

    Raises:
        NormalizationError: If any step fails for this file.
    """
    try:
        img = decode_image(source)
        original_size = img.size
        img = resize_to_width(img, max_width)
        data = encode_jpeg(img, quality)
    except NormalizationError:
        raise
    except Exception as err:
        raise NormalizationError(source.filename, str(err) or err.__class__.__name__) from err

    logger.debug(
        "Normalized '%s' %sx%s -> %sx%s (%d bytes)",
        source.filename, original_size[0], original_size[1], img.width, img.height, len(data),
    )
    return NormalizedImage(
        filename=source.filename,
        data=data,
        width=img.width,
        height=img.height,
        index=source.index,
    )
