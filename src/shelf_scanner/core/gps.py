"""
gps.py - read GPS tags from shelf photos.

Independent of the scan pipeline: reports where each photo was taken, using
the EXIF GPS IFD read through Pillow (HEIC through pillow-heif's opener).
Only images carrying both latitude and longitude produce a record; values
are rendered as readable strings.
"""

import io
from typing import Any, Iterable, Optional

import pillow_heif
from PIL import Image
from PIL.ExifTags import GPS, IFD

from .models import GpsRecord, GpsReport, SourceImage
from ..utils.log_utils import get_logger

logger = get_logger(__name__)

pillow_heif.register_heif_opener()


def _to_float(value: Any) -> float:
    # value may be an IFDRational, a (num, den) tuple or a plain number
    if isinstance(value, tuple):
        return value[0] / value[1]
    return float(value)


def _to_deg(value: Any) -> Optional[float]:
    try:
        d, m, s = value
        return _to_float(d) + (_to_float(m) / 60.0) + (_to_float(s) / 3600.0)
    except (TypeError, ValueError, ZeroDivisionError):
        return None


def _format_coordinate(value: Any, ref: Any, negative_ref: str) -> Optional[str]:
    deg = _to_deg(value)
    if deg is None:
        return None
    if isinstance(ref, bytes):
        ref = ref.decode("ascii", "ignore")
    if isinstance(ref, str) and ref.strip().upper() == negative_ref:
        deg = -deg
    return f"{deg:.6f}"


def _format_altitude(value: Any, ref: Any) -> Optional[str]:
    if value is None:
        return None
    try:
        altitude = _to_float(value)
    except (TypeError, ValueError, ZeroDivisionError):
        return None
    # AltitudeRef 1 means below sea level
    if ref in (1, b"\x01"):
        altitude = -altitude
    return f"{altitude:g} m"


def _format_time(value: Any) -> Optional[str]:
    try:
        h, m, s = (_to_float(v) for v in value)
    except (TypeError, ValueError, ZeroDivisionError):
        return None
    return f"{int(h):02d}:{int(m):02d}:{int(s):02d}"


def gps_record_from_ifd(filename: str, gps_ifd: dict) -> Optional[GpsRecord]:
    """Build a GpsRecord from a GPS IFD mapping, or None without a full position."""
    latitude = _format_coordinate(gps_ifd.get(GPS.GPSLatitude), gps_ifd.get(GPS.GPSLatitudeRef), "S")
    longitude = _format_coordinate(gps_ifd.get(GPS.GPSLongitude), gps_ifd.get(GPS.GPSLongitudeRef), "W")
    if not latitude or not longitude:
        return None
    date_stamp = gps_ifd.get(GPS.GPSDateStamp)
    return GpsRecord(
        filename=filename,
        latitude=latitude,
        longitude=longitude,
        altitude=_format_altitude(gps_ifd.get(GPS.GPSAltitude), gps_ifd.get(GPS.GPSAltitudeRef)),
        date_stamp=str(date_stamp).strip() if date_stamp else None,
        time_stamp=_format_time(gps_ifd.get(GPS.GPSTimeStamp)) if GPS.GPSTimeStamp in gps_ifd else None,
    )


def read_gps_ifd(source: SourceImage) -> dict:
    with Image.open(io.BytesIO(source.data)) as img:
        return dict(img.getexif().get_ifd(IFD.GPSInfo))


def extract_gps(sources: Iterable[SourceImage], folder: Optional[str] = None) -> GpsReport:
    """
    Collect GPS records for `sources`. Unreadable files are logged and skipped.
    """
    sources = list(sources)
    report = GpsReport(folder=folder, image_count=len(sources))
    for source in sources:
        try:
            record = gps_record_from_ifd(source.filename, read_gps_ifd(source))
        except Exception as err:
            logger.warning("Error reading EXIF for %s: %s", source.filename, err)
            continue
        if record is not None:
            report.records.append(record)
        else:
            logger.debug("No GPS position in %s", source.filename)
    return report
