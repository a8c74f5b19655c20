from PIL.ExifTags import GPS
from PIL.TiffImagePlugin import IFDRational

from shelf_scanner.core import gps
from shelf_scanner.core.gps import extract_gps, gps_record_from_ifd
from shelf_scanner.core.models import SourceImage

from conftest import make_source

SAN_FRANCISCO = {
    GPS.GPSLatitudeRef: "N",
    GPS.GPSLatitude: (IFDRational(37, 1), IFDRational(46, 1), IFDRational(30, 1)),
    GPS.GPSLongitudeRef: "W",
    GPS.GPSLongitude: (IFDRational(122, 1), IFDRational(25, 1), IFDRational(12, 1)),
    GPS.GPSAltitudeRef: b"\x00",
    GPS.GPSAltitude: IFDRational(25, 2),
    GPS.GPSDateStamp: "2024:05:01",
    GPS.GPSTimeStamp: (IFDRational(14, 1), IFDRational(3, 1), IFDRational(22, 1)),
}


def test_record_from_full_gps_ifd():
    record = gps_record_from_ifd("shelf.heic", SAN_FRANCISCO)
    assert record.latitude == "37.775000"
    assert record.longitude == "-122.420000"
    assert record.altitude == "12.5 m"
    assert record.date_stamp == "2024:05:01"
    assert record.time_stamp == "14:03:22"
    assert record.to_dict()["fileName"] == "shelf.heic"


def test_rational_tuples_are_understood():
    ifd = {
        GPS.GPSLatitudeRef: "S",
        GPS.GPSLatitude: ((33, 1), (52, 1), (0, 1)),
        GPS.GPSLongitudeRef: "E",
        GPS.GPSLongitude: ((151, 1), (12, 1), (0, 1)),
    }
    record = gps_record_from_ifd("sydney.jpg", ifd)
    assert record.latitude.startswith("-33.86")
    assert record.longitude == "151.200000"
    assert record.altitude is None
    assert record.time_stamp is None


def test_no_record_without_longitude():
    ifd = {GPS.GPSLatitudeRef: "N", GPS.GPSLatitude: (1, 2, 3)}
    assert gps_record_from_ifd("x.jpg", ifd) is None


def test_extract_gps_keeps_only_located_images(monkeypatch):
    located = make_source("located.jpg")
    plain = make_source("plain.jpg", index=1)

    def fake_read(source):
        return SAN_FRANCISCO if source.filename == "located.jpg" else {}

    monkeypatch.setattr(gps, "read_gps_ifd", fake_read)
    report = extract_gps([located, plain], folder="Den")
    assert report.image_count == 2
    assert [r.filename for r in report.records] == ["located.jpg"]
    assert report.to_dict()["folder"] == "Den"


def test_extract_gps_skips_unreadable_files():
    sources = [SourceImage.from_bytes("broken.jpg", b"garbage"), make_source("plain.png", index=1)]
    report = extract_gps(sources)
    assert report.image_count == 2
    assert report.records == []
