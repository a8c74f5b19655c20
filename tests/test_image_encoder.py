import io

import pytest
from PIL import Image

from shelf_scanner.core import image_encoder
from shelf_scanner.core.errors import NormalizationError
from shelf_scanner.core.image_encoder import normalize_image, resize_to_width
from shelf_scanner.core.models import SourceImage

from conftest import make_image_bytes, make_source


def decoded_size(data):
    with Image.open(io.BytesIO(data)) as img:
        assert img.format == "JPEG"
        return img.size


@pytest.mark.parametrize("filename", ["wide.jpg", "wide.jpeg", "wide.png", "wide.webp"])
def test_wide_image_is_capped(filename):
    out = normalize_image(make_source(filename, 3000, 1500), max_width=1024, quality=80)
    assert out.width == 1024
    assert out.height == 512
    assert decoded_size(out.data) == (1024, 512)
    assert out.mime_type == "image/jpeg"


def test_narrow_image_is_not_enlarged():
    out = normalize_image(make_source("small.png", 300, 200), max_width=1024)
    assert (out.width, out.height) == (300, 200)
    assert decoded_size(out.data) == (300, 200)


def test_image_exactly_at_cap_keeps_size():
    out = normalize_image(make_source("edge.jpg", 1024, 2000), max_width=1024)
    assert (out.width, out.height) == (1024, 2000)


def test_portrait_aspect_ratio_preserved():
    out = normalize_image(make_source("tall.jpg", 2048, 4096), max_width=1024)
    assert (out.width, out.height) == (1024, 2048)


def test_resize_to_width_never_upscales():
    img = Image.new("RGB", (10, 10))
    assert resize_to_width(img, 1024).size == (10, 10)


def test_rgba_png_is_encoded_as_jpeg():
    img = Image.new("RGBA", (64, 32), (10, 20, 30, 128))
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    out = normalize_image(SourceImage.from_bytes("alpha.png", buf.getvalue()))
    assert decoded_size(out.data) == (64, 32)


def test_filename_and_index_carried_through():
    src = SourceImage.from_bytes("shelf3.jpg", make_image_bytes(), index=7)
    out = normalize_image(src)
    assert out.filename == "shelf3.jpg"
    assert out.index == 7


def test_undecodable_bytes_raise_normalization_error():
    with pytest.raises(NormalizationError) as exc:
        normalize_image(SourceImage.from_bytes("broken.jpg", b"not an image"))
    assert exc.value.filename == "broken.jpg"


def test_heic_goes_through_transcode(monkeypatch):
    calls = []

    def fake_transcode(data):
        calls.append(data)
        return Image.new("RGB", (2000, 1000))

    monkeypatch.setattr(image_encoder, "transcode_heic", fake_transcode)
    out = normalize_image(SourceImage.from_bytes("IMG_0001.HEIC", b"heic-bytes"))
    assert calls == [b"heic-bytes"]
    assert (out.width, out.height) == (1024, 512)


def test_heic_transcode_failure_is_reported(monkeypatch):
    def failing(data):
        raise RuntimeError("corrupt container")

    monkeypatch.setattr(image_encoder, "transcode_heic", failing)
    with pytest.raises(NormalizationError) as exc:
        normalize_image(SourceImage.from_bytes("bad.heic", b"x"))
    assert "HEIC conversion failed" in exc.value.reason


def test_truncated_jpeg_is_decoded_as_far_as_possible():
    buf = io.BytesIO()
    Image.effect_noise((400, 300), 64).convert("RGB").save(buf, format="JPEG", quality=90)
    data = buf.getvalue()
    source = SourceImage.from_bytes("cut.jpg", data[: int(len(data) * 0.7)])
    out = normalize_image(source, max_width=1024)
    assert (out.width, out.height) == (400, 300)
    assert decoded_size(out.data) == (400, 300)
