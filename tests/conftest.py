import io

import pytest
from PIL import Image

from shelf_scanner.api.base import APIClient
from shelf_scanner.config import Settings
from shelf_scanner.core.models import SourceImage


def make_image_bytes(w=200, h=150, fmt="JPEG", color=(100, 150, 200)):
    img = Image.new("RGB", (w, h), color=color)
    b = io.BytesIO()
    img.save(b, format=fmt)
    return b.getvalue()


def make_source(filename, w=200, h=150, index=0):
    fmt = {"jpg": "JPEG", "jpeg": "JPEG", "png": "PNG", "webp": "WEBP"}.get(filename.rsplit(".", 1)[-1].lower(), "JPEG")
    return SourceImage.from_bytes(filename, make_image_bytes(w, h, fmt), index=index)


class FakeClient(APIClient):
    """Records the batch it receives and answers with canned text."""

    def __init__(self, response="[]", error=None):
        self.response = response
        self.error = error
        self.batches = []
        super().__init__("fake-key")

    def _validate_api_key(self):
        pass

    def _get_model_name(self):
        return "fake-model"

    def _call_api(self, batch):
        self.batches.append(batch)
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def library(tmp_path):
    root = tmp_path / "Library Images"
    root.mkdir()
    return root


@pytest.fixture
def settings(library):
    return Settings(library_root=library, max_workers=2)
