"""
Batch assembly: the single ordered multimodal request of a scan.

The request opens with the fixed instruction, followed by one
(label, image) pair per normalized image in enumeration order. Each label
names the file of the image right after it, which is how the model can
attribute detections back to filenames.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from .models import NormalizedImage
from ..api.prompt import IMAGE_LABEL_TEMPLATE, SHELF_PROMPT_TEMPLATE


@dataclass(frozen=True)
class BatchPart:
    """Either a text segment or an image segment of a BatchRequest."""
    text: Optional[str] = None
    image: Optional[NormalizedImage] = None

    @property
    def is_image(self) -> bool:
        return self.image is not None


@dataclass(frozen=True)
class BatchRequest:
    parts: Tuple[BatchPart, ...]

    @property
    def instruction(self) -> str:
        return self.parts[0].text

    @property
    def images(self) -> List[NormalizedImage]:
        return [p.image for p in self.parts if p.is_image]

    @property
    def filenames(self) -> List[str]:
        return [img.filename for img in self.images]

    def __len__(self) -> int:
        return len(self.parts)

    def __iter__(self):
        return iter(self.parts)


def image_label(filename: str) -> str:
    return IMAGE_LABEL_TEMPLATE.format(filename=filename)


def assemble_batch(
    images: Iterable[NormalizedImage], instruction: str = SHELF_PROMPT_TEMPLATE
) -> BatchRequest:
    """Build the BatchRequest for `images`, which must already be in enumeration order."""
    parts = [BatchPart(text=instruction)]
    for img in images:
        parts.append(BatchPart(text=image_label(img.filename)))
        parts.append(BatchPart(image=img))
    return BatchRequest(parts=tuple(parts))
