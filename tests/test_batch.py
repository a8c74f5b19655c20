from shelf_scanner.api.prompt import SHELF_PROMPT_TEMPLATE
from shelf_scanner.core.batch import assemble_batch
from shelf_scanner.core.models import NormalizedImage


def make_normalized(name, index):
    return NormalizedImage(filename=name, data=b"jpeg-" + name.encode(), width=10, height=10, index=index)


def test_instruction_comes_first():
    batch = assemble_batch([make_normalized("a.jpg", 0)])
    assert batch.instruction == SHELF_PROMPT_TEMPLATE
    assert not batch.parts[0].is_image


def test_each_image_is_preceded_by_its_label():
    images = [make_normalized("a.jpg", 0), make_normalized("b.png", 1), make_normalized("d.webp", 3)]
    batch = assemble_batch(images)
    assert len(batch) == 1 + 2 * len(images)
    for position, part in enumerate(batch.parts):
        if part.is_image:
            label = batch.parts[position - 1]
            assert label.text == f"Image Filename: {part.image.filename}"
    assert batch.filenames == ["a.jpg", "b.png", "d.webp"]


def test_empty_input_yields_instruction_only():
    batch = assemble_batch([])
    assert len(batch) == 1
    assert batch.images == []


def test_instruction_states_output_contract():
    for fragment in ("JSON array", '"title"', '"author"', '"sources"', "Combine duplicates"):
        assert fragment in SHELF_PROMPT_TEMPLATE
