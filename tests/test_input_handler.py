"""
Tests for directory walking and image decoding.
"""

import cv2
import numpy as np
import pytest

from facesweep.input_handler import (
    InputHandler,
    find_images,
    is_image_file,
    resize_to_max_height,
)


def _write_png(path, height=40, width=60):
    path.parent.mkdir(parents=True, exist_ok=True)
    assert cv2.imwrite(str(path), np.full((height, width, 3), 128, dtype=np.uint8))


@pytest.fixture
def image_tree(tmp_path):
    _write_png(tmp_path / "a.png")
    _write_png(tmp_path / "nested" / "deeper" / "b.png")
    _write_png(tmp_path / "upper.png")
    (tmp_path / "upper.png").rename(tmp_path / "UPPER.PNG")
    (tmp_path / "notes.txt").write_text("not an image", encoding="utf-8")
    (tmp_path / "folder.jpg").mkdir()
    return tmp_path


@pytest.mark.parametrize(
    "name, expected",
    [
        ("x.jpg", True),
        ("x.JPEG", True),
        ("x.png", True),
        ("x.bmp", True),
        ("x.gif", True),
        ("x.Tiff", True),
        ("x.webp", False),
        ("x.txt", False),
        ("jpg", False),
    ],
)
def test_is_image_file(tmp_path, name, expected):
    assert is_image_file(tmp_path / name) is expected


def test_find_images_recursive(image_tree):
    found = find_images(image_tree)
    names = [p.name for p in found]

    assert sorted(names) == ["UPPER.PNG", "a.png", "b.png"]
    assert found == sorted(found)


def test_iterates_decoded_images(image_tree):
    handler = InputHandler(image_tree)

    results = list(handler)

    assert len(handler) == 3
    assert len(results) == 3
    for path, image in results:
        assert image.shape == (40, 60, 3)
    assert handler.unreadable == []


def test_skips_undecodable_files(image_tree):
    (image_tree / "broken.png").write_bytes(b"definitely not a png")

    handler = InputHandler(image_tree)
    results = list(handler)

    assert len(handler) == 4
    assert len(results) == 3
    assert handler.unreadable == [image_tree / "broken.png"]


def test_max_height_resize(tmp_path):
    _write_png(tmp_path / "tall.png", height=400, width=200)

    (_, image), = list(InputHandler(tmp_path, max_height=100))

    assert image.shape[:2] == (100, 50)


def test_resize_never_upscales():
    image = np.zeros((50, 80, 3), dtype=np.uint8)
    assert resize_to_max_height(image, 100) is image


def test_missing_directory(tmp_path):
    with pytest.raises(FileNotFoundError):
        InputHandler(tmp_path / "nope")


def test_file_is_not_a_directory(tmp_path):
    target = tmp_path / "file.png"
    _write_png(target)
    with pytest.raises(NotADirectoryError):
        InputHandler(target)


def test_empty_directory(tmp_path):
    handler = InputHandler(tmp_path)
    assert len(handler) == 0
    assert list(handler) == []
