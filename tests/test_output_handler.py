"""
Tests for the presenter (save / display) and report output.
"""

import json
import logging
from pathlib import Path

import cv2
import numpy as np
import pytest

from facesweep.config import AppConfig, OutputConfig
from facesweep.output_handler import OutputHandler
from facesweep.rectangle import Rectangle


@pytest.fixture
def gray_frame():
    return np.full((120, 160, 3), 128, dtype=np.uint8)


@pytest.fixture
def fake_window(monkeypatch):
    """Replace the OpenCV window calls and script the pressed key."""
    state = {"shown": 0, "key": ord(" "), "destroyed": 0}

    def imshow(name, image):
        state["shown"] += 1

    def wait_key(delay):
        assert delay == 0
        return state["key"]

    def destroy_all():
        state["destroyed"] += 1

    monkeypatch.setattr(cv2, "imshow", imshow)
    monkeypatch.setattr(cv2, "waitKey", wait_key)
    monkeypatch.setattr(cv2, "destroyAllWindows", destroy_all)
    return state


def _config(**output):
    return AppConfig(output=OutputConfig(**output))


def test_save_mode_writes_annotated_copy(tmp_path, gray_frame):
    save_dir = tmp_path / "out"
    handler = OutputHandler(_config(save_dir=str(save_dir)))
    source = tmp_path / "photos" / "group.png"

    assert handler.mode == "save"
    assert handler.process_image(source, gray_frame, [Rectangle(10, 10, 50, 50)])
    handler.finalize()

    written = cv2.imread(str(save_dir / "group.png"))
    assert written is not None
    assert written.shape == gray_frame.shape
    assert written[10, 10].tolist() == [255, 0, 0]
    # Source frame untouched
    assert gray_frame[10, 10].tolist() == [128, 128, 128]


def test_save_mode_skips_images_without_faces(tmp_path, gray_frame):
    save_dir = tmp_path / "out"
    handler = OutputHandler(_config(save_dir=str(save_dir)))

    assert handler.process_image(tmp_path / "empty.png", gray_frame, [])

    assert not (save_dir / "empty.png").exists()


def test_save_failure_is_logged_not_raised(tmp_path, gray_frame, caplog):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("occupied", encoding="utf-8")
    handler = OutputHandler(_config(save_dir=str(blocker)))

    with caplog.at_level(logging.ERROR):
        assert handler.process_image(tmp_path / "a.png", gray_frame, [Rectangle(1, 1, 5, 5)])

    assert "Failed to save" in caplog.text


def test_display_mode_blocks_per_image(tmp_path, gray_frame, fake_window):
    handler = OutputHandler(_config())

    assert handler.mode == "display"
    assert handler.process_image(tmp_path / "a.png", gray_frame, [Rectangle(1, 1, 5, 5)])
    assert handler.process_image(tmp_path / "b.png", gray_frame, [])
    handler.finalize()

    assert fake_window["shown"] == 1
    assert fake_window["destroyed"] == 1


@pytest.mark.parametrize("key", [ord("q"), 27])
def test_display_quit_keys(tmp_path, gray_frame, fake_window, key):
    fake_window["key"] = key
    handler = OutputHandler(_config())

    assert handler.process_image(tmp_path / "a.png", gray_frame, [Rectangle(1, 1, 5, 5)]) is False


def test_report_records_every_outcome(tmp_path, gray_frame):
    report = tmp_path / "reports" / "run.json"
    handler = OutputHandler(_config(save_dir=str(tmp_path / "out"), report_path=str(report)))

    handler.process_image(Path("a.png"), gray_frame, [Rectangle(1, 2, 3, 4)])
    handler.process_image(Path("b.png"), gray_frame, [])
    handler.record_skipped(Path("c.png"), np.zeros((0, 0, 3), dtype=np.uint8), "empty image")
    handler.record_unreadable(Path("d.png"))
    handler.finalize()

    payload = json.loads(report.read_text(encoding="utf-8"))
    assert payload["summary"] == {"processed": 2, "skipped": 1, "unreadable": 1, "faces": 1}
    assert payload["images"][0] == {
        "path": "a.png",
        "status": "processed",
        "reason": None,
        "image_width": 160,
        "image_height": 120,
        "faces": [{"x": 1, "y": 2, "width": 3, "height": 4}],
    }
    assert payload["images"][2]["status"] == "skipped"
    assert payload["images"][2]["reason"] == "empty image"
    assert payload["images"][3]["status"] == "unreadable"


def test_no_report_without_path(tmp_path, gray_frame):
    handler = OutputHandler(_config(save_dir=str(tmp_path / "out")))

    handler.record_unreadable(Path("d.png"))
    handler.finalize()

    assert list(tmp_path.glob("**/*.json")) == []
