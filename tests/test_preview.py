import numpy as np
import pytest
from PIL import Image

from imagealbum.adjust import Adjustments, apply_adjustments
from imagealbum.preview import (
    GeometryTracker,
    PreviewError,
    PreviewSession,
    Rect,
)


@pytest.fixture
def image_path(tmp_path):
    rng = np.random.default_rng(7)
    data = rng.integers(0, 256, size=(30, 60, 3), dtype=np.uint8)
    path = tmp_path / "photo.png"
    Image.fromarray(data, "RGB").save(path)
    return path


def _pixels(path):
    with Image.open(path) as picture:
        return np.array(picture.convert("RGB"))


def test_render_identity_matches_original(image_path):
    session = PreviewSession(image_path)
    assert np.array_equal(session.render(), _pixels(image_path))


def test_render_uses_adjustments(image_path):
    session = PreviewSession(image_path)
    session.set_adjustment("brightness", 10)
    session.set_adjustment("exposure", 20)
    expected = apply_adjustments(
        _pixels(image_path), Adjustments(brightness=10, exposure=20)
    )
    assert np.array_equal(session.render(), expected)


def test_unknown_adjustment_rejected(image_path):
    session = PreviewSession(image_path)
    with pytest.raises(ValueError):
        session.set_adjustment("hue", 5)


def test_save_round_trip(image_path):
    session = PreviewSession(image_path)
    session.set_adjustment("contrast", 25)
    rendered = session.render()
    assert session.save() == image_path
    assert np.array_equal(_pixels(image_path), rendered)


def test_save_as_writes_new_file(image_path, tmp_path):
    session = PreviewSession(image_path)
    session.set_adjustment("temperature", 15)
    target = tmp_path / "copy.png"
    assert session.save_as(target) == target
    assert np.array_equal(_pixels(target), session.render())
    assert np.array_equal(_pixels(image_path), PreviewSession(image_path).render())


def test_save_as_unknown_extension_fails(image_path, tmp_path):
    session = PreviewSession(image_path)
    with pytest.raises(PreviewError):
        session.save_as(tmp_path / "copy.unknownext")


def test_missing_image_cannot_render_or_save(tmp_path):
    session = PreviewSession(tmp_path / "missing.png")
    assert session.image is None
    with pytest.raises(PreviewError):
        session.render()
    with pytest.raises(PreviewError):
        session.save()


def test_delete_removes_file(image_path):
    session = PreviewSession(image_path)
    assert session.delete() == image_path
    assert not image_path.exists()
    with pytest.raises(PreviewError):
        session.delete()


@pytest.mark.parametrize("box", [(100, 100), (40, 200), (500, 20)])
def test_preview_fits_box_and_keeps_aspect(image_path, box):
    session = PreviewSession(image_path)
    picture = session.preview(box)
    width, height = picture.size
    assert width <= box[0] and height <= box[1]
    assert width == box[0] or height == box[1]
    assert abs(width / height - 2.0) < 0.2


def test_preview_rejects_empty_box(image_path):
    with pytest.raises(ValueError):
        PreviewSession(image_path).preview((0, 10))


def test_tracker_keeps_smaller_geometry():
    tracker = GeometryTracker(Rect(0, 0, 1280, 800))
    smaller = Rect(10, 10, 800, 600)
    assert tracker.on_resize(smaller) is True
    assert tracker.normal_geometry == smaller
    assert tracker.on_resize(Rect(0, 0, 1920, 1080)) is False
    assert tracker.normal_geometry == smaller


def test_tracker_replaces_empty_geometry():
    tracker = GeometryTracker(Rect(0, 0, 0, 0))
    large = Rect(0, 0, 1920, 1080)
    assert tracker.on_resize(large) is True
    assert tracker.normal_geometry == large


def test_tracker_ignores_non_normal_state():
    initial = Rect(0, 0, 1280, 800)
    tracker = GeometryTracker(initial)
    assert tracker.on_resize(Rect(0, 0, 10, 10), normal_state=False) is False
    assert tracker.normal_geometry == initial


def test_tracker_restore_cycle():
    initial = Rect(5, 5, 1280, 800)
    tracker = GeometryTracker(initial)
    assert tracker.on_state_change(False, True) is None
    assert tracker.restoring is False
    assert tracker.on_state_change(True, False) == initial
    assert tracker.restoring is True
    assert tracker.on_resize(Rect(0, 0, 100, 100)) is False
    assert tracker.finish_restore() == initial
    assert tracker.restoring is False