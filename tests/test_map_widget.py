from __future__ import annotations

from pathlib import Path

import pytest

pytest.importorskip("PySide6", reason="PySide6 is required for widget tests", exc_type=ImportError)
pytest.importorskip("PySide6.QtTest", reason="Qt test helpers not available", exc_type=ImportError)

from PySide6.QtCore import QPointF
from PySide6.QtGui import QColor, QImage
from PySide6.QtTest import QSignalSpy

from campaign_map.map_view.map_widget import InteractiveMapWidget
from campaign_map.map_view.viewport import Size


def _write_image(path: Path, width: int, height: int) -> Path:
    image = QImage(width, height, QImage.Format.Format_RGB32)
    image.fill(QColor("#335577"))
    assert image.save(str(path), "PNG")
    return path


def test_set_image_fits_current_size(tmp_path: Path, qapp) -> None:
    widget = InteractiveMapWidget()
    widget.resize(800, 600)
    spy = QSignalSpy(widget.imageLoaded)

    assert widget.set_image(_write_image(tmp_path / "map.png", 200, 100))

    state = widget.controller.state
    assert spy.count() == 1
    assert state.image == Size(200, 100)
    assert state.container == Size(widget.width(), widget.height())
    assert state.viewport.scale == pytest.approx(min(widget.width() / 200, widget.height() / 100))
    assert widget.image_source == str(tmp_path / "map.png")


def test_failed_load_leaves_empty_state(tmp_path: Path, qapp) -> None:
    widget = InteractiveMapWidget()
    spy = QSignalSpy(widget.imageLoadFailed)

    assert widget.set_image(tmp_path / "missing.png") is False

    assert spy.count() == 1
    assert not widget.controller.state.has_image
    assert widget.image_source is None


def test_zoom_slots_drive_controller(tmp_path: Path, qapp) -> None:
    widget = InteractiveMapWidget()
    widget.resize(800, 600)
    widget.set_image(_write_image(tmp_path / "map.png", 400, 300))
    fit_scale = widget.controller.state.viewport.scale

    widget.zoom_in()
    assert widget.controller.state.viewport.scale == pytest.approx(fit_scale * 1.1)

    widget.reset_view()
    assert widget.controller.state.viewport.scale == pytest.approx(fit_scale)


def test_widget_renders_markers_and_staged_candidate(tmp_path: Path, qapp) -> None:
    widget = InteractiveMapWidget(show_labels=True)
    widget.resize(800, 600)
    widget.set_image(_write_image(tmp_path / "map.png", 400, 300))
    controller = widget.controller
    controller.pointer_down(400, 300)
    controller.pointer_up(400, 300)
    controller.confirm_waypoint("Watchtower")
    controller.pointer_down(300, 250)
    controller.pointer_up(300, 250)

    pixmap = widget.grab()

    assert not pixmap.isNull()
    assert controller.staged is not None
    assert len(controller.store) == 1
    assert widget.waypoint_at(QPointF(400.0, 300.0)) is not None
