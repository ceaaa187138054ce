"""QWidget based implementation of the interactive campaign map."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from PySide6.QtCore import QPoint, QPointF, Qt, Signal
from PySide6.QtGui import QColor, QFont, QImageReader, QPainter, QPen, QPixmap
from PySide6.QtWidgets import QWidget

from ..config import MAP_WIDGET_MINIMUM_SIZE, MARKER_HIT_SLOP, MARKER_LABEL_OFFSET, MARKER_RADIUS
from .controller import MapViewController
from .coordinates import percent_to_container
from .input_handler import InputHandler
from .viewport import Point
from .waypoints import Waypoint, category_info

LOGGER = logging.getLogger(__name__)


class InteractiveMapWidget(QWidget):
    """Display a pannable, zoomable map image with waypoint markers."""

    imageLoaded = Signal(int, int)
    """Signal emitted with the native size of a successfully loaded image."""

    imageLoadFailed = Signal(str)
    waypointContextRequested = Signal(object, QPoint)
    """Signal emitted with the waypoint under a right click and the global position."""

    def __init__(
        self,
        parent: QWidget | None = None,
        *,
        controller: Optional[MapViewController] = None,
        marker_radius: int = MARKER_RADIUS,
        show_labels: bool = True,
    ) -> None:
        super().__init__(parent)

        # ``MapViewController`` owns the engine state and persistence so this
        # subclass only deals with painting and Qt event plumbing.
        self._controller = controller or MapViewController(parent=self)
        self._input_handler = InputHandler(parent=self)
        self._pixmap = QPixmap()
        self._image_source: Optional[str] = None
        self._marker_radius = int(marker_radius)
        self._show_labels = bool(show_labels)

        self._input_handler.gesture_event.connect(self._controller.dispatch)
        self._input_handler.cursor_changed.connect(self.setCursor)
        self._input_handler.cursor_reset.connect(self.unsetCursor)
        self._controller.viewChanged.connect(self._schedule_repaint)
        self._controller.waypointsChanged.connect(self._schedule_repaint)
        self._controller.waypointStaged.connect(self._schedule_repaint)

        self.setMouseTracking(True)
        self.setMinimumSize(*MAP_WIDGET_MINIMUM_SIZE)

    # ------------------------------------------------------------------
    @property
    def controller(self) -> MapViewController:
        return self._controller

    @property
    def image_source(self) -> Optional[str]:
        return self._image_source

    # ------------------------------------------------------------------
    def set_image(self, source: Path | str) -> bool:
        """Load *source* and treat it as a fresh map.

        Failing to decode the image leaves the widget in the empty state and
        emits :attr:`imageLoadFailed`.
        """

        reader = QImageReader(str(source))
        reader.setAutoTransform(True)
        image = reader.read()
        if image.isNull():
            message = f"Unable to load map image {source}: {reader.errorString()}"
            LOGGER.warning(message)
            self.clear_image()
            self.imageLoadFailed.emit(message)
            return False

        self._pixmap = QPixmap.fromImage(image)
        self._image_source = str(source)
        self._controller.resize(self.width(), self.height())
        self._controller.load_image(image.width(), image.height())
        self.imageLoaded.emit(image.width(), image.height())
        self.update()
        return True

    def clear_image(self) -> None:
        self._pixmap = QPixmap()
        self._image_source = None
        self._controller.clear_image()
        self.update()

    # ------------------------------------------------------------------
    def zoom_in(self) -> None:
        self._controller.zoom_in()

    def zoom_out(self) -> None:
        self._controller.zoom_out()

    def reset_view(self) -> None:
        self._controller.reset_view()

    def set_wheel_action(self, action: str) -> None:
        self._input_handler.set_wheel_action(action)

    def set_marker_radius(self, radius: int) -> None:
        self._marker_radius = int(radius)
        self.update()

    def set_show_labels(self, enabled: bool) -> None:
        self._show_labels = bool(enabled)
        self.update()

    def waypoint_at(self, position: QPointF) -> Optional[Waypoint]:
        """Return the waypoint whose marker lies under *position*, if any."""

        return self._controller.waypoint_at(
            position.x(),
            position.y(),
            self._marker_radius + MARKER_HIT_SLOP,
        )

    # ------------------------------------------------------------------
    def paintEvent(self, event) -> None:  # type: ignore[override]
        """Render the map image followed by the waypoint markers."""

        painter = QPainter(self)
        try:
            painter.setRenderHint(QPainter.RenderHint.Antialiasing, True)
            painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform, True)
            painter.fillRect(self.rect(), self.palette().window())
            if self._pixmap.isNull():
                painter.setPen(self.palette().placeholderText().color())
                painter.drawText(self.rect(), Qt.AlignmentFlag.AlignCenter, "No map loaded")
                return
            self._paint_image(painter)
            self._paint_waypoints(painter)
            self._paint_staged(painter)
        finally:
            painter.end()

    def _paint_image(self, painter: QPainter) -> None:
        viewport = self._controller.state.viewport
        painter.save()
        painter.translate(viewport.offset_x, viewport.offset_y)
        painter.scale(viewport.scale, viewport.scale)
        painter.drawPixmap(0, 0, self._pixmap)
        painter.restore()

    def _paint_waypoints(self, painter: QPainter) -> None:
        radius = float(self._marker_radius)
        label_font = QFont(self.font())
        label_font.setBold(True)
        painter.setFont(label_font)
        for projected in self._controller.projected_waypoints():
            waypoint = projected.waypoint
            center = QPointF(projected.position.x, projected.position.y)
            color = QColor(category_info(waypoint.category).color)
            if waypoint.is_pending:
                color.setAlpha(140)
            painter.setPen(QPen(QColor(20, 20, 20, 200), 2.0))
            painter.setBrush(color)
            painter.drawEllipse(center, radius, radius)
            if self._show_labels and waypoint.title:
                painter.setPen(QColor(255, 255, 255))
                painter.drawText(
                    QPointF(center.x() + MARKER_LABEL_OFFSET, center.y() + radius / 2.0),
                    waypoint.title,
                )

    def _paint_staged(self, painter: QPainter) -> None:
        staged = self._controller.staged
        if staged is None:
            return
        state = self._controller.state
        position = percent_to_container(Point(staged.x_percent, staged.y_percent), state.image, state.viewport)
        radius = float(self._marker_radius) + 3.0
        pen = QPen(QColor(category_info(staged.category).color), 2.0, Qt.PenStyle.DashLine)
        painter.setPen(pen)
        painter.setBrush(Qt.BrushStyle.NoBrush)
        painter.drawEllipse(QPointF(position.x, position.y), radius, radius)

    # ------------------------------------------------------------------
    def mousePressEvent(self, event) -> None:  # type: ignore[override]
        """Forward presses to the input handler; right clicks target markers."""

        if event.button() == Qt.MouseButton.RightButton:
            waypoint = self.waypoint_at(event.position())
            if waypoint is not None:
                self.waypointContextRequested.emit(waypoint, event.globalPosition().toPoint())
                event.accept()
                return
        self._input_handler.handle_mouse_press(event)
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event) -> None:  # type: ignore[override]
        self._input_handler.handle_mouse_move(event)
        if not self._controller.state.is_dragging:
            waypoint = self.waypoint_at(event.position())
            self.setToolTip(waypoint.title if waypoint is not None else "")
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event) -> None:  # type: ignore[override]
        self._input_handler.handle_mouse_release(event)
        super().mouseReleaseEvent(event)

    def wheelEvent(self, event) -> None:  # type: ignore[override]
        self._input_handler.handle_wheel_event(event)
        event.accept()

    def leaveEvent(self, event) -> None:  # type: ignore[override]
        self._input_handler.handle_leave()
        super().leaveEvent(event)

    def resizeEvent(self, event) -> None:  # type: ignore[override]
        """Keep the engine's container size in sync with the widget."""

        super().resizeEvent(event)
        self._controller.resize(self.width(), self.height())

    # ------------------------------------------------------------------
    def _schedule_repaint(self, *_args) -> None:
        self.update()


__all__ = ["InteractiveMapWidget"]
