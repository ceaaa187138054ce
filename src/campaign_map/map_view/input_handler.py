"""Logic for translating Qt input events into viewport engine events."""

from __future__ import annotations

from PySide6.QtCore import QObject, Qt, Signal

from .gestures import (
    MIDDLE_BUTTON,
    PRIMARY_BUTTON,
    SECONDARY_BUTTON,
    PointerDown,
    PointerInput,
    PointerLeave,
    PointerMove,
    PointerUp,
    Wheel,
)

_BUTTON_BITS = (
    (Qt.MouseButton.LeftButton, PRIMARY_BUTTON),
    (Qt.MouseButton.RightButton, SECONDARY_BUTTON),
    (Qt.MouseButton.MiddleButton, MIDDLE_BUTTON),
)


def button_mask(buttons) -> int:
    """Convert a Qt button (or button set) into the engine's bit mask."""

    mask = 0
    for qt_button, bit in _BUTTON_BITS:
        if buttons & qt_button:
            mask |= bit
    return mask


def pointer_from_event(event, *, use_pressed_button: bool = False) -> PointerInput:
    """Return the container-local pointer sample carried by a mouse *event*.

    Press and release events describe the button that changed through
    ``button()``; move events only report the held set via ``buttons()``.
    """

    position = event.position()
    buttons = event.button() if use_pressed_button else event.buttons()
    return PointerInput(float(position.x()), float(position.y()), button_mask(buttons))


class InputHandler(QObject):
    """Handle mouse interaction for :class:`~campaign_map.map_view.map_widget.InteractiveMapWidget`."""

    gesture_event = Signal(object)
    """Signal emitted with a toolkit-neutral engine event for every input."""

    cursor_changed = Signal(Qt.CursorShape)
    cursor_reset = Signal()

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._is_dragging = False
        self._wheel_action = "zoom"

    # ------------------------------------------------------------------
    def set_wheel_action(self, action: str) -> None:
        """Enable (``"zoom"``) or disable (``"none"``) wheel zooming."""

        self._wheel_action = "zoom" if action == "zoom" else "none"

    # ------------------------------------------------------------------
    def handle_mouse_press(self, event) -> None:
        """Start a drag gesture when the primary mouse button is pressed."""

        pointer = pointer_from_event(event, use_pressed_button=True)
        if pointer.is_primary:
            self._is_dragging = True
            self.cursor_changed.emit(Qt.CursorShape.ClosedHandCursor)
        self.gesture_event.emit(PointerDown(pointer))

    # ------------------------------------------------------------------
    def handle_mouse_move(self, event) -> None:
        """Forward pointer motion; the engine ignores it outside a drag."""

        if not self._is_dragging:
            return
        self.gesture_event.emit(PointerMove(pointer_from_event(event)))

    # ------------------------------------------------------------------
    def handle_mouse_release(self, event) -> None:
        """Finish drag gestures and restore the default cursor."""

        if event.button() != Qt.MouseButton.LeftButton or not self._is_dragging:
            return
        self._is_dragging = False
        self.gesture_event.emit(PointerUp(pointer_from_event(event, use_pressed_button=True)))
        self.cursor_reset.emit()

    # ------------------------------------------------------------------
    def handle_leave(self) -> None:
        """Abort an active drag when the pointer leaves the widget."""

        if not self._is_dragging:
            return
        self._is_dragging = False
        self.gesture_event.emit(PointerLeave())
        self.cursor_reset.emit()

    # ------------------------------------------------------------------
    def handle_wheel_event(self, event) -> None:
        """Request a zoom step anchored at the cursor."""

        if self._wheel_action != "zoom":
            return
        delta = event.angleDelta().y()
        if delta == 0:
            return
        position = event.position()
        self.gesture_event.emit(Wheel(float(position.x()), float(position.y()), float(delta)))


__all__ = ["InputHandler", "button_mask", "pointer_from_event"]
