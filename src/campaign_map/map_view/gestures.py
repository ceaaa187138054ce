"""Pure state machine that turns pointer and wheel input into viewport changes.

Every input, including container resizes and image loads, is an event fed to
:func:`transition`, which returns a brand new :class:`MapViewState`.  Nothing in
this module touches Qt or performs I/O, so the whole interaction model can be
exercised without a display.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Optional, Union

from ..config import CLICK_DRAG_THRESHOLD, ZOOM_IN_FACTOR, ZOOM_OUT_FACTOR
from .constraints import apply_constraints, clamp_scale
from .viewport import (
    EMPTY_SIZE,
    IDENTITY_VIEWPORT,
    ContainerDimensions,
    ImageDimensions,
    Point,
    ViewportState,
    compute_fit_viewport,
)

# Button bit used by :class:`PointerInput`.  Front ends translate their native
# button enumeration into this mask before feeding the engine.
PRIMARY_BUTTON = 1
SECONDARY_BUTTON = 2
MIDDLE_BUTTON = 4


@dataclass(frozen=True)
class PointerInput:
    """Toolkit-neutral pointer sample in container-local pixels."""

    x: float
    y: float
    buttons: int = PRIMARY_BUTTON

    @property
    def position(self) -> Point:
        return Point(self.x, self.y)

    @property
    def is_primary(self) -> bool:
        return bool(self.buttons & PRIMARY_BUTTON)


# ----------------------------------------------------------------------
# Events
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class PointerDown:
    pointer: PointerInput


@dataclass(frozen=True)
class PointerMove:
    pointer: PointerInput


@dataclass(frozen=True)
class PointerUp:
    pointer: PointerInput


@dataclass(frozen=True)
class PointerLeave:
    pass


@dataclass(frozen=True)
class Wheel:
    """Wheel step at ``(x, y)``; a positive *delta* zooms in."""

    x: float
    y: float
    delta: float


@dataclass(frozen=True)
class ZoomIn:
    pass


@dataclass(frozen=True)
class ZoomOut:
    pass


@dataclass(frozen=True)
class ResetView:
    pass


@dataclass(frozen=True)
class Resize:
    container: ContainerDimensions


@dataclass(frozen=True)
class ImageLoaded:
    image: ImageDimensions


@dataclass(frozen=True)
class ImageCleared:
    pass


GestureEvent = Union[
    PointerDown,
    PointerMove,
    PointerUp,
    PointerLeave,
    Wheel,
    ZoomIn,
    ZoomOut,
    ResetView,
    Resize,
    ImageLoaded,
    ImageCleared,
]


# ----------------------------------------------------------------------
# State
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Dragging:
    start_pointer: Point
    start_offset: Point
    # Flips once the pointer travels beyond ``CLICK_DRAG_THRESHOLD`` and never
    # flips back, so a drag that returns to its origin is still a drag.
    moved: bool = False


GestureState = Union[Idle, Dragging]

IDLE = Idle()


@dataclass(frozen=True)
class MapViewState:
    """Complete snapshot of the interactive map viewport."""

    viewport: ViewportState = IDENTITY_VIEWPORT
    image: ImageDimensions = EMPTY_SIZE
    container: ContainerDimensions = EMPTY_SIZE
    gesture: GestureState = IDLE
    # ``True`` once the user zoomed or panned the current image.  While it is
    # ``False`` container resizes refit the image.
    user_adjusted: bool = False
    # Position of the click produced by the transition that created this
    # state, or ``None``.  Cleared by the next transition.
    click: Optional[Point] = None

    @property
    def has_image(self) -> bool:
        return not self.image.is_empty()

    @property
    def is_interactive(self) -> bool:
        return self.has_image and not self.container.is_empty()

    @property
    def is_dragging(self) -> bool:
        return isinstance(self.gesture, Dragging)


# ----------------------------------------------------------------------
# Transitions
# ----------------------------------------------------------------------
def transition(state: MapViewState, event: GestureEvent) -> MapViewState:
    """Return the state that results from applying *event* to *state*."""

    if state.click is not None:
        state = replace(state, click=None)

    if isinstance(event, PointerDown):
        return _on_pointer_down(state, event.pointer)
    if isinstance(event, PointerMove):
        return _on_pointer_move(state, event.pointer)
    if isinstance(event, PointerUp):
        return _on_pointer_up(state, event.pointer)
    if isinstance(event, PointerLeave):
        return replace(state, gesture=IDLE) if state.is_dragging else state
    if isinstance(event, Wheel):
        if event.delta > 0:
            return zoom_at(state, Point(event.x, event.y), ZOOM_IN_FACTOR)
        if event.delta < 0:
            return zoom_at(state, Point(event.x, event.y), ZOOM_OUT_FACTOR)
        return state
    if isinstance(event, ZoomIn):
        return zoom_at(state, state.container.center(), ZOOM_IN_FACTOR)
    if isinstance(event, ZoomOut):
        return zoom_at(state, state.container.center(), ZOOM_OUT_FACTOR)
    if isinstance(event, ResetView):
        return replace(
            state,
            viewport=compute_fit_viewport(state.image, state.container),
            gesture=IDLE,
            user_adjusted=False,
        )
    if isinstance(event, Resize):
        return _on_resize(state, event.container)
    if isinstance(event, ImageLoaded):
        return replace(
            state,
            image=event.image,
            viewport=compute_fit_viewport(event.image, state.container),
            gesture=IDLE,
            user_adjusted=False,
        )
    if isinstance(event, ImageCleared):
        return replace(
            state,
            image=EMPTY_SIZE,
            viewport=IDENTITY_VIEWPORT,
            gesture=IDLE,
            user_adjusted=False,
        )
    raise TypeError(f"Unsupported gesture event: {event!r}")


def zoom_at(state: MapViewState, anchor: Point, factor: float) -> MapViewState:
    """Scale by *factor* while keeping the content under *anchor* stationary."""

    if not state.is_interactive:
        return state

    viewport = state.viewport
    new_scale = clamp_scale(viewport.scale * factor, state.image, state.container)
    if math.isclose(new_scale, viewport.scale, rel_tol=1e-12):
        return state

    ratio = new_scale / viewport.scale
    candidate = ViewportState(
        scale=new_scale,
        offset_x=anchor.x - (anchor.x - viewport.offset_x) * ratio,
        offset_y=anchor.y - (anchor.y - viewport.offset_y) * ratio,
    )
    committed = apply_constraints(candidate, state.image, state.container)
    return replace(state, viewport=committed, user_adjusted=True)


def _on_pointer_down(state: MapViewState, pointer: PointerInput) -> MapViewState:
    if state.is_dragging or not pointer.is_primary or not state.is_interactive:
        return state
    return replace(
        state,
        gesture=Dragging(start_pointer=pointer.position, start_offset=state.viewport.offset),
    )


def _on_pointer_move(state: MapViewState, pointer: PointerInput) -> MapViewState:
    gesture = state.gesture
    if not isinstance(gesture, Dragging):
        return state

    delta = pointer.position - gesture.start_pointer
    moved = gesture.moved or math.hypot(delta.x, delta.y) > CLICK_DRAG_THRESHOLD
    if not moved:
        # Jitter inside the click threshold leaves the view untouched.
        return state
    target = gesture.start_offset + delta
    committed = apply_constraints(
        state.viewport.with_offset(target.x, target.y),
        state.image,
        state.container,
    )
    return replace(
        state,
        viewport=committed,
        gesture=replace(gesture, moved=moved),
        user_adjusted=state.user_adjusted or committed != state.viewport,
    )


def _on_pointer_up(state: MapViewState, pointer: PointerInput) -> MapViewState:
    gesture = state.gesture
    if not isinstance(gesture, Dragging):
        return state
    click = None if gesture.moved else pointer.position
    return replace(state, gesture=IDLE, click=click)


def _on_resize(state: MapViewState, container: ContainerDimensions) -> MapViewState:
    if container == state.container:
        return state
    if not state.user_adjusted:
        viewport = compute_fit_viewport(state.image, container)
    else:
        viewport = apply_constraints(state.viewport, state.image, container)
    return replace(state, container=container, viewport=viewport)


class GestureController:
    """Stateful wrapper that feeds events through :func:`transition`."""

    def __init__(self, state: MapViewState | None = None) -> None:
        self._state = state or MapViewState()

    @property
    def state(self) -> MapViewState:
        return self._state

    def dispatch(self, event: GestureEvent) -> MapViewState:
        """Apply *event* and return the committed state."""

        self._state = transition(self._state, event)
        return self._state


__all__ = [
    "Dragging",
    "GestureController",
    "GestureEvent",
    "GestureState",
    "IDLE",
    "Idle",
    "ImageCleared",
    "ImageLoaded",
    "MIDDLE_BUTTON",
    "MapViewState",
    "PRIMARY_BUTTON",
    "PointerDown",
    "PointerInput",
    "PointerLeave",
    "PointerMove",
    "PointerUp",
    "ResetView",
    "Resize",
    "SECONDARY_BUTTON",
    "Wheel",
    "ZoomIn",
    "ZoomOut",
    "transition",
    "zoom_at",
]
