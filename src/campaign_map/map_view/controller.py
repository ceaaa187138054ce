"""Controller that owns the viewport engine, waypoint placement and the store."""

from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import QObject, Signal

from ..errors import CampaignMapError, WaypointNotFoundError
from ..errors.handler import ErrorHandler, ErrorSeverity
from ..storage.repository import WaypointPersistence
from .gestures import (
    GestureController,
    GestureEvent,
    ImageCleared,
    ImageLoaded,
    MapViewState,
    PointerDown,
    PointerInput,
    PointerLeave,
    PointerMove,
    PointerUp,
    ResetView,
    Resize,
    Wheel,
    ZoomIn,
    ZoomOut,
)
from .viewport import Point, Size
from .waypoints import (
    ProjectedWaypoint,
    StagedWaypoint,
    Waypoint,
    WaypointCategory,
    WaypointPlacer,
    WaypointStore,
)

LOGGER = logging.getLogger(__name__)


class MapViewController(QObject):
    """Encapsulate viewport state, waypoint placement and persistence calls.

    The controller is toolkit-light: it only relies on ``QObject`` signals so
    widgets, tests and alternative front ends observe the same notifications.
    Persistence runs synchronously; the store is updated before the call and
    rolled back when the collaborator reports a failure.
    """

    viewChanged = Signal(object)
    """Signal emitted with the committed :class:`MapViewState`."""

    waypointStaged = Signal(object)
    """Signal emitted with the staged candidate, or ``None`` once it is cleared."""

    waypointsChanged = Signal()
    waypointCreated = Signal(object)
    waypointDeleted = Signal(str)
    errorOccurred = Signal(str)

    def __init__(
        self,
        persistence: Optional[WaypointPersistence] = None,
        *,
        category: WaypointCategory = WaypointCategory.LOCATION,
        error_handler: Optional[ErrorHandler] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._persistence = persistence
        self._gestures = GestureController()
        self._placer = WaypointPlacer(category)
        self._store = WaypointStore()
        self._map_id: Optional[str] = None
        self._placement_enabled = True
        self._error_handler = error_handler or ErrorHandler(LOGGER)
        self._error_handler.register_ui_callback(self._report_error)

    # ------------------------------------------------------------------
    # State accessors
    # ------------------------------------------------------------------
    @property
    def state(self) -> MapViewState:
        return self._gestures.state

    @property
    def store(self) -> WaypointStore:
        return self._store

    @property
    def staged(self) -> Optional[StagedWaypoint]:
        return self._placer.staged

    @property
    def category(self) -> WaypointCategory:
        return self._placer.category

    @property
    def map_id(self) -> Optional[str]:
        return self._map_id

    @property
    def placement_enabled(self) -> bool:
        return self._placement_enabled

    def set_placement_enabled(self, enabled: bool) -> None:
        """Allow or forbid click-to-place (read-only viewers only pan and zoom)."""

        self._placement_enabled = bool(enabled)
        if not self._placement_enabled:
            self.cancel_waypoint()

    def set_category(self, category: object) -> None:
        self._placer.set_category(category)
        if self._placer.staged is not None:
            self.waypointStaged.emit(self._placer.staged)

    # ------------------------------------------------------------------
    # Engine events
    # ------------------------------------------------------------------
    def dispatch(self, event: GestureEvent) -> MapViewState:
        """Feed *event* through the gesture reducer and publish the result."""

        previous = self._gestures.state
        state = self._gestures.dispatch(event)
        if (state.viewport, state.image, state.container) != (
            previous.viewport,
            previous.image,
            previous.container,
        ):
            self.viewChanged.emit(state)
        if state.click is not None:
            self._stage_click(state.click)
        return state

    def pointer_down(self, x: float, y: float, buttons: int = 1) -> MapViewState:
        return self.dispatch(PointerDown(PointerInput(x, y, buttons)))

    def pointer_move(self, x: float, y: float, buttons: int = 1) -> MapViewState:
        return self.dispatch(PointerMove(PointerInput(x, y, buttons)))

    def pointer_up(self, x: float, y: float, buttons: int = 1) -> MapViewState:
        return self.dispatch(PointerUp(PointerInput(x, y, buttons)))

    def pointer_leave(self) -> MapViewState:
        return self.dispatch(PointerLeave())

    def wheel(self, x: float, y: float, delta: float) -> MapViewState:
        return self.dispatch(Wheel(x, y, delta))

    def zoom_in(self) -> MapViewState:
        return self.dispatch(ZoomIn())

    def zoom_out(self) -> MapViewState:
        return self.dispatch(ZoomOut())

    def reset_view(self) -> MapViewState:
        return self.dispatch(ResetView())

    def resize(self, width: int, height: int) -> MapViewState:
        return self.dispatch(Resize(Size(int(width), int(height))))

    def load_image(self, width: int, height: int) -> MapViewState:
        """Report the native size of a freshly loaded (or replaced) map image.

        Any staged candidate refers to the previous image and is discarded.
        """

        self.cancel_waypoint()
        return self.dispatch(ImageLoaded(Size(int(width), int(height))))

    def clear_image(self) -> MapViewState:
        self.cancel_waypoint()
        return self.dispatch(ImageCleared())

    # ------------------------------------------------------------------
    # Waypoints
    # ------------------------------------------------------------------
    def switch_map(self, map_id: Optional[str]) -> list[Waypoint]:
        """Make *map_id* current and load its waypoints from persistence."""

        self._map_id = map_id
        self.cancel_waypoint()
        waypoints: list[Waypoint] = []
        if self._persistence is not None:
            try:
                records = self._persistence.load_waypoints(map_id)
            except CampaignMapError as exc:
                self._error_handler.handle(exc, ErrorSeverity.ERROR, {"map_id": map_id})
                records = []
            waypoints = [Waypoint.from_record(record) for record in records]
        self._store.replace_all(waypoints)
        self.waypointsChanged.emit()
        return waypoints

    def projected_waypoints(self) -> list[ProjectedWaypoint]:
        state = self.state
        return self._store.project(state.image, state.viewport)

    def waypoint_at(self, x: float, y: float, radius: float) -> Optional[Waypoint]:
        state = self.state
        return self._store.waypoint_at(Point(x, y), state.image, state.viewport, radius)

    def confirm_waypoint(self, title: str, description: str = "") -> Optional[Waypoint]:
        """Confirm the staged candidate and persist it.

        Raises :class:`~campaign_map.errors.WaypointValidationError` for an
        empty title, leaving the candidate staged so the form can be fixed.
        Returns ``None`` when nothing was staged or persistence failed.
        """

        draft = self._placer.confirm(title, description, map_id=self._map_id)
        if draft is None:
            return None
        self.waypointStaged.emit(None)

        provisional = self._store.add_optimistic(draft)
        self.waypointsChanged.emit()
        if self._persistence is None:
            self.waypointCreated.emit(provisional)
            return provisional

        record = provisional.to_record()
        del record["id"]
        try:
            stored = self._persistence.create_waypoint(record)
        except CampaignMapError as exc:
            self._store.reconcile(provisional.id, None)
            self.waypointsChanged.emit()
            self._error_handler.handle(exc, ErrorSeverity.ERROR, {"title": draft.title})
            return None

        waypoint = self._store.reconcile(provisional.id, Waypoint.from_record(stored))
        self.waypointsChanged.emit()
        if waypoint is not None:
            self.waypointCreated.emit(waypoint)
        return waypoint

    def cancel_waypoint(self) -> None:
        if self._placer.cancel() is not None:
            self.waypointStaged.emit(None)

    def delete_waypoint(self, waypoint_id: str) -> bool:
        """Remove *waypoint_id* optimistically; restore it if persistence fails."""

        removed = self._store.remove(waypoint_id)
        if removed is None:
            return False
        self.waypointsChanged.emit()

        if self._persistence is not None and not removed.is_pending:
            try:
                self._persistence.delete_waypoint(waypoint_id)
            except WaypointNotFoundError:
                LOGGER.warning("Waypoint %s was already gone from storage", waypoint_id)
            except CampaignMapError as exc:
                self._store.restore(removed)
                self.waypointsChanged.emit()
                self._error_handler.handle(exc, ErrorSeverity.ERROR, {"waypoint_id": waypoint_id})
                return False

        self.waypointDeleted.emit(waypoint_id)
        return True

    # ------------------------------------------------------------------
    def _stage_click(self, click: Point) -> None:
        if not self._placement_enabled:
            return
        state = self.state
        staged = self._placer.stage_click(click, state.image, state.viewport)
        if staged is not None:
            self.waypointStaged.emit(staged)

    def _report_error(self, message: str, severity: ErrorSeverity) -> None:
        self.errorOccurred.emit(message)


__all__ = ["MapViewController"]
