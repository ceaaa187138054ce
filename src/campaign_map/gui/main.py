"""Entry point for the PySide6 campaign map window."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

from PySide6.QtCore import QPoint, Qt, QTimer
from PySide6.QtGui import QAction, QActionGroup, QKeySequence
from PySide6.QtWidgets import (
    QApplication,
    QComboBox,
    QDialog,
    QDialogButtonBox,
    QFileDialog,
    QFormLayout,
    QLabel,
    QLineEdit,
    QMainWindow,
    QMenu,
    QMessageBox,
    QPlainTextEdit,
    QWidget,
)

from ..errors import CampaignMapError, SettingsError, WaypointValidationError
from ..errors.handler import ErrorHandler
from ..map_view.controller import MapViewController
from ..map_view.map_widget import InteractiveMapWidget
from ..map_view.waypoints import (
    CATEGORY_CATALOG,
    StagedWaypoint,
    Waypoint,
    category_info,
    parse_category,
)
from ..settings.manager import SettingsManager
from ..storage import JsonFileKeyValueStore, KeyValueWaypointRepository, MapRecord, MapRepository
from ..utils.console_logger import ensure_console_logger

LOGGER = logging.getLogger(__name__)

_IMAGE_FILTER = "Images (*.png *.jpg *.jpeg *.webp *.bmp *.gif)"


class WaypointDialog(QDialog):
    """Collect the title and description for a staged waypoint."""

    def __init__(self, staged: StagedWaypoint, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.setWindowTitle("Add Waypoint")

        info = category_info(staged.category)
        self._title_edit = QLineEdit(self)
        self._title_edit.setPlaceholderText("Waypoint name")
        self._description_edit = QPlainTextEdit(self)
        self._description_edit.setPlaceholderText("Optional notes")

        layout = QFormLayout(self)
        layout.addRow("Category", QLabel(info.label, self))
        layout.addRow("Position", QLabel(f"{staged.x_percent:.1f}%, {staged.y_percent:.1f}%", self))
        layout.addRow("Title", self._title_edit)
        layout.addRow("Description", self._description_edit)

        buttons = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel,
            parent=self,
        )
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)
        layout.addRow(buttons)

    def title(self) -> str:
        return self._title_edit.text()

    def description(self) -> str:
        return self._description_edit.toPlainText()


class MapWindow(QMainWindow):
    """Primary application window that hosts the interactive campaign map."""

    def __init__(self, settings: SettingsManager) -> None:
        super().__init__()
        self.resize(1024, 768)

        self._settings = settings
        self._current_map: Optional[MapRecord] = None
        store = JsonFileKeyValueStore(settings.storage_path())
        self._maps = MapRepository(store)
        self._waypoints = KeyValueWaypointRepository(store)

        preferences = settings.map_preferences()
        default_category = preferences.default_category
        self._controller = MapViewController(
            self._waypoints,
            category=default_category,
            error_handler=ErrorHandler(LOGGER),
            parent=self,
        )
        self._map_widget = InteractiveMapWidget(
            self,
            controller=self._controller,
            marker_radius=preferences.marker_radius,
            show_labels=preferences.show_labels,
        )
        self._map_widget.set_wheel_action(preferences.wheel_action)
        self.setCentralWidget(self._map_widget)

        self._category_picker = QComboBox(self)
        for info in CATEGORY_CATALOG:
            self._category_picker.addItem(info.label, info.category.value)
        self._category_picker.setCurrentIndex(self._category_picker.findData(default_category.value))
        self._category_picker.currentIndexChanged.connect(self._on_category_changed)

        self._create_actions()
        self._create_menus()
        self._create_toolbar()

        self._controller.waypointStaged.connect(self._on_waypoint_staged)
        self._controller.errorOccurred.connect(self._on_error)
        self._controller.viewChanged.connect(self._update_window_title)
        self._map_widget.imageLoadFailed.connect(self._on_error)
        self._map_widget.waypointContextRequested.connect(self._show_waypoint_menu)
        self._settings.settingsChanged.connect(self._on_setting_changed)

        self._restore_active_map()
        self._update_window_title()

    # ------------------------------------------------------------------
    @property
    def map_widget(self) -> InteractiveMapWidget:
        return self._map_widget

    # ------------------------------------------------------------------
    def _create_actions(self) -> None:
        """Assemble actions that appear in the menu bar."""

        self._action_open_map = QAction("Open Map Image…", self)
        self._action_open_map.setShortcut(QKeySequence.StandardKey.Open)
        self._action_open_map.triggered.connect(self._open_map_image)

        self._action_zoom_in = QAction("Zoom In", self)
        self._action_zoom_in.setShortcut(Qt.Key.Key_Plus)
        self._action_zoom_in.triggered.connect(self._map_widget.zoom_in)

        self._action_zoom_out = QAction("Zoom Out", self)
        self._action_zoom_out.setShortcut(Qt.Key.Key_Minus)
        self._action_zoom_out.triggered.connect(self._map_widget.zoom_out)

        self._action_reset_view = QAction("Reset View", self)
        self._action_reset_view.setShortcut(Qt.Key.Key_0)
        self._action_reset_view.triggered.connect(self._map_widget.reset_view)

        self._action_show_labels = QAction("Show Labels", self)
        self._action_show_labels.setCheckable(True)
        self._action_show_labels.setChecked(self._settings.map_preferences().show_labels)
        self._action_show_labels.toggled.connect(self._toggle_labels)

    # ------------------------------------------------------------------
    def _create_menus(self) -> None:
        """Create the menu structure shown in the window."""

        menu_bar = self.menuBar()

        file_menu = menu_bar.addMenu("File")
        file_menu.addAction(self._action_open_map)
        self._maps_menu = file_menu.addMenu("Switch Map")
        self._maps_menu.aboutToShow.connect(self._populate_maps_menu)

        view_menu = menu_bar.addMenu("View")
        view_menu.addAction(self._action_zoom_in)
        view_menu.addAction(self._action_zoom_out)
        view_menu.addSeparator()
        view_menu.addAction(self._action_reset_view)
        view_menu.addSeparator()
        view_menu.addAction(self._action_show_labels)

    def _create_toolbar(self) -> None:
        toolbar = self.addToolBar("Map")
        toolbar.addAction(self._action_zoom_in)
        toolbar.addAction(self._action_zoom_out)
        toolbar.addAction(self._action_reset_view)
        toolbar.addSeparator()
        toolbar.addWidget(QLabel("Category: ", self))
        toolbar.addWidget(self._category_picker)

    # ------------------------------------------------------------------
    def _restore_active_map(self) -> None:
        preferred = self._settings.get("last_map_id")
        record: Optional[MapRecord] = None
        try:
            if preferred:
                record = self._maps.get(preferred)
        except CampaignMapError:
            LOGGER.info("Last map %s is no longer available", preferred)
        if record is None:
            record = self._maps.active_map()
        if record is not None:
            self._show_map(record)

    def _show_map(self, record: MapRecord) -> None:
        self._current_map = record
        self._map_widget.set_image(record.image_url)
        self._controller.switch_map(record.id)
        try:
            self._settings.set("last_map_id", record.id)
        except SettingsError as exc:
            LOGGER.warning("Unable to remember the selected map: %s", exc)
        self._update_window_title()

    def _open_map_image(self) -> None:
        """Register a new map image and make it the active map."""

        path, _ = QFileDialog.getOpenFileName(self, "Select map image", str(Path.home()), _IMAGE_FILTER)
        if not path:
            return
        try:
            record = self._maps.add_map(Path(path).stem, path)
        except CampaignMapError as exc:
            QMessageBox.critical(self, "Error", f"Unable to add the map:\n{exc}")
            return
        self._show_map(record)

    def _populate_maps_menu(self) -> None:
        self._maps_menu.clear()
        group = QActionGroup(self._maps_menu)
        for record in self._maps.list_maps():
            action = self._maps_menu.addAction(record.title)
            action.setCheckable(True)
            action.setChecked(self._current_map is not None and record.id == self._current_map.id)
            group.addAction(action)
            action.triggered.connect(lambda _checked=False, map_id=record.id: self._activate_map(map_id))
        if not group.actions():
            placeholder = self._maps_menu.addAction("No maps yet")
            placeholder.setEnabled(False)

    def _activate_map(self, map_id: str) -> None:
        try:
            record = self._maps.set_active(map_id)
        except CampaignMapError as exc:
            QMessageBox.critical(self, "Error", f"Unable to switch maps:\n{exc}")
            return
        self._show_map(record)

    # ------------------------------------------------------------------
    def _on_category_changed(self, index: int) -> None:
        category = parse_category(self._category_picker.itemData(index))
        self._controller.set_category(category)

    def _on_waypoint_staged(self, staged: Optional[StagedWaypoint]) -> None:
        if staged is None:
            return
        # Defer the modal dialog until the mouse release has been fully handled.
        QTimer.singleShot(0, self._prompt_for_waypoint)

    def _prompt_for_waypoint(self) -> None:
        staged = self._controller.staged
        if staged is None:
            return
        dialog = WaypointDialog(staged, self)
        while dialog.exec() == QDialog.DialogCode.Accepted:
            try:
                self._controller.confirm_waypoint(dialog.title(), dialog.description())
            except WaypointValidationError as exc:
                QMessageBox.warning(self, "Add Waypoint", str(exc))
                continue
            return
        self._controller.cancel_waypoint()

    def _show_waypoint_menu(self, waypoint: Waypoint, global_pos: QPoint) -> None:
        menu = QMenu(self)
        header = menu.addAction(f"{category_info(waypoint.category).label}: {waypoint.title}")
        header.setEnabled(False)
        menu.addSeparator()
        delete_action = menu.addAction("Delete Waypoint")
        chosen = menu.exec(global_pos)
        if chosen is delete_action:
            self._controller.delete_waypoint(waypoint.id)

    def _toggle_labels(self, enabled: bool) -> None:
        try:
            self._settings.set("map.show_labels", enabled)
        except SettingsError as exc:
            LOGGER.warning("Unable to store label preference: %s", exc)
            self._map_widget.set_show_labels(enabled)

    def _on_setting_changed(self, key: str, value: object) -> None:
        if key == "map.show_labels":
            self._map_widget.set_show_labels(bool(value))
        elif key == "map.marker_radius":
            self._map_widget.set_marker_radius(int(value))
        elif key == "map.wheel_action":
            self._map_widget.set_wheel_action(str(value))
        elif key == "map.default_category":
            category = parse_category(value)
            self._category_picker.setCurrentIndex(self._category_picker.findData(category.value))

    def _on_error(self, message: str) -> None:
        self.statusBar().showMessage(message, 5000)

    # ------------------------------------------------------------------
    def _update_window_title(self, *_args) -> None:
        """Include the map title and current zoom in the window title."""

        title = self._current_map.title if self._current_map is not None else "No map"
        scale = self._controller.state.viewport.scale
        self.setWindowTitle(f"Campaign Map: {title} ({scale * 100:.0f}%)")


def main() -> int:
    """Application entry point used by ``campaign-map-gui``."""

    ensure_console_logger()
    app = QApplication(sys.argv)

    settings = SettingsManager()
    try:
        settings.load()
    except SettingsError as exc:
        QMessageBox.critical(None, "Error", f"Failed to load settings:\n{exc}")
        return 1

    window = MapWindow(settings)
    window.show()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
