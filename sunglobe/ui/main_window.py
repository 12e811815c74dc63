"""PySide6 main window hosting the globe and the location search bar."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from PySide6.QtCore import QObject, QThread, QTimer, Signal
from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMainWindow,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from sunglobe.models import GlobeOptions, Marker
from sunglobe.services.engine import GlobeController, GlobeEngine
from sunglobe.services.geocoding import Geocoder, GeocodingError, NominatimGeocoder
from sunglobe.ui.constants import CLOCK_REFRESH_MS
from sunglobe.ui.opengl.globe_widget import GlobeWidget
from sunglobe.ui.qt_scheduler import QtScheduler

logger = logging.getLogger(__name__)

# Lookups still running after their window closed; released on thread finish.
_DETACHED_LOOKUPS: set[tuple[QThread, "GeocodeWorker"]] = set()


class GeocodeWorker(QObject):
    """Background worker that resolves one query off the GUI thread."""

    finished = Signal(object)
    error = Signal(str)

    def __init__(self, geocoder: Geocoder, query: str) -> None:
        super().__init__()
        self._geocoder = geocoder
        self._query = query

    def run(self) -> None:
        try:
            marker = self._geocoder.lookup(self._query)
        except GeocodingError as exc:
            self.error.emit(str(exc))
            return
        self.finished.emit(marker)


class GlobeWindow(QMainWindow):
    """Top bar with a UTC clock and search field over the sunlit globe."""

    def __init__(
        self,
        options: GlobeOptions | None = None,
        geocoder: Geocoder | None = None,
    ) -> None:
        super().__init__()
        self.setWindowTitle("Sunlit Globe")
        self._options = options or GlobeOptions()
        self._geocoder = geocoder or NominatimGeocoder()
        self._geocode_thread: QThread | None = None
        self._geocode_worker: GeocodeWorker | None = None
        self.globe_widget = GlobeWidget()
        self._scheduler = QtScheduler(self)
        self._engine = GlobeEngine(self.globe_widget, self._scheduler, self._options)
        self.controller: GlobeController | None = None
        self._clock_timer = QTimer(self)
        self._clock_timer.setInterval(CLOCK_REFRESH_MS)
        self._clock_timer.timeout.connect(self._refresh_clock)
        self._build_ui()
        self.controller = self._engine.start()
        self._refresh_clock()
        self._clock_timer.start()

    def _build_ui(self) -> None:
        central_widget = QWidget(self)
        self.setCentralWidget(central_widget)
        root_layout = QVBoxLayout(central_widget)
        top_row = QHBoxLayout()
        self.time_label = QLabel()
        self.time_label.setStyleSheet("color: lightblue; font-family: monospace;")
        top_row.addWidget(self.time_label)
        self.location_input = QLineEdit()
        self.location_input.setPlaceholderText("Enter a city, address, or lat,lng")
        self.location_input.returnPressed.connect(self._submit_location)
        top_row.addWidget(self.location_input, stretch=1)
        self.locate_button = QPushButton("Go")
        self.locate_button.clicked.connect(self._submit_location)
        top_row.addWidget(self.locate_button)
        root_layout.addLayout(top_row)
        root_layout.addWidget(self.globe_widget, stretch=1)
        self.status_label = QLabel("")
        self.status_label.setWordWrap(True)
        root_layout.addWidget(self.status_label)

    def _refresh_clock(self) -> None:
        now = datetime.now(timezone.utc)
        self.time_label.setText(f"{now:%Y-%m-%d %H:%M:%S} UTC")

    def _set_locating(self, busy: bool) -> None:
        self.location_input.setEnabled(not busy)
        self.locate_button.setEnabled(not busy)
        self.locate_button.setText("Locating…" if busy else "Go")

    def _submit_location(self) -> None:
        query = self.location_input.text().strip()
        if not query or self._geocode_thread is not None:
            return
        self._set_locating(True)
        self.status_label.setText("")
        thread = QThread(self)
        worker = GeocodeWorker(self._geocoder, query)
        worker.moveToThread(thread)
        thread.started.connect(worker.run)
        worker.finished.connect(self._handle_location_resolved)
        worker.error.connect(self._handle_location_error)
        worker.finished.connect(thread.quit)
        worker.error.connect(thread.quit)
        thread.finished.connect(self._cleanup_geocode_thread)
        self._geocode_thread = thread
        self._geocode_worker = worker
        thread.start()

    def _handle_location_resolved(self, marker: Marker) -> None:
        self._set_locating(False)
        if self.controller is not None and self.controller.show_location(marker):
            self.status_label.setText(marker.label)

    def _handle_location_error(self, message: str) -> None:
        self._set_locating(False)
        logger.info("Location lookup failed: %s", message)
        self.status_label.setText(message)

    def _cleanup_geocode_thread(self) -> None:
        if self._geocode_worker is not None:
            self._geocode_worker.deleteLater()
        if self._geocode_thread is not None:
            self._geocode_thread.deleteLater()
        self._geocode_worker = None
        self._geocode_thread = None

    def _detach_geocode_thread(self) -> None:
        """Let an in-flight lookup finish on its own, with its result dropped.

        A blocking request cannot be interrupted, so the thread is reparented
        away from the window and kept alive until it finishes.
        """
        thread, worker = self._geocode_thread, self._geocode_worker
        if thread is None or worker is None:
            return
        self._geocode_thread = None
        self._geocode_worker = None
        worker.finished.disconnect(self._handle_location_resolved)
        worker.error.disconnect(self._handle_location_error)
        thread.finished.disconnect(self._cleanup_geocode_thread)
        thread.setParent(None)
        pending = (thread, worker)
        _DETACHED_LOOKUPS.add(pending)

        def _release() -> None:
            _DETACHED_LOOKUPS.discard(pending)
            worker.deleteLater()
            thread.deleteLater()

        thread.finished.connect(_release)
        if thread.isFinished():
            _release()
        logger.debug("Detached running location lookup on close")

    def closeEvent(self, event: QCloseEvent) -> None:
        self._clock_timer.stop()
        if self.controller is not None:
            self.controller.teardown()
        self._detach_geocode_thread()
        super().closeEvent(event)
