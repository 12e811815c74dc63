"""Startup splash with a texture-loading progress bar."""

from __future__ import annotations

from PySide6.QtCore import Qt
from PySide6.QtGui import QColor, QPixmap
from PySide6.QtWidgets import QLabel, QProgressBar, QSplashScreen

SPLASH_SIZE = (480, 200)


def blank_splash_pixmap(width: int = SPLASH_SIZE[0], height: int = SPLASH_SIZE[1]) -> QPixmap:
    pixmap = QPixmap(width, height)
    pixmap.fill(QColor(2, 4, 10))
    return pixmap


class LoadingSplashScreen(QSplashScreen):
    """Splash screen with a status label above a progress bar."""

    def __init__(self, pixmap: QPixmap | None = None) -> None:
        pixmap = pixmap if pixmap is not None else blank_splash_pixmap()
        super().__init__(pixmap)
        bar_width = max(200, min(pixmap.width() - 40, 420))
        bar_height = 22
        bar_x = (pixmap.width() - bar_width) // 2
        bar_y = pixmap.height() - bar_height - 20

        self._title = QLabel("Sunlit Globe", self)
        self._title.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._title.setStyleSheet("color: #9fd3ff; font-size: 22px; font-weight: 600;")
        self._title.setGeometry(10, 24, pixmap.width() - 20, 36)

        self._label = QLabel("Loading textures…", self)
        self._label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._label.setStyleSheet("color: white; font-size: 13px;")
        self._label.setGeometry(10, bar_y - 30, pixmap.width() - 20, 22)

        self._progress = QProgressBar(self)
        self._progress.setRange(0, 100)
        self._progress.setValue(0)
        self._progress.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._progress.setFormat("0%")
        self._progress.setGeometry(bar_x, bar_y, bar_width, bar_height)
        self._progress.setStyleSheet(
            """
            QProgressBar {
                background-color: rgba(255, 255, 255, 30);
                color: white;
                border: 1px solid rgba(159, 211, 255, 160);
                border-radius: 5px;
            }
            QProgressBar::chunk {
                background-color: #ffdd00;
                border-radius: 4px;
            }
            """
        )

    @property
    def message(self) -> str:
        return self._label.text()

    @property
    def percent(self) -> int:
        return self._progress.value()

    def update_status(self, message: str, progress: float) -> None:
        percent = int(max(0.0, min(1.0, progress)) * 100)
        self._label.setText(message)
        self._progress.setValue(percent)
        self._progress.setFormat(f"{percent}%")
