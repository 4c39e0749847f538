# icarus/ui/thumbnails.py
"""
Session artwork. Images are downloaded on one long-lived worker thread
through the shared ApiClient and turned into pixmaps on the GUI thread.
"""
import logging
from typing import Dict, Optional, Set

import requests
from urllib3.exceptions import HTTPError as Urllib3Error
from PyQt6.QtCore import QObject, QThread, Qt, pyqtSignal, pyqtSlot
from PyQt6.QtGui import QPainter, QPainterPath, QPixmap

from icarus.core.api_client import ApiClient

logger = logging.getLogger(__name__)

THUMBNAIL_SIZE = 50
THUMBNAIL_RADIUS = 8


def rounded_thumbnail(pixmap: QPixmap, size: int = THUMBNAIL_SIZE, radius: int = THUMBNAIL_RADIUS) -> QPixmap:
    """Scale to fit a size x size square and clip to a rounded rectangle."""
    scaled = pixmap.scaled(size, size, Qt.AspectRatioMode.KeepAspectRatio,
                           Qt.TransformationMode.SmoothTransformation)
    result = QPixmap(scaled.size())
    result.fill(Qt.GlobalColor.transparent)

    painter = QPainter(result)
    painter.setRenderHint(QPainter.RenderHint.Antialiasing)
    path = QPainterPath()
    path.addRoundedRect(0, 0, scaled.width(), scaled.height(), radius, radius)
    painter.setClipPath(path)
    painter.drawPixmap(0, 0, scaled)
    painter.end()
    return result


class ThumbnailWorker(QObject):
    """Lives on the loader thread. Emits the raw bytes, or b"" on failure."""
    loaded = pyqtSignal(str, bytes)

    def __init__(self, api_client: ApiClient):
        super().__init__()
        self.api_client = api_client

    @pyqtSlot(str)
    def load(self, url: str):
        try:
            response = self.api_client.get(url)
        except (requests.exceptions.RequestException, Urllib3Error) as e:
            logger.debug(f"Thumbnail {url} failed: {e}")
            self.loaded.emit(url, b"")
            return
        if response.status_code != 200:
            logger.debug(f"Thumbnail {url} -> HTTP {response.status_code}")
            self.loaded.emit(url, b"")
            return
        self.loaded.emit(url, response.content)


class ThumbnailLoader(QObject):
    """
    Caches thumbnails by URL. Each URL is downloaded at most once at a time;
    failed downloads are retried the next time the URL is requested.
    """
    thumbnail_ready = pyqtSignal(str, QPixmap)
    _requested = pyqtSignal(str)

    def __init__(self, api_client: ApiClient, parent=None):
        super().__init__(parent)
        self._cache: Dict[str, QPixmap] = {}
        self._pending: Set[str] = set()

        self._thread = QThread()
        self._worker = ThumbnailWorker(api_client)
        self._worker.moveToThread(self._thread)
        self._requested.connect(self._worker.load)
        self._worker.loaded.connect(self._on_loaded)
        self._thread.finished.connect(self._worker.deleteLater)
        self._thread.start()

    def cached(self, url: str) -> Optional[QPixmap]:
        return self._cache.get(url)

    def request(self, url: str):
        if url in self._cache or url in self._pending:
            return
        self._pending.add(url)
        self._requested.emit(url)

    @pyqtSlot(str, bytes)
    def _on_loaded(self, url: str, data: bytes):
        self._pending.discard(url)
        if not data:
            return
        pixmap = QPixmap()
        if not pixmap.loadFromData(data):
            logger.warning(f"Thumbnail {url} is not an image")
            return
        pixmap = rounded_thumbnail(pixmap)
        self._cache[url] = pixmap
        self.thumbnail_ready.emit(url, pixmap)

    def shutdown(self, timeout_ms: int = 5000):
        self._thread.quit()
        self._thread.wait(timeout_ms)
