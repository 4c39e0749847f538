# icarus/plugins/plugin_tautulli.py
"""
Tautulli Plugin - live Plex activity
Polls Tautulli's get_activity command and lists the current sessions.
"""
import logging
from typing import List, Optional

from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QListWidget,
    QListWidgetItem, QProgressBar, QPushButton
)
from PyQt6.QtCore import Qt
from PyQt6.QtGui import QPixmap

from icarus.core.api_client import ApiClient
from icarus.core.credential_store import CredentialStore
from icarus.core.event_bus import EventBus
from icarus.core.fetcher import TautulliFetcher
from icarus.core.models import PollResult, Session
from icarus.core.plugin_base import PluginBase
from icarus.core.poll_scheduler import PollScheduler
from icarus.core.settings_manager import AppPreferences
from icarus.ui.thumbnails import THUMBNAIL_SIZE, ThumbnailLoader


class SessionRow(QWidget):
    """One row of the activity list: artwork, title, user and playback progress."""

    def __init__(self, session: Session, thumbnail_url: Optional[str] = None, parent=None):
        super().__init__(parent)
        self.thumbnail_url = thumbnail_url
        outer = QHBoxLayout(self)
        outer.setContentsMargins(6, 4, 6, 4)

        self.thumbnail = None
        if thumbnail_url:
            self.thumbnail = QLabel("🎬")
            self.thumbnail.setFixedSize(THUMBNAIL_SIZE, THUMBNAIL_SIZE)
            self.thumbnail.setAlignment(Qt.AlignmentFlag.AlignCenter)
            self.thumbnail.setStyleSheet("background-color: rgba(128, 128, 128, 60); border-radius: 8px;")
            outer.addWidget(self.thumbnail)

        layout = QVBoxLayout()
        outer.addLayout(layout, 1)

        title = QLabel(session.title)
        font = title.font()
        font.setBold(True)
        title.setFont(font)
        layout.addWidget(title)

        user = QLabel(f"User: {session.user}")
        user.setStyleSheet("color: #888;")
        layout.addWidget(user)

        if session.progress_percent is not None:
            progress = QProgressBar()
            progress.setRange(0, 100)
            progress.setValue(round(session.progress_percent))
            progress.setTextVisible(False)
            progress.setMaximumWidth(200)
            layout.addWidget(progress)

    def set_thumbnail(self, pixmap: QPixmap):
        if self.thumbnail is not None:
            self.thumbnail.setStyleSheet("")
            self.thumbnail.setPixmap(pixmap)


class TautulliTab(QWidget):
    """
    Activity view. Renders whatever the scheduler publishes.
    """
    def __init__(self, scheduler: PollScheduler, credentials: CredentialStore, thumbnails: ThumbnailLoader,
                 parent=None):
        super().__init__(parent)
        self.scheduler = scheduler
        self.credentials = credentials
        self.thumbnails = thumbnails
        self.rows: List[SessionRow] = []

        layout = QVBoxLayout(self)

        header = QHBoxLayout()
        header.addWidget(QLabel("<h2>Tautulli Activity</h2>"))
        header.addStretch()
        self.btn_refresh = QPushButton("Refresh Now")
        header.addWidget(self.btn_refresh)
        layout.addLayout(header)

        self.status_label = QLabel()
        self.status_label.setWordWrap(True)
        layout.addWidget(self.status_label)

        self.session_list = QListWidget()
        self.session_list.setAlternatingRowColors(True)
        layout.addWidget(self.session_list)

        self.scheduler.result_changed.connect(self.render)
        self.thumbnails.thumbnail_ready.connect(self._on_thumbnail_ready)
        self.render(self.scheduler.current_result)

    def render(self, result: PollResult):
        self.session_list.clear()
        self.rows = []

        if result.is_loading:
            self.status_label.setText("Loading Tautulli activity...")
            self.status_label.setStyleSheet("")
            return

        if result.is_error:
            self.status_label.setText(result.message)
            self.status_label.setStyleSheet("color: #F44336;")
            return

        sessions = result.snapshot.sessions
        fetched = result.snapshot.fetched_at.astimezone().strftime("%H:%M:%S")
        self.status_label.setText(f"{len(sessions)} active session(s), updated {fetched}")
        self.status_label.setStyleSheet("color: #888;")

        endpoint_url = self.credentials.load(TautulliFetcher.integration).endpoint_url
        for session in sessions:
            item = QListWidgetItem(self.session_list)
            item.setData(Qt.ItemDataRole.UserRole, session.id)
            thumb_url = session.full_thumbnail_url(endpoint_url)
            row = SessionRow(session, thumb_url)
            if thumb_url:
                cached = self.thumbnails.cached(thumb_url)
                if cached is not None:
                    row.set_thumbnail(cached)
                else:
                    self.thumbnails.request(thumb_url)
            self.rows.append(row)
            item.setSizeHint(row.sizeHint())
            self.session_list.setItemWidget(item, row)

    def _on_thumbnail_ready(self, url: str, pixmap: QPixmap):
        for row in self.rows:
            if row.thumbnail_url == url:
                row.set_thumbnail(pixmap)


class TautulliPlugin(PluginBase):
    """Tautulli live activity."""

    def __init__(self, logger: logging.Logger, preferences: AppPreferences, credentials: CredentialStore,
                 api_client: ApiClient, event_bus: EventBus):
        super().__init__(logger, preferences, credentials, api_client, event_bus)
        self.widget: Optional[TautulliTab] = None
        self.thumbnails: Optional[ThumbnailLoader] = None
        self.scheduler = PollScheduler(
            integration=TautulliFetcher.integration,
            fetcher=TautulliFetcher(api_client),
            credential_store=credentials,
            event_bus=event_bus,
        )
        self.event_bus.subscribe("refresh_interval_changed", self._on_interval_changed)
        self.event_bus.subscribe("settings_changed", self._on_settings_changed)

    def get_name(self) -> str:
        return TautulliFetcher.integration

    def get_widget(self) -> QWidget:
        if self.widget is None:
            self.thumbnails = ThumbnailLoader(self.api_client)
            self.widget = TautulliTab(self.scheduler, self.credentials, self.thumbnails)
            self.widget.btn_refresh.clicked.connect(self.on_activate)
        return self.widget

    def get_tab_name(self) -> str:
        return "Activity"

    def get_icon(self) -> str:
        return "▶️"

    def get_sort_key(self) -> int:
        return 10

    def on_activate(self):
        """Start (or restart) polling with the configured interval."""
        self.scheduler.start(self.preferences.refresh_interval)

    def on_deactivate(self):
        self.scheduler.stop()

    def _on_interval_changed(self, seconds: int):
        if self.scheduler.is_polling:
            self.logger.info(f"Tautulli refresh interval changed to {seconds}s, restarting poller")
            self.scheduler.start(seconds)

    def _on_settings_changed(self, integration: str):
        if integration in ("all", self.get_name()) and self.scheduler.is_polling:
            self.scheduler.start(self.preferences.refresh_interval)

    def cleanup(self):
        self.event_bus.unsubscribe("refresh_interval_changed", self._on_interval_changed)
        self.event_bus.unsubscribe("settings_changed", self._on_settings_changed)
        self.scheduler.shutdown()
        if self.thumbnails is not None:
            self.thumbnails.shutdown()
