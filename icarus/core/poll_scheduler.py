# icarus/core/poll_scheduler.py
"""
Repeating poll loop for one integration.

Each tick loads the integration's credential, runs the fetcher on a worker
thread and publishes the outcome as a PollResult. Failed ticks never stop
the timer: the loop keeps retrying at the same interval until stop().
"""

import logging
from enum import Enum
from typing import Callable, Dict, Optional, Set, Tuple

from PyQt6.QtCore import QObject, QThread, QTimer, pyqtSignal, pyqtSlot

from .api_client import ApiWorker
from .credential_store import CredentialStore
from .errors import FetchError, NotConfigured
from .event_bus import EventBus
from .fetcher import Fetcher
from .models import PollResult, PollSnapshot
from .utils import format_interval

logger = logging.getLogger(__name__)


class SchedulerState(Enum):
    IDLE = "idle"
    POLLING = "polling"
    STOPPED = "stopped"


class _FetchRelay(QObject):
    """
    Lives on the scheduler's thread and carries a fetch's sequence number,
    so worker signals are delivered back through queued connections.
    """
    def __init__(self, seq: int, on_result: Callable, on_done: Callable, parent: QObject):
        super().__init__(parent)
        self.seq = seq
        self.on_result = on_result
        self.on_done = on_done

    @pyqtSlot(object, str)
    def deliver(self, result, error: str):
        self.on_result(self.seq, result, error)

    @pyqtSlot()
    def release(self):
        self.on_done(self.seq)


class PollScheduler(QObject):
    """
    Owns the timer and the latest PollResult for one integration.

    Every fetch gets a sequence number. A result is published only if it is
    newer than the last published one and was issued after the last stop(),
    so a slow fetch can never overwrite the outcome of a later one.
    """
    result_changed = pyqtSignal(object)  # PollResult

    def __init__(self,
                 integration: str,
                 fetcher: Fetcher,
                 credential_store: CredentialStore,
                 event_bus: Optional[EventBus] = None,
                 run_in_thread: bool = True,
                 parent: Optional[QObject] = None):
        super().__init__(parent)
        self.integration = integration
        self.fetcher = fetcher
        self.credential_store = credential_store
        self.event_bus = event_bus
        self.run_in_thread = run_in_thread

        self._state = SchedulerState.IDLE
        self._interval: float = 0
        self._timer: Optional[QTimer] = None
        self._result = PollResult.loading()

        self._seq = 0
        self._published_seq = 0
        self._discard_upto = 0
        self._pending: Set[int] = set()
        self._threads: Dict[int, Tuple[QThread, ApiWorker, _FetchRelay]] = {}

    # --- Read-only state ---

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def current_result(self) -> PollResult:
        return self._result

    @property
    def is_polling(self) -> bool:
        return self._state is SchedulerState.POLLING

    @property
    def has_active_timer(self) -> bool:
        return self._timer is not None and self._timer.isActive()

    # --- Control ---

    def start(self, interval_seconds: float):
        """
        Fetch now, then every `interval_seconds`.
        Calling start while polling replaces the running timer.
        """
        if interval_seconds <= 0:
            raise ValueError(f"Poll interval must be positive, got {interval_seconds!r}")

        self._cancel_timer()
        self._interval = interval_seconds
        self._state = SchedulerState.POLLING

        timer = QTimer(self)
        timer.setInterval(int(interval_seconds * 1000))
        timer.timeout.connect(self._on_tick)
        self._timer = timer
        timer.start()

        logger.info(f"{self.integration}: polling every {format_interval(interval_seconds)}")
        self._dispatch()

    def stop(self):
        """Cancel the timer. Fetches still in flight finish, but their results are dropped."""
        self._cancel_timer()
        self._discard_upto = self._seq
        if self._state is not SchedulerState.STOPPED:
            logger.info(f"{self.integration}: polling stopped")
        self._state = SchedulerState.STOPPED

    def shutdown(self, timeout_ms: int = 5000):
        """Stop polling and wait for worker threads to exit."""
        self.stop()
        for thread, _worker, _relay in list(self._threads.values()):
            thread.quit()
            thread.wait(timeout_ms)
        self._threads.clear()
        self._pending.clear()

    def _cancel_timer(self):
        if self._timer is None:
            return
        self._timer.stop()
        self._timer.timeout.disconnect(self._on_tick)
        self._timer.deleteLater()
        self._timer = None

    # --- Ticks ---

    def _on_tick(self):
        if self._state is not SchedulerState.POLLING:
            return
        if self._pending:
            logger.debug(f"{self.integration}: previous fetch still running, skipping tick")
            return
        self._dispatch()

    def _dispatch(self):
        self._seq += 1
        seq = self._seq
        self._pending.add(seq)
        credential = self.credential_store.load(self.integration)

        if not self.run_in_thread:
            self._on_fetch_finished(seq, self.fetcher.fetch_status(credential), "")
            return

        thread = QThread()
        worker = ApiWorker(self.fetcher.fetch_status, credential)
        relay = _FetchRelay(seq, self._on_fetch_finished, self._release_thread, parent=self)
        self._threads[seq] = (thread, worker, relay)

        worker.moveToThread(thread)

        worker.finished.connect(relay.deliver)
        worker.finished.connect(thread.quit)
        worker.finished.connect(worker.deleteLater)

        thread.finished.connect(relay.release)
        thread.finished.connect(thread.deleteLater)

        thread.started.connect(worker.run)
        thread.start()

    def _release_thread(self, seq: int):
        entry = self._threads.pop(seq, None)
        if entry is not None:
            entry[2].deleteLater()

    def _on_fetch_finished(self, seq: int, outcome, error: str):
        self._pending.discard(seq)

        if self._state is not SchedulerState.POLLING or seq <= self._discard_upto:
            logger.debug(f"{self.integration}: dropping result of fetch #{seq} (stopped)")
            return
        if seq <= self._published_seq:
            logger.debug(f"{self.integration}: dropping stale result of fetch #{seq}")
            return
        self._published_seq = seq

        if error:
            outcome = FetchError(error)

        if isinstance(outcome, PollSnapshot):
            logger.debug(f"{self.integration}: {len(outcome.sessions)} active sessions")
            self._publish(PollResult.ready(outcome), "up")
        elif isinstance(outcome, FetchError):
            status = "unconfigured" if isinstance(outcome, NotConfigured) else "down"
            self._publish(PollResult.error(self._retry_message(outcome)), status)
        else:
            logger.error(f"{self.integration}: fetcher returned {type(outcome).__name__}")
            self._publish(PollResult.error(self._retry_message(FetchError("Unexpected fetch result"))), "down")

    def _retry_message(self, error: FetchError) -> str:
        return f"{error.user_message.rstrip('.')}. Retrying in {format_interval(self._interval)}..."

    def _publish(self, result: PollResult, status: str):
        self._result = result
        self.result_changed.emit(result)
        if self.event_bus is not None:
            self.event_bus.publish("snapshot_updated", self.integration, result)
            self.event_bus.publish("service_status_changed", self.integration, status)
