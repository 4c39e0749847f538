"""
Reusable HTTP client with retry logic, timeout handling, and session management,
plus the QObject worker used to run blocking calls off the GUI thread.
"""

import logging
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry
from typing import Optional, Dict, Any, Callable

from PyQt6.QtCore import QObject, pyqtSignal

from . import __version__

logger = logging.getLogger(__name__)

USER_AGENT = f"Icarus/{__version__} (+media-server dashboard)"


class ApiClient:
    """
    Reusable HTTP client with retry logic, timeout handling,
    and session management for all API calls.
    """
    def __init__(self, timeout: float = 10):
        self.session = self._create_session()
        self.session.headers.update({
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
        })
        self.timeout = timeout

    def _create_session(self) -> requests.Session:
        """
        Creates a requests session that retries failed connections.
        HTTP status codes are handed back untouched; the poll loop owns retries.
        """
        session = requests.Session()
        retry = Retry(
            total=2,
            read=0,
            connect=2,
            status=0,
            backoff_factor=0.3,
            allowed_methods=frozenset(["GET"]),
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        return session

    def get(self,
            url: str,
            params: Optional[Dict[str, Any]] = None,
            headers: Optional[Dict[str, str]] = None,
            timeout: Optional[float] = None) -> requests.Response:
        """
        Issue a GET request and return the raw response, whatever its status.

        Raises:
            requests.exceptions.RequestException: On network errors
        """
        request_timeout = timeout if timeout is not None else self.timeout
        # Params may carry the API key, so only their names are logged
        logger.debug(f"GET {url} params={sorted(params or {})}")
        try:
            response = self.session.get(url, params=params, headers=headers, timeout=request_timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"Network error on GET {url}: {e}")
            raise
        logger.debug(f"GET {url} -> {response.status_code}")
        return response

    def close(self):
        """Close the session and cleanup resources."""
        if self.session:
            self.session.close()

class ApiWorker(QObject):
    """
    Runs one blocking call (a fetch or a connection test) on a QThread.
    `finished` always fires exactly once, with (result, "") on success
    or (None, error text) when the call raised.
    """
    finished = pyqtSignal(object, str)

    def __init__(self, task_callable: Callable, *args, **kwargs):
        super().__init__()
        self.task_callable = task_callable
        self.args = args
        self.kwargs = kwargs

    def run(self):
        task_name = getattr(self.task_callable, '__qualname__', 'task')
        logger.debug(f"Worker running {task_name}")
        try:
            result = self.task_callable(*self.args, **self.kwargs)
        except Exception as e:
            logger.error(f"Worker task {task_name} failed: {e}", exc_info=True)
            self.finished.emit(None, str(e) or type(e).__name__)
            return
        self.finished.emit(result, "")
