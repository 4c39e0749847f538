"""
Logging setup: console output plus a Qt handler that forwards records
to the GUI log tab.
"""

import logging
import sys
from typing import Callable, Optional

from PyQt6.QtCore import QObject, pyqtSignal

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(name)s - %(message)s'


class QtLogHandler(logging.Handler, QObject):
    """
    Custom logging handler that emits a Qt signal with the log message.
    This allows safe logging from worker threads to the GUI.
    """
    log_updated = pyqtSignal(str)

    def __init__(self, *args, **kwargs):
        logging.Handler.__init__(self, *args, **kwargs)
        QObject.__init__(self)

    def emit(self, record):
        """
        Emit the log message as a formatted string via Qt signal.
        """
        msg = self.format(record)
        self.log_updated.emit(msg)


def setup_logging(log_widget_append_slot: Optional[Callable[[str], None]] = None,
                  level: int = logging.INFO) -> logging.Logger:
    """
    Configures the root logger with a console handler and, when a slot is
    given, the custom Qt handler for GUI display.

    Args:
        log_widget_append_slot: Qt slot (function) to receive log messages
        level: Root log level

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger()
    logger.setLevel(level)

    # Clear existing handlers to avoid duplicates
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    formatter = logging.Formatter(LOG_FORMAT)

    if log_widget_append_slot is not None:
        qt_handler = QtLogHandler()
        qt_handler.setFormatter(formatter)
        qt_handler.log_updated.connect(log_widget_append_slot)
        logger.addHandler(qt_handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # requests/urllib3 are chatty at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    logger.info("Logging system initialized")
    return logger
