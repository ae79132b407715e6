"""Centralized error event bus for user-facing error reporting.

Components publish errors here; the UI layer subscribes and shows them
(the equivalent of a snackbar or toast), tests subscribe to assert on them.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from log_config.logger import get_logger

logger = get_logger(__name__)


class ErrorSeverity(Enum):
    """Error severity levels."""

    INFO = "info"  # Informational, not really an error
    WARNING = "warning"  # Warning, operation continues
    ERROR = "error"  # Error occurred, operation may fail
    CRITICAL = "critical"  # Session unusable until reinitialized


class ErrorCategory(Enum):
    """Error categories for classification."""

    SESSION = "session"
    CAMERA = "camera"
    PERMISSION = "permission"
    TRACKING = "tracking"
    RENDERING = "rendering"
    ASSETS = "assets"
    CONFIG = "config"
    SYSTEM = "system"


_LOG_LEVELS = {
    ErrorSeverity.INFO: "INFO",
    ErrorSeverity.WARNING: "WARNING",
    ErrorSeverity.ERROR: "ERROR",
    ErrorSeverity.CRITICAL: "CRITICAL",
}


@dataclass
class ErrorEvent:
    """Error event with context information."""

    category: ErrorCategory
    severity: ErrorSeverity
    message: str
    source: str
    timestamp: float = field(default_factory=time.time)
    exception: Optional[Exception] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        exc_info = f" ({self.exception.__class__.__name__})" if self.exception else ""
        return f"[{self.severity.value.upper()}] {self.category.value}/{self.source}: {self.message}{exc_info}"


ErrorCallback = Callable[[ErrorEvent], None]


class ErrorEventBus:
    """Publish-subscribe bus for error events."""

    def __init__(self, max_history: int = 100):
        self._subscribers: Dict[ErrorCategory, List[ErrorCallback]] = {}
        self._all_subscribers: List[ErrorCallback] = []
        self._lock = threading.Lock()
        self._event_history: List[ErrorEvent] = []
        self._max_history = max_history
        self._error_counts: Dict[ErrorCategory, int] = {}

    def subscribe(self, callback: ErrorCallback, category: Optional[ErrorCategory] = None) -> None:
        """Subscribe to error events.

        Args:
            callback: Function to call when error occurs
            category: Specific category to subscribe to, or None for all errors
        """
        with self._lock:
            if category is None:
                self._all_subscribers.append(callback)
            else:
                self._subscribers.setdefault(category, []).append(callback)

    def unsubscribe(self, callback: ErrorCallback, category: Optional[ErrorCategory] = None) -> None:
        with self._lock:
            if category is None:
                if callback in self._all_subscribers:
                    self._all_subscribers.remove(callback)
            elif callback in self._subscribers.get(category, []):
                self._subscribers[category].remove(callback)

    def publish(self, event: ErrorEvent) -> None:
        """Record, log, and fan out an event.

        Args:
            event: Error event to publish
        """
        with self._lock:
            self._event_history.append(event)
            if len(self._event_history) > self._max_history:
                self._event_history.pop(0)
            self._error_counts[event.category] = self._error_counts.get(event.category, 0) + 1

            category_subscribers = self._subscribers.get(event.category, []).copy()
            all_subscribers = self._all_subscribers.copy()

        logger.opt(exception=event.exception).log(_LOG_LEVELS[event.severity], str(event))

        # Notify subscribers (outside lock to avoid deadlocks)
        for callback in category_subscribers + all_subscribers:
            try:
                callback(event)
            except Exception as e:
                callback_name = getattr(callback, "__name__", repr(callback))
                logger.exception(f"Error in event subscriber {callback_name}: {e}")

    def get_history(self, category: Optional[ErrorCategory] = None, limit: int = 100) -> List[ErrorEvent]:
        """Get recent error history, oldest first.

        Args:
            category: Filter by category, or None for all
            limit: Maximum number of events to return
        """
        with self._lock:
            history = self._event_history.copy()

        if category is not None:
            history = [e for e in history if e.category == category]

        return history[-limit:]

    def get_error_counts(self) -> Dict[ErrorCategory, int]:
        with self._lock:
            return self._error_counts.copy()

    def clear_history(self) -> None:
        """Clear error history and counts."""
        with self._lock:
            self._event_history.clear()
            self._error_counts.clear()
        logger.debug("Error history cleared")


# Global error event bus instance
_error_bus: Optional[ErrorEventBus] = None
_bus_lock = threading.Lock()


def get_error_bus() -> ErrorEventBus:
    """Get global error event bus instance."""
    global _error_bus
    if _error_bus is None:
        with _bus_lock:
            if _error_bus is None:
                _error_bus = ErrorEventBus()
                logger.debug("Created global error event bus")
    return _error_bus


def publish_error(
    category: ErrorCategory,
    severity: ErrorSeverity,
    message: str,
    source: str,
    exception: Optional[Exception] = None,
    **metadata: Any,
) -> None:
    """Convenience function to publish an error event on the global bus."""
    event = ErrorEvent(
        category=category,
        severity=severity,
        message=message,
        source=source,
        exception=exception,
        metadata=metadata,
    )
    get_error_bus().publish(event)


__all__ = [
    "ErrorSeverity",
    "ErrorCategory",
    "ErrorEvent",
    "ErrorEventBus",
    "get_error_bus",
    "publish_error",
]
