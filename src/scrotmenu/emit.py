"""Run events for scrotmenu.

Each run emits operation.started, then either choice.resolved followed by
operation.completed, or operation.cancelled when a dialog is closed, or
error.handled followed by a failed operation.completed. All of them carry the
same operation_id. A single shutdown event follows at process exit.

Events are written to stderr as JSON lines unless --quiet-events is given:
    {"event_type": "choice.resolved", "timestamp": "...",
     "source": {"tool": "scrotmenu"}, "data": {"operation_id": "...", "action": "copy"}}

Tests and embedding code can collect them with add_handler().
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

EventHandler = Callable[[dict], None]

EVENT_CATALOG = [
    {
        "event_type": "operation.started",
        "data_fields": ["operation_id", "select", "delay"],
    },
    {
        "event_type": "choice.resolved",
        "data_fields": ["operation_id", "action"],
    },
    {
        "event_type": "operation.completed",
        "data_fields": ["operation_id", "success", "action", "detail", "error_message"],
    },
    {
        "event_type": "operation.cancelled",
        "data_fields": ["operation_id", "stage"],
    },
    {
        "event_type": "error.handled",
        "data_fields": ["operation_id", "error_type", "stage", "message"],
    },
    {
        "event_type": "shutdown",
        "data_fields": [],
    },
]

_handlers: List[EventHandler] = []
_source: str = "unknown"
_stderr_enabled: bool = True


def configure(source: str, stderr: bool = True) -> None:
    """Set the source name and whether events go to stderr. Call once at startup."""
    global _source, _stderr_enabled
    _source = source
    _stderr_enabled = stderr


def add_handler(handler: EventHandler) -> None:
    _handlers.append(handler)


def remove_handler(handler: EventHandler) -> None:
    if handler in _handlers:
        _handlers.remove(handler)


def make_event(event_type: str, data: Dict[str, Any], source: Optional[str] = None) -> dict:
    return {
        "event_type": event_type,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "source": {"tool": source or _source},
        "data": data,
    }


def emit(
    event_type: str,
    data: Dict[str, Any],
    source: Optional[str] = None,
) -> dict:
    """Emit a structured event to stderr and every registered handler.

    Transport failures are logged at debug level and never raised.

    Returns:
        The event that was emitted
    """
    event = make_event(event_type, data, source)

    if _stderr_enabled:
        try:
            print(json.dumps(event, default=str), file=sys.stderr, flush=True)
        except (OSError, ValueError) as exc:
            logger.debug("Could not write event to stderr: %s", exc)

    for handler in list(_handlers):
        try:
            handler(event)
        except Exception as exc:
            logger.debug("Event handler error: %s", exc)

    return event
