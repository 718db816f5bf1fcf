"""
Audit Logger

DESIGN DECISION: Every mutation of the store is logged.
This provides:
1. Complete traceability of what changed and when
2. Debugging capability when a slot fails to load or save
3. A short in-process history the UI can show

The audit logger:
- Gracefully handles failures (never crashes the caller if logging fails)
- Is attached to the store as a subscriber, so it sees every event
"""

import logging
import sys
from collections import deque
from typing import TYPE_CHECKING, Callable, Optional

import structlog

from ledger.models.audit import AuditEvent, AuditSeverity

if TYPE_CHECKING:
    from ledger.store.expense_store import ExpenseStore


def configure_logging(log_level: str = "INFO", json_output: bool = True) -> None:
    """
    Configure structlog on top of the stdlib logging module.

    Called once at application start (create_app_components does it).
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, log_level.upper(), logging.INFO),
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class AuditLogger:
    """
    Central audit logging service.

    Logs events to the structured local log and keeps the most recent
    ones in memory.
    """

    def __init__(self, history_size: int = 200):
        self._logger = structlog.get_logger("ledger.audit")
        self._history: deque[AuditEvent] = deque(maxlen=history_size)
        self._unsubscribers: list[Callable[[], None]] = []

    def log(self, event: AuditEvent) -> None:
        """Log an audit event. Failures to log are reported, never raised."""
        self._history.append(event)
        log_dict = event.to_log_dict()

        try:
            if event.severity == AuditSeverity.ERROR:
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception as e:
            print(f"Warning: audit log write failed: {e}", file=sys.stderr)

    def attach(self, store: "ExpenseStore") -> None:
        """Subscribe to a store so every mutation is logged."""
        self._unsubscribers.append(store.subscribe(self.log))

    def detach(self) -> None:
        while self._unsubscribers:
            self._unsubscribers.pop()()

    def recent_events(self, limit: int = 50) -> list[AuditEvent]:
        """Most recent events, newest first."""
        events = list(self._history)
        events.reverse()
        return events[:limit]
