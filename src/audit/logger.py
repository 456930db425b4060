"""
Audit Logger

DESIGN DECISION: Every change to the store is logged.
This provides:
1. Traceability of who changed which record
2. Debugging capability when the hosted store fails
3. A short history the front end can show

The audit logger:
- Logs locally through structlog (JSON lines)
- Keeps the most recent events in memory for display
- Supports correlation IDs to trace related events
"""

import logging
from collections import deque
from typing import Any, Optional
from uuid import UUID, uuid4

import structlog

from src.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


# Configure structlog for local logging
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
        structlog.processors.JSONRenderer(ensure_ascii=False)
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route stdlib logging (and so structlog) to stderr at `level`."""
    logging.basicConfig(format="%(message)s", level=level.upper())


class AuditLogger:
    """
    Central audit logging service.

    Every event goes to the structured local log; the last `history_size`
    events are also kept in memory.
    """

    def __init__(self, history_size: int = 200):
        self._logger = structlog.get_logger("audit")
        self._history: deque[AuditEvent] = deque(maxlen=history_size)

    @property
    def history(self) -> list[AuditEvent]:
        """Recent events, oldest first."""
        return list(self._history)

    def log(self, event: AuditEvent) -> None:
        """Log an audit event at a level derived from its severity."""
        self._history.append(event)
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

    def log_record_created(
        self,
        entity_type: str,
        entity_id: str,
        details: dict[str, Any],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a new record in one of the collections."""
        self.log(AuditEventBuilder.record_created(
            entity_type=entity_type,
            entity_id=entity_id,
            details=details,
            correlation_id=correlation_id,
        ))

    def log_record_updated(
        self,
        entity_type: str,
        entity_id: str,
        fields: dict[str, Any],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.record_updated(
            entity_type=entity_type,
            entity_id=entity_id,
            fields=fields,
            correlation_id=correlation_id,
        ))

    def log_record_deleted(
        self,
        entity_type: str,
        entity_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.record_deleted(
            entity_type=entity_type,
            entity_id=entity_id,
            correlation_id=correlation_id,
        ))

    def log_expense_copied(
        self,
        upcoming_expense_id: str,
        entry_id: str,
        amount: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an upcoming expense copied into the cash book."""
        self.log(AuditEventBuilder.expense_copied(
            upcoming_expense_id=upcoming_expense_id,
            entry_id=entry_id,
            amount=amount,
            correlation_id=correlation_id,
        ))

    def log_report_generated(
        self,
        report_type: str,
        parameters: dict[str, Any],
        entry_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.report_generated(
            report_type=report_type,
            parameters=parameters,
            entry_count=entry_count,
            correlation_id=correlation_id,
        ))

    def log_validation_failed(
        self,
        form: str,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a rejected form."""
        self.log(AuditEventBuilder.validation_failed(
            form=form,
            issues=issues,
            correlation_id=correlation_id,
        ))

    def log_login(self, username: str, succeeded: bool) -> None:
        if succeeded:
            self.log(AuditEventBuilder.login_succeeded(username))
        else:
            self.log(AuditEventBuilder.login_failed(username))

    def log_store_error(
        self,
        operation: str,
        error_message: str,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a failed store call."""
        self.log(AuditEventBuilder.store_error(
            operation=operation,
            error_message=error_message,
            entity_type=entity_type,
            entity_id=entity_id,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a user action (e.g. copying an upcoming
    expense) and pass it to every event that action produces.
    """
    return uuid4()
