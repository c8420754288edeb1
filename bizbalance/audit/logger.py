"""
Audit Logger

DESIGN DECISION: Every state change and insight request is logged.
This provides:
1. Traceability of edits
2. Debugging capability for storage and AI failures
3. Correlation of all events produced by one user action

The audit logger:
- Is synchronous, like the rest of the state path
- Gracefully handles failures (a logging problem never breaks an edit)
- Supports correlation IDs to trace related events
"""

import logging
import sys
from typing import Optional
from uuid import UUID, uuid4

import structlog

from bizbalance.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


def configure_logging(level: str = "INFO") -> None:
    """
    Configure stdlib logging and structlog for JSON output.

    Safe to call more than once; the last call wins.
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
        force=True,
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
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class AuditLogger:
    """
    Central audit logging service.

    Writes every event to the structured local log.
    """

    def __init__(self, logger_name: str = "bizbalance.audit"):
        self._logger = structlog.get_logger(logger_name)

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns False if the log write itself failed.
        """
        log_dict = event.to_log_dict()

        try:
            if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception:
            # Logging must never take down the edit path
            return False

        return True

    def log_record_added(
        self,
        collection: str,
        record_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a record being appended to a collection."""
        self.log(AuditEventBuilder.record_added(
            collection=collection,
            record_id=record_id,
            correlation_id=correlation_id,
        ))

    def log_record_updated(
        self,
        collection: str,
        record_id: str,
        field: str,
        found: bool,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.record_updated(
            collection=collection,
            record_id=record_id,
            field=field,
            found=found,
            correlation_id=correlation_id,
        ))

    def log_record_removed(
        self,
        collection: str,
        record_id: str,
        found: bool,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.record_removed(
            collection=collection,
            record_id=record_id,
            found=found,
            correlation_id=correlation_id,
        ))

    def log_formula_mode_changed(
        self,
        strict: bool,
        formula: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.formula_mode_changed(
            strict=strict,
            formula=formula,
            correlation_id=correlation_id,
        ))

    def log_state_loaded(self, key: str, record_counts: dict[str, int]) -> None:
        self.log(AuditEventBuilder.state_loaded(key=key, record_counts=record_counts))

    def log_state_reset(self, key: str, reason: str) -> None:
        """Log a fallback to the default state."""
        self.log(AuditEventBuilder.state_reset_to_default(key=key, reason=reason))

    def log_state_saved(
        self,
        key: str,
        size_bytes: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.state_saved(
            key=key,
            size_bytes=size_bytes,
            correlation_id=correlation_id,
        ))

    def log_save_failed(
        self,
        key: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.save_failed(
            key=key,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    def log_insight_requested(
        self,
        bne: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.insight_requested(
            bne=bne,
            correlation_id=correlation_id,
        ))

    def log_insight_generated(
        self,
        length: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.insight_generated(
            length=length,
            correlation_id=correlation_id,
        ))

    def log_insight_failed(
        self,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.insight_failed(
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    def log_insight_skipped(self, correlation_id: Optional[UUID] = None) -> None:
        self.log(AuditEventBuilder.insight_skipped(correlation_id=correlation_id))

    def log_insight_rejected_busy(self, correlation_id: Optional[UUID] = None) -> None:
        self.log(AuditEventBuilder.insight_rejected_busy(correlation_id=correlation_id))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))

    def log_external_service_error(
        self,
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log external service error."""
        self.log(AuditEventBuilder.external_service_error(
            service=service,
            error_message=error_message,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., an edit).
    Pass it through all subsequent operations.
    """
    return uuid4()
