"""
Audit Models for BizBalance

Every state change and every insight request is logged as an event.
This provides:
1. A trail of what the user changed and when
2. Debugging information when storage or the AI service misbehaves
3. A way to correlate all events of one user action

DESIGN DECISION: Events are immutable value objects. They are emitted
through structlog and never edited after creation.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """
    Types of events we audit.
    """
    # Record editing
    RECORD_ADDED = "record_added"
    RECORD_UPDATED = "record_updated"
    RECORD_REMOVED = "record_removed"
    FORMULA_MODE_CHANGED = "formula_mode_changed"

    # Persistence
    STATE_LOADED = "state_loaded"
    STATE_RESET_TO_DEFAULT = "state_reset_to_default"
    STATE_SAVED = "state_saved"
    SAVE_FAILED = "save_failed"

    # AI insight
    INSIGHT_REQUESTED = "insight_requested"
    INSIGHT_GENERATED = "insight_generated"
    INSIGHT_FAILED = "insight_failed"
    INSIGHT_SKIPPED = "insight_skipped"
    INSIGHT_REJECTED_BUSY = "insight_rejected_busy"

    # System events
    SYSTEM_ERROR = "system_error"
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'record', 'state', 'insight')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate the events of one user action"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )

    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.record_added("accountsReceivable", record_id)
        event = AuditEventBuilder.insight_failed("timeout", correlation_id)
    """

    @staticmethod
    def record_added(
        collection: str,
        record_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_ADDED,
            entity_type="record",
            entity_id=record_id,
            correlation_id=correlation_id,
            description=f"Record added to {collection}",
            details={"collection": collection},
            is_user_action=True,
        )

    @staticmethod
    def record_updated(
        collection: str,
        record_id: str,
        field: str,
        found: bool,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_UPDATED,
            severity=AuditSeverity.INFO if found else AuditSeverity.DEBUG,
            entity_type="record",
            entity_id=record_id,
            correlation_id=correlation_id,
            description=(
                f"Record {field} updated in {collection}"
                if found
                else f"Update ignored, no such record in {collection}"
            ),
            details={"collection": collection, "field": field, "found": found},
            is_user_action=True,
        )

    @staticmethod
    def record_removed(
        collection: str,
        record_id: str,
        found: bool,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_REMOVED,
            severity=AuditSeverity.INFO if found else AuditSeverity.DEBUG,
            entity_type="record",
            entity_id=record_id,
            correlation_id=correlation_id,
            description=(
                f"Record removed from {collection}"
                if found
                else f"Remove ignored, no such record in {collection}"
            ),
            details={"collection": collection, "found": found},
            is_user_action=True,
        )

    @staticmethod
    def formula_mode_changed(
        strict: bool,
        formula: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.FORMULA_MODE_CHANGED,
            entity_type="formula",
            correlation_id=correlation_id,
            description=f"Formula mode set to {'strict' if strict else 'standard'}",
            details={"strict": strict, "formula": formula},
            is_user_action=True,
        )

    @staticmethod
    def state_loaded(key: str, record_counts: dict[str, int]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_LOADED,
            entity_type="state",
            entity_id=key,
            description="Business data loaded from local storage",
            details={"record_counts": record_counts},
        )

    @staticmethod
    def state_reset_to_default(key: str, reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_RESET_TO_DEFAULT,
            severity=AuditSeverity.WARNING,
            entity_type="state",
            entity_id=key,
            description="Stored business data unreadable, using default state",
            error_message=reason,
        )

    @staticmethod
    def state_saved(
        key: str,
        size_bytes: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_SAVED,
            severity=AuditSeverity.DEBUG,
            entity_type="state",
            entity_id=key,
            correlation_id=correlation_id,
            description="Business data saved to local storage",
            details={"size_bytes": size_bytes},
        )

    @staticmethod
    def save_failed(
        key: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="state",
            entity_id=key,
            correlation_id=correlation_id,
            description="Failed to save business data",
            error_message=error_message,
        )

    @staticmethod
    def insight_requested(
        bne: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INSIGHT_REQUESTED,
            entity_type="insight",
            correlation_id=correlation_id,
            description="AI insight requested",
            details={"bne": bne},
            is_user_action=True,
        )

    @staticmethod
    def insight_generated(
        length: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INSIGHT_GENERATED,
            entity_type="insight",
            correlation_id=correlation_id,
            description="AI insight generated",
            details={"length": length},
        )

    @staticmethod
    def insight_failed(
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INSIGHT_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="insight",
            correlation_id=correlation_id,
            description="AI insight request failed",
            error_message=error_message,
        )

    @staticmethod
    def insight_skipped(correlation_id: Optional[UUID] = None) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INSIGHT_SKIPPED,
            severity=AuditSeverity.WARNING,
            entity_type="insight",
            correlation_id=correlation_id,
            description="AI insight skipped: no API key configured",
            is_user_action=True,
        )

    @staticmethod
    def insight_rejected_busy(correlation_id: Optional[UUID] = None) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INSIGHT_REJECTED_BUSY,
            severity=AuditSeverity.DEBUG,
            entity_type="insight",
            correlation_id=correlation_id,
            description="AI insight already in progress, request ignored",
            is_user_action=True,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )

    @staticmethod
    def external_service_error(
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"External service error: {service}",
            error_message=error_message,
            details={
                "service": service,
            },
            correlation_id=correlation_id,
        )
