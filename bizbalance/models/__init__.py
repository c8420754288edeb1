"""
Data Models Package

This package contains all Pydantic models used in BizBalance.
All data flowing through the system must conform to these schemas.
"""

from bizbalance.models.finance import (
    AccountType,
    BankAccount,
    BusinessData,
    CalculationResult,
    CollectionName,
    FinancialRecord,
    InvalidPatchError,
    RecordField,
    RecordPatch,
    default_business_data,
    new_record_id,
)
from bizbalance.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Finance models
    "AccountType",
    "BankAccount",
    "BusinessData",
    "CalculationResult",
    "CollectionName",
    "FinancialRecord",
    "InvalidPatchError",
    "RecordField",
    "RecordPatch",
    "default_business_data",
    "new_record_id",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
