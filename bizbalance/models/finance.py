"""
Core Data Models for BizBalance

These models define the schemas for everything the dashboard holds:
1. Line items (receivables, payables, credit cards)
2. Bank accounts, grouped by bank for reporting
3. The whole persisted state blob
4. The derived calculation result

DESIGN DECISION: All models are frozen. An edit never changes a record in
place; it produces a new record, a new collection and a new BusinessData.
Amounts are Decimal so a per-bank breakdown always sums exactly to the
bank total.

Serialized keys use the camelCase names of the stored blob
("accountsReceivable", "bankName"), Python code uses snake_case.
"""

from decimal import Decimal
from enum import Enum
from typing import Any, Iterable
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from bizbalance.validation import ZERO, coerce_choice, parse_amount, parse_text


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class AccountType(str, Enum):
    """Kind of cash account held at a bank."""
    CHECKING = "Checking"
    SAVINGS = "Savings"


class CollectionName(str, Enum):
    """
    The four independent collections in BusinessData.

    Values are the serialized keys of the stored blob.
    """
    ACCOUNTS_RECEIVABLE = "accountsReceivable"
    ACCOUNTS_PAYABLE = "accountsPayable"
    CREDIT_CARDS = "creditCards"
    BANK_ACCOUNTS = "bankAccounts"

    @property
    def field_name(self) -> str:
        """Attribute name on BusinessData."""
        return _COLLECTION_FIELDS[self]

    @property
    def label(self) -> str:
        return _COLLECTION_LABELS[self]

    @property
    def holds_bank_accounts(self) -> bool:
        return self is CollectionName.BANK_ACCOUNTS


_COLLECTION_FIELDS = {
    CollectionName.ACCOUNTS_RECEIVABLE: "accounts_receivable",
    CollectionName.ACCOUNTS_PAYABLE: "accounts_payable",
    CollectionName.CREDIT_CARDS: "credit_cards",
    CollectionName.BANK_ACCOUNTS: "bank_accounts",
}

_COLLECTION_LABELS = {
    CollectionName.ACCOUNTS_RECEIVABLE: "Accounts Receivable (AR)",
    CollectionName.ACCOUNTS_PAYABLE: "Accounts Payable (AP)",
    CollectionName.CREDIT_CARDS: "Credit Cards (C)",
    CollectionName.BANK_ACCOUNTS: "Bank Accounts",
}


class RecordField(str, Enum):
    """
    Editable fields of a record.

    NAME and AMOUNT exist on every record.
    BANK_NAME and TYPE exist only on bank accounts.
    """
    NAME = "name"
    AMOUNT = "amount"
    BANK_NAME = "bankName"
    TYPE = "type"

    @property
    def bank_only(self) -> bool:
        return self in (RecordField.BANK_NAME, RecordField.TYPE)


class InvalidPatchError(ValueError):
    """A patch names a field the target record does not have."""
    pass


def new_record_id() -> str:
    """
    Generate a record identifier.

    Random 128-bit UUID, rendered as hex. Collisions are treated as
    impossible and not handled.
    """
    return uuid4().hex


# =============================================================================
# RECORD MODELS
# =============================================================================

class FinancialRecord(BaseModel):
    """
    One receivable, payable or credit-card line item.

    Amount has no sign constraint. Anything that is not a finite
    number (missing, "", "abc", NaN) is stored as zero.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(
        default_factory=new_record_id,
        min_length=1,
        description="Identifier, unique within the owning collection"
    )
    name: str = Field(
        default="",
        description="Free-text label"
    )
    amount: Decimal = Field(
        default=ZERO,
        description="Amount in dollars, any sign"
    )

    @field_validator('id', mode='before')
    @classmethod
    def stringify_id(cls, v: Any) -> Any:
        """Older blobs may carry numeric ids."""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator('name', mode='before')
    @classmethod
    def normalize_name(cls, v: Any) -> str:
        return parse_text(v)

    @field_validator('amount', mode='before')
    @classmethod
    def normalize_amount(cls, v: Any) -> Decimal:
        return parse_amount(v)


class BankAccount(FinancialRecord):
    """
    A cash account at a named bank.

    Several accounts may share a bank_name; reporting sums them
    under that name.
    """

    bank_name: str = Field(
        default="",
        alias="bankName",
        description="Bank the account is held at"
    )
    type: AccountType = Field(
        default=AccountType.CHECKING,
        description="Checking or savings"
    )

    @field_validator('bank_name', mode='before')
    @classmethod
    def normalize_bank_name(cls, v: Any) -> str:
        return parse_text(v)

    @field_validator('type', mode='before')
    @classmethod
    def normalize_type(cls, v: Any) -> AccountType:
        return coerce_choice(v, AccountType, AccountType.CHECKING)


# =============================================================================
# STATE MODEL
# =============================================================================

class BusinessData(BaseModel):
    """
    The full persisted state.

    Four independent collections. Every record id is unique within its
    own collection; the same id may appear in two different collections.

    The whole value is replaced on every edit (see with_records).
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    accounts_receivable: tuple[FinancialRecord, ...] = Field(
        default=(),
        alias="accountsReceivable",
    )
    accounts_payable: tuple[FinancialRecord, ...] = Field(
        default=(),
        alias="accountsPayable",
    )
    credit_cards: tuple[FinancialRecord, ...] = Field(
        default=(),
        alias="creditCards",
    )
    bank_accounts: tuple[BankAccount, ...] = Field(
        default=(),
        alias="bankAccounts",
    )

    @model_validator(mode='after')
    def validate_unique_ids(self) -> 'BusinessData':
        """Reject collections that contain the same id twice."""
        for name in CollectionName:
            seen = set()
            for record in getattr(self, name.field_name):
                if record.id in seen:
                    raise ValueError(
                        f"Duplicate id {record.id!r} in {name.value}"
                    )
                seen.add(record.id)
        return self

    def records(self, name: CollectionName) -> tuple[FinancialRecord, ...]:
        """Get one collection by name."""
        return getattr(self, name.field_name)

    def with_records(
        self,
        name: CollectionName,
        records: Iterable[FinancialRecord],
    ) -> 'BusinessData':
        """
        Return a new BusinessData with one collection replaced.

        The other three collections are shared with this instance.
        """
        values = {field: getattr(self, field) for field in type(self).model_fields}
        values[name.field_name] = tuple(records)
        return BusinessData(**values)


def default_business_data() -> BusinessData:
    """
    State used on first start and whenever stored data is unreadable.

    Two empty accounts at "Bank 1", one savings and one checking.
    """
    return BusinessData(
        bank_accounts=(
            BankAccount(
                id="1",
                name="Main",
                bank_name="Bank 1",
                type=AccountType.SAVINGS,
                amount=ZERO,
            ),
            BankAccount(
                id="2",
                name="Main",
                bank_name="Bank 1",
                type=AccountType.CHECKING,
                amount=ZERO,
            ),
        ),
    )


# =============================================================================
# EDIT MODELS
# =============================================================================

class RecordPatch(BaseModel):
    """
    A single-field edit to a record.

    The value is normalized for its field when the patch is built:
    amounts through parse_amount, account types through AccountType,
    labels through parse_text. Applying the patch never sees raw input.

    Usage:
        patch = RecordPatch.set_amount("1,200.50")
        updated = patch.apply(record)
    """
    model_config = ConfigDict(frozen=True)

    field: RecordField
    value: Any

    @model_validator(mode='before')
    @classmethod
    def normalize_value(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data

        field = RecordField(data.get("field"))
        raw = data.get("value")

        if field is RecordField.AMOUNT:
            value = parse_amount(raw)
        elif field is RecordField.TYPE:
            value = coerce_choice(raw, AccountType, AccountType.CHECKING)
        else:
            value = parse_text(raw)

        return {"field": field, "value": value}

    @classmethod
    def set_name(cls, value: Any) -> 'RecordPatch':
        return cls(field=RecordField.NAME, value=value)

    @classmethod
    def set_amount(cls, value: Any) -> 'RecordPatch':
        return cls(field=RecordField.AMOUNT, value=value)

    @classmethod
    def set_bank_name(cls, value: Any) -> 'RecordPatch':
        return cls(field=RecordField.BANK_NAME, value=value)

    @classmethod
    def set_type(cls, value: Any) -> 'RecordPatch':
        return cls(field=RecordField.TYPE, value=value)

    def apply(self, record: FinancialRecord) -> FinancialRecord:
        """
        Return a copy of `record` with this patch applied.

        Raises:
            InvalidPatchError: If a bank-only field targets a plain record
        """
        if self.field.bank_only and not isinstance(record, BankAccount):
            raise InvalidPatchError(
                f"Field {self.field.value!r} only exists on bank accounts"
            )

        if self.field is RecordField.NAME:
            update = {"name": self.value}
        elif self.field is RecordField.AMOUNT:
            update = {"amount": self.value}
        elif self.field is RecordField.BANK_NAME:
            update = {"bank_name": self.value}
        elif self.field is RecordField.TYPE:
            update = {"type": self.value}
        else:
            raise InvalidPatchError(f"Unsupported field: {self.field!r}")

        return record.model_copy(update=update)


# =============================================================================
# DERIVED MODELS
# =============================================================================

class CalculationResult(BaseModel):
    """
    Summary derived from BusinessData. Never persisted.

    net_receivables = total_ar - total_ap
    net_bank        = total_bank - total_credit
    bne             = net_receivables +/- net_bank, per formula mode
    """
    model_config = ConfigDict(frozen=True)

    total_ar: Decimal = ZERO
    total_ap: Decimal = ZERO
    total_credit: Decimal = ZERO
    total_bank: Decimal = ZERO

    # Lookup by bank name; order carries no meaning
    bank_breakdown: dict[str, Decimal] = Field(default_factory=dict)

    net_receivables: Decimal = ZERO
    net_bank: Decimal = ZERO
    bne: Decimal = ZERO
    bne_formula: str = "(AR - AP) + (B - C)"
    strict_formula: bool = False

    @property
    def total_assets(self) -> Decimal:
        return self.total_ar + self.total_bank

    @property
    def total_liabilities(self) -> Decimal:
        return self.total_ap + self.total_credit
