"""
Record Collection Editor

Three operations over one collection: add, update, remove.

DESIGN DECISION: Collections are tuples of frozen records. Every
operation returns a NEW tuple and leaves its input untouched, so the
previous state is always still intact for whoever holds it.

Unknown ids are not errors. Update and remove with an id that is not in
the collection return the collection unchanged.
"""

from typing import Optional, Sequence, TypeVar

from bizbalance.models.finance import (
    AccountType,
    BankAccount,
    BusinessData,
    CollectionName,
    FinancialRecord,
    RecordPatch,
    new_record_id,
)

R = TypeVar("R", bound=FinancialRecord)

# Placeholder shown for a freshly added bank account
DEFAULT_BANK_NAME = "Bank 1"


def add_record(records: Sequence[FinancialRecord]) -> tuple[FinancialRecord, ...]:
    """Append a blank line item (fresh id, empty name, amount 0)."""
    return (*records, FinancialRecord(id=new_record_id(), name=""))


def add_bank_account(accounts: Sequence[BankAccount]) -> tuple[BankAccount, ...]:
    """Append a blank checking account at the placeholder bank."""
    account = BankAccount(
        id=new_record_id(),
        name=DEFAULT_BANK_NAME,
        bank_name=DEFAULT_BANK_NAME,
        type=AccountType.CHECKING,
    )
    return (*accounts, account)


def update_record(
    records: Sequence[R],
    record_id: str,
    patch: RecordPatch,
) -> tuple[R, ...]:
    """
    Return a copy of `records` with one record patched.

    Records whose id does not match are carried over as the same
    objects. If nothing matches, the result equals the input.

    Raises:
        InvalidPatchError: If the patch targets a field the matching
            record does not have
    """
    return tuple(
        patch.apply(record) if record.id == record_id else record
        for record in records
    )


def remove_record(records: Sequence[R], record_id: str) -> tuple[R, ...]:
    """Return a copy of `records` without the record with `record_id`."""
    return tuple(record for record in records if record.id != record_id)


def find_record(records: Sequence[R], record_id: str) -> Optional[R]:
    """Return the record with `record_id`, or None."""
    for record in records:
        if record.id == record_id:
            return record
    return None


def add_to_collection(
    data: BusinessData,
    name: CollectionName,
) -> tuple[BusinessData, FinancialRecord]:
    """
    Append a blank record to one collection of `data`.

    Returns the new BusinessData and the record that was added.
    """
    current = data.records(name)
    if name.holds_bank_accounts:
        updated = add_bank_account(current)
    else:
        updated = add_record(current)
    return data.with_records(name, updated), updated[-1]
