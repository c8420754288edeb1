"""Record collection editing package."""

from bizbalance.editor.collections import (
    DEFAULT_BANK_NAME,
    add_bank_account,
    add_record,
    add_to_collection,
    find_record,
    new_record_id,
    remove_record,
    update_record,
)

__all__ = [
    "DEFAULT_BANK_NAME",
    "add_bank_account",
    "add_record",
    "add_to_collection",
    "find_record",
    "new_record_id",
    "remove_record",
    "update_record",
]
