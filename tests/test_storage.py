"""
Tests for local storage and the BusinessData repository.

File tests use pytest's tmp_path; nothing touches the real data dir.
"""

import json
import os

import pytest
from decimal import Decimal

from bizbalance.models.audit import AuditEventType
from bizbalance.models.finance import (
    AccountType,
    BankAccount,
    BusinessData,
    FinancialRecord,
    default_business_data,
)
from bizbalance.services.storage import (
    BusinessDataRepository,
    CorruptStateError,
    InMemoryStore,
    JsonFileStore,
    KeyValueStore,
    StorageError,
)
from bizbalance.services.storage.repository import DEFAULT_STATE_KEY


class FailingStore(KeyValueStore):
    """Store whose backend is unavailable."""

    def get_item(self, key):
        raise StorageError("disk unavailable")

    def set_item(self, key, value):
        raise StorageError("disk full")

    def remove_item(self, key):
        raise StorageError("disk unavailable")


@pytest.fixture
def sample_data():
    return BusinessData(
        accounts_receivable=(FinancialRecord(id="r1", name="Client", amount="1250.75"),),
        accounts_payable=(FinancialRecord(id="p1", name="Rent", amount=900),),
        credit_cards=(FinancialRecord(id="c1", name="Amex", amount="0.10"),),
        bank_accounts=(
            BankAccount(id="b1", name="Ops", bank_name="Chase", type=AccountType.SAVINGS, amount=5000),
        ),
    )


class TestJsonFileStore:

    def test_missing_file_is_empty(self, tmp_path):
        store = JsonFileStore(tmp_path / "none.json")
        assert store.get_item("anything") is None

    def test_set_then_get(self, tmp_path):
        store = JsonFileStore(tmp_path / "store.json")
        store.set_item("k", "v")
        assert store.get_item("k") == "v"

    def test_persists_across_instances(self, tmp_path):
        """A fresh store on the same path sees earlier writes."""
        path = tmp_path / "store.json"
        JsonFileStore(path).set_item("k", "v")
        assert JsonFileStore(path).get_item("k") == "v"

    def test_creates_parent_directory(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "store.json"
        JsonFileStore(path).set_item("k", "v")
        assert path.exists()

    def test_keys_are_independent(self, tmp_path):
        store = JsonFileStore(tmp_path / "store.json")
        store.set_item("a", "1")
        store.set_item("b", "2")
        store.set_item("a", "3")
        assert store.get_item("a") == "3"
        assert store.get_item("b") == "2"

    def test_remove_item(self, tmp_path):
        store = JsonFileStore(tmp_path / "store.json")
        store.set_item("a", "1")
        store.remove_item("a")
        store.remove_item("never-there")
        assert store.get_item("a") is None

    def test_no_temp_files_left_behind(self, tmp_path):
        store = JsonFileStore(tmp_path / "store.json")
        store.set_item("a", "1")
        store.set_item("a", "2")
        assert os.listdir(tmp_path) == ["store.json"]

    def test_corrupt_file_raises_on_read(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(CorruptStateError):
            JsonFileStore(path).get_item("k")

    def test_non_object_file_raises_on_read(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("[1, 2, 3]", encoding="utf-8")
        with pytest.raises(CorruptStateError):
            JsonFileStore(path).get_item("k")

    def test_corrupt_file_replaced_on_write(self, tmp_path):
        """Saving fresh state is never blocked by a broken file."""
        path = tmp_path / "store.json"
        path.write_text("{not json", encoding="utf-8")
        store = JsonFileStore(path)

        store.set_item("k", "v")

        assert json.loads(path.read_text(encoding="utf-8")) == {"k": "v"}

    def test_non_utf8_file_raises_on_read(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_bytes(b'{"bizbalance_data": "\xff\xfe"}')
        with pytest.raises(CorruptStateError):
            JsonFileStore(path).get_item("bizbalance_data")

    def test_non_utf8_file_replaced_on_write(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_bytes(b"\xff\xfe garbage")

        JsonFileStore(path).set_item("k", "v")

        assert json.loads(path.read_text(encoding="utf-8")) == {"k": "v"}

    def test_unwritable_location_raises_storage_error(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        store = JsonFileStore(blocker / "store.json")

        with pytest.raises(StorageError):
            store.set_item("k", "v")


class TestInMemoryStore:

    def test_basic_operations(self):
        store = InMemoryStore()
        assert store.get_item("k") is None
        store.set_item("k", "v")
        assert store.get_item("k") == "v"
        store.remove_item("k")
        assert store.get_item("k") is None

    def test_initial_content_copied(self):
        initial = {"k": "v"}
        store = InMemoryStore(initial)
        store.set_item("k", "changed")
        assert initial == {"k": "v"}


class TestBusinessDataRepository:

    def test_first_start_loads_default(self):
        repository = BusinessDataRepository(InMemoryStore())
        assert repository.load() == default_business_data()

    def test_save_then_load_round_trip(self, sample_data):
        repository = BusinessDataRepository(InMemoryStore())
        repository.save(sample_data)
        assert repository.load() == sample_data

    def test_round_trip_through_file(self, tmp_path, sample_data):
        path = tmp_path / "local_storage.json"
        BusinessDataRepository(JsonFileStore(path)).save(sample_data)

        loaded = BusinessDataRepository(JsonFileStore(path)).load()

        assert loaded == sample_data
        assert loaded.accounts_receivable[0].amount == Decimal("1250.75")

    def test_stored_blob_uses_camel_case_keys(self, sample_data):
        store = InMemoryStore()
        BusinessDataRepository(store).save(sample_data)

        blob = json.loads(store.get_item(DEFAULT_STATE_KEY))

        assert set(blob) == {"accountsReceivable", "accountsPayable", "creditCards", "bankAccounts"}
        assert blob["bankAccounts"][0]["bankName"] == "Chase"
        assert blob["bankAccounts"][0]["type"] == "Savings"

    def test_save_returns_size(self, sample_data):
        store = InMemoryStore()
        size = BusinessDataRepository(store).save(sample_data)
        assert size == len(store.get_item(DEFAULT_STATE_KEY).encode("utf-8"))

    def test_custom_key(self, sample_data):
        store = InMemoryStore()
        BusinessDataRepository(store, key="other").save(sample_data)
        assert store.get_item("other") is not None
        assert store.get_item(DEFAULT_STATE_KEY) is None

    @pytest.mark.parametrize("blob", [
        "{not json",
        "[]",
        '{"accountsReceivable": "nope"}',
        '{"bankAccounts": [{"id": "1"}, {"id": "1"}]}',
    ])
    def test_invalid_blob_falls_back_to_default(self, blob, audit_logger):
        """Corrupt stored data never blocks startup."""
        store = InMemoryStore({DEFAULT_STATE_KEY: blob})
        repository = BusinessDataRepository(store, audit_logger=audit_logger)

        assert repository.load() == default_business_data()
        assert audit_logger.types() == [AuditEventType.STATE_RESET_TO_DEFAULT]

    def test_unreadable_store_falls_back_to_default(self, audit_logger):
        repository = BusinessDataRepository(FailingStore(), audit_logger=audit_logger)
        assert repository.load() == default_business_data()
        assert audit_logger.types() == [AuditEventType.STATE_RESET_TO_DEFAULT]

    def test_corrupt_file_falls_back_to_default(self, tmp_path):
        path = tmp_path / "local_storage.json"
        path.write_text("garbage", encoding="utf-8")
        assert BusinessDataRepository(JsonFileStore(path)).load() == default_business_data()

    def test_non_utf8_file_falls_back_and_saves_over(self, tmp_path, audit_logger):
        """An undecodable file neither blocks startup nor later saves."""
        path = tmp_path / "local_storage.json"
        path.write_bytes(b'{"bizbalance_data": "\xff\xfe"}')
        repository = BusinessDataRepository(JsonFileStore(path), audit_logger=audit_logger)

        assert repository.load() == default_business_data()
        assert audit_logger.types() == [AuditEventType.STATE_RESET_TO_DEFAULT]

        repository.save(default_business_data())
        assert BusinessDataRepository(JsonFileStore(path)).load() == default_business_data()

    def test_load_logs_record_counts(self, sample_data, audit_logger):
        store = InMemoryStore()
        repository = BusinessDataRepository(store, audit_logger=audit_logger)
        repository.save(sample_data)

        repository.load()

        loaded = audit_logger.events[-1]
        assert loaded.event_type == AuditEventType.STATE_LOADED
        assert loaded.details["record_counts"]["bankAccounts"] == 1

    def test_save_failure_raises(self, sample_data):
        repository = BusinessDataRepository(FailingStore())
        with pytest.raises(StorageError):
            repository.save(sample_data)

    def test_clear_returns_to_default(self, sample_data):
        repository = BusinessDataRepository(InMemoryStore())
        repository.save(sample_data)
        repository.clear()
        assert repository.load() == default_business_data()

    def test_out_of_range_stored_amount_loads_as_zero(self):
        blob = json.dumps({
            "bankAccounts": [{"id": "1", "bankName": "A", "amount": "1E+1000000"}],
        })
        repository = BusinessDataRepository(InMemoryStore({DEFAULT_STATE_KEY: blob}))

        assert repository.load().bank_accounts[0].amount == Decimal("0")

    def test_missing_optional_fields_filled(self):
        """Older blobs without type or bankName still load."""
        blob = json.dumps({
            "accountsReceivable": [],
            "accountsPayable": [],
            "creditCards": [],
            "bankAccounts": [{"id": 1, "name": "Main", "amount": "12"}],
        })
        repository = BusinessDataRepository(InMemoryStore({DEFAULT_STATE_KEY: blob}))

        account = repository.load().bank_accounts[0]

        assert account.id == "1"
        assert account.bank_name == ""
        assert account.type == AccountType.CHECKING


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
