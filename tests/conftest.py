"""Shared fixtures: isolate every test from the developer's environment."""

import pytest

from bizbalance.audit import AuditLogger
from bizbalance.config import get_settings
from bizbalance.models.audit import AuditEvent, AuditEventType


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Run each test in an empty directory with no Gemini key set."""
    monkeypatch.chdir(tmp_path)
    for var in (
        "GEMINI_API_KEY",
        "GEMINI_MODEL_NAME",
        "BIZBALANCE_STORAGE_DATA_DIR",
        "BIZBALANCE_STORAGE_STATE_KEY",
        "DEFAULT_STRICT_FORMULA",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(var, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class RecordingAuditLogger(AuditLogger):
    """AuditLogger that keeps every event in memory."""

    def __init__(self):
        super().__init__()
        self.events: list[AuditEvent] = []

    def log(self, event: AuditEvent) -> bool:
        self.events.append(event)
        return True

    def types(self) -> list[AuditEventType]:
        return [event.event_type for event in self.events]


@pytest.fixture
def audit_logger():
    return RecordingAuditLogger()
