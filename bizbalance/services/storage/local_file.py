"""
Local Storage Implementations

DESIGN DECISION: All keys live in ONE JSON object in ONE file, just like
a browser keeps one local storage area per origin.

Writes go to a temporary file in the same directory and are then moved
over the original with os.replace, so a crash mid-write never leaves a
half-written file behind. os.replace can fail transiently when another
process holds the file open (antivirus, sync clients), so writes are
retried a few times with a short pause.

TRADEOFFS:
- Every write rewrites the whole file (we hold one small blob)
- No locking between processes (single local user)
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

import structlog
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from bizbalance.services.storage.interface import (
    CorruptStateError,
    KeyValueStore,
    StorageError,
)


class JsonFileStore(KeyValueStore):
    """
    Key-value store backed by a single JSON file.

    The file holds a JSON object mapping keys to string values.
    A missing file is an empty store.
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)
        self._logger = structlog.get_logger(__name__)

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, str]:
        """Read the whole store. Missing file means empty store."""
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except UnicodeDecodeError as e:
            raise CorruptStateError(f"Storage file is not valid UTF-8: {e}")
        except OSError as e:
            raise StorageError(f"Failed to read {self._path}: {e}")

        if not raw.strip():
            return {}

        try:
            content = json.loads(raw)
        except json.JSONDecodeError as e:
            raise CorruptStateError(f"Storage file is not valid JSON: {e}")

        if not isinstance(content, dict):
            raise CorruptStateError("Storage file does not hold a JSON object")

        return {str(k): v for k, v in content.items() if isinstance(v, str)}

    @retry(
        retry=retry_if_exception_type(OSError),
        stop=stop_after_attempt(3),
        wait=wait_fixed(0.05),
        reraise=True,
    )
    def _write_all(self, content: dict[str, str]) -> None:
        """Atomically replace the storage file."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self._path.parent,
            prefix=f".{self._path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                json.dump(content, tmp, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def get_item(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        try:
            content = self._read_all()
        except CorruptStateError:
            # A broken file must not block saving fresh state
            self._logger.warning("storage_file_overwritten", path=str(self._path))
            content = {}

        content[key] = value
        try:
            self._write_all(content)
        except OSError as e:
            raise StorageError(f"Failed to write {self._path}: {e}")

    def remove_item(self, key: str) -> None:
        content = self._read_all()
        if key not in content:
            return
        del content[key]
        try:
            self._write_all(content)
        except OSError as e:
            raise StorageError(f"Failed to write {self._path}: {e}")


class InMemoryStore(KeyValueStore):
    """
    Key-value store held in a dict.

    Used in tests and as a fallback when the data directory
    is not writable.
    """

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)
