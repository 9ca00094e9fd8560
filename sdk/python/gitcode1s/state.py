"""
Persisted key/value state.

The host owns where the access token lives between runs. Three backends are
provided: an in-memory dict, a JSON file, and the OS keychain.
"""

import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

import keyring
import keyring.errors

from gitcode1s.exceptions import StateStoreError
from gitcode1s.logging import get_logger

logger = get_logger("state")


class StateStore(ABC):
    """Abstract base class for persisted string state."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored value, or None when the key is unset."""
        pass

    @abstractmethod
    async def update(self, key: str, value: str) -> None:
        """Persist a value. Returns once the write is complete."""
        pass


class MemoryStateStore(StateStore):
    """State kept in a dict for the lifetime of the process."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    async def update(self, key: str, value: str) -> None:
        self._values[key] = value


class JsonFileStateStore(StateStore):
    """State kept as one JSON object in a file."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _load(self) -> dict[str, str]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable state file %s: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key: str) -> str | None:
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    async def update(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
        except OSError as e:
            raise StateStoreError(f"Failed to write {self.path}: {e}") from e
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f)
            os.replace(tmp_path, self.path)
        except OSError as e:
            Path(tmp_path).unlink(missing_ok=True)
            raise StateStoreError(f"Failed to write {self.path}: {e}") from e


class KeyringStateStore(StateStore):
    """State kept in the OS keychain (macOS Keychain, Windows Credential Manager, ...)."""

    def __init__(self, service: str = "gitcode1s") -> None:
        self.service = service

    def get(self, key: str) -> str | None:
        try:
            return keyring.get_password(self.service, key)
        except keyring.errors.KeyringError as e:
            logger.warning("Failed to read %s from keyring: %s", key, e)
            return None

    async def update(self, key: str, value: str) -> None:
        try:
            if value:
                keyring.set_password(self.service, key, value)
            else:
                try:
                    keyring.delete_password(self.service, key)
                except keyring.errors.PasswordDeleteError:
                    pass
        except keyring.errors.KeyringError as e:
            logger.warning("Failed to save %s to keyring", key)
            raise StateStoreError(f"Failed to save {key} to keyring: {e}") from e
