"""Key/value storage abstractions for persisted client state."""

from typing import Protocol

PROFILE_KEY = "snapplate_profile"
LOGS_KEY = "snapplate_logs"
AI_SETTINGS_KEY = "snapplate_ai_settings"


class KeyValueStorage(Protocol):
    """Persistence interface for JSON documents stored under fixed keys."""

    def get(self, key: str) -> str | None:
        """Return the stored document or None."""

    def set(self, key: str, value: str) -> None:
        """Store a document.

        Raises ``StorageQuotaExceededError`` when the quota would be exceeded.
        """

    def remove(self, key: str) -> None:
        """Delete a document if present."""

    def used_bytes(self) -> int:
        """Return the bytes used by all keys and documents."""
