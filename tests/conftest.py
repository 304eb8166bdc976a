"""Shared test fixtures."""

import json
from dataclasses import dataclass, field
from datetime import UTC, datetime

import pytest

from snapplate.config import Settings
from snapplate.containers import AppContainer
from snapplate.domain.errors import StorageError, StorageQuotaExceededError
from snapplate.domain.providers import ModelInfo, ResolvedConfig
from snapplate.services.analysis import AnalysisService, ChatClient
from snapplate.services.log_store import LogStore
from snapplate.services.preferences import PreferencesStore
from snapplate.services.storage import KeyValueStorage

FIXED_NOW = datetime(2026, 3, 14, 12, 30, tzinfo=UTC)

APPLE_REPLY = json.dumps(
    {
        "foods": [
            {
                "name": "Apple",
                "calories": 95,
                "protein": 0.5,
                "carbs": 25,
                "fat": 0.3,
                "amount": "1 medium",
            }
        ]
    }
)


def fixed_clock() -> datetime:
    return FIXED_NOW


@dataclass
class InMemoryStorage(KeyValueStorage):
    """In-memory key/value storage for tests."""

    documents: dict[str, str] = field(default_factory=dict)
    quota_bytes: int | None = None
    failing_writes: int = 0
    write_attempts: int = 0

    def get(self, key: str) -> str | None:
        return self.documents.get(key)

    def set(self, key: str, value: str) -> None:
        self.write_attempts += 1
        if self.failing_writes > 0:
            self.failing_writes -= 1
            raise StorageQuotaExceededError("quota exceeded")
        if self.quota_bytes is not None:
            existing = self.documents.get(key)
            projected = self.used_bytes() + len(key) + len(value.encode("utf-8"))
            if existing is not None:
                projected -= len(key) + len(existing.encode("utf-8"))
            if projected > self.quota_bytes:
                raise StorageQuotaExceededError("quota exceeded")
        self.documents[key] = value

    def remove(self, key: str) -> None:
        self.documents.pop(key, None)

    def used_bytes(self) -> int:
        return sum(
            len(key) + len(value.encode("utf-8"))
            for key, value in self.documents.items()
        )


@dataclass
class BrokenStorage(InMemoryStorage):
    """Storage whose writes and deletes always fail."""

    def set(self, key: str, value: str) -> None:
        self.write_attempts += 1
        raise StorageError("disk failure")

    def remove(self, key: str) -> None:
        raise StorageError("disk failure")


@dataclass
class FakeChatClient(ChatClient):
    """Fake chat client replaying queued replies and recording payloads."""

    replies: list[str | None | Exception] = field(
        default_factory=lambda: [APPLE_REPLY]
    )
    models: list[ModelInfo] = field(default_factory=list)
    calls: list[tuple[ResolvedConfig, dict[str, object]]] = field(
        default_factory=list
    )
    model_calls: list[ResolvedConfig] = field(default_factory=list)

    async def complete(
        self, config: ResolvedConfig, payload: dict[str, object]
    ) -> str | None:
        self.calls.append((config, payload))
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    async def list_models(self, config: ResolvedConfig) -> list[ModelInfo]:
        self.model_calls.append(config)
        return list(self.models)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        ai_api_key="server-key",
        ai_provider=None,
        ai_model="server-model",
        ai_custom_api_url=None,
        data_dir=str(tmp_path / "data"),
    )


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def chat_client() -> FakeChatClient:
    return FakeChatClient()


@pytest.fixture
def container(
    settings: Settings,
    storage: InMemoryStorage,
    chat_client: FakeChatClient,
) -> AppContainer:
    analysis_service = AnalysisService(
        client=chat_client,
        server=settings.server_defaults(),
        referer=settings.app_referer,
        title=settings.app_title,
    )
    log_store = LogStore(storage, clock=fixed_clock)
    preferences = PreferencesStore(storage)

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        analysis_service=analysis_service,
        log_store=log_store,
        preferences=preferences,
        close_resources=close_resources,
    )
