"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from snapplate.adapters.file_storage import FileStorage
from snapplate.adapters.openai_chat_client import OpenAIChatClient
from snapplate.config import Settings
from snapplate.services.analysis import AnalysisService
from snapplate.services.log_store import LogStore
from snapplate.services.preferences import PreferencesStore


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    analysis_service: AnalysisService
    log_store: LogStore
    preferences: PreferencesStore
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    storage = FileStorage.create(
        resolved_settings.data_dir, quota_bytes=resolved_settings.storage_quota_bytes
    )
    chat_client = OpenAIChatClient.create()
    analysis_service = AnalysisService(
        client=chat_client,
        server=resolved_settings.server_defaults(),
        referer=resolved_settings.app_referer,
        title=resolved_settings.app_title,
    )
    log_store = LogStore(storage, quota_bytes=resolved_settings.storage_quota_bytes)
    preferences = PreferencesStore(storage)

    async def close_resources() -> None:
        await chat_client.close()

    return AppContainer(
        settings=resolved_settings,
        analysis_service=analysis_service,
        log_store=log_store,
        preferences=preferences,
        close_resources=close_resources,
    )
