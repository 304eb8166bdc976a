"""Food photo analysis through chat-completion providers."""

import logging
from dataclasses import dataclass
from typing import Protocol

from snapplate.domain.errors import (
    EmptyResponseError,
    FallbackFailedError,
    MissingImageError,
    UpstreamError,
)
from snapplate.domain.meals import AnalysisResult
from snapplate.domain.providers import (
    ModelInfo,
    Provider,
    ProviderRequest,
    ResolvedConfig,
    ServerConfigSnapshot,
    ServerDefaults,
)
from snapplate.services.parsing import parse_analysis
from snapplate.services.providers import resolve_provider
from snapplate.services.requests import (
    build_analysis_payload,
    build_text_fallback_payload,
    select_variant,
)

logger = logging.getLogger(__name__)

OPENROUTER_VISION_MARKERS = (
    "vision",
    "gpt-4",
    "gemini",
    "claude",
    "llava",
    "pixtral",
    "qwen",
)
OPENAI_CHAT_MARKERS = ("gpt", "o1", "o3", "o4")


class ChatClient(Protocol):
    """Interface for chat-completion providers."""

    async def complete(
        self, config: ResolvedConfig, payload: dict[str, object]
    ) -> str | None:
        """Send a chat completion and return the reply text, if any.

        Raises ``UpstreamError`` on error statuses and transport failures.
        """

    async def list_models(self, config: ResolvedConfig) -> list[ModelInfo]:
        """Return the models offered by the provider."""


@dataclass
class AnalysisService:
    """Service that resolves providers, sends requests and parses replies."""

    client: ChatClient
    server: ServerDefaults
    referer: str | None = None
    title: str | None = None

    def resolve(self, request: ProviderRequest) -> ResolvedConfig:
        """Resolve the provider config for a caller request."""
        return resolve_provider(
            request, self.server, referer=self.referer, title=self.title
        )

    async def analyze(
        self, image: bytes | str | None, request: ProviderRequest
    ) -> AnalysisResult:
        """Analyze a food photo and return normalized food items."""
        config = self.resolve(request)
        if not image:
            raise MissingImageError()
        payload = build_analysis_payload(image, config.model)
        try:
            content = await self.client.complete(config, payload)
        except UpstreamError as exc:
            if not _should_fall_back(config.model, exc):
                raise
            logger.warning(
                "Image request rejected, retrying without image",
                extra={"model": config.model, "status_code": exc.status_code},
            )
            return await self._fall_back(config, exc)
        if not content:
            raise EmptyResponseError()
        return parse_analysis(content)

    async def list_models(self, request: ProviderRequest) -> list[ModelInfo]:
        """List models for the resolved provider, filtered for analysis use."""
        config = self.resolve(request)
        models = await self.client.list_models(config)
        return filter_models(config.provider, models)

    def server_config(self) -> ServerConfigSnapshot:
        """Describe the server-side provider configuration."""
        custom_url = (self.server.custom_url or "").strip() or None
        provider = Provider.CUSTOM if custom_url else self.server.provider
        return ServerConfigSnapshot(
            has_server_key=bool((self.server.api_key or "").strip()),
            server_provider=provider,
            server_model=(self.server.model or "").strip() or None,
            server_custom_url=custom_url,
        )

    async def _fall_back(
        self, config: ResolvedConfig, primary: UpstreamError
    ) -> AnalysisResult:
        payload = build_text_fallback_payload(config.model)
        try:
            content = await self.client.complete(config, payload)
        except UpstreamError as exc:
            raise FallbackFailedError(
                f"Fallback request failed: {exc.message} "
                f"(original error: {primary.message})"
            ) from exc
        if not content:
            raise FallbackFailedError(
                f"Fallback request returned no content "
                f"(original error: {primary.message})"
            )
        return parse_analysis(content)


def filter_models(provider: Provider, models: list[ModelInfo]) -> list[ModelInfo]:
    """Keep models plausibly usable for photo analysis, sorted for display."""
    if provider is Provider.OPENROUTER:
        selected = [
            model
            for model in models
            if any(marker in model.id.lower() for marker in OPENROUTER_VISION_MARKERS)
        ]
        return sorted(selected, key=lambda model: model.name.lower())
    if provider is Provider.OPENAI:
        selected = [
            ModelInfo(id=model.id, name=model.id)
            for model in models
            if any(marker in model.id for marker in OPENAI_CHAT_MARKERS)
        ]
        return sorted(selected, key=lambda model: model.id)
    return sorted(models, key=lambda model: model.id)


def _should_fall_back(model: str, error: UpstreamError) -> bool:
    return select_variant(model).text_fallback and error.detail is not None
