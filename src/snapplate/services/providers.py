"""Provider, endpoint and credential resolution."""

from snapplate.domain.errors import MissingCredentialError, MissingCustomUrlError
from snapplate.domain.providers import (
    DEFAULT_MODEL,
    Provider,
    ProviderRequest,
    ResolvedConfig,
    ServerDefaults,
)

OPENAI_BASE_URL = "https://api.openai.com/v1"
OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"


def resolve_provider(
    request: ProviderRequest,
    server: ServerDefaults,
    *,
    referer: str | None = None,
    title: str | None = None,
) -> ResolvedConfig:
    """Resolve the concrete endpoint, key and model for a request.

    Pure function of its inputs. Raises ``MissingCredentialError`` when the
    selected key source has no key and ``MissingCustomUrlError`` when the
    custom provider is selected without a URL.
    """
    api_key = _resolve_api_key(request, server)
    provider, custom_url = _resolve_provider_and_url(request, server)
    model = _resolve_model(request, server)
    if provider is Provider.CUSTOM and not custom_url:
        raise MissingCustomUrlError()
    return ResolvedConfig(
        provider=provider,
        base_url=base_url_for(provider, custom_url),
        model=model,
        api_key=api_key,
        referer=referer,
        title=title,
    )


def base_url_for(provider: Provider, custom_url: str | None = None) -> str:
    """Map a provider to its API base URL."""
    if provider is Provider.OPENROUTER:
        return OPENROUTER_BASE_URL
    if provider is Provider.CUSTOM:
        if not custom_url:
            raise MissingCustomUrlError()
        return custom_url.rstrip("/")
    return OPENAI_BASE_URL


def _resolve_api_key(request: ProviderRequest, server: ServerDefaults) -> str:
    raw = server.api_key if request.use_server_config else request.api_key
    api_key = (raw or "").strip()
    if not api_key:
        raise MissingCredentialError()
    return api_key


def _resolve_provider_and_url(
    request: ProviderRequest, server: ServerDefaults
) -> tuple[Provider, str | None]:
    if request.use_server_config:
        server_url = _clean(server.custom_url)
        if server_url:
            return Provider.CUSTOM, server_url
        return server.provider or Provider.OPENAI, None
    return request.provider or Provider.OPENAI, _clean(request.custom_url)


def _resolve_model(request: ProviderRequest, server: ServerDefaults) -> str:
    model = _clean(request.model)
    if model:
        return model
    if request.use_server_config:
        server_model = _clean(server.model)
        if server_model:
            return server_model
    return DEFAULT_MODEL


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    cleaned = value.strip()
    return cleaned or None
