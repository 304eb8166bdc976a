"""Provider selection models."""

from dataclasses import dataclass
from enum import StrEnum

DEFAULT_MODEL = "gpt-4o"


class Provider(StrEnum):
    """Supported chat-completion providers."""

    OPENAI = "openai"
    OPENROUTER = "openrouter"
    CUSTOM = "custom"


class KeySource(StrEnum):
    """Where the API key comes from."""

    LOCAL = "local"
    SERVER = "server"


@dataclass(frozen=True)
class ProviderRequest:
    """Provider fields supplied by the caller for one request."""

    use_server_config: bool = False
    api_key: str | None = None
    provider: Provider | None = None
    model: str | None = None
    custom_url: str | None = None


@dataclass(frozen=True)
class ServerDefaults:
    """Provider defaults configured on the server."""

    api_key: str | None = None
    provider: Provider | None = None
    model: str | None = None
    custom_url: str | None = None


@dataclass(frozen=True)
class ResolvedConfig:
    """Concrete endpoint, model and credential for one call."""

    provider: Provider
    base_url: str
    model: str
    api_key: str
    referer: str | None = None
    title: str | None = None

    def headers(self) -> dict[str, str]:
        """Return request headers for the resolved provider."""
        headers = {"Authorization": f"Bearer {self.api_key}"}
        if self.provider is Provider.OPENROUTER:
            if self.referer:
                headers["HTTP-Referer"] = self.referer
            if self.title:
                headers["X-Title"] = self.title
        return headers

    def extra_headers(self) -> dict[str, str]:
        """Return headers beyond the bearer credential."""
        return {
            key: value
            for key, value in self.headers().items()
            if key != "Authorization"
        }


@dataclass(frozen=True)
class ModelInfo:
    """A model offered by a provider."""

    id: str
    name: str


@dataclass(frozen=True)
class ServerConfigSnapshot:
    """What the server configuration implies, without the key itself."""

    has_server_key: bool
    server_provider: Provider | None
    server_model: str | None
    server_custom_url: str | None
