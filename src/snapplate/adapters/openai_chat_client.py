"""OpenAI-compatible chat completions client."""

from dataclasses import dataclass

import httpx
from openai import APIConnectionError, APIStatusError, AsyncOpenAI

from snapplate.domain.errors import UpstreamError
from snapplate.domain.providers import ModelInfo, ResolvedConfig
from snapplate.services.analysis import ChatClient


@dataclass
class OpenAIChatClient(ChatClient):
    """Chat client backed by the OpenAI SDK, usable with any compatible base URL."""

    http_client: httpx.AsyncClient

    @classmethod
    def create(cls) -> "OpenAIChatClient":
        """Create a chat client with a managed httpx session."""
        return cls(http_client=httpx.AsyncClient())

    async def complete(
        self, config: ResolvedConfig, payload: dict[str, object]
    ) -> str | None:
        """Call the chat completions endpoint and return the reply text."""
        client = self._client_for(config)
        try:
            response = await client.chat.completions.create(**payload)
        except APIStatusError as exc:
            raise _status_error(exc) from exc
        except APIConnectionError as exc:
            raise UpstreamError(
                f"Could not reach {config.provider} API: {exc}"
            ) from exc

        # Some gateways answer 200 with an error object instead of choices.
        error = getattr(response, "error", None)
        if isinstance(error, dict):
            raise _body_error(error)
        choices = getattr(response, "choices", None) or []
        if not choices:
            return None
        content = choices[0].message.content
        return content.strip() if content else None

    async def list_models(self, config: ResolvedConfig) -> list[ModelInfo]:
        """Fetch the provider's model list."""
        client = self._client_for(config)
        try:
            page = await client.models.list()
        except APIStatusError as exc:
            raise _status_error(exc) from exc
        except APIConnectionError as exc:
            raise UpstreamError(
                f"Could not reach {config.provider} API: {exc}"
            ) from exc
        return [
            ModelInfo(id=model.id, name=getattr(model, "name", None) or model.id)
            for model in page.data
        ]

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    def _client_for(self, config: ResolvedConfig) -> AsyncOpenAI:
        return AsyncOpenAI(
            api_key=config.api_key,
            base_url=config.base_url,
            default_headers=config.extra_headers(),
            http_client=self.http_client,
            max_retries=0,
        )


def _status_error(exc: APIStatusError) -> UpstreamError:
    detail = exc.body if isinstance(exc.body, dict) else None
    message = detail.get("message") if detail else None
    if not isinstance(message, str) or not message:
        message = f"API error: {exc.status_code}"
    return UpstreamError(message, status_code=exc.status_code, detail=detail)


def _body_error(error: dict[str, object]) -> UpstreamError:
    message = error.get("message")
    code = error.get("code")
    return UpstreamError(
        message if isinstance(message, str) and message else "API error",
        status_code=code if isinstance(code, int) and code >= 400 else None,
        detail=error,
    )
