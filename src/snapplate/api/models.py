"""Pydantic models for API request bodies."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from snapplate.domain.meals import FoodItem
from snapplate.domain.providers import Provider, ProviderRequest


class _CamelModel(BaseModel):
    """Accepts both snake_case and camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AnalyzeRequest(_CamelModel):
    """Photo analysis request."""

    image_base64: str | None = None
    api_key: str | None = None
    provider: Provider | None = None
    model: str | None = None
    custom_api_url: str | None = None
    use_server_key: bool = False

    def provider_request(self) -> ProviderRequest:
        return ProviderRequest(
            use_server_config=self.use_server_key,
            api_key=self.api_key,
            provider=self.provider,
            model=self.model,
            custom_url=self.custom_api_url,
        )


class MealCreateRequest(_CamelModel):
    """Meal entry to append after a successful analysis."""

    foods: list[FoodItem]
    image_data_url: str | None = None
    timestamp: datetime | None = None
    log_date: date | None = None


class PruneRequest(_CamelModel):
    """Manual log pruning request."""

    days_to_keep: int = Field(default=30, ge=0)


class ModelsQuery(_CamelModel):
    """Model listing query parameters."""

    api_key: str | None = None
    provider: Provider | None = None
    custom_api_url: str | None = None
    use_server_key: bool = False

    def provider_request(self) -> ProviderRequest:
        return ProviderRequest(
            use_server_config=self.use_server_key,
            api_key=self.api_key,
            provider=self.provider,
            custom_url=self.custom_api_url,
        )
