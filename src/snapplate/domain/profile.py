"""User profile and AI settings models."""

from enum import StrEnum

from pydantic import BaseModel, Field

from snapplate.domain.providers import DEFAULT_MODEL, KeySource, Provider


class Sex(StrEnum):
    MALE = "male"
    FEMALE = "female"


class ActivityLevel(StrEnum):
    SEDENTARY = "sedentary"
    LIGHT = "light"
    MODERATE = "moderate"
    ACTIVE = "active"
    VERY_ACTIVE = "very_active"


ACTIVITY_MULTIPLIERS: dict[ActivityLevel, float] = {
    ActivityLevel.SEDENTARY: 1.2,
    ActivityLevel.LIGHT: 1.375,
    ActivityLevel.MODERATE: 1.55,
    ActivityLevel.ACTIVE: 1.725,
    ActivityLevel.VERY_ACTIVE: 1.9,
}


class UserProfile(BaseModel):
    """Body metrics used for the daily calorie target."""

    sex: Sex
    age: int = Field(gt=0)
    weight: float = Field(gt=0.0, description="kg")
    height: float = Field(gt=0.0, description="cm")
    activity_level: ActivityLevel
    goal_calories: float | None = Field(default=None, ge=0.0)

    def bmr(self) -> float:
        """Basal metabolic rate using the Mifflin-St Jeor equation."""
        base = 10 * self.weight + 6.25 * self.height - 5 * self.age
        if self.sex is Sex.MALE:
            return base + 5
        return base - 161

    def tdee(self) -> int:
        """Total daily energy expenditure."""
        return round(self.bmr() * ACTIVITY_MULTIPLIERS[self.activity_level])

    def daily_target(self) -> float:
        """Explicit goal when set, otherwise TDEE."""
        if self.goal_calories is not None:
            return self.goal_calories
        return float(self.tdee())


class AISettings(BaseModel):
    """Provider selection saved by the client."""

    provider: Provider = Provider.OPENAI
    model: str = DEFAULT_MODEL
    key_source: KeySource = KeySource.LOCAL
    local_api_key: str = ""
    custom_api_url: str = ""
