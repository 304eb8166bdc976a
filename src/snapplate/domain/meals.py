"""Domain models for meal logging."""

from datetime import UTC, datetime
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class FoodItem(BaseModel):
    """Single detected food with estimated macros."""

    model_config = ConfigDict(frozen=True)

    name: str
    calories: float = Field(ge=0.0)
    protein: float = Field(ge=0.0)
    carbs: float = Field(ge=0.0)
    fat: float = Field(ge=0.0)
    amount: str


class MealTotals(BaseModel):
    """Aggregated macros for a meal or a day."""

    model_config = ConfigDict(frozen=True)

    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0


class MealEntry(BaseModel):
    """One analyzed photo saved with its aggregated totals."""

    model_config = ConfigDict(frozen=True)

    id: str
    timestamp: datetime
    image_data_url: str | None = None
    foods: list[FoodItem]
    total_calories: float
    total_protein: float
    total_carbs: float
    total_fat: float

    @classmethod
    def create(
        cls,
        foods: list[FoodItem],
        image_data_url: str | None = None,
        timestamp: datetime | None = None,
    ) -> "MealEntry":
        """Build a new entry, summing totals over the foods once."""
        return cls(
            id=str(uuid4()),
            timestamp=timestamp or datetime.now(tz=UTC),
            image_data_url=image_data_url,
            foods=list(foods),
            total_calories=sum(food.calories for food in foods),
            total_protein=sum(food.protein for food in foods),
            total_carbs=sum(food.carbs for food in foods),
            total_fat=sum(food.fat for food in foods),
        )


class DailyLog(BaseModel):
    """Meal entries recorded for one calendar day."""

    date: str
    meals: list[MealEntry] = Field(default_factory=list)

    def totals(self) -> MealTotals:
        """Sum stored meal totals for the day."""
        return MealTotals(
            calories=sum(meal.total_calories for meal in self.meals),
            protein=sum(meal.total_protein for meal in self.meals),
            carbs=sum(meal.total_carbs for meal in self.meals),
            fat=sum(meal.total_fat for meal in self.meals),
        )


class AnalysisResult(BaseModel):
    """Normalized analysis reply, possibly degraded."""

    foods: list[FoodItem]
    error: str | None = None
    raw_response: str | None = None

    @property
    def degraded(self) -> bool:
        """Return True when the reply could not be parsed."""
        return self.error is not None
