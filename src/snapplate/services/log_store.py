"""Date-partitioned meal log with quota-aware cleanup."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from pydantic import TypeAdapter, ValidationError

from snapplate.domain.errors import StorageError, StorageQuotaExceededError
from snapplate.domain.meals import DailyLog, MealEntry
from snapplate.services.storage import LOGS_KEY, KeyValueStorage

logger = logging.getLogger(__name__)

ASSUMED_QUOTA_BYTES = 5 * 1024 * 1024
SAFETY_THRESHOLD_BYTES = 4 * 1024 * 1024
DEFAULT_DAYS_TO_KEEP = 30
EMERGENCY_DAYS_TO_KEEP = 7
TRUNCATED_IMAGE_CHARS = 100
TRUNCATED_MARKER = "...truncated..."

LogMapping = dict[str, DailyLog]

_LOGS_ADAPTER = TypeAdapter(dict[str, DailyLog])


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


def keep_recent_days(logs: LogMapping, days: int) -> LogMapping:
    """Keep only the most recent ``days`` date keys."""
    if days <= 0:
        return {}
    kept = sorted(logs)[-days:]
    return {date_key: logs[date_key] for date_key in kept}


def truncate_images(logs: LogMapping) -> LogMapping:
    """Replace every image with a short prefix plus a truncation marker."""
    return _map_images(
        logs,
        lambda image: image[:TRUNCATED_IMAGE_CHARS] + TRUNCATED_MARKER,
    )


def drop_images(logs: LogMapping) -> LogMapping:
    """Remove every image."""
    return _map_images(logs, lambda _image: None)


@dataclass(frozen=True)
class CleanupStep:
    """One stage of log degradation, applied to the full mapping."""

    name: str
    apply: Callable[[LogMapping], LogMapping]


CLEANUP_STEPS: tuple[CleanupStep, ...] = (
    CleanupStep(
        "recent_days",
        lambda logs: keep_recent_days(logs, DEFAULT_DAYS_TO_KEEP),
    ),
    CleanupStep(
        "truncate_images",
        lambda logs: truncate_images(keep_recent_days(logs, DEFAULT_DAYS_TO_KEEP)),
    ),
    CleanupStep(
        "emergency",
        lambda logs: drop_images(keep_recent_days(logs, EMERGENCY_DAYS_TO_KEEP)),
    ),
    CleanupStep("clear", lambda _logs: {}),
)


@dataclass(frozen=True)
class StorageUsage:
    """Advisory storage usage figures."""

    used_bytes: int
    quota_bytes: int

    @property
    def percentage(self) -> float:
        if self.quota_bytes <= 0:
            return 0.0
        return self.used_bytes / self.quota_bytes * 100


@dataclass
class LogStore:
    """Meal log persisted as a single JSON document keyed by date."""

    storage: KeyValueStorage
    clock: Callable[[], datetime] = _utc_now
    safety_threshold_bytes: int = SAFETY_THRESHOLD_BYTES
    quota_bytes: int = ASSUMED_QUOTA_BYTES
    cleanup_steps: tuple[CleanupStep, ...] = CLEANUP_STEPS

    def today(self) -> str:
        """Return today's date key."""
        return self.clock().date().isoformat()

    def append(self, entry: MealEntry, date_key: str | None = None) -> None:
        """Append a meal entry to a day's log."""
        key = date_key or self.today()
        logs = self._load()
        logs.setdefault(key, DailyLog(date=key)).meals.append(entry)
        self._commit(logs)

    def remove(self, entry_id: str, date_key: str | None = None) -> bool:
        """Delete a meal entry; return True when something was removed."""
        key = date_key or self.today()
        logs = self._load()
        daily = logs.get(key)
        if daily is None:
            return False
        remaining = [meal for meal in daily.meals if meal.id != entry_id]
        if len(remaining) == len(daily.meals):
            return False
        daily.meals = remaining
        self._commit(logs)
        return True

    def get(self, date_key: str | None = None) -> DailyLog:
        """Return a day's log, empty when nothing was recorded."""
        key = date_key or self.today()
        return self._load().get(key) or DailyLog(date=key)

    def list_dates(self) -> list[str]:
        """Return recorded date keys, most recent first."""
        return sorted(self._load(), reverse=True)

    def usage(self) -> StorageUsage:
        """Return measured usage against the assumed quota."""
        return StorageUsage(
            used_bytes=self.storage.used_bytes(), quota_bytes=self.quota_bytes
        )

    def prune(self, days_to_keep: int = DEFAULT_DAYS_TO_KEEP) -> int:
        """Drop all but the most recent days; return the number of days kept."""
        logs = keep_recent_days(self._load(), days_to_keep)
        self._commit(logs)
        logger.info("Pruned meal logs", extra={"days_kept": len(logs)})
        return len(logs)

    def _load(self) -> LogMapping:
        raw = self.storage.get(LOGS_KEY)
        if not raw:
            return {}
        try:
            return _LOGS_ADAPTER.validate_json(raw)
        except ValidationError:
            logger.warning("Stored meal log is unreadable, starting empty")
            return {}

    def _commit(self, logs: LogMapping) -> None:
        if self._try_write(logs):
            return
        for step in self.cleanup_steps:
            candidate = step.apply(logs)
            if self._try_write(candidate):
                logger.info(
                    "Cleaned up meal logs",
                    extra={"step": step.name, "days_kept": len(candidate)},
                )
                return
        logger.error("Meal log cleanup exhausted, clearing stored logs")
        try:
            self.storage.remove(LOGS_KEY)
        except StorageError:
            logger.exception("Failed to clear stored meal logs")

    def _try_write(self, logs: LogMapping) -> bool:
        serialized = _LOGS_ADAPTER.dump_json(logs)
        if len(serialized) > self.safety_threshold_bytes:
            logger.warning(
                "Meal log over safety threshold",
                extra={"size_bytes": len(serialized)},
            )
            return False
        try:
            self.storage.set(LOGS_KEY, serialized.decode("utf-8"))
        except StorageQuotaExceededError:
            logger.warning(
                "Storage quota exceeded writing meal log",
                extra={"size_bytes": len(serialized)},
            )
            return False
        except StorageError:
            logger.exception(
                "Failed to write meal log",
                extra={"size_bytes": len(serialized)},
            )
            return False
        return True


def _map_images(
    logs: LogMapping, transform: Callable[[str], str | None]
) -> LogMapping:
    mapped: LogMapping = {}
    for date_key, daily in logs.items():
        meals = [
            meal.model_copy(update={"image_data_url": transform(meal.image_data_url)})
            if meal.image_data_url
            else meal
            for meal in daily.meals
        ]
        mapped[date_key] = DailyLog(date=daily.date, meals=meals)
    return mapped
