"""Tests for the meal log store."""

from datetime import date, timedelta

from snapplate.domain.meals import DailyLog, FoodItem, MealEntry
from snapplate.services.log_store import (
    TRUNCATED_IMAGE_CHARS,
    TRUNCATED_MARKER,
    LogStore,
    drop_images,
    keep_recent_days,
    truncate_images,
)
from snapplate.services.storage import LOGS_KEY
from tests.conftest import BrokenStorage, InMemoryStorage, fixed_clock

IMAGE = "data:image/jpeg;base64," + "A" * 4000
APPLE = FoodItem(
    name="Apple", calories=95, protein=0.5, carbs=25, fat=0.3, amount="1 medium"
)
TOAST = FoodItem(name="Toast", calories=80, protein=3, carbs=15, fat=1, amount="1")


def _entry(image: str | None = None) -> MealEntry:
    return MealEntry.create([APPLE, TOAST], image_data_url=image)


def _seed(storage: InMemoryStorage, days: int, image: str | None = None) -> list[str]:
    store = LogStore(storage, clock=fixed_clock, safety_threshold_bytes=10**9)
    start = date(2026, 1, 1)
    keys = [(start + timedelta(days=offset)).isoformat() for offset in range(days)]
    for key in keys:
        store.append(_entry(image), key)
    return keys


def _stored_size(storage: InMemoryStorage) -> int:
    return len(storage.documents[LOGS_KEY].encode("utf-8"))


def test_meal_entry_sums_totals() -> None:
    entry = _entry()

    assert entry.total_calories == 175
    assert entry.total_protein == 3.5
    assert entry.total_carbs == 40
    assert entry.total_fat == 1.3


def test_append_preserves_order_and_remove_deletes() -> None:
    store = LogStore(InMemoryStorage(), clock=fixed_clock)
    first = _entry()
    second = _entry()

    store.append(first)
    store.append(second)

    daily = store.get()
    assert daily.date == "2026-03-14"
    assert [meal.id for meal in daily.meals] == [first.id, second.id]
    assert daily.totals().calories == 350

    assert store.remove(first.id) is True
    assert [meal.id for meal in store.get().meals] == [second.id]


def test_remove_unknown_entry_returns_false() -> None:
    store = LogStore(InMemoryStorage(), clock=fixed_clock)
    store.append(_entry())

    assert store.remove("missing") is False
    assert store.remove("missing", "2020-01-01") is False


def test_get_missing_day_is_empty() -> None:
    store = LogStore(InMemoryStorage(), clock=fixed_clock)

    daily = store.get("2026-01-05")

    assert daily.date == "2026-01-05"
    assert daily.meals == []
    assert daily.totals().calories == 0


def test_list_dates_most_recent_first() -> None:
    storage = InMemoryStorage()
    keys = _seed(storage, 3)
    store = LogStore(storage, clock=fixed_clock)

    assert store.list_dates() == list(reversed(keys))


def test_commit_over_threshold_keeps_recent_days() -> None:
    storage = InMemoryStorage()
    keys = _seed(storage, 40)
    threshold = int(_stored_size(storage) * 0.85)
    store = LogStore(storage, clock=fixed_clock, safety_threshold_bytes=threshold)

    store.append(_entry(), keys[-1])

    assert store.list_dates() == list(reversed(keys[-30:]))
    assert len(store.get(keys[-1]).meals) == 2
    assert _stored_size(storage) <= threshold


def test_commit_over_threshold_truncates_images() -> None:
    storage = InMemoryStorage()
    keys = _seed(storage, 40, image=IMAGE)
    threshold = int(_stored_size(storage) * 0.5)
    store = LogStore(storage, clock=fixed_clock, safety_threshold_bytes=threshold)

    store.append(_entry(IMAGE), keys[-1])

    assert len(store.list_dates()) == 30
    image = store.get(keys[-1]).meals[0].image_data_url
    assert image == IMAGE[:TRUNCATED_IMAGE_CHARS] + TRUNCATED_MARKER
    assert _stored_size(storage) <= threshold


def test_quota_error_triggers_cleanup() -> None:
    storage = InMemoryStorage()
    _seed(storage, 2)
    storage.failing_writes = 1
    attempts_before = storage.write_attempts
    store = LogStore(storage, clock=fixed_clock)
    entry = _entry()

    store.append(entry)

    assert storage.write_attempts - attempts_before == 2
    assert [meal.id for meal in store.get().meals] == [entry.id]
    assert len(store.list_dates()) == 3


def test_emergency_cleanup_drops_images_and_old_days() -> None:
    storage = InMemoryStorage()
    keys = _seed(storage, 10, image=IMAGE)
    storage.failing_writes = 3
    store = LogStore(storage, clock=fixed_clock)

    store.append(_entry(IMAGE), keys[-1])

    assert store.list_dates() == list(reversed(keys[-7:]))
    for key in keys[-7:]:
        assert all(meal.image_data_url is None for meal in store.get(key).meals)


def test_exhausted_cleanup_clears_logs() -> None:
    storage = InMemoryStorage()
    _seed(storage, 3)
    storage.failing_writes = 5
    store = LogStore(storage, clock=fixed_clock)

    store.append(_entry())

    assert LOGS_KEY not in storage.documents
    assert store.list_dates() == []


def test_failed_writes_do_not_reach_caller() -> None:
    storage = BrokenStorage()
    store = LogStore(storage, clock=fixed_clock)

    store.append(_entry())

    assert storage.write_attempts == 5
    assert store.remove("missing") is False
    assert store.prune(3) == 0


def test_prune_keeps_recent_days_with_images() -> None:
    storage = InMemoryStorage()
    keys = _seed(storage, 5, image=IMAGE)
    store = LogStore(storage, clock=fixed_clock)

    kept = store.prune(3)

    assert kept == 3
    assert store.list_dates() == list(reversed(keys[-3:]))
    assert store.get(keys[-1]).meals[0].image_data_url == IMAGE


def test_prune_to_zero_days() -> None:
    storage = InMemoryStorage()
    _seed(storage, 2)
    store = LogStore(storage, clock=fixed_clock)

    assert store.prune(0) == 0
    assert store.list_dates() == []


def test_usage_reports_percentage() -> None:
    storage = InMemoryStorage(documents={"k": "x" * 99})
    store = LogStore(storage, clock=fixed_clock, quota_bytes=1000)

    usage = store.usage()

    assert usage.used_bytes == 100
    assert usage.quota_bytes == 1000
    assert usage.percentage == 10.0


def test_unreadable_log_starts_empty() -> None:
    storage = InMemoryStorage(documents={LOGS_KEY: "not json"})
    store = LogStore(storage, clock=fixed_clock)

    assert store.get().meals == []

    store.append(_entry())

    assert len(store.get().meals) == 1


def test_cleanup_transforms() -> None:
    logs = {
        "2026-01-01": DailyLog(date="2026-01-01", meals=[_entry(IMAGE)]),
        "2026-01-02": DailyLog(date="2026-01-02", meals=[_entry()]),
        "2026-01-03": DailyLog(date="2026-01-03", meals=[_entry(IMAGE)]),
    }

    assert list(keep_recent_days(logs, 2)) == ["2026-01-02", "2026-01-03"]
    assert keep_recent_days(logs, 0) == {}

    truncated = truncate_images(logs)
    assert truncated["2026-01-01"].meals[0].image_data_url.endswith(TRUNCATED_MARKER)
    assert truncated["2026-01-02"].meals[0].image_data_url is None
    assert logs["2026-01-01"].meals[0].image_data_url == IMAGE

    dropped = drop_images(logs)
    assert all(
        meal.image_data_url is None
        for daily in dropped.values()
        for meal in daily.meals
    )
