import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from codenest.streaks.models import ActivityType, UserStreakState
from codenest.streaks.service import get_streak_status, record_activity
from codenest.streaks.store import InMemoryStreakStore

UTC = timezone.utc
DAY_ONE = datetime(2026, 5, 1, 9, 0, tzinfo=UTC)


@pytest.mark.anyio
async def test_record_activity_persists_state():
    store = InMemoryStreakStore()

    result = await record_activity(store, "u1", ActivityType.PROBLEM_SOLVED, now=DAY_ONE, tz=UTC)
    stored = await store.get("u1")

    assert result.current_streak == 1
    assert stored.total_xp == 10
    assert stored.last_activity_date == DAY_ONE


@pytest.mark.anyio
async def test_consecutive_days_build_a_streak():
    store = InMemoryStreakStore()
    for day in range(3):
        result = await record_activity(store, "u1", ActivityType.PROBLEM_SOLVED,
                                       now=DAY_ONE + timedelta(days=day), tz=UTC)

    assert result.current_streak == 3
    assert result.streak_continued
    assert result.streak_multiplier == 1.1
    assert result.earned_xp == 11
    assert "streak_3" in result.new_achievements


@pytest.mark.anyio
async def test_concurrent_updates_for_one_user_do_not_lose_xp():
    store = InMemoryStreakStore()

    results = await asyncio.gather(*[
        record_activity(store, "u1", ActivityType.PROBLEM_SOLVED, now=DAY_ONE, tz=UTC)
        for _ in range(20)
    ])
    stored = await store.get("u1")

    assert stored.total_xp == 200
    assert stored.daily_xp == 200
    assert stored.current_streak == 1
    # Serial order: each commit saw the previous total
    assert sorted(r.total_xp for r in results) == list(range(10, 201, 10))


@pytest.mark.anyio
async def test_different_users_are_independent():
    store = InMemoryStreakStore()
    await asyncio.gather(
        record_activity(store, "a", ActivityType.DAILY_CHALLENGE, now=DAY_ONE, tz=UTC),
        record_activity(store, "b", ActivityType.PRACTICE_SESSION, now=DAY_ONE, tz=UTC),
    )
    assert (await store.get("a")).total_xp == 25
    assert (await store.get("b")).total_xp == 5


@pytest.mark.anyio
async def test_status_for_unknown_user_returns_defaults_without_writing():
    store = InMemoryStreakStore()

    state, was_reset = await get_streak_status(store, "ghost", now=DAY_ONE, tz=UTC)

    assert state == UserStreakState()
    assert not was_reset
    assert await store.get("ghost") is None


@pytest.mark.anyio
async def test_status_resets_lapsed_streak_and_persists_it():
    store = InMemoryStreakStore()
    for day in range(4):
        await record_activity(store, "u1", ActivityType.PROBLEM_SOLVED,
                              now=DAY_ONE + timedelta(days=day), tz=UTC)

    later = DAY_ONE + timedelta(days=10)
    state, was_reset = await get_streak_status(store, "u1", now=later, tz=UTC)
    stored = await store.get("u1")

    assert was_reset
    assert state.current_streak == 0
    assert stored.current_streak == 0
    assert stored.daily_xp == 0
    assert stored.longest_streak == 4
    assert "streak_3" in stored.achievements


@pytest.mark.anyio
async def test_status_keeps_streak_alive_until_a_day_is_missed():
    store = InMemoryStreakStore()
    await record_activity(store, "u1", ActivityType.PROBLEM_SOLVED, now=DAY_ONE, tz=UTC)

    state, was_reset = await get_streak_status(store, "u1", now=DAY_ONE + timedelta(days=1), tz=UTC)

    assert not was_reset
    assert state.current_streak == 1
