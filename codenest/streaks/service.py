from datetime import datetime, timezone, tzinfo
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

from codenest import config
from codenest.logger import get_logger
from codenest.streaks.engine import apply_activity, reset_if_inactive
from codenest.streaks.models import ActivityType, StreakUpdateResult, UserStreakState
from codenest.streaks.store import StreakStore

logger = get_logger(__name__)


def streak_timezone() -> tzinfo:
    return ZoneInfo(config.STREAK_TIMEZONE)


async def record_activity(
    store: StreakStore,
    user_id: str,
    activity_type: ActivityType,
    points: Optional[float] = None,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> StreakUpdateResult:
    """Apply one qualifying activity to the user's streak state inside a store transaction"""
    now = now or datetime.now(timezone.utc)
    tz = tz or streak_timezone()

    def mutate(state):
        return apply_activity(state, activity_type, points, now, tz)

    result = await store.transact(user_id, mutate)

    logger.info(
        "Streak update user=%s activity=%s streak=%d earned=%d new_achievements=%s",
        user_id, ActivityType(activity_type).value, result.current_streak, result.earned_xp,
        result.new_achievements,
    )
    return result


async def get_streak_status(
    store: StreakStore,
    user_id: str,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> Tuple[UserStreakState, bool]:
    """
    Current state for a user, plus whether it was reset for inactivity.

    A lapsed streak is written back as currentStreak = 0, dailyXP = 0. Users
    without a document get the defaults and nothing is written.
    """
    now = now or datetime.now(timezone.utc)
    tz = tz or streak_timezone()

    def mutate(state):
        if state is None:
            return None, (UserStreakState(), False)
        corrected = reset_if_inactive(state, now, tz)
        if corrected is None:
            return None, (state, False)
        return corrected, (corrected, True)

    state, was_reset = await store.transact(user_id, mutate)
    if was_reset:
        logger.info("Streak for user %s reset due to inactivity", user_id)
    return state, was_reset
