"""
Streak / XP rules
Day-boundary streak transitions, multiplier tiers, XP awards and achievement
unlocks. Everything here is a pure function of the stored state and "now";
persistence and isolation live in codenest.streaks.store.
"""

import math
from datetime import date, datetime, timezone, tzinfo
from typing import Iterable, List, Optional, Tuple

from codenest.streaks.models import (
    ActivityType, StreakTransition, StreakUpdateResult, UserStreakState
)

# XP rewards based on activity type
XP_REWARDS = {
    ActivityType.PROBLEM_SOLVED: 10,
    ActivityType.DAILY_CHALLENGE: 25,
    ActivityType.PRACTICE_SESSION: 5,
}

# (minimum streak, multiplier), ascending
STREAK_MULTIPLIERS = (
    (0, 1.0),
    (3, 1.1),
    (7, 1.2),
    (14, 1.3),
    (30, 1.5),
    (60, 1.7),
    (100, 2.0),
)

STREAK_MILESTONES = (3, 7, 14, 30, 60, 100)
XP_MILESTONES = (100, 500, 1000, 2500, 5000, 10000)
LONGEST_STREAK_MILESTONES = (10, 25, 50, 100)


def get_streak_multiplier(streak: int) -> float:
    """Multiplier of the largest threshold not exceeding streak"""
    multiplier = 1.0
    for threshold, value in STREAK_MULTIPLIERS:
        if streak < threshold:
            break
        multiplier = value
    return multiplier


def local_date(moment: datetime, tz: tzinfo) -> date:
    # Mongo hands back naive datetimes; they are stored as UTC
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(tz).date()


def days_since(last_activity: Optional[datetime], now: datetime, tz: tzinfo) -> Optional[int]:
    """Whole calendar days between the last activity and now, or None without prior activity"""
    if last_activity is None:
        return None
    return (local_date(now, tz) - local_date(last_activity, tz)).days


def calculate_streak_update(
    last_activity: Optional[datetime],
    current_streak: int,
    now: datetime,
    tz: tzinfo,
) -> StreakTransition:
    gap = days_since(last_activity, now, tz)

    if gap is None:
        return StreakTransition(new_streak=1)

    if gap <= 0:
        # Same day (or a clock behind the stored date) - no streak change
        return StreakTransition(new_streak=current_streak)

    if gap == 1:
        return StreakTransition(new_streak=current_streak + 1, streak_continued=True)

    return StreakTransition(new_streak=1, streak_broken=current_streak > 0)


def check_achievements(
    existing: Iterable[str],
    new_streak: int,
    longest_streak: int,
    total_xp: int,
) -> List[str]:
    """Milestones reached that are not yet in the stored achievement set"""
    existing = set(existing)
    reached = (
        [f"streak_{m}" for m in STREAK_MILESTONES if new_streak >= m]
        + [f"xp_{m}" for m in XP_MILESTONES if total_xp >= m]
        + [f"longest_streak_{m}" for m in LONGEST_STREAK_MILESTONES if longest_streak >= m]
    )
    return [achievement for achievement in reached if achievement not in existing]


def apply_activity(
    state: Optional[UserStreakState],
    activity_type: ActivityType,
    points: Optional[float],
    now: datetime,
    tz: tzinfo,
) -> Tuple[UserStreakState, StreakUpdateResult]:
    """
    Compute the state after one qualifying activity.

    Returns the new state to persist and the full update result for the caller.
    A missing state is treated as a fresh, all-zero document.
    """
    state = state or UserStreakState()

    transition = calculate_streak_update(state.last_activity_date, state.current_streak, now, tz)

    base_xp = points or XP_REWARDS[ActivityType(activity_type)]
    multiplier = get_streak_multiplier(transition.new_streak)
    earned_xp = math.floor(base_xp * multiplier)

    is_new_day = (
        state.last_activity_date is None
        or local_date(state.last_activity_date, tz) != local_date(now, tz)
    )
    daily_xp = earned_xp if is_new_day else state.daily_xp + earned_xp

    longest_streak = max(transition.new_streak, state.longest_streak)
    total_xp = state.total_xp + earned_xp

    new_achievements = check_achievements(state.achievements, transition.new_streak, longest_streak, total_xp)

    new_state = UserStreakState(
        current_streak=transition.new_streak,
        longest_streak=longest_streak,
        last_activity_date=now,
        total_xp=total_xp,
        daily_xp=daily_xp,
        streak_multiplier=multiplier,
        achievements=list(state.achievements) + new_achievements,
    )

    result = StreakUpdateResult(
        **new_state.model_dump(),
        earned_xp=earned_xp,
        base_xp=base_xp,
        streak_bonus=earned_xp - base_xp,
        streak_broken=transition.streak_broken,
        streak_continued=transition.streak_continued,
        new_achievements=new_achievements,
        is_new_day=is_new_day,
    )
    return new_state, result


def reset_if_inactive(
    state: UserStreakState,
    now: datetime,
    tz: tzinfo,
) -> Optional[UserStreakState]:
    """Corrected state when the stored streak lapsed, or None when nothing changes"""
    gap = days_since(state.last_activity_date, now, tz)
    if gap is None or gap <= 1 or state.current_streak == 0:
        return None
    return state.model_copy(update={
        "current_streak": 0,
        "daily_xp": 0,
        "streak_multiplier": get_streak_multiplier(0),
    })
