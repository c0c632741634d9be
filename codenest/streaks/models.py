from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List, Optional
from datetime import datetime
from enum import Enum


class ActivityType(str, Enum):
    PROBLEM_SOLVED = "problem_solved"
    DAILY_CHALLENGE = "daily_challenge"
    PRACTICE_SESSION = "practice_session"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserStreakState(CamelModel):
    """Per-user gamification document; only the streak store transaction mutates it"""
    current_streak: int = 0
    longest_streak: int = 0
    last_activity_date: Optional[datetime] = None
    total_xp: int = Field(0, alias="totalXP")
    daily_xp: int = Field(0, alias="dailyXP")
    streak_multiplier: float = 1.0
    achievements: List[str] = []

    def to_document(self, user_id: str) -> dict:
        return {"user_id": user_id, **self.model_dump()}

    @classmethod
    def from_document(cls, doc: Optional[dict]) -> Optional["UserStreakState"]:
        if not doc:
            return None
        return cls.model_validate({k: v for k, v in doc.items() if k not in ("_id", "user_id")})


class StreakUpdateRequest(CamelModel):
    activity_type: ActivityType
    points: Optional[float] = Field(None, ge=0)


class StreakTransition(BaseModel):
    new_streak: int
    streak_broken: bool = False
    streak_continued: bool = False


class StreakUpdateResult(UserStreakState):
    earned_xp: int = Field(0, alias="earnedXP")
    base_xp: float = Field(0, alias="baseXP")
    streak_bonus: float = 0
    streak_broken: bool = False
    streak_continued: bool = False
    new_achievements: List[str] = []
    is_new_day: bool = False
