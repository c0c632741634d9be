from fastapi import APIRouter, Depends, HTTPException

from codenest.dependencies import get_current_user_id, get_streak_store
from codenest.errors import CodeNestError
from codenest.streaks.models import StreakUpdateRequest
from codenest.streaks.service import get_streak_status, record_activity
from codenest.streaks.store import StreakStore

router = APIRouter(tags=["Streaks"])


def _message(result) -> str:
    if result.streak_broken:
        return "Streak was broken, but you're starting fresh!"
    if result.streak_continued:
        return f"Great job! Your streak is now {result.current_streak} days!"
    return f"You earned {result.earned_xp} XP today!"


@router.post("/streak")
async def update_streak(
    payload: StreakUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    store: StreakStore = Depends(get_streak_store),
):
    """Record a qualifying activity and award XP"""
    try:
        result = await record_activity(store, user_id, payload.activity_type, payload.points)
    except CodeNestError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())

    return {
        "success": True,
        "data": result.model_dump(by_alias=True),
        "message": _message(result),
    }


@router.get("/streak")
async def read_streak(
    user_id: str = Depends(get_current_user_id),
    store: StreakStore = Depends(get_streak_store),
):
    """Current streak data, corrected if the streak lapsed"""
    try:
        state, was_reset = await get_streak_status(store, user_id)
    except CodeNestError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())

    response = {
        "success": True,
        "data": state.model_dump(by_alias=True),
    }
    if was_reset:
        response["message"] = "Your streak has been reset due to inactivity."
    return response
