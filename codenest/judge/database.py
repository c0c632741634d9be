from motor.motor_asyncio import AsyncIOMotorDatabase
from datetime import datetime, timezone
from typing import List, Optional
import uuid

from codenest.judge.models import SubmissionOutcome
from codenest.judge.testcases import get_execution_stats

# ==================== SUBMISSION CRUD ====================

async def create_submission(
    db: AsyncIOMotorDatabase,
    user_id: str,
    code: str,
    language: str,
    outcome: SubmissionOutcome,
    problem_id: Optional[str] = None,
) -> str:
    """Persist a judged submission; timing and memory are stored as averages over executed tests"""
    submission_id = f"SUB_{uuid.uuid4().hex[:12].upper()}"
    stats = get_execution_stats(outcome.results)

    submission = {
        "submission_id": submission_id,
        "user_id": user_id,
        "problem_id": problem_id,
        "code": code,
        "language": language,
        "status": outcome.verdict.value,
        "execution_time": stats["average_execution_time"],
        "memory_usage": stats["average_memory_usage"],
        "passed_tests": outcome.passed_tests,
        "total_tests": outcome.total_tests,
        "test_results": [r.model_dump() for r in outcome.results],
        "submitted_at": datetime.now(timezone.utc),
    }

    await db.submissions.insert_one(submission)
    return submission_id


async def get_submission(db: AsyncIOMotorDatabase, submission_id: str) -> Optional[dict]:
    return await db.submissions.find_one({"submission_id": submission_id}, {"_id": 0})


async def get_user_submissions(db: AsyncIOMotorDatabase, user_id: str, limit: int = 50) -> List[dict]:
    """Most recent first, without source code or per-test payloads"""
    cursor = db.submissions.find(
        {"user_id": user_id},
        {"_id": 0, "code": 0, "test_results": 0},
    ).sort("submitted_at", -1).limit(limit)
    return await cursor.to_list(length=limit)


async def create_submission_indexes(db: AsyncIOMotorDatabase) -> None:
    await db.submissions.create_index("submission_id", unique=True)
    await db.submissions.create_index([("user_id", 1), ("submitted_at", -1)])
