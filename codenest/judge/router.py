from fastapi import APIRouter, Depends, HTTPException, Query
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError
import asyncio

from codenest import config
from codenest.dependencies import get_current_user_id, get_db, get_evaluator, get_request_budget
from codenest.errors import CodeNestError, EvaluationTimeout, RateLimitExceeded, ValidationError
from codenest.judge.database import create_submission, get_submission, get_user_submissions
from codenest.judge.evaluator import SubmissionEvaluator
from codenest.judge.models import EvaluateRequest, EvaluateResponse, EvaluationPolicy
from codenest.judge.rate_limit import RequestBudget
from codenest.judge.testcases import create_submission_summary, validate_test_cases
from codenest.logger import get_logger

router = APIRouter(tags=["Judge"])
logger = get_logger(__name__)


def _raise_http(error: CodeNestError):
    headers = None
    if isinstance(error, RateLimitExceeded):
        headers = {"Retry-After": str(error.retry_after)}
    raise HTTPException(status_code=error.status_code, detail=error.to_detail(), headers=headers)


# ==================== ENDPOINTS ====================

@router.post("/compile", response_model=EvaluateResponse, response_model_exclude_none=True)
async def compile_and_evaluate(
    payload: EvaluateRequest,
    user_id: str = Depends(get_current_user_id),
    evaluator: SubmissionEvaluator = Depends(get_evaluator),
    budget: RequestBudget = Depends(get_request_budget),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    """
    Run code against a problem's test cases.

    action=run    → public test cases only, every case executed
    action=submit → all test cases, stops at the first failure, result persisted
    """
    try:
        budget.consume(user_id)

        problems = validate_test_cases(payload.test_cases)
        if problems:
            raise ValidationError(f"Test case validation failed: {', '.join(problems)}", field="testCases")

        try:
            outcome = await asyncio.wait_for(
                evaluator.evaluate(payload.code, payload.language, payload.test_cases, payload.action),
                timeout=config.EVALUATION_TIMEOUT_SECONDS,
            )
        except asyncio.TimeoutError:
            logger.error("Evaluation for user %s exceeded %ss", user_id, config.EVALUATION_TIMEOUT_SECONDS)
            raise EvaluationTimeout("Evaluation did not finish in time")

    except CodeNestError as e:
        _raise_http(e)

    submission_id = None
    if payload.action == EvaluationPolicy.SUBMIT:
        try:
            submission_id = await create_submission(
                db, user_id, payload.code, payload.language, outcome, problem_id=payload.problem_id
            )
        except PyMongoError:
            # The verdict is still returned; only the history record is missing
            logger.exception("Failed to store submission for user %s", user_id)

    return EvaluateResponse(
        verdict=outcome.verdict,
        results=outcome.results,
        total_tests=outcome.total_tests,
        passed_tests=outcome.passed_tests,
        execution_time=outcome.max_execution_time,
        memory_usage=outcome.max_memory_usage,
        submission_id=submission_id,
    )


@router.get("/submissions")
async def get_my_submissions(
    limit: int = Query(50, ge=1, le=100),
    user_id: str = Depends(get_current_user_id),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    """Get user's submission history"""
    submissions = await get_user_submissions(db, user_id, limit)
    return {
        "submissions": submissions,
        "count": len(submissions),
    }


@router.get("/submissions/summary")
async def get_submission_summary(
    user_id: str = Depends(get_current_user_id),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    """Aggregate statistics over the user's recent submissions"""
    submissions = await get_user_submissions(db, user_id, limit=1000)
    return create_submission_summary(submissions)


@router.get("/submissions/{submission_id}")
async def get_submission_details(
    submission_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    """Full record of one of the caller's submissions"""
    submission = await get_submission(db, submission_id)
    if not submission or submission.get("user_id") != user_id:
        raise HTTPException(status_code=404, detail="Submission not found")
    return submission
