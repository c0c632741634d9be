from pydantic import BaseModel, ConfigDict, Field, StrictBool
from pydantic.alias_generators import to_camel
from typing import List, Optional
from enum import Enum


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ==================== ENUMS ====================

class Verdict(str, Enum):
    ACCEPTED = "Accepted"
    WRONG_ANSWER = "Wrong Answer"
    TIME_LIMIT_EXCEEDED = "Time Limit Exceeded"
    RUNTIME_ERROR = "Runtime Error"
    COMPILATION_ERROR = "Compilation Error"


class EvaluationPolicy(str, Enum):
    RUN = "run"       # public tests only, continue on failure
    SUBMIT = "submit"  # every test, stop on first failure


# ==================== TEST CASE MODELS ====================

class TestCase(CamelModel):
    __test__ = False
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    input: str
    expected_output: str
    is_hidden: StrictBool = False


class TestResult(CamelModel):
    __test__ = False
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    passed: bool
    input: str
    expected_output: str
    actual_output: str = ""
    execution_time: float = 0.0  # ms
    memory_usage: int = 0        # bytes
    error: Optional[str] = None
    status: Optional[str] = None


class SubmissionOutcome(CamelModel):
    verdict: Verdict
    results: List[TestResult]
    total_tests: int
    passed_tests: int
    max_execution_time: float = 0.0
    max_memory_usage: int = 0


# ==================== EXECUTION ENGINE ====================

class ExecutionResult(BaseModel):
    """Terminal result fetched from Judge0, fields passed through untouched"""
    status_id: int
    status_description: str = ""
    stdout: Optional[str] = None
    stderr: Optional[str] = None
    compile_output: Optional[str] = None
    time: Optional[float] = None   # seconds; Judge0 reports it as a string
    memory: Optional[int] = None   # kilobytes

    @classmethod
    def from_judge0(cls, payload: dict) -> "ExecutionResult":
        status = payload.get("status")
        if not isinstance(status, dict):
            status = {}
        return cls(
            status_id=status.get("id", 0),
            status_description=status.get("description", ""),
            stdout=payload.get("stdout"),
            stderr=payload.get("stderr"),
            compile_output=payload.get("compile_output"),
            time=payload.get("time"),
            memory=payload.get("memory"),
        )


# ==================== API MODELS ====================

class EvaluateRequest(CamelModel):
    code: str = Field(..., min_length=1, max_length=100000)
    language: str  # python, java, javascript, cpp, c
    test_cases: List[TestCase]
    action: EvaluationPolicy
    problem_id: Optional[str] = None


class EvaluateResponse(CamelModel):
    verdict: Verdict
    results: List[TestResult]
    total_tests: int
    passed_tests: int
    execution_time: float
    memory_usage: int
    submission_id: Optional[str] = None
