"""
Test case management utilities
Output comparison, validation, result building and statistics.
Pure functions: nothing here touches the network or the database.
"""

import re
from collections import Counter
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from codenest.judge.models import TestCase, TestResult, Verdict

MAX_TEST_CASE_LENGTH = 10000
MAX_TEST_CASES = 100

_TRAILING_WS = re.compile(r"[ \t\f\v]+$", re.MULTILINE)


# ==================== OUTPUT COMPARISON ====================

def normalize_output(output: str) -> str:
    """Trim, unify line endings, strip trailing whitespace per line and trailing blank lines"""
    output = output.strip().replace("\r\n", "\n").replace("\r", "\n")
    output = _TRAILING_WS.sub("", output)
    return output.rstrip("\n")


def compare_outputs(expected: str, actual: str, strict: bool = False) -> bool:
    if strict:
        return expected == actual
    return normalize_output(expected) == normalize_output(actual)


# ==================== VALIDATION ====================

def _field(test_case: Any, camel: str, snake: str) -> Any:
    if isinstance(test_case, TestCase):
        return getattr(test_case, snake)
    if isinstance(test_case, dict):
        return test_case.get(camel, test_case.get(snake))
    return None


def validate_test_case_input(value: Any) -> Optional[str]:
    """Returns an error message, or None when the input is acceptable"""
    if not isinstance(value, str):
        return "Input must be a string"
    if len(value) > MAX_TEST_CASE_LENGTH:
        return "Input is too long (max 10,000 characters)"
    return None


def validate_test_case_output(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return "Output must be a string"
    if len(value) > MAX_TEST_CASE_LENGTH:
        return "Output is too long (max 10,000 characters)"
    return None


def validate_test_case(test_case: Any) -> List[str]:
    """
    Validate one test case, given as a TestCase or a raw dict
    (camelCase or snake_case keys). Returns the list of problems found.
    """
    errors = []

    input_error = validate_test_case_input(_field(test_case, "input", "input"))
    if input_error:
        errors.append(f"Input: {input_error}")

    output_error = validate_test_case_output(_field(test_case, "expectedOutput", "expected_output"))
    if output_error:
        errors.append(f"Expected Output: {output_error}")

    if not isinstance(_field(test_case, "isHidden", "is_hidden"), bool):
        errors.append("isHidden must be a boolean value")

    return errors


def validate_test_cases(test_cases: Any) -> List[str]:
    if not isinstance(test_cases, (list, tuple)):
        return ["Test cases must be an array"]
    if not test_cases:
        return ["At least one test case is required"]
    if len(test_cases) > MAX_TEST_CASES:
        return [f"Too many test cases (max {MAX_TEST_CASES})"]

    errors = []
    if not any(_field(tc, "isHidden", "is_hidden") is False for tc in test_cases):
        errors.append("At least one public test case is required")

    for index, test_case in enumerate(test_cases, 1):
        problems = validate_test_case(test_case)
        if problems:
            errors.append(f"Test case {index}: {', '.join(problems)}")

    return errors


# ==================== RESULTS ====================

def create_test_result(
    test_case: TestCase,
    actual_output: Optional[str],
    execution_time: float = 0.0,
    memory_usage: int = 0,
    error: Optional[str] = None,
    status: Optional[str] = None,
    strict: bool = False,
) -> TestResult:
    actual_output = actual_output or ""
    passed = not error and compare_outputs(test_case.expected_output, actual_output, strict)
    return TestResult(
        passed=passed,
        input=test_case.input,
        expected_output=test_case.expected_output,
        actual_output=actual_output,
        execution_time=execution_time or 0.0,
        memory_usage=memory_usage or 0,
        error=error,
        status=status,
    )


def calculate_submission_verdict(results: Sequence[TestResult]) -> Tuple[Verdict, str]:
    """Reduce a result set to a single verdict plus a human readable detail line"""
    if not results:
        return Verdict.RUNTIME_ERROR, "No test results available"

    if all(r.error and "compilation" in r.error.lower() for r in results):
        return Verdict.COMPILATION_ERROR, results[0].error or "Code failed to compile"

    runtime_errors = sum(1 for r in results if r.error and "time limit" not in r.error.lower())
    if runtime_errors:
        return Verdict.RUNTIME_ERROR, f"{runtime_errors} test(s) failed with runtime errors"

    timeouts = sum(1 for r in results if r.error and "time limit" in r.error.lower())
    if timeouts:
        return Verdict.TIME_LIMIT_EXCEEDED, f"{timeouts} test(s) exceeded time limit"

    passed = sum(1 for r in results if r.passed)
    if passed == len(results):
        return Verdict.ACCEPTED, f"All {len(results)} test cases passed"

    return Verdict.WRONG_ANSWER, f"{passed}/{len(results)} test cases passed"


# ==================== STATISTICS ====================

def get_execution_stats(results: Sequence[TestResult]) -> Dict[str, float]:
    if not results:
        return {
            "total_execution_time": 0,
            "average_execution_time": 0,
            "max_execution_time": 0,
            "total_memory_usage": 0,
            "average_memory_usage": 0,
            "max_memory_usage": 0,
        }

    times = [r.execution_time for r in results]
    memory = [r.memory_usage for r in results]
    return {
        "total_execution_time": sum(times),
        "average_execution_time": sum(times) / len(times),
        "max_execution_time": max(times),
        "total_memory_usage": sum(memory),
        "average_memory_usage": sum(memory) / len(memory),
        "max_memory_usage": max(memory),
    }


def calculate_score(results: Sequence[TestResult]) -> Dict[str, Any]:
    total = len(results)
    passed = sum(1 for r in results if r.passed)
    return {
        "passed": passed,
        "failed": total - passed,
        "total": total,
        "score": round(passed / total * 100, 2) if total else 0.0,
    }


def filter_test_cases(test_cases: Iterable[TestCase], show_hidden: bool = False) -> Dict[str, List[TestCase]]:
    test_cases = list(test_cases)
    public = [tc for tc in test_cases if not tc.is_hidden]
    hidden = [tc for tc in test_cases if tc.is_hidden]
    return {
        "public": public,
        "hidden": hidden,
        "visible": test_cases if show_hidden else public,
    }


def format_test_case_for_display(test_case: TestCase, index: int) -> Dict[str, Any]:
    return {
        "title": f"Test Case {index + 1}{' (Hidden)' if test_case.is_hidden else ''}",
        "formatted_input": test_case.input.strip(),
        "formatted_output": test_case.expected_output.strip(),
        "is_hidden": test_case.is_hidden,
    }


def create_submission_summary(submissions: Sequence[dict]) -> Dict[str, Any]:
    """
    Summary statistics over stored submission records

    Records are the dicts written by the submission store; execution_time and
    memory_usage may be missing on older records and are then left out of the
    averages.
    """
    if not submissions:
        return {
            "total_submissions": 0,
            "accepted_submissions": 0,
            "success_rate": 0.0,
            "language_distribution": {},
            "status_distribution": {},
            "average_execution_time": 0.0,
            "average_memory_usage": 0.0,
        }

    languages = Counter(s.get("language", "unknown") for s in submissions)
    statuses = Counter(s.get("status", "unknown") for s in submissions)
    accepted = statuses.get(Verdict.ACCEPTED.value, 0)

    times = [s["execution_time"] for s in submissions if s.get("execution_time") is not None]
    memory = [s["memory_usage"] for s in submissions if s.get("memory_usage") is not None]

    return {
        "total_submissions": len(submissions),
        "accepted_submissions": accepted,
        "success_rate": accepted / len(submissions) * 100,
        "language_distribution": dict(languages),
        "status_distribution": dict(statuses),
        "average_execution_time": sum(times) / len(times) if times else 0.0,
        "average_memory_usage": sum(memory) / len(memory) if memory else 0.0,
    }
