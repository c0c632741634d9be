"""
Submission evaluator
Runs a problem's test cases through the execution client under the "run" or
"submit" policy and reduces the per-test results to one verdict.
"""

from typing import List, Sequence

from codenest import config
from codenest.errors import ExecutionError, NoTestCasesError, UnsupportedLanguageError
from codenest.judge.client import LANGUAGE_IDS, Judge0Client, resolve_language_id
from codenest.judge.models import (
    EvaluationPolicy, ExecutionResult, SubmissionOutcome, TestCase, TestResult
)
from codenest.judge.testcases import calculate_submission_verdict, create_test_result
from codenest.logger import get_logger

logger = get_logger(__name__)

# Judge0 terminal status ids
STATUS_TIME_LIMIT_EXCEEDED = 5
STATUS_COMPILATION_ERROR = 6
FIRST_RUNTIME_ERROR_STATUS = 7


def select_test_cases(test_cases: Sequence[TestCase], policy: EvaluationPolicy) -> List[TestCase]:
    if policy == EvaluationPolicy.RUN:
        return [tc for tc in test_cases if not tc.is_hidden]
    return list(test_cases)


def interpret_execution(result: ExecutionResult) -> dict:
    """Turn a raw engine result into TestResult fields (output, ms, bytes, error)"""
    execution_time = float(result.time) * 1000 if result.time else 0.0
    memory_usage = result.memory * 1024 if result.memory else 0

    error = None
    if result.status_id == STATUS_COMPILATION_ERROR:
        compile_output = (result.compile_output or "").strip()
        error = f"Compilation Error: {compile_output}" if compile_output else "Compilation Error"
    elif result.status_id == STATUS_TIME_LIMIT_EXCEEDED:
        error = "Time Limit Exceeded"
    elif result.status_id >= FIRST_RUNTIME_ERROR_STATUS:
        error = (result.stderr or "").strip() or result.status_description or "Runtime Error"

    return {
        "actual_output": (result.stdout or "").strip(),
        "execution_time": execution_time,
        "memory_usage": memory_usage,
        "error": error,
        "status": result.status_description or None,
    }


def apply_resource_limits(
    result: TestResult,
    max_time_ms: float = config.MAX_EXECUTION_TIME_MS,
    max_memory: int = config.MAX_MEMORY_USAGE_BYTES,
    max_output: int = config.MAX_OUTPUT_LENGTH,
) -> TestResult:
    if result.error:
        return result

    if result.execution_time > max_time_ms:
        return result.model_copy(update={
            "passed": False,
            "error": f"Time Limit Exceeded ({result.execution_time:g}ms > {max_time_ms}ms)",
        })

    if result.memory_usage > max_memory:
        return result.model_copy(update={
            "passed": False,
            "error": f"Memory Limit Exceeded ({result.memory_usage} bytes > {max_memory} bytes)",
        })

    if len(result.actual_output) > max_output:
        return result.model_copy(update={
            "passed": False,
            "actual_output": result.actual_output[:max_output] + "... (truncated)",
            "error": "Output Limit Exceeded",
        })

    return result


class SubmissionEvaluator:
    def __init__(
        self,
        client: Judge0Client,
        max_poll_attempts: int = config.JUDGE_MAX_POLL_ATTEMPTS,
        strict: bool = False,
    ):
        self._client = client
        self._max_poll_attempts = max_poll_attempts
        self._strict = strict

    async def evaluate(
        self,
        code: str,
        language: str,
        test_cases: Sequence[TestCase],
        policy: EvaluationPolicy,
    ) -> SubmissionOutcome:
        language_id = resolve_language_id(language)
        if language_id is None:
            raise UnsupportedLanguageError(language, LANGUAGE_IDS.keys())

        policy = EvaluationPolicy(policy)
        selected = select_test_cases(test_cases, policy)
        if not selected:
            raise NoTestCasesError()

        logger.info("Evaluating %d test case(s), language=%s policy=%s", len(selected), language, policy.value)

        results = []
        for index, test_case in enumerate(selected, 1):
            result = await self._run_test_case(code, language_id, test_case)
            results.append(result)

            # For submissions, stop on first failure to save engine resources
            if policy == EvaluationPolicy.SUBMIT and not result.passed:
                logger.info("Stopping submit evaluation at failing test %d/%d", index, len(selected))
                break

        verdict, details = calculate_submission_verdict(results)
        logger.info("Verdict %s: %s", verdict.value, details)

        return SubmissionOutcome(
            verdict=verdict,
            results=results,
            total_tests=len(selected),
            passed_tests=sum(1 for r in results if r.passed),
            max_execution_time=max((r.execution_time for r in results), default=0.0),
            max_memory_usage=max((r.memory_usage for r in results), default=0),
        )

    async def _run_test_case(self, code: str, language_id: int, test_case: TestCase) -> TestResult:
        try:
            execution = await self._client.run(
                code, language_id, test_case.input, test_case.expected_output,
                max_attempts=self._max_poll_attempts,
            )
        except ExecutionError as e:
            logger.warning("Test case execution failed: %s", e.message)
            return create_test_result(test_case, "", error=e.message, status="Error")

        fields = interpret_execution(execution)
        result = create_test_result(test_case, strict=self._strict, **fields)
        return apply_resource_limits(result)
