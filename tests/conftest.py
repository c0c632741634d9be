import pytest

from codenest.judge.models import ExecutionResult, TestCase


@pytest.fixture
def anyio_backend():
    return "asyncio"


def judge0_payload(status_id=3, description="Accepted", stdout="", stderr=None,
                   compile_output=None, time="0.010", memory=1024):
    return {
        "status": {"id": status_id, "description": description},
        "stdout": stdout,
        "stderr": stderr,
        "compile_output": compile_output,
        "time": time,
        "memory": memory,
    }


class ScriptedJudge:
    """
    Stands in for Judge0Client at the evaluator seam: maps stdin to either an
    ExecutionResult payload or an exception to raise.
    """

    def __init__(self, script):
        self.script = script
        self.calls = []

    async def run(self, source_code, language_id, stdin, expected_output, max_attempts=10):
        self.calls.append({"stdin": stdin, "language_id": language_id, "max_attempts": max_attempts})
        outcome = self.script[stdin]
        if isinstance(outcome, Exception):
            raise outcome
        return ExecutionResult.from_judge0(outcome)


@pytest.fixture
def sum_cases():
    return [
        TestCase(input="1 2", expected_output="3", is_hidden=False),
        TestCase(input="2 2", expected_output="4", is_hidden=False),
        TestCase(input="5 5", expected_output="10", is_hidden=True),
    ]
