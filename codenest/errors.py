"""
Error taxonomy for the judge and streak services

Every error carries the HTTP status and machine code the routers report.
"""

from typing import Optional


class CodeNestError(Exception):
    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def to_detail(self) -> dict:
        detail = {"error": self.message, "code": self.code}
        if self.field:
            detail["field"] = self.field
        return detail


# ==================== VALIDATION ====================

class ValidationError(CodeNestError):
    status_code = 400
    code = "VALIDATION_ERROR"


class UnsupportedLanguageError(ValidationError):
    code = "UNSUPPORTED_LANGUAGE"

    def __init__(self, language: str, supported):
        super().__init__(
            f"Unsupported language: {language}. Supported: {', '.join(supported)}",
            field="language",
        )
        self.language = language


class NoTestCasesError(ValidationError):
    code = "NO_TEST_CASES"

    def __init__(self, message: str = "No test cases available for this action"):
        super().__init__(message, field="testCases")


class RateLimitExceeded(CodeNestError):
    status_code = 429
    code = "RATE_LIMITED"

    def __init__(self, retry_after: int):
        super().__init__("Rate limit exceeded. Please try again later.")
        self.retry_after = retry_after


# ==================== EXECUTION ENGINE ====================

class ExecutionError(CodeNestError):
    """Raised by the execution client; captured per test case by the evaluator"""
    status_code = 502
    code = "EXECUTION_ERROR"


class DispatchError(ExecutionError):
    code = "DISPATCH_ERROR"


class ResultFetchError(ExecutionError):
    code = "RESULT_FETCH_ERROR"


class PollTimeoutError(ExecutionError):
    status_code = 504
    code = "POLL_TIMEOUT"


class EvaluationTimeout(CodeNestError):
    status_code = 504
    code = "EVALUATION_TIMEOUT"


# ==================== STREAK STORE ====================

class TransactionError(CodeNestError):
    code = "TRANSACTION_ERROR"


class StreakPermissionError(TransactionError):
    status_code = 403
    code = "PERMISSION_DENIED"


class StreakNotFoundError(TransactionError):
    status_code = 404
    code = "NOT_FOUND"
