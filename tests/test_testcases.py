from codenest.judge.models import TestCase, TestResult, Verdict
from codenest.judge.testcases import (
    calculate_score,
    calculate_submission_verdict,
    compare_outputs,
    create_submission_summary,
    create_test_result,
    filter_test_cases,
    format_test_case_for_display,
    get_execution_stats,
    normalize_output,
    validate_test_case,
    validate_test_cases,
)


def _result(passed=True, error=None, time=0.0, memory=0):
    return TestResult(
        passed=passed, input="", expected_output="", actual_output="",
        execution_time=time, memory_usage=memory, error=error,
    )


# ==================== COMPARISON ====================

def test_compare_ignores_trailing_newline():
    assert compare_outputs("3\n", "3")


def test_compare_detects_different_values():
    assert not compare_outputs("3", "4")


def test_compare_normalizes_line_endings_and_trailing_spaces():
    assert compare_outputs("1 2\r\n3 4\r\n\r\n", "1 2   \n3 4")


def test_compare_keeps_interior_whitespace_significant():
    assert not compare_outputs("1 2", "1  2")


def test_strict_mode_is_byte_exact():
    assert not compare_outputs("3\n", "3", strict=True)
    assert compare_outputs("3\n", "3\n", strict=True)


def test_normalize_output_strips_trailing_blank_lines():
    assert normalize_output("  a\t\nb  \n\n\n") == "a\nb"


# ==================== VALIDATION ====================

def test_valid_test_case_has_no_errors():
    assert validate_test_case(TestCase(input="1", expected_output="1")) == []


def test_raw_test_case_with_non_boolean_hidden_flag():
    errors = validate_test_case({"input": "1", "expectedOutput": "1", "isHidden": "yes"})
    assert errors == ["isHidden must be a boolean value"]


def test_overlong_input_and_output_are_reported():
    errors = validate_test_case({"input": "x" * 10001, "expectedOutput": "y" * 10001, "isHidden": False})
    assert errors == [
        "Input: Input is too long (max 10,000 characters)",
        "Expected Output: Output is too long (max 10,000 characters)",
    ]


def test_collection_bounds():
    assert validate_test_cases([]) == ["At least one test case is required"]
    assert validate_test_cases("nope") == ["Test cases must be an array"]
    too_many = [TestCase(input="", expected_output="")] * 101
    assert validate_test_cases(too_many) == ["Too many test cases (max 100)"]


def test_collection_requires_a_public_case():
    errors = validate_test_cases([TestCase(input="1", expected_output="1", is_hidden=True)])
    assert "At least one public test case is required" in errors


def test_collection_reports_case_index():
    errors = validate_test_cases([
        TestCase(input="1", expected_output="1"),
        {"input": 5, "expectedOutput": "1", "isHidden": False},
    ])
    assert errors == ["Test case 2: Input: Input must be a string"]


# ==================== RESULTS & VERDICT ====================

def test_create_test_result_passes_on_normalized_match():
    result = create_test_result(TestCase(input="1 2", expected_output="3"), "3\n", 12.5, 2048)
    assert result.passed
    assert result.execution_time == 12.5
    assert result.memory_usage == 2048


def test_create_test_result_fails_when_error_present():
    result = create_test_result(TestCase(input="", expected_output="3"), "3", error="Segmentation fault")
    assert not result.passed


def test_verdict_all_passed_is_accepted():
    verdict, details = calculate_submission_verdict([_result(), _result()])
    assert verdict == Verdict.ACCEPTED
    assert details == "All 2 test cases passed"


def test_verdict_compilation_error_requires_every_result():
    results = [_result(False, "Compilation Error: missing ;")] * 2
    assert calculate_submission_verdict(results)[0] == Verdict.COMPILATION_ERROR


def test_verdict_runtime_error_beats_time_limit():
    results = [_result(False, "Time Limit Exceeded"), _result(False, "ZeroDivisionError")]
    assert calculate_submission_verdict(results)[0] == Verdict.RUNTIME_ERROR


def test_verdict_time_limit_exceeded():
    results = [_result(), _result(False, "Time Limit Exceeded")]
    assert calculate_submission_verdict(results)[0] == Verdict.TIME_LIMIT_EXCEEDED


def test_verdict_mixed_without_errors_is_wrong_answer():
    verdict, details = calculate_submission_verdict([_result(), _result(False)])
    assert verdict == Verdict.WRONG_ANSWER
    assert details == "1/2 test cases passed"


def test_verdict_without_results_is_runtime_error():
    assert calculate_submission_verdict([])[0] == Verdict.RUNTIME_ERROR


# ==================== STATISTICS ====================

def test_execution_stats():
    stats = get_execution_stats([_result(time=10, memory=100), _result(time=30, memory=300)])
    assert stats["max_execution_time"] == 30
    assert stats["average_execution_time"] == 20
    assert stats["total_memory_usage"] == 400
    assert stats["max_memory_usage"] == 300


def test_execution_stats_empty():
    assert get_execution_stats([])["max_execution_time"] == 0


def test_score():
    assert calculate_score([_result(), _result(False), _result(), _result()]) == {
        "passed": 3, "failed": 1, "total": 4, "score": 75.0,
    }


def test_filter_and_display(sum_cases):
    groups = filter_test_cases(sum_cases)
    assert len(groups["public"]) == 2
    assert len(groups["hidden"]) == 1
    assert groups["visible"] == groups["public"]
    assert filter_test_cases(sum_cases, show_hidden=True)["visible"] == sum_cases
    assert format_test_case_for_display(sum_cases[2], 2)["title"] == "Test Case 3 (Hidden)"


def test_submission_summary():
    summary = create_submission_summary([
        {"language": "python", "status": "Accepted", "execution_time": 10.0, "memory_usage": 100},
        {"language": "python", "status": "Wrong Answer", "execution_time": 30.0},
        {"language": "cpp", "status": "Accepted"},
    ])
    assert summary["total_submissions"] == 3
    assert summary["accepted_submissions"] == 2
    assert round(summary["success_rate"], 2) == 66.67
    assert summary["language_distribution"] == {"python": 2, "cpp": 1}
    assert summary["status_distribution"] == {"Accepted": 2, "Wrong Answer": 1}
    assert summary["average_execution_time"] == 20.0
    assert summary["average_memory_usage"] == 100


def test_submission_summary_empty():
    assert create_submission_summary([])["success_rate"] == 0.0
