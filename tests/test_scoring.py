import json

import pytest

from app.features.assessments.schemas import QuestionSchema
from app.features.compile.schemas import ScoreReport, TestCaseResult
from app.features.grading.scoring import (
    INVALID_CODE_FEEDBACK,
    NO_CODE_FEEDBACK,
    score_answer,
    score_code,
    score_fill,
    score_mcq,
    summarize,
    total_percentage,
)


def _mcq(**extra):
    data = {"_id": "m1", "type": "mcq", "options": ["A", "B", "C", "D"], "correctAnswer": 2, "points": 2}
    data.update(extra)
    return QuestionSchema.model_validate(data)


def _fill(**extra):
    data = {"_id": "f1", "type": "fill", "correctAnswer": "Polymorphism", "points": 3}
    data.update(extra)
    return QuestionSchema.model_validate(data)


def _code(points=8):
    return QuestionSchema.model_validate({"_id": "c1", "type": "code", "points": points})


def _results(*flags):
    return [{"passed": flag, "input": "", "output": "", "actualOutput": ""} for flag in flags]


def test_mcq_correct_index():
    record = score_mcq("m1", _mcq(), 2)
    assert record.is_correct is True
    assert record.points == 2
    assert record.feedback == "Correct"


def test_mcq_accepts_option_text_and_string_index():
    assert score_mcq("m1", _mcq(), "C").is_correct is True
    assert score_mcq("m1", _mcq(), "2").is_correct is True


def test_mcq_incorrect_names_correct_option():
    record = score_mcq("m1", _mcq(), 0)
    assert record.is_correct is False
    assert record.points == 0
    assert record.feedback == "Incorrect. Correct answer: C"
    assert record.correct_answer == "C"


def test_mcq_unanswered_is_incorrect():
    assert score_mcq("m1", _mcq(), None).is_correct is False


@pytest.mark.parametrize("answer", ["polymorphism", "  POLYMORPHISM ", "Polymorphism"])
def test_fill_is_trimmed_and_case_insensitive(answer):
    record = score_fill("f1", _fill(), answer)
    assert record.is_correct is True
    assert record.points == 3


def test_fill_wrong_answer():
    record = score_fill("f1", _fill(), "Encapsulation")
    assert record.is_correct is False
    assert record.points == 0
    assert record.feedback == "Incorrect. Correct answer: Polymorphism"


def test_code_partial_credit_from_test_results():
    answer = json.dumps({"code": "x", "testResults": _results(True, True, True, False)})
    record = score_code("c1", _code(8), answer)
    assert record.points == 6
    assert record.is_correct is False
    assert record.feedback == "Passed 3 of 4 test cases"
    stored = json.loads(record.answer)
    assert stored["testCasesPassed"] == 3
    assert stored["testCasesTotal"] == 4
    assert stored["code"] == "x"


def test_code_ignores_client_points():
    answer = json.dumps({"code": "x", "testResults": _results(False, False), "points": 8, "score": 100})
    record = score_code("c1", _code(8), answer)
    assert record.points == 0


def test_code_counts_from_results_not_counters():
    answer = json.dumps({"code": "x", "testResults": _results(True, False), "testCasesPassed": 2, "testCasesTotal": 2})
    assert score_code("c1", _code(8), answer).points == 4


def test_code_falls_back_to_counters():
    answer = {"code": "x", "testCasesPassed": 1, "testCasesTotal": 2}
    assert score_code("c1", _code(10), answer).points == 5


def test_code_fully_passing_is_correct():
    answer = json.dumps({"code": "x", "testResults": _results(True, True)})
    record = score_code("c1", _code(8), answer)
    assert record.is_correct is True
    assert record.points == 8


@pytest.mark.parametrize("answer", [None, "", json.dumps({"code": "x"}), json.dumps({"testResults": []})])
def test_code_without_results_scores_zero(answer):
    record = score_code("c1", _code(), answer)
    assert record.points == 0
    assert record.feedback == NO_CODE_FEEDBACK


def test_code_malformed_answer():
    record = score_code("c1", _code(), "{not json")
    assert record.points == 0
    assert record.feedback == INVALID_CODE_FEEDBACK


def test_code_uses_fresh_report_when_given():
    report = ScoreReport(
        output="",
        test_results=[TestCaseResult(passed=True), TestCaseResult(passed=True)],
        score=100,
        execution_time=0.0,
    )
    answer = json.dumps({"code": "x", "testResults": _results(False, False)})
    record = score_code("c1", _code(8), answer, report=report)
    assert record.points == 8
    assert json.loads(record.answer)["score"] == 100


def test_score_answer_dispatches_by_type():
    assert score_answer("m1", _mcq(), 2).feedback == "Correct"
    assert score_answer("f1", _fill(), "polymorphism").feedback == "Correct"
    assert score_answer("c1", _code(), None).feedback == NO_CODE_FEEDBACK


def test_summarize_uses_earned_points():
    questions = [_mcq(), _fill(), _code(8)]
    records = [
        score_mcq("m1", questions[0], 2),
        score_fill("f1", questions[1], "nope"),
        score_code("c1", questions[2], json.dumps({"testResults": _results(True, True, True, False)})),
    ]
    totals = summarize(records, questions)
    assert totals["scoreRaw"] == 8
    assert totals["maxScore"] == 13
    assert totals["score"] == 62


def test_total_percentage_without_points_is_zero():
    questions = [_mcq(points=0)]
    assert total_percentage([score_mcq("m1", questions[0], 2)], questions) == 0


def test_total_percentage_is_clamped():
    question = _mcq(points=1)
    inflated = score_mcq("m1", _mcq(points=5), 2)
    assert total_percentage([inflated], [question]) == 100
