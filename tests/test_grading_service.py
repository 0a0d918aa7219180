import json

import pytest

from app.common.errors import MissingPlaceholder
from app.features.assessments.schemas import AssessmentSchema
from app.features.compile.schemas import ScoreReport, TestCaseResult
from app.features.grading.schemas import SubmitAnswersRequest
from app.features.grading.service import GradingService

pytestmark = pytest.mark.anyio("asyncio")


ASSESSMENT = {
    "_id": "t1",
    "title": "OOP quiz",
    "questions": [
        {"_id": "q-mcq", "type": "mcq", "options": ["A", "B", "C"], "correctAnswer": 1, "points": 2},
        {"type": "fill", "correctAnswer": "inheritance", "points": 2},
        {
            "_id": "q-code",
            "type": "code",
            "points": 4,
            "validationProgram": {"python": "print(add(1, 2))"},
            "testCases": [{"input": "", "output": "3"}, {"input": "1", "output": "4"}],
        },
    ],
}


class FakeRunner:
    def __init__(self, report=None, error=None):
        self.report = report
        self.error = error
        self.calls = []

    async def run(self, student_code, language, question, *, cancel_event=None):
        self.calls.append((student_code, language, question.id))
        if self.error is not None:
            raise self.error
        return self.report


def _code_answer(*flags, **extra):
    payload = {"code": "def add(a, b): return a + b", "languageId": 71}
    payload["testResults"] = [{"passed": f} for f in flags]
    payload.update(extra)
    return json.dumps(payload)


async def test_grade_mixed_assessment(make_settings):
    service = GradingService(runner=FakeRunner(), settings=make_settings())
    assessment = AssessmentSchema.model_validate(ASSESSMENT)
    answers = {"q-mcq": 1, "q1": " Inheritance ", "q-code": _code_answer(True, False)}

    report = await service.grade(assessment, answers)

    assert [a.question_id for a in report.answers] == ["q-mcq", "q1", "q-code"]
    assert [a.points for a in report.answers] == [2, 2, 2]
    assert report.score_raw == 6
    assert report.max_score == 8
    assert report.score == 75


async def test_missing_answers_score_zero(make_settings):
    service = GradingService(runner=FakeRunner(), settings=make_settings())
    report = await service.grade(AssessmentSchema.model_validate(ASSESSMENT), {})

    assert report.score == 0
    assert report.answers[2].feedback == "No code provided"


async def test_answers_keyed_by_position(make_settings):
    service = GradingService(runner=FakeRunner(), settings=make_settings())
    report = await service.grade(AssessmentSchema.model_validate(ASSESSMENT), {"0": 1, "1": "inheritance"})

    assert report.answers[0].is_correct is True
    assert report.answers[1].is_correct is True


async def test_code_is_rerun_when_enabled(make_settings):
    fresh = ScoreReport(
        output="4",
        test_results=[TestCaseResult(passed=True), TestCaseResult(passed=True)],
        score=100,
    )
    runner = FakeRunner(report=fresh)
    service = GradingService(runner=runner, settings=make_settings(rescore_code_on_submit=True))

    report = await service.grade(AssessmentSchema.model_validate(ASSESSMENT), {"q-code": _code_answer(False, False)})

    assert runner.calls[0][2] == "q-code"
    assert runner.calls[0][1].judge0_id == 71
    assert report.answers[2].points == 4
    assert report.answers[2].is_correct is True


async def test_rerun_configuration_error_keeps_stored_results(make_settings):
    runner = FakeRunner(error=MissingPlaceholder("Validation program must include the placeholder"))
    service = GradingService(runner=runner, settings=make_settings(rescore_code_on_submit=True))

    report = await service.grade(AssessmentSchema.model_validate(ASSESSMENT), {"q-code": _code_answer(True, False)})

    assert report.answers[2].points == 2


async def test_code_not_rerun_by_default(make_settings):
    runner = FakeRunner()
    service = GradingService(runner=runner, settings=make_settings())

    await service.grade(AssessmentSchema.model_validate(ASSESSMENT), {"q-code": _code_answer(True)})

    assert runner.calls == []


def test_answers_list_is_keyed_by_question_id():
    req = SubmitAnswersRequest.model_validate(
        {"answers": [{"questionId": "q-mcq", "answer": 1}, "inheritance"], "score": 100, "timeSpent": 30}
    )
    assert req.answers == {"q-mcq": 1, "q1": "inheritance"}
    assert req.time_spent == 30
