from __future__ import annotations

"""
Final-submission scoring across question types.

Rules:
	- mcq: the chosen option must resolve to the ``correctAnswer`` index; all or nothing
	- fill: trimmed, case-insensitive equality; all or nothing
	- code: fractional credit, points * passed / total, counted from the stored
	  test results; client supplied ``points``/``score`` values are ignored

Submission percentage = sum(points) / sum(question points), rounded half up and
clamped to [0, 100].
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from app.common.utils import round_half_up, safe_json_loads
from app.features.assessments.schemas import QuestionSchema
from app.features.compile.schemas import ScoreReport
from app.features.grading.schemas import AnswerRecord

NO_CODE_FEEDBACK = "No code provided"
INVALID_CODE_FEEDBACK = "Invalid code answer format"


class QuestionType(str, Enum):
	mcq = "mcq"
	fill = "fill"
	code = "code"


@dataclass
class CodeTally:
	passed: int
	total: int

	@property
	def fraction(self) -> float:
		return (self.passed / self.total) if self.total > 0 else 0.0


def _as_index(value: Any) -> Optional[int]:
	if isinstance(value, bool):
		return None
	if isinstance(value, int):
		return value
	if isinstance(value, float) and value.is_integer():
		return int(value)
	if isinstance(value, str):
		try:
			return int(value.strip())
		except ValueError:
			return None
	return None


def _correct_option_index(question: QuestionSchema) -> Optional[int]:
	idx = _as_index(question.correct_answer)
	if idx is not None:
		return idx
	if isinstance(question.correct_answer, str) and question.correct_answer in question.options:
		return question.options.index(question.correct_answer)
	return None


def _selected_option_index(question: QuestionSchema, answer: Any) -> Optional[int]:
	if isinstance(answer, str) and answer in question.options:
		return question.options.index(answer)
	return _as_index(answer)


def score_mcq(question_id: str, question: QuestionSchema, answer: Any) -> AnswerRecord:
	correct_idx = _correct_option_index(question)
	selected_idx = _selected_option_index(question, answer)
	is_correct = correct_idx is not None and selected_idx == correct_idx
	correct_display = question.correct_answer
	if correct_idx is not None and 0 <= correct_idx < len(question.options):
		correct_display = question.options[correct_idx]
	return AnswerRecord(
		question_id=question_id,
		answer=answer,
		is_correct=is_correct,
		points=question.points if is_correct else 0,
		feedback="Correct" if is_correct else f"Incorrect. Correct answer: {correct_display}",
		correct_answer=correct_display,
	)


def score_fill(question_id: str, question: QuestionSchema, answer: Any) -> AnswerRecord:
	student = answer if isinstance(answer, str) else ""
	expected = question.correct_answer if isinstance(question.correct_answer, str) else ""
	is_correct = student.strip().lower() == expected.strip().lower()
	return AnswerRecord(
		question_id=question_id,
		answer=answer,
		is_correct=is_correct,
		points=question.points if is_correct else 0,
		feedback="Correct" if is_correct else f"Incorrect. Correct answer: {question.correct_answer}",
		correct_answer=question.correct_answer,
	)


def parse_code_answer(answer: Any) -> Optional[Dict[str, Any]]:
	"""Code answers travel as a JSON string (or object) with code/testResults keys."""
	if answer is None or answer == "":
		return {}
	payload = safe_json_loads(answer, default=None)
	return payload if isinstance(payload, dict) else None


def tally_code_answer(payload: Dict[str, Any]) -> Optional[CodeTally]:
	results = payload.get("testResults")
	if isinstance(results, list):
		passed = sum(1 for r in results if isinstance(r, dict) and r.get("passed") is True)
		return CodeTally(passed=passed, total=len(results))
	# Older clients only kept the counters
	passed = _as_index(payload.get("testCasesPassed"))
	total = _as_index(payload.get("testCasesTotal"))
	if passed is None or total is None:
		return None
	total = max(0, total)
	return CodeTally(passed=max(0, min(passed, total)), total=total)


def score_code(
	question_id: str,
	question: QuestionSchema,
	answer: Any,
	*,
	report: Optional[ScoreReport] = None,
) -> AnswerRecord:
	payload = parse_code_answer(answer)
	if payload is None:
		return AnswerRecord(
			question_id=question_id,
			answer=answer,
			is_correct=False,
			points=0,
			feedback=INVALID_CODE_FEEDBACK,
			correct_answer=question.correct_answer,
		)
	if report is not None:
		payload = dict(payload)
		payload["testResults"] = [r.model_dump(by_alias=True) for r in report.test_results]
		payload["score"] = report.score
	tally = tally_code_answer(payload)
	if tally is None or tally.total == 0:
		return AnswerRecord(
			question_id=question_id,
			answer=answer,
			is_correct=False,
			points=0,
			feedback=NO_CODE_FEEDBACK,
			correct_answer=question.correct_answer,
		)
	points = question.points * tally.fraction
	stored = dict(payload)
	stored.update({"testCasesPassed": tally.passed, "testCasesTotal": tally.total, "points": points})
	return AnswerRecord(
		question_id=question_id,
		answer=json.dumps(stored),
		is_correct=tally.passed == tally.total,
		points=points,
		feedback=f"Passed {tally.passed} of {tally.total} test cases",
		correct_answer=question.correct_answer,
	)


def score_answer(
	question_id: str,
	question: QuestionSchema,
	answer: Any,
	*,
	report: Optional[ScoreReport] = None,
) -> AnswerRecord:
	qtype = QuestionType(question.type)
	if qtype is QuestionType.mcq:
		return score_mcq(question_id, question, answer)
	if qtype is QuestionType.fill:
		return score_fill(question_id, question, answer)
	return score_code(question_id, question, answer, report=report)


def total_percentage(records: Iterable[AnswerRecord], questions: Iterable[QuestionSchema]) -> int:
	max_score = sum(q.points for q in questions)
	if max_score <= 0:
		return 0
	earned = sum(r.points for r in records)
	pct = round_half_up(100 * earned / max_score)
	return max(0, min(100, pct))


def summarize(records: List[AnswerRecord], questions: List[QuestionSchema]) -> dict:
	return {
		"score": total_percentage(records, questions),
		"scoreRaw": sum(r.points for r in records),
		"maxScore": sum(q.points for q in questions),
	}
