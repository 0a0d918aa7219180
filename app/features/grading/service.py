from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from app.Core.config import Settings, get_settings
from app.common.errors import ConfigurationError
from app.common.quota import QuotaError
from app.features.assessments.schemas import AssessmentSchema, QuestionSchema
from app.features.compile.schemas import ScoreReport
from app.features.compile.service import CodeRunnerService, get_code_runner
from app.features.grading.schemas import AnswerRecord, SubmissionReport
from app.features.grading.scoring import parse_code_answer, score_answer, summarize
from app.features.judge0.languages import Language

logger = logging.getLogger("grading")


def _answer_for(index: int, question: QuestionSchema, answers: Dict[str, Any]) -> Tuple[str, Any]:
    """Locate a question's answer by ``_id``, ``q<index>`` or the bare index."""
    keys = [k for k in (question.id, f"q{index}", str(index)) if k]
    for key in keys:
        if key in answers:
            return keys[0], answers[key]
    return keys[0], None


class GradingService:
    def __init__(self, runner: Optional[CodeRunnerService] = None, settings: Optional[Settings] = None):
        self.runner = runner or get_code_runner()
        self.settings = settings or get_settings()

    async def _rerun_code(self, question: QuestionSchema, answer: Any) -> Optional[ScoreReport]:
        payload = parse_code_answer(answer)
        if not payload or not payload.get("code"):
            return None
        language_id = payload.get("languageId", payload.get("language_id"))
        if language_id is None:
            return None
        try:
            language = Language.from_id(language_id)
            return await self.runner.run(str(payload["code"]), language, question)
        except (ConfigurationError, QuotaError) as exc:
            logger.warning("Could not re-run code for question %s, keeping stored results: %s", question.id, exc)
            return None

    async def grade(self, assessment: AssessmentSchema, answers: Dict[str, Any]) -> SubmissionReport:
        records: List[AnswerRecord] = []
        for index, question in enumerate(assessment.questions):
            question_key, answer = _answer_for(index, question, answers)
            report = None
            if question.type == "code" and self.settings.rescore_code_on_submit:
                report = await self._rerun_code(question, answer)
            records.append(score_answer(question_key, question, answer, report=report))
        totals = summarize(records, assessment.questions)
        return SubmissionReport(
            answers=records,
            score=totals["score"],
            score_raw=totals["scoreRaw"],
            max_score=totals["maxScore"],
        )


grading_service = GradingService()


def get_grading_service() -> GradingService:
    return grading_service
