from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AnswerRecord(BaseModel):
    """Reconciled verdict for one question of a submission attempt."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    question_id: str = Field(alias="questionId")
    answer: Any = None
    is_correct: bool = Field(alias="isCorrect")
    points: float = 0
    feedback: str = ""
    correct_answer: Any = Field(default=None, alias="correctAnswer")


class SubmitAnswersRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    answers: Dict[str, Any]
    # Client-computed values are accepted for compatibility and ignored
    score: Optional[float] = None
    max_score: Optional[float] = Field(default=None, alias="maxScore")
    time_spent: Optional[int] = Field(default=None, alias="timeSpent")

    @field_validator("answers", mode="before")
    @classmethod
    def _normalise_answers(cls, value: Any) -> Dict[str, Any]:
        if isinstance(value, dict):
            return {str(k): v for k, v in value.items()}
        if isinstance(value, list):
            mapped: Dict[str, Any] = {}
            for idx, item in enumerate(value):
                if isinstance(item, dict) and "questionId" in item:
                    mapped[str(item["questionId"])] = item.get("answer")
                else:
                    mapped[f"q{idx}"] = item
            return mapped
        raise ValueError("answers must be an object keyed by question or a list of {questionId, answer}")


class SubmissionReport(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    answers: List[AnswerRecord] = Field(default_factory=list)
    score: int = 0
    score_raw: float = Field(default=0, alias="scoreRaw")
    max_score: float = Field(default=0, alias="maxScore")
    time_spent: Optional[int] = Field(default=None, alias="timeSpent")
