from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CompileRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    code: str
    language_id: int = Field(alias="languageId")
    test_id: Optional[str] = Field(default=None, alias="testId")
    assignment_id: Optional[str] = Field(default=None, alias="assignmentId")
    question_id: str = Field(alias="questionId")

    @field_validator("test_id", "assignment_id", "question_id", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Optional[str]:
        return None if value is None else str(value)


class TestCaseResult(BaseModel):
    """Verdict for one test case; never mutated once built."""

    __test__ = False
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    passed: bool
    input: str = ""
    output: str = ""
    actual_output: str = Field(default="", alias="actualOutput")
    execution_time: float = Field(default=0.0, alias="executionTime")
    error: str = ""
    full_output: str = Field(default="", alias="fullOutput")


class ScoreReport(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    output: str = ""
    test_results: List[TestCaseResult] = Field(default_factory=list, alias="testResults")
    score: int = 0
    execution_time: float = Field(default=0.0, alias="executionTime")

    @property
    def tests_passed(self) -> int:
        return sum(1 for t in self.test_results if t.passed)

    @property
    def tests_total(self) -> int:
        return len(self.test_results)
