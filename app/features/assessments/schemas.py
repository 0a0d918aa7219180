from __future__ import annotations

from typing import Any, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from app.features.judge0.languages import Language


def _coerce_id(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    if isinstance(value, dict) and "$oid" in value:
        return str(value["$oid"])
    return str(value)


class TestCaseSchema(BaseModel):
    __test__ = False
    model_config = ConfigDict(extra="ignore")

    input: str = ""
    output: str = ""
    description: Optional[str] = None

    @field_validator("input", "output", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> str:
        return "" if value is None else str(value)


class ValidationProgramSchema(BaseModel):
    model_config = ConfigDict(extra="ignore")

    java: Optional[str] = None
    python: Optional[str] = None
    cpp: Optional[str] = None
    javascript: Optional[str] = None


class QuestionSchema(BaseModel):
    """Read-only view of a question as stored by the platform."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[str] = Field(default=None, validation_alias=AliasChoices("_id", "id"), serialization_alias="_id")
    text: str = ""
    type: Literal["mcq", "fill", "code"]
    options: List[str] = Field(default_factory=list)
    correct_answer: Any = Field(default=None, alias="correctAnswer")
    code_template: Optional[str] = Field(default=None, alias="codeTemplate")
    validation_program: ValidationProgramSchema = Field(default_factory=ValidationProgramSchema, alias="validationProgram")
    test_cases: Optional[List[TestCaseSchema]] = Field(default=None, alias="testCases")
    points: float = 0

    @field_validator("id", mode="before")
    @classmethod
    def _normalise_id(cls, value: Any) -> Optional[str]:
        return _coerce_id(value)

    @field_validator("options", mode="before")
    @classmethod
    def _options_list(cls, value: Any) -> List[str]:
        if value is None:
            return []
        return [str(v) for v in value]

    @field_validator("validation_program", mode="before")
    @classmethod
    def _program_default(cls, value: Any) -> Any:
        return value or {}

    @field_validator("points", mode="before")
    @classmethod
    def _points_default(cls, value: Any) -> Any:
        return 0 if value is None else value

    def harness_for(self, language: Language) -> str:
        key = language.harness_key
        if key is None:
            return ""
        return getattr(self.validation_program, key) or ""


class AssessmentSchema(BaseModel):
    """A test or an assignment; only ``questions`` matters to the pipeline."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[str] = Field(default=None, validation_alias=AliasChoices("_id", "id"), serialization_alias="_id")
    title: str = ""
    course_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("courseId", "course_id"))
    questions: List[QuestionSchema] = Field(default_factory=list)

    @field_validator("id", "course_id", mode="before")
    @classmethod
    def _normalise_ids(cls, value: Any) -> Optional[str]:
        return _coerce_id(value)

    @field_validator("questions", mode="before")
    @classmethod
    def _questions_list(cls, value: Any) -> Any:
        return value or []

    def find_question(self, question_id: str) -> Optional[QuestionSchema]:
        """Match on ``_id``; questions without one match on their position."""
        wanted = str(question_id)
        for index, question in enumerate(self.questions):
            if question.id:
                if question.id == wanted:
                    return question
            elif str(index) == wanted:
                return question
        return None


AssessmentKind = Literal["test", "assignment"]
