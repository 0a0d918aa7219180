from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from app.Core.config import get_settings
from app.common.cache import ReadCache, read_cache
from app.common.errors import NotFound
from app.common.utils import safe_json_loads
from app.features.assessments.schemas import AssessmentKind, AssessmentSchema, QuestionSchema

logger = logging.getLogger(__name__)


class AssessmentRepository:
    """Read-only access to tests and assignments (the platform owns the data)."""

    async def get_test(self, test_id: str) -> Optional[AssessmentSchema]:
        raise NotImplementedError

    async def get_assignment(self, assignment_id: str) -> Optional[AssessmentSchema]:
        raise NotImplementedError

    async def get_assessment(self, kind: AssessmentKind, assessment_id: str) -> Optional[AssessmentSchema]:
        if kind == "test":
            return await self.get_test(assessment_id)
        return await self.get_assignment(assessment_id)

    async def get_question(
        self,
        kind: AssessmentKind,
        assessment_id: str,
        question_id: str,
        *,
        fall_back_to_assignment: bool = False,
    ) -> QuestionSchema:
        """Resolve one question or raise ``NotFound``.

        With ``fall_back_to_assignment`` an unknown test id is retried against the
        assignment store, matching the legacy test compile route.
        """
        assessment = await self.get_assessment(kind, assessment_id)
        if assessment is None and kind == "test" and fall_back_to_assignment:
            assessment = await self.get_assignment(assessment_id)
            if assessment is None:
                raise NotFound("Test or Assignment not found")
        if assessment is None:
            raise NotFound(f"{kind.capitalize()} not found")
        question = assessment.find_question(question_id)
        if question is None:
            raise NotFound("Question not found")
        return question


class InMemoryAssessmentRepository(AssessmentRepository):
    def __init__(self) -> None:
        self._tests: Dict[str, AssessmentSchema] = {}
        self._assignments: Dict[str, AssessmentSchema] = {}

    def add_test(self, test_id: str, data: Dict[str, Any] | AssessmentSchema) -> AssessmentSchema:
        assessment = data if isinstance(data, AssessmentSchema) else AssessmentSchema.model_validate(data)
        self._tests[str(test_id)] = assessment
        return assessment

    def add_assignment(self, assignment_id: str, data: Dict[str, Any] | AssessmentSchema) -> AssessmentSchema:
        assessment = data if isinstance(data, AssessmentSchema) else AssessmentSchema.model_validate(data)
        self._assignments[str(assignment_id)] = assessment
        return assessment

    async def get_test(self, test_id: str) -> Optional[AssessmentSchema]:
        return self._tests.get(str(test_id))

    async def get_assignment(self, assignment_id: str) -> Optional[AssessmentSchema]:
        return self._assignments.get(str(assignment_id))


class SupabaseAssessmentRepository(AssessmentRepository):
    """Tests/assignments stored as rows with a JSON ``questions`` column."""

    def __init__(
        self,
        *,
        tests_table: Optional[str] = None,
        assignments_table: Optional[str] = None,
        client_factory=None,
        cache: Optional[ReadCache] = None,
    ) -> None:
        settings = get_settings()
        self._tests_table = tests_table or settings.supabase_tests_table
        self._assignments_table = assignments_table or settings.supabase_assignments_table
        self._client_factory = client_factory
        self._cache = cache if cache is not None else read_cache

    async def _client(self):
        if self._client_factory is not None:
            return await self._client_factory()
        from app.DB.supabase import get_supabase
        return await get_supabase()

    async def _fetch(self, table: str, row_id: str) -> Optional[AssessmentSchema]:
        key = f"assessment:{table}:{row_id}"
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        client = await self._client()
        resp = await client.table(table).select("*").eq("id", row_id).limit(1).execute()
        rows = resp.data or []
        if not rows:
            return None
        row = dict(rows[0])
        row["questions"] = safe_json_loads(row.get("questions"), default=[])
        assessment = AssessmentSchema.model_validate(row)
        self._cache.set(key, assessment)
        logger.debug("Loaded %s %s with %d questions", table, row_id, len(assessment.questions))
        return assessment

    async def get_test(self, test_id: str) -> Optional[AssessmentSchema]:
        return await self._fetch(self._tests_table, str(test_id))

    async def get_assignment(self, assignment_id: str) -> Optional[AssessmentSchema]:
        return await self._fetch(self._assignments_table, str(assignment_id))


_repository: Optional[AssessmentRepository] = None


def get_assessment_repository() -> AssessmentRepository:
    global _repository
    if _repository is None:
        store = get_settings().question_store
        if store == "memory":
            _repository = InMemoryAssessmentRepository()
        else:
            _repository = SupabaseAssessmentRepository()
    return _repository


__all__ = [
    "AssessmentRepository",
    "InMemoryAssessmentRepository",
    "SupabaseAssessmentRepository",
    "get_assessment_repository",
]
