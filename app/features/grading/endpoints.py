from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from app.features.assessments.repository import AssessmentRepository, get_assessment_repository
from app.features.assessments.schemas import AssessmentKind
from app.features.grading.schemas import SubmissionReport, SubmitAnswersRequest
from app.features.grading.service import GradingService, get_grading_service

logger = logging.getLogger("grading")

router = APIRouter(prefix="/api", tags=["grading"])


def _err(status: int, code: str, message: str):
    return HTTPException(status_code=status, detail={"error_code": code, "message": message})


async def _submit(
    kind: AssessmentKind,
    assessment_id: str,
    req: SubmitAnswersRequest,
    repository: AssessmentRepository,
    grading: GradingService,
) -> SubmissionReport:
    assessment = await repository.get_assessment(kind, assessment_id)
    if assessment is None:
        raise _err(404, "E_NOT_FOUND", f"{kind.capitalize()} not found")
    try:
        report = await grading.grade(assessment, req.answers)
    except Exception as exc:
        logger.exception("Failed to grade %s %s", kind, assessment_id)
        raise _err(500, "E_UNKNOWN", f"Failed to submit {kind}: {exc}")
    if req.score is not None and req.score != report.score:
        logger.info(
            "Ignoring client score for %s %s: client=%s recomputed=%s",
            kind, assessment_id, req.score, report.score,
        )
    if req.time_spent is not None:
        report = report.model_copy(update={"time_spent": req.time_spent})
    return report


@router.post("/tests/{test_id}/submit", response_model=SubmissionReport, summary="Score a finished test")
async def submit_test(
    test_id: str,
    req: SubmitAnswersRequest,
    repository: AssessmentRepository = Depends(get_assessment_repository),
    grading: GradingService = Depends(get_grading_service),
):
    return await _submit("test", test_id, req, repository, grading)


@router.post("/assignments/{assignment_id}/submit", response_model=SubmissionReport, summary="Score a finished assignment")
async def submit_assignment(
    assignment_id: str,
    req: SubmitAnswersRequest,
    repository: AssessmentRepository = Depends(get_assessment_repository),
    grading: GradingService = Depends(get_grading_service),
):
    return await _submit("assignment", assignment_id, req, repository, grading)
