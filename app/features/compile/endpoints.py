from __future__ import annotations

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request

from app.common.errors import ConfigurationError, NotFound
from app.common.quota import QuotaError
from app.features.assessments.repository import AssessmentRepository, get_assessment_repository
from app.features.assessments.schemas import AssessmentKind
from app.features.compile.schemas import CompileRequest, ScoreReport
from app.features.compile.service import CodeRunnerService, get_code_runner
from app.features.judge0.languages import Language

logger = logging.getLogger("compile")

router = APIRouter(prefix="/api/compile", tags=["compile"])

_DISCONNECT_CHECK_S = 0.5


#function to make errors consistent
def _err(status: int, code: str, message: str):
    return HTTPException(status_code=status, detail={"error_code": code, "message": message})


async def _watch_disconnect(request: Request, cancel_event: asyncio.Event) -> None:
    # Lets in-flight polls stop once the student's browser has gone away
    while not cancel_event.is_set():
        if await request.is_disconnected():
            logger.info("Client disconnected from %s; abandoning execution", request.url.path)
            cancel_event.set()
            return
        await asyncio.sleep(_DISCONNECT_CHECK_S)


async def _compile(
    kind: AssessmentKind,
    assessment_id: Optional[str],
    req: CompileRequest,
    request: Request,
    repository: AssessmentRepository,
    runner: CodeRunnerService,
) -> ScoreReport:
    if not assessment_id:
        raise _err(400, "E_INVALID_INPUT", f"{'testId' if kind == 'test' else 'assignmentId'} is required")
    logger.info(
        "Compile request: kind=%s id=%s question=%s language_id=%s",
        kind, assessment_id, req.question_id, req.language_id,
    )
    cancel_event = asyncio.Event()
    watcher = asyncio.create_task(_watch_disconnect(request, cancel_event))
    try:
        question = await repository.get_question(
            kind,
            assessment_id,
            req.question_id,
            fall_back_to_assignment=(kind == "test"),
        )
        language = Language.from_id(req.language_id)
        return await runner.run(req.code, language, question, cancel_event=cancel_event)
    except NotFound as exc:
        raise _err(404, exc.error_code, str(exc))
    except ConfigurationError as exc:
        raise _err(400, exc.error_code, str(exc))
    except QuotaError as exc:
        raise _err(413, exc.error_code, str(exc))
    except HTTPException:
        raise
    except Exception as exc:
        logger.exception("Error compiling %s code", kind)
        raise _err(500, "E_UNKNOWN", f"Internal server error: {exc}")
    finally:
        cancel_event.set()
        watcher.cancel()


@router.post("/test", response_model=ScoreReport, summary="Run code against a test question's test cases")
async def compile_test(
    req: CompileRequest,
    request: Request,
    repository: AssessmentRepository = Depends(get_assessment_repository),
    runner: CodeRunnerService = Depends(get_code_runner),
):
    return await _compile("test", req.test_id, req, request, repository, runner)


@router.post("/assignment", response_model=ScoreReport, summary="Run code against an assignment question's test cases")
async def compile_assignment(
    req: CompileRequest,
    request: Request,
    repository: AssessmentRepository = Depends(get_assessment_repository),
    runner: CodeRunnerService = Depends(get_code_runner),
):
    return await _compile("assignment", req.assignment_id, req, request, repository, runner)
