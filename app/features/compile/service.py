"""Test case runner: executes a student's code against every test case of a question."""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

from app.Core.config import Settings, get_settings
from app.common.errors import Judge0Error, NoTestCases
from app.common.quota import enforce_job_payload
from app.common.utils import parse_seconds, round_half_up
from app.features.assessments.schemas import QuestionSchema, TestCaseSchema
from app.features.compile.schemas import ScoreReport, TestCaseResult
from app.features.judge0.injection import combine_code_with_harness
from app.features.judge0.languages import Language
from app.features.judge0.service import Judge0Service, judge0_service

logger = logging.getLogger(__name__)

DEADLINE_EXCEEDED = "Execution timed out: request deadline exceeded"


def normalise_output(text: Optional[str]) -> str:
    """Trim, then drop every carriage return so CRLF and LF outputs compare equal."""
    return (text or "").strip().replace("\r", "")


def outputs_match(actual: Optional[str], expected: Optional[str]) -> bool:
    return normalise_output(actual) == normalise_output(expected)


def compute_score(passed: int, total: int) -> int:
    if total <= 0:
        raise NoTestCases("No test cases found for this question")
    return round_half_up(100 * passed / total)


def _failed_case(case: TestCaseSchema, message: str) -> TestCaseResult:
    return TestCaseResult(
        passed=False,
        input=case.input,
        output=case.output.strip(),
        actual_output="",
        execution_time=0.0,
        error=message,
        full_output="",
    )


def build_report(results: List[TestCaseResult]) -> ScoreReport:
    passed = sum(1 for r in results if r.passed)
    return ScoreReport(
        output=results[-1].actual_output if results else "",
        test_results=results,
        score=compute_score(passed, len(results)),
        execution_time=max((r.execution_time for r in results), default=0.0),
    )


class CodeRunnerService:
    def __init__(
        self,
        judge0: Optional[Judge0Service] = None,
        settings: Optional[Settings] = None,
    ):
        self.judge0 = judge0 or judge0_service
        self.settings = settings or get_settings()

    def _deadline(self) -> Optional[float]:
        deadline = self.settings.compile_request_deadline_s
        return deadline if deadline and deadline > 0 else None

    async def _run_case(
        self,
        index: int,
        case: TestCaseSchema,
        source_code: str,
        language: Language,
        semaphore: asyncio.Semaphore,
        cancel_event: Optional[asyncio.Event],
    ) -> TestCaseResult:
        async with semaphore:
            try:
                result = await self.judge0.execute(
                    source_code,
                    language.judge0_id,
                    case.input,
                    cancel_event=cancel_event,
                )
            except Judge0Error as exc:
                logger.warning("Test case %d could not be executed: %s", index, exc)
                return _failed_case(case, str(exc))

        actual = result.stdout.strip()
        expected = case.output.strip()
        return TestCaseResult(
            passed=outputs_match(actual, expected),
            input=case.input,
            output=expected,
            actual_output=actual,
            execution_time=parse_seconds(result.time),
            error=result.stderr or result.compile_output,
            full_output=actual,
        )

    async def run(
        self,
        student_code: str,
        language: Language,
        question: QuestionSchema,
        *,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> ScoreReport:
        """Run ``student_code`` against every test case of ``question``.

        Configuration problems (missing placeholder, unsupported language, no test
        cases) raise before anything is dispatched. Failures of individual jobs are
        recorded as failed test cases; the report always has one entry per case, in
        question order.
        """
        source_code = combine_code_with_harness(student_code, question.harness_for(language), language)
        cases = list(question.test_cases or [])
        if not cases:
            raise NoTestCases("No test cases found for this question")
        enforce_job_payload(source_code, (case.input for case in cases))

        semaphore = asyncio.Semaphore(max(1, self.settings.judge0_case_concurrency))
        tasks = [
            asyncio.create_task(self._run_case(idx, case, source_code, language, semaphore, cancel_event))
            for idx, case in enumerate(cases)
        ]
        try:
            done, pending = await asyncio.wait(tasks, timeout=self._deadline())
        except asyncio.CancelledError:
            for task in tasks:
                task.cancel()
            raise
        for task in pending:
            task.cancel()
        if pending:
            logger.warning("Request deadline reached with %d of %d test cases unfinished", len(pending), len(cases))
            await asyncio.gather(*pending, return_exceptions=True)

        results: List[TestCaseResult] = []
        for task, case in zip(tasks, cases):
            if task in done:
                results.append(task.result())
            else:
                results.append(_failed_case(case, DEADLINE_EXCEEDED))
        report = build_report(results)
        logger.info(
            "Ran %d test cases (%s): %d passed, score=%d",
            report.tests_total,
            language.value,
            report.tests_passed,
            report.score,
        )
        return report


code_runner = CodeRunnerService()


def get_code_runner() -> CodeRunnerService:
    return code_runner


__all__ = [
    "CodeRunnerService",
    "build_report",
    "compute_score",
    "get_code_runner",
    "normalise_output",
    "outputs_match",
]
