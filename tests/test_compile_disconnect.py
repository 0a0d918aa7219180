import asyncio
from types import SimpleNamespace

import pytest

from app.features.assessments.repository import InMemoryAssessmentRepository
from app.features.compile import endpoints
from app.features.compile.schemas import CompileRequest, ScoreReport, TestCaseResult

pytestmark = pytest.mark.anyio("asyncio")


QUESTION = {
    "_id": "q1",
    "type": "code",
    "points": 1,
    "testCases": [{"input": "", "output": "ok"}],
}


class FakeRequest:
    def __init__(self, disconnected=False):
        self.disconnected = disconnected
        self.checks = 0
        self.url = SimpleNamespace(path="/api/compile/test")

    async def is_disconnected(self):
        self.checks += 1
        return self.disconnected


class EventRunner:
    """Waits until told to stop (or a short timeout) and reports what it saw."""

    def __init__(self):
        self.events = []

    async def run(self, student_code, language, question, *, cancel_event=None):
        self.events.append(cancel_event)
        try:
            await asyncio.wait_for(cancel_event.wait(), timeout=1.0)
            stopped = True
        except asyncio.TimeoutError:
            stopped = False
        return ScoreReport(
            output="",
            test_results=[TestCaseResult(passed=not stopped, error="cancelled" if stopped else "")],
            score=0 if stopped else 100,
        )


def _repo():
    repo = InMemoryAssessmentRepository()
    repo.add_test("t1", {"questions": [QUESTION]})
    return repo


def _req():
    return CompileRequest.model_validate({"code": "print('ok')", "languageId": 71, "testId": "t1", "questionId": "q1"})


async def test_watcher_sets_event_on_disconnect():
    request = FakeRequest(disconnected=True)
    cancel_event = asyncio.Event()

    await asyncio.wait_for(endpoints._watch_disconnect(request, cancel_event), timeout=1.0)

    assert cancel_event.is_set()
    assert request.checks == 1


async def test_watcher_exits_once_event_is_set():
    request = FakeRequest(disconnected=False)
    cancel_event = asyncio.Event()
    cancel_event.set()

    await asyncio.wait_for(endpoints._watch_disconnect(request, cancel_event), timeout=1.0)

    assert request.checks == 0


async def test_disconnect_reaches_the_runner():
    runner = EventRunner()

    report = await endpoints._compile("test", "t1", _req(), FakeRequest(disconnected=True), _repo(), runner)

    assert runner.events[0].is_set()
    assert report.test_results[0].error == "cancelled"


async def test_compile_cancels_watcher_when_done(monkeypatch):
    watchers = []
    watch = endpoints._watch_disconnect

    async def recording_watch(request, cancel_event):
        watchers.append(asyncio.current_task())
        await watch(request, cancel_event)

    class QuickRunner:
        async def run(self, student_code, language, question, *, cancel_event=None):
            # let the watcher start polling
            await asyncio.sleep(0.01)
            return ScoreReport(output="ok", test_results=[TestCaseResult(passed=True)], score=100)

    monkeypatch.setattr(endpoints, "_watch_disconnect", recording_watch)

    report = await endpoints._compile("test", "t1", _req(), FakeRequest(disconnected=False), _repo(), QuickRunner())

    assert report.score == 100
    assert len(watchers) == 1
    with pytest.raises(asyncio.CancelledError):
        await watchers[0]
    assert watchers[0].cancelled()
