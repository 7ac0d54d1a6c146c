import asyncio
import re
from datetime import datetime, timedelta, timezone

import pytest

from resumeforge.rule_engine import RuleBasedTailor
from resumeforge.runners import WorkflowManager
from resumeforge.runners.workflow_manager import generate_workflow_id
from resumeforge.schemas import WorkflowRequest, WorkflowStatus


class StubOrchestrator:
    """Rule-based tailoring with hooks to block, delay or fail."""

    def __init__(self, gate=None, delay=0.0, error=None):
        self.gate = gate
        self.delay = delay
        self.error = error

    async def tailor(self, resume, job, options=None):
        if self.gate is not None:
            await self.gate.wait()
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return RuleBasedTailor().tailor(resume, job, options)


class ManualClock:
    def __init__(self):
        self.now = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self):
        return self.now


@pytest.fixture
def request_body(resume, job):
    return WorkflowRequest(original_resume=resume, job_description=job)


def make_manager(orchestrator=None, **kwargs):
    kwargs.setdefault("step_delay", (0, 0))
    return WorkflowManager(orchestrator or StubOrchestrator(), **kwargs)


async def wait_until(predicate, attempts=500):
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0.01)
    raise AssertionError("condition not reached")


async def wait_terminal(manager, workflow_id):
    await wait_until(lambda: manager.get_workflow_status(workflow_id).is_terminal)
    return manager.get_workflow_status(workflow_id)


def test_workflow_id_format():
    assert re.match(r"^workflow_\d+_[0-9a-f]{9}$", generate_workflow_id())


def test_workflow_runs_to_completion(request_body):
    async def scenario():
        manager = make_manager()
        workflow_id = manager.start_workflow(request_body)

        record = manager.get_workflow_status(workflow_id)
        assert record.status == WorkflowStatus.PENDING
        assert record.progress == 0

        record = await wait_terminal(manager, workflow_id)
        assert record.status == WorkflowStatus.COMPLETED
        assert record.progress == 100
        assert record.error is None
        assert record.result.match_score == 88
        await manager.shutdown()

    asyncio.run(scenario())


def test_progress_never_decreases(request_body):
    async def scenario():
        manager = make_manager(StubOrchestrator(delay=0.02))
        workflow_id = manager.start_workflow(request_body)
        seen = []
        while True:
            record = manager.get_workflow_status(workflow_id)
            seen.append(record.progress)
            if record.is_terminal:
                break
            await asyncio.sleep(0)
        assert seen == sorted(seen)
        assert seen[-1] == 100
        assert 95 in seen
        await manager.shutdown()

    asyncio.run(scenario())


def test_status_reads_are_copies(request_body):
    async def scenario():
        manager = make_manager()
        workflow_id = manager.start_workflow(request_body)
        snapshot = manager.get_workflow_status(workflow_id)
        snapshot.progress = 99
        assert manager.get_workflow_status(workflow_id).progress == 0
        await manager.shutdown()

    asyncio.run(scenario())


def test_cancel_running_workflow_discards_late_result(request_body):
    async def scenario():
        gate = asyncio.Event()
        manager = make_manager(StubOrchestrator(gate=gate))
        workflow_id = manager.start_workflow(request_body)
        await wait_until(lambda: manager.get_workflow_status(workflow_id).progress == 95)

        assert manager.cancel_workflow(workflow_id) is True
        gate.set()
        await asyncio.sleep(0.05)

        record = manager.get_workflow_status(workflow_id)
        assert record.status == WorkflowStatus.FAILED
        assert record.error == "Workflow cancelled by user"
        assert record.result is None
        assert manager.cancel_workflow(workflow_id) is False
        await manager.shutdown()

    asyncio.run(scenario())


def test_cancel_completed_or_unknown_workflow(request_body):
    async def scenario():
        manager = make_manager()
        workflow_id = manager.start_workflow(request_body)
        await wait_terminal(manager, workflow_id)

        assert manager.cancel_workflow(workflow_id) is False
        assert manager.get_workflow_status(workflow_id).status == WorkflowStatus.COMPLETED
        assert manager.cancel_workflow("workflow_0_missing") is False
        await manager.shutdown()

    asyncio.run(scenario())


def test_timeout_marks_failed_and_ignores_late_completion(request_body):
    async def scenario():
        manager = make_manager(StubOrchestrator(delay=0.3), timeout=0.05)
        workflow_id = manager.start_workflow(request_body)

        record = await wait_terminal(manager, workflow_id)
        assert record.status == WorkflowStatus.FAILED
        assert record.error == "Workflow timeout"

        await asyncio.sleep(0.4)
        record = manager.get_workflow_status(workflow_id)
        assert record.status == WorkflowStatus.FAILED
        assert record.result is None
        await manager.shutdown()

    asyncio.run(scenario())


def test_orchestrator_error_fails_workflow(request_body):
    async def scenario():
        manager = make_manager(StubOrchestrator(error=RuntimeError("boom")))
        workflow_id = manager.start_workflow(request_body)
        record = await wait_terminal(manager, workflow_id)
        assert record.status == WorkflowStatus.FAILED
        assert record.error == "boom"
        await manager.shutdown()

    asyncio.run(scenario())


def test_cleanup_removes_records_past_retention(request_body):
    async def scenario():
        clock = ManualClock()
        manager = make_manager(clock=clock)
        done = manager.start_workflow(request_body)
        await wait_terminal(manager, done)

        assert manager.cleanup_old_workflows(clock.now + timedelta(hours=1)) == 0

        pending = manager.start_workflow(request_body)
        assert manager.cleanup_old_workflows(clock.now + timedelta(hours=25)) == 2
        assert manager.get_workflow_status(done) is None
        assert manager.get_workflow_status(pending) is None

        # the swept pending workflow stops quietly
        await asyncio.sleep(0.05)
        assert manager.get_workflow_status(pending) is None
        await manager.shutdown()

    asyncio.run(scenario())


def test_sweeper_runs_periodically(request_body):
    async def scenario():
        clock = ManualClock()
        manager = make_manager(clock=clock, sweep_interval=0.01)
        manager.start()
        workflow_id = manager.start_workflow(request_body)
        await wait_terminal(manager, workflow_id)

        clock.now += timedelta(days=2)
        await wait_until(lambda: manager.get_workflow_status(workflow_id) is None)
        await manager.shutdown()

    asyncio.run(scenario())


def test_list_and_stats(resume, job):
    async def scenario():
        gate = asyncio.Event()
        manager = make_manager(StubOrchestrator(gate=gate))
        first = manager.start_workflow(WorkflowRequest(original_resume=resume, job_description=job, user_id="u1"))
        second = manager.start_workflow(WorkflowRequest(original_resume=resume, job_description=job, user_id="u2"))
        manager.cancel_workflow(second)
        gate.set()
        await wait_terminal(manager, first)

        assert [r.id for r in manager.list_workflows("u1")] == [first]
        assert {r.id for r in manager.list_workflows()} == {first, second}
        stats = manager.get_stats()
        assert (stats.total, stats.completed, stats.failed, stats.pending, stats.running) == (2, 1, 1, 0, 0)
        await manager.shutdown()

    asyncio.run(scenario())


def test_shutdown_cancels_in_flight_workflows(request_body):
    async def scenario():
        manager = make_manager(StubOrchestrator(gate=asyncio.Event()))
        manager.start()
        workflow_id = manager.start_workflow(request_body)
        await wait_until(lambda: manager.get_workflow_status(workflow_id).status == WorkflowStatus.RUNNING)

        await manager.shutdown()

        assert manager.get_workflow_status(workflow_id) is None
        assert manager.get_stats().total == 0

    asyncio.run(scenario())
