import asyncio
import logging
import random
import time
import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Tuple

from ..config import Settings
from ..errors import WorkflowCancelledError, WorkflowTimeoutError
from ..orchestrator import TailoringOrchestrator
from ..schemas import (
    WorkflowRecord,
    WorkflowRequest,
    WorkflowStats,
    WorkflowStatus,
)

logger = logging.getLogger(__name__)

PROGRESS_RUNNING = 10
PROGRESS_CHECKPOINTS = (20, 40, 60, 80, 95)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_workflow_id() -> str:
    return f"workflow_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


class WorkflowManager:
    """
    In-memory registry of tailoring workflows.

    Each workflow runs as its own asyncio task and only that task (plus
    cancel/timeout, which can only move it to failed) writes its record.
    Callers poll get_workflow_status(); records are swept after the
    retention window whatever their state.
    """

    def __init__(
        self,
        orchestrator: TailoringOrchestrator,
        *,
        timeout: float = 5 * 60,
        retention: float = 24 * 60 * 60,
        sweep_interval: float = 60 * 60,
        step_delay: Tuple[float, float] = (1.0, 3.0),
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.orchestrator = orchestrator
        self.timeout = timeout
        self.retention = timedelta(seconds=retention)
        self.sweep_interval = sweep_interval
        self.step_delay = step_delay
        self._clock = clock
        self._records: Dict[str, WorkflowRecord] = {}
        self._tasks: Dict[str, "asyncio.Task[None]"] = {}
        self._sweeper: Optional["asyncio.Task[None]"] = None

    @classmethod
    def from_settings(cls, orchestrator: TailoringOrchestrator, settings: Settings) -> "WorkflowManager":
        return cls(
            orchestrator,
            timeout=settings.workflow_timeout,
            retention=settings.workflow_retention,
            sweep_interval=settings.workflow_sweep_interval,
            step_delay=(settings.workflow_step_delay_min, settings.workflow_step_delay_max),
        )

    # ----- lifecycle -----

    def start(self) -> None:
        """Start the periodic retention sweep. Must be called inside a running loop."""
        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.create_task(self._sweep_loop(), name="workflow-sweeper")

    async def shutdown(self) -> None:
        """Cancel the sweeper and every in-flight workflow, and wait for them to finish."""
        pending = list(self._tasks.values())
        if self._sweeper is not None:
            pending.append(self._sweeper)
            self._sweeper = None
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        self._tasks.clear()
        logger.info(f"Workflow manager shut down ({len(self._records)} records discarded)")
        self._records.clear()

    # ----- public operations -----

    def start_workflow(self, request: WorkflowRequest) -> str:
        workflow_id = generate_workflow_id()
        now = self._clock()
        self._records[workflow_id] = WorkflowRecord(
            id=workflow_id,
            status=WorkflowStatus.PENDING,
            progress=0,
            user_id=request.user_id,
            created_at=now,
            updated_at=now,
        )
        task = asyncio.create_task(self._execute(workflow_id, request), name=workflow_id)
        self._tasks[workflow_id] = task
        task.add_done_callback(lambda _t, wid=workflow_id: self._tasks.pop(wid, None))
        logger.info(f"Workflow {workflow_id} started")
        return workflow_id

    def get_workflow_status(self, workflow_id: str) -> Optional[WorkflowRecord]:
        record = self._records.get(workflow_id)
        return record.model_copy(deep=True) if record is not None else None

    def cancel_workflow(self, workflow_id: str) -> bool:
        cancelled = self._fail(workflow_id, WorkflowCancelledError())
        if cancelled:
            logger.info(f"Workflow {workflow_id} cancelled")
        return cancelled

    def list_workflows(self, user_id: Optional[str] = None) -> List[WorkflowRecord]:
        records = [
            r for r in list(self._records.values())
            if user_id is None or r.user_id == user_id
        ]
        return [r.model_copy(deep=True) for r in sorted(records, key=lambda r: r.created_at)]

    def get_stats(self) -> WorkflowStats:
        stats = WorkflowStats()
        for record in list(self._records.values()):
            stats.total += 1
            setattr(stats, record.status.value, getattr(stats, record.status.value) + 1)
        return stats

    def cleanup_old_workflows(self, now: Optional[datetime] = None) -> int:
        cutoff = (now or self._clock()) - self.retention
        removed = 0
        for workflow_id, record in list(self._records.items()):
            if record.created_at < cutoff:
                del self._records[workflow_id]
                removed += 1
        if removed:
            logger.info(f"Swept {removed} expired workflow(s)")
        return removed

    # ----- internals -----

    async def _execute(self, workflow_id: str, request: WorkflowRequest) -> None:
        loop = asyncio.get_running_loop()
        timer = loop.call_later(self.timeout, self._expire, workflow_id)
        try:
            self._update(workflow_id, status=WorkflowStatus.RUNNING, progress=PROGRESS_RUNNING)

            for checkpoint in PROGRESS_CHECKPOINTS:
                if not self._update(workflow_id, progress=checkpoint):
                    return
                await asyncio.sleep(self._next_delay())

            if self._is_terminal(workflow_id):
                return
            result = await self.orchestrator.tailor(
                request.original_resume,
                request.job_description,
                request.options,
            )
            if self._update(workflow_id, status=WorkflowStatus.COMPLETED, progress=100, result=result):
                logger.info(f"Workflow {workflow_id} completed (match score {result.match_score})")
            else:
                logger.info(f"Workflow {workflow_id} finished after it was closed; result discarded")
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.exception(f"Workflow {workflow_id} failed: {e}")
            self._fail(workflow_id, e)
        finally:
            timer.cancel()

    def _expire(self, workflow_id: str) -> None:
        if self._fail(workflow_id, WorkflowTimeoutError()):
            logger.warning(f"Workflow {workflow_id} timed out after {self.timeout:g}s")

    def _next_delay(self) -> float:
        low, high = self.step_delay
        if high <= 0:
            return 0
        return random.uniform(max(low, 0), high)

    def _is_terminal(self, workflow_id: str) -> bool:
        record = self._records.get(workflow_id)
        return record is None or record.is_terminal

    def _fail(self, workflow_id: str, error: Exception) -> bool:
        return self._update(workflow_id, status=WorkflowStatus.FAILED, error=str(error) or type(error).__name__)

    def _update(self, workflow_id: str, **changes) -> bool:
        """Apply changes unless the record is gone or already terminal."""
        record = self._records.get(workflow_id)
        if record is None or record.is_terminal:
            return False
        if "progress" in changes:
            changes["progress"] = max(record.progress, changes["progress"])
        for key, value in changes.items():
            setattr(record, key, value)
        record.updated_at = self._clock()
        return True

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self.sweep_interval)
            self.cleanup_old_workflows()
