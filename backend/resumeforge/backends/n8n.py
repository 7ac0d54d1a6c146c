"""
n8n backend: resume tailoring through a workflow-automation webhook.

The webhook either answers with the tailored result directly or hands back an
execution id, which is then polled on the n8n executions API.
"""
import asyncio
import logging
import random
import string
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import httpx

from ..analyzer import compute_match_score, flatten_resume_to_text, job_keywords
from ..errors import ConfigurationError, PollingTimeoutError, SchemaError, TransportError
from ..schemas import JobDescription, ResumeDocument, TailoringOptions, TailoringResult
from .base import TailoringBackend, response_json

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_request_id() -> str:
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"resume_{int(time.time() * 1000)}_{suffix}"


def execution_progress(execution: Dict[str, Any]) -> int:
    """Percentage of workflow nodes that have produced output."""
    run_data = ((execution.get("data") or {}).get("resultData") or {}).get("runData") or {}
    total = len(run_data)
    if total == 0:
        return 0
    completed = sum(
        1 for node in run_data.values()
        if isinstance(node, list) and node and isinstance(node[0], dict) and node[0].get("data")
    )
    return round(completed * 100 / total)


class N8nBackend(TailoringBackend):
    name = "n8n"

    def __init__(
        self,
        webhook_url: Optional[str] = None,
        webhook_token: Optional[str] = None,
        timeout: float = 60.0,
        poll_interval: float = 2.0,
        poll_timeout: float = 120.0,
    ):
        self.webhook_url = (webhook_url or "").rstrip("/")
        self.webhook_token = webhook_token
        self.timeout = timeout
        self.poll_interval = poll_interval
        self.poll_timeout = poll_timeout

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.webhook_token}",
        }

    @staticmethod
    def validate_payload(resume: ResumeDocument, job: JobDescription) -> bool:
        return resume.is_tailorable() and job.is_tailorable()

    async def _tailor(self, resume: ResumeDocument, job: JobDescription, options: TailoringOptions) -> TailoringResult:
        if not self.webhook_url or not self.webhook_token:
            raise ConfigurationError("n8n webhook URL or token not configured")
        if not self.validate_payload(resume, job):
            raise SchemaError("payload requires name, email, job title and description")

        request_id = generate_request_id()
        body = {
            "originalResume": resume.model_dump(mode="json", by_alias=True),
            "jobDescription": job.model_dump(mode="json", by_alias=True),
            "template": options.template.value,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "requestId": request_id,
        }

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(f"{self.webhook_url}/webhook/tailor-resume", headers=self._headers(), json=body)
        data = response_json(response)
        if not isinstance(data, dict):
            raise SchemaError("webhook response is not an object")

        execution_id = data.get("executionId")
        if _find_tailored_resume(data) is None and execution_id:
            logger.info(f"n8n request {request_id} running as execution {execution_id}")
            data = await self._wait_for_execution(str(execution_id))

        return self._to_result(data, job, options)

    async def check_execution_status(self, execution_id: str) -> Dict[str, Any]:
        """One status probe: {"status": running|success|error, "progress": int, "result": dict|None}."""
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.get(
                f"{self.webhook_url}/api/v1/executions/{execution_id}",
                headers={"Authorization": f"Bearer {self.webhook_token}"},
            )
        execution = response_json(response)
        if not isinstance(execution, dict):
            raise SchemaError("execution status is not an object")

        if not execution.get("finished"):
            status = "running"
        elif execution.get("stoppedAt"):
            status = "success"
        else:
            status = "error"
        return {
            "status": status,
            "progress": execution_progress(execution),
            "result": execution.get("data") if status == "success" else None,
        }

    async def _wait_for_execution(self, execution_id: str) -> Dict[str, Any]:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.poll_timeout
        while True:
            status = await self.check_execution_status(execution_id)
            logger.debug(f"n8n execution {execution_id}: {status['status']} ({status['progress']}%)")
            if status["status"] == "success":
                if not isinstance(status["result"], dict):
                    raise SchemaError("execution finished without result data")
                return status["result"]
            if status["status"] == "error":
                raise TransportError(f"execution {execution_id} failed remotely")
            if loop.time() + self.poll_interval > deadline:
                raise PollingTimeoutError(f"execution {execution_id} still running after {self.poll_timeout:g}s")
            await asyncio.sleep(self.poll_interval)

    @staticmethod
    def _to_result(data: Dict[str, Any], job: JobDescription, options: TailoringOptions) -> TailoringResult:
        tailored = _find_tailored_resume(data)
        if tailored is None:
            raise SchemaError("no tailored resume data received from n8n workflow")
        inner = data.get("data") if isinstance(data.get("data"), dict) else {}

        tailored_resume = ResumeDocument.model_validate(tailored)
        score = data.get("matchScore", inner.get("matchScore"))
        if score is None:
            score = compute_match_score(flatten_resume_to_text(tailored_resume), job_keywords(job, options))
        suggestions = data.get("suggestions") or inner.get("suggestions") or []

        return TailoringResult(
            tailored_resume=tailored_resume,
            match_score=score,
            suggestions=suggestions,
        )


def _find_tailored_resume(data: Dict[str, Any]) -> Optional[Any]:
    if data.get("tailoredResume"):
        return data["tailoredResume"]
    inner = data.get("data")
    if isinstance(inner, dict) and inner.get("tailoredResume"):
        return inner["tailoredResume"]
    return None
