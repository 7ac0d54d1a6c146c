import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from ..errors import BackendError, BackendErrorReason, SchemaError, TransportError
from ..schemas import JobDescription, ResumeDocument, TailoringOptions, TailoringResult

logger = logging.getLogger(__name__)


@dataclass
class BackendResult:
    """Outcome of one backend call: either a result or the error that stopped it."""
    backend: str
    result: Optional[TailoringResult] = None
    error: Optional[BackendError] = None

    @property
    def ok(self) -> bool:
        return self.result is not None and self.error is None


class TailoringBackend(ABC):
    """Remote tailoring provider. tailor() never raises; failures come back as data."""

    name = "backend"

    async def tailor(
        self,
        resume: ResumeDocument,
        job: JobDescription,
        options: TailoringOptions,
    ) -> BackendResult:
        try:
            result = await self._tailor(resume, job, options)
            return BackendResult(backend=self.name, result=result)
        except BackendError as e:
            error = e
        except httpx.HTTPError as e:
            error = TransportError(f"{type(e).__name__}: {e}")
        except ValidationError as e:
            error = SchemaError(f"{e.error_count()} validation error(s)")
        except (ValueError, KeyError, IndexError, TypeError, AttributeError) as e:
            error = SchemaError(str(e), reason=BackendErrorReason.MALFORMED_RESPONSE)

        error.backend = error.backend or self.name
        logger.warning(f"Tailoring backend {self.name} failed: {error}")
        return BackendResult(backend=self.name, error=error)

    @abstractmethod
    async def _tailor(
        self,
        resume: ResumeDocument,
        job: JobDescription,
        options: TailoringOptions,
    ) -> TailoringResult:
        ...


def response_json(response: httpx.Response) -> Any:
    if response.status_code != 200:
        raise TransportError(f"HTTP {response.status_code}: {response.text[:200]}")
    try:
        return response.json()
    except ValueError:
        raise SchemaError("response body is not JSON", reason=BackendErrorReason.MALFORMED_RESPONSE)


def first_json_object(text: str) -> Dict[str, Any]:
    """Decode the first JSON object embedded in free text."""
    decoder = json.JSONDecoder()
    start = text.find("{")
    while start >= 0:
        try:
            obj, _ = decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            start = text.find("{", start + 1)
            continue
        if isinstance(obj, dict):
            return obj
        start = text.find("{", start + 1)
    raise SchemaError("no JSON object found in response text", reason=BackendErrorReason.MALFORMED_RESPONSE)
