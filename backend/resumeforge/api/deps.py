from fastapi import Request

from ..backends import GeminiBackend
from ..orchestrator import TailoringOrchestrator
from ..runners import WorkflowManager


def get_orchestrator(request: Request) -> TailoringOrchestrator:
    return request.app.state.orchestrator


def get_workflow_manager(request: Request) -> WorkflowManager:
    return request.app.state.workflow_manager


def get_gemini(request: Request) -> GeminiBackend:
    for backend in request.app.state.orchestrator.backends:
        if isinstance(backend, GeminiBackend):
            return backend
    settings = request.app.state.settings
    return GeminiBackend(api_key=settings.gemini_api_key, base_url=settings.gemini_base_url,
                         model=settings.gemini_model, timeout=settings.gemini_timeout)
