import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, get_settings
from .orchestrator import build_orchestrator
from .runners import WorkflowManager

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        orchestrator = build_orchestrator(settings)
        manager = WorkflowManager.from_settings(orchestrator, settings)
        app.state.settings = settings
        app.state.orchestrator = orchestrator
        app.state.workflow_manager = manager
        manager.start()
        logger.info("Tailoring service started")
        try:
            yield
        finally:
            await manager.shutdown()

    app = FastAPI(title="Resume Tailoring Backend", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health():
        return {"ok": True}

    from .api.routes_tailor import router as tailor_router
    from .api.routes_workflows import router as workflows_router
    app.include_router(workflows_router)
    app.include_router(tailor_router)

    return app


app = create_app()
