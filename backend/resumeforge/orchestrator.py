"""
Tailoring orchestrator.

Tries each remote backend in priority order and falls back to the rule-based
engine when all of them fail. tailor() always returns a TailoringResult.
"""
import logging
from typing import List, Optional, Sequence

from .analyzer import job_keywords
from .backends import GeminiBackend, N8nBackend, TailoringBackend
from .config import Settings, get_settings
from .rule_engine import RuleBasedTailor
from .schemas import JobDescription, ResumeDocument, TailoringOptions, TailoringResult, clamp_score

logger = logging.getLogger(__name__)


class TailoringOrchestrator:
    def __init__(self, backends: Sequence[TailoringBackend], fallback: Optional[RuleBasedTailor] = None):
        self.backends: List[TailoringBackend] = list(backends)
        self.fallback = fallback or RuleBasedTailor()

    async def tailor(
        self,
        resume: ResumeDocument,
        job: JobDescription,
        options: Optional[TailoringOptions] = None,
    ) -> TailoringResult:
        options = options or TailoringOptions()

        if resume.is_tailorable() and job.is_tailorable():
            for backend in self.backends:
                try:
                    outcome = await backend.tailor(resume, job, options)
                except Exception as e:
                    # backends report failures as data; anything else is a bug in one
                    logger.exception(f"Backend {backend.name} raised unexpectedly: {e}")
                    continue
                if outcome.ok:
                    logger.info(f"Resume tailored by {backend.name} backend")
                    return self.post_process(outcome.result, job, options)
        else:
            logger.info("Resume or job description incomplete; skipping remote backends")

        logger.info("Falling back to rule-based tailoring")
        result = self.fallback.tailor(resume, job, options)
        return self.post_process(result, job, options)

    def post_process(self, result: TailoringResult, job: JobDescription, options: TailoringOptions) -> TailoringResult:
        """Recompute keyword matches and improvement areas locally from the tailored text."""
        keywords = job_keywords(job, options)
        tailored = result.tailored_resume
        return result.model_copy(update={
            "match_score": clamp_score(result.match_score),
            "keyword_matches": self.fallback.extract_keyword_matches(tailored, keywords),
            "improvement_areas": self.fallback.generate_improvement_areas(tailored, keywords),
        })


def build_orchestrator(settings: Optional[Settings] = None) -> TailoringOrchestrator:
    """Workflow automation first, then the LLM, then the rule-based engine."""
    settings = settings or get_settings()
    backends = [
        N8nBackend(
            webhook_url=settings.n8n_webhook_url,
            webhook_token=settings.n8n_webhook_token,
            timeout=settings.n8n_timeout,
            poll_interval=settings.n8n_poll_interval,
            poll_timeout=settings.n8n_poll_timeout,
        ),
        GeminiBackend(
            api_key=settings.gemini_api_key,
            base_url=settings.gemini_base_url,
            model=settings.gemini_model,
            timeout=settings.gemini_timeout,
        ),
    ]
    return TailoringOrchestrator(backends, RuleBasedTailor())
