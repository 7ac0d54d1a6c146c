"""
Runtime configuration for the tailoring service.

Values come from the environment (optionally seeded from a .env file) and are
read when get_settings() is called, so tests can patch the environment first.
"""
import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()

DEFAULT_CORS_ORIGINS = ["http://localhost:5173", "http://localhost:3000"]


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


def _env_str(name: str, default: Optional[str] = None) -> Optional[str]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


@dataclass
class Settings:
    # Backend A: generative-text endpoint
    gemini_api_key: Optional[str] = None
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_model: str = "gemini-pro"
    gemini_timeout: float = 60.0

    # Backend B: workflow automation webhook
    n8n_webhook_url: Optional[str] = None
    n8n_webhook_token: Optional[str] = None
    n8n_timeout: float = 60.0
    n8n_poll_interval: float = 2.0
    n8n_poll_timeout: float = 120.0

    # Workflow manager
    workflow_timeout: float = 5 * 60
    workflow_retention: float = 24 * 60 * 60
    workflow_sweep_interval: float = 60 * 60
    workflow_step_delay_min: float = 1.0
    workflow_step_delay_max: float = 3.0

    cors_origins: List[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    log_level: str = "INFO"


def get_settings() -> Settings:
    """Build Settings from the current environment."""
    origins_env = os.getenv("CORS_ORIGINS")
    origins = [o.strip() for o in (origins_env or "").split(",") if o.strip()]

    return Settings(
        gemini_api_key=_env_str("GEMINI_API_KEY"),
        gemini_base_url=_env_str("GEMINI_BASE_URL", Settings.gemini_base_url),
        gemini_model=_env_str("GEMINI_MODEL", Settings.gemini_model),
        gemini_timeout=_env_float("GEMINI_TIMEOUT", Settings.gemini_timeout),
        n8n_webhook_url=_env_str("N8N_WEBHOOK_URL"),
        n8n_webhook_token=_env_str("N8N_WEBHOOK_TOKEN"),
        n8n_timeout=_env_float("N8N_TIMEOUT", Settings.n8n_timeout),
        n8n_poll_interval=_env_float("N8N_POLL_INTERVAL", Settings.n8n_poll_interval),
        n8n_poll_timeout=_env_float("N8N_POLL_TIMEOUT", Settings.n8n_poll_timeout),
        workflow_timeout=_env_float("WORKFLOW_TIMEOUT", Settings.workflow_timeout),
        workflow_retention=_env_float("WORKFLOW_RETENTION", Settings.workflow_retention),
        workflow_sweep_interval=_env_float("WORKFLOW_SWEEP_INTERVAL", Settings.workflow_sweep_interval),
        workflow_step_delay_min=_env_float("WORKFLOW_STEP_DELAY_MIN", Settings.workflow_step_delay_min),
        workflow_step_delay_max=_env_float("WORKFLOW_STEP_DELAY_MAX", Settings.workflow_step_delay_max),
        cors_origins=origins or list(DEFAULT_CORS_ORIGINS),
        log_level=(_env_str("LOG_LEVEL", "INFO") or "INFO").upper(),
    )
