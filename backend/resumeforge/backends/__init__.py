"""Remote tailoring backends. Each one reports failures as a BackendResult."""
from .base import BackendResult, TailoringBackend
from .gemini import GeminiBackend
from .n8n import N8nBackend

__all__ = ["BackendResult", "TailoringBackend", "GeminiBackend", "N8nBackend"]
