"""Resume tailoring service: keyword analysis, tailoring backends and workflow tracking."""

__version__ = "0.1.0"
