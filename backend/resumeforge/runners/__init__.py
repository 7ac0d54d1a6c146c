from .workflow_manager import WorkflowManager

__all__ = ["WorkflowManager"]
