from .task_runner import TaskRunner

__all__ = ["TaskRunner"]
