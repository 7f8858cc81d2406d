"""Application services for perftrack."""

from perftrack.services.task_lifecycle import TaskLifecycleService
from perftrack.services.reporting import ReportingService

__all__ = ["TaskLifecycleService", "ReportingService"]
