"""
Application Module

Entry points: the query and push tasks, the polling trigger and the
reference trigger scheduler.
"""

from prometheus_tasks.application.tasks import PushTask, QueryTask
from prometheus_tasks.application.triggers import QueryTrigger, TriggerScheduler

__all__ = [
    "PushTask",
    "QueryTask",
    "QueryTrigger",
    "TriggerScheduler",
]
