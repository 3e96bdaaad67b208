from prometheus_tasks.application.tasks.connection import ConnectionConfig
from prometheus_tasks.application.tasks.push import PushTask
from prometheus_tasks.application.tasks.query import QueryParameters, QueryTask

__all__ = [
    "ConnectionConfig",
    "PushTask",
    "QueryParameters",
    "QueryTask",
]
