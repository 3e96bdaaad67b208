from prometheus_tasks.application.triggers.polling_trigger import QueryTrigger
from prometheus_tasks.application.triggers.scheduler import TriggerScheduler

__all__ = [
    "QueryTrigger",
    "TriggerScheduler",
]
