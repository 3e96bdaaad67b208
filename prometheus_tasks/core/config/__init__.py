"""
Configuration Module

Components:
-----------
- **settings.py**: Pydantic-based configuration with environment variable loading
- **constants.py**: Result types, fetch modes, log stages and wire constants

Environment Variables:
---------------------
```bash
PROMETHEUS_URL=http://prometheus:9090
PUSHGATEWAY_URL=http://pushgateway:9091
HTTP_TIMEOUT=10
RESULT_STORAGE_DIR=/var/lib/prometheus-tasks
TRIGGER_MAX_ATTEMPTS=3
LOG_LEVEL=INFO
LOG_FORMAT=json
```
"""

from prometheus_tasks.core.config.constants import FetchType, ResultType, Stage
from prometheus_tasks.core.config.settings import Settings, get_settings, reload_settings

__all__ = [
    "FetchType",
    "ResultType",
    "Settings",
    "Stage",
    "get_settings",
    "reload_settings",
]
