from .logger import (
    clear_invocation_id,
    get_invocation_id,
    get_logger,
    invocation_scope,
    log_stage,
    set_invocation_id,
    setup_logging,
)

__all__ = [
    "clear_invocation_id",
    "get_invocation_id",
    "get_logger",
    "invocation_scope",
    "log_stage",
    "set_invocation_id",
    "setup_logging",
]
