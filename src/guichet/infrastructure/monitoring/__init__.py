"""
Logging and notification.
"""

from guichet.infrastructure.monitoring.logger import (
    JSONFormatter,
    get_action_id,
    log_performance,
    set_action_id,
    setup_logging,
)
from guichet.infrastructure.monitoring.notifier import (
    ConsoleNotifier,
    LoggingNotifier,
)

__all__ = [
    "JSONFormatter",
    "get_action_id",
    "log_performance",
    "set_action_id",
    "setup_logging",
    "ConsoleNotifier",
    "LoggingNotifier",
]
