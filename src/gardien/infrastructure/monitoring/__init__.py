"""
Monitoring: structured logging, user-facing reporter, Prometheus metrics.
"""

from gardien.infrastructure.monitoring.logger import (
    get_attempt_id,
    get_logger,
    log_performance,
    set_attempt_id,
    setup_logging,
)
from gardien.infrastructure.monitoring.reporter import SystemReporter

__all__ = [
    "SystemReporter",
    "get_attempt_id",
    "get_logger",
    "log_performance",
    "set_attempt_id",
    "setup_logging",
]
