"""
Logging and monitoring utilities for the inbox core.

Provides component-scoped logging and timing of collaborator API calls.
"""

from .loggers import ContextLogger, configure_logging, get_logger
from .metrics import MetricsCollector, OperationMetrics

__all__ = [
    "get_logger",
    "configure_logging",
    "ContextLogger",
    "MetricsCollector",
    "OperationMetrics",
]
