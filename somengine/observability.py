"""
Observability infrastructure for the SOM engine
Provides structured logging, Prometheus metrics and operation tracing
"""

import logging
import time
import uuid
from contextlib import contextmanager
from typing import Optional

import psutil
import structlog
from prometheus_client import (
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)


# Prometheus Metrics
TRAINING_ITERATIONS = Counter(
    "somengine_training_iterations_total", "Total training iterations completed"
)

ITERATE_DURATION = Histogram(
    "somengine_iterate_duration_seconds",
    "Duration of a single Trainer.iterate call in seconds",
)

INITIALIZATIONS = Counter(
    "somengine_initializations_total",
    "Total weight initializations performed",
    ["strategy", "outcome"],
)

QUANTIZATION_ERROR = Gauge(
    "somengine_quantization_error", "Most recently computed quantization error"
)

TOPOGRAPHIC_ERROR = Gauge(
    "somengine_topographic_error", "Most recently computed topographic error"
)

SYSTEM_MEMORY_USAGE = Gauge(
    "somengine_system_memory_usage_bytes", "System memory usage in bytes"
)


class CorrelationIDProcessor:
    """Add correlation ID to log entries"""

    def __call__(self, logger, method_name, event_dict):
        if "correlation_id" not in event_dict:
            event_dict["correlation_id"] = structlog.contextvars.get_contextvars().get(
                "correlation_id", "unknown"
            )
        return event_dict


def setup_logging(log_level: str = "INFO", json_format: bool = True) -> None:
    """Configure structured logging with structlog"""

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="ISO"),
        structlog.processors.StackInfoRenderer(),
        CorrelationIDProcessor(),
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, log_level.upper()),
    )


def get_correlation_id() -> str:
    """Generate a new correlation ID"""
    return str(uuid.uuid4())


@contextmanager
def trace_operation(operation_name: str, **extra_context):
    """Context manager for tracing operations with logging"""
    logger = structlog.get_logger()
    correlation_id = get_correlation_id()
    start_time = time.time()

    logger.info(
        "Operation started",
        operation=operation_name,
        correlation_id=correlation_id,
        **extra_context,
    )

    with structlog.contextvars.bound_contextvars(correlation_id=correlation_id):
        try:
            yield correlation_id
        except Exception as e:
            logger.error(
                "Operation failed",
                operation=operation_name,
                correlation_id=correlation_id,
                duration_seconds=time.time() - start_time,
                error=str(e),
                error_type=type(e).__name__,
                **extra_context,
            )
            raise

    logger.info(
        "Operation completed",
        operation=operation_name,
        correlation_id=correlation_id,
        duration_seconds=time.time() - start_time,
        **extra_context,
    )


def update_system_metrics():
    """Update system-level metrics"""
    try:
        SYSTEM_MEMORY_USAGE.set(psutil.virtual_memory().used)
    except (OSError, RuntimeError) as e:
        structlog.get_logger().error("Failed to update system metrics", error=str(e))


def get_metrics() -> bytes:
    """Get Prometheus metrics in text format"""
    update_system_metrics()
    return generate_latest()


def log_iterate_metrics(steps: int, duration: float) -> None:
    """Record one iterate call"""
    TRAINING_ITERATIONS.inc(steps)
    ITERATE_DURATION.observe(duration)


def log_initialization(strategy: str, outcome: str) -> None:
    """Record one weight initialization, outcome is 'ok' or 'skipped'"""
    INITIALIZATIONS.labels(strategy=strategy, outcome=outcome).inc()


def log_quality_metrics(qe: Optional[float] = None, te: Optional[float] = None) -> None:
    """Publish the latest quality metrics"""
    if qe is not None:
        QUANTIZATION_ERROR.set(qe)
    if te is not None:
        TOPOGRAPHIC_ERROR.set(te)
