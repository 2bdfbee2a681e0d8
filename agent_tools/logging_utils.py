"""Shared logging utilities for outbound API calls."""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Any, Iterator, Mapping


def log_event(
    logger: logging.Logger,
    message: str,
    *,
    level: int = logging.INFO,
    tool_name: str | None = None,
    query_params: Mapping[str, Any] | None = None,
    result_count: int | None = None,
    status_code: int | None = None,
    event: str | None = None,
    extra_context: Mapping[str, Any] | None = None,
) -> None:
    """Log a single structured event."""

    context: dict[str, Any] = {
        "tool_name": tool_name,
        "query_params": dict(query_params) if query_params else None,
        "result_count": result_count,
        "status_code": status_code,
        "event": event,
    }

    if extra_context:
        context.update(extra_context)

    logger.log(level, message, extra=context)


@contextmanager
def log_operation(
    logger: logging.Logger,
    *,
    event: str,
    query_params: Mapping[str, Any] | None = None,
    extra_context: Mapping[str, Any] | None = None,
) -> Iterator[None]:
    """Log the start/end of an operation with elapsed time."""

    context: dict[str, Any] = {
        "query_params": dict(query_params) if query_params else None,
        "event": event,
    }

    if extra_context:
        context.update(extra_context)

    logger.info("Starting %s", event, extra=context)
    start = time.perf_counter()

    try:
        yield
    except Exception as exc:
        elapsed_ms = (time.perf_counter() - start) * 1000
        failure_context = {**context, "elapsed_ms": round(elapsed_ms, 2)}
        logger.warning("%s failed: %s", event, exc, extra=failure_context)
        raise
    else:
        elapsed_ms = (time.perf_counter() - start) * 1000
        success_context = {**context, "elapsed_ms": round(elapsed_ms, 2)}
        logger.info("Finished %s", event, extra=success_context)
