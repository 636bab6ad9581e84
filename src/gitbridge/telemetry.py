"""OpenTelemetry spans around tool dispatch, no-op when the SDK is absent."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Generator
from contextlib import contextmanager
from importlib import import_module
from typing import Any

logger = logging.getLogger("gitbridge.telemetry")

trace: Any | None = None
try:
    trace = import_module("opentelemetry.trace")
    _HAS_OTEL = True
except Exception:
    _HAS_OTEL = False

_TRACER_NAME = "gitbridge"


def _get_tracer() -> Any:
    if _HAS_OTEL and trace is not None:
        return trace.get_tracer(_TRACER_NAME)
    return None


def generate_request_id() -> str:
    """UUID4 used to correlate log lines and spans of one tool call."""
    return str(uuid.uuid4())


def set_attributes(span: Any, attributes: dict[str, Any]) -> None:
    """Best-effort attribute update; ``span`` may be None."""
    if span is None:
        return
    for key, value in attributes.items():
        try:
            span.set_attribute(key, value)
        except Exception as exc:
            logger.debug("Failed to set span attribute %s: %s", key, exc)


@contextmanager
def trace_span(
    name: str,
    attributes: dict[str, Any] | None = None,
) -> Generator[Any, None, None]:
    """Open a span named ``name``, or yield None without OpenTelemetry.

    Exceptions raised by the wrapped block propagate unchanged; only
    failures of the tracing machinery itself are swallowed.
    """
    span_context = _start_span(name, attributes or {})
    if span_context is None:
        yield None
        return
    context_manager, span = span_context

    failure: BaseException | None = None
    try:
        yield span
    except BaseException as exc:
        failure = exc
        raise
    finally:
        _end_span(name, context_manager, failure)


def _start_span(name: str, attributes: dict[str, Any]) -> tuple[Any, Any] | None:
    try:
        tracer = _get_tracer()
        if tracer is None:
            return None
        context_manager = tracer.start_as_current_span(name, attributes=attributes)
        return context_manager, context_manager.__enter__()
    except Exception as exc:
        logger.debug("OpenTelemetry unavailable for span '%s': %s", name, exc)
        return None


def _end_span(name: str, context_manager: Any, failure: BaseException | None) -> None:
    try:
        if failure is None:
            context_manager.__exit__(None, None, None)
        else:
            context_manager.__exit__(type(failure), failure, failure.__traceback__)
    except Exception as exc:
        logger.debug("Failed to close span '%s': %s", name, exc)
