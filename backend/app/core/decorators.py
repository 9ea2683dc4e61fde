"""Core Decorators

Non-invasive stage tracing for the decision pipeline
"""

import inspect
import time
from functools import wraps
from typing import Any, Callable, Optional, TypeVar

from backend.app.core.logging import get_logger

logger = get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def _summarize_output(result: Any) -> dict[str, Any]:
    if result is None:
        return {}
    try:
        if hasattr(result, "model_dump"):
            return result.model_dump(mode="json", exclude_none=True)
        if isinstance(result, dict):
            return result
        return {"value": str(result)[:500]}
    except Exception:
        return {"value": str(result)[:500]}


def trace_log(
    layer: str,
    action: str,
    include_output: bool = False,
) -> Callable[[F], F]:
    """Trace logging decorator

    Logs duration and outcome of a pipeline stage. Exceptions are logged and
    re-raised unchanged.

    Args:
        layer: pipeline layer (intent_router, meetings, contracts, decision)
        action: action name (classify, resolve_meeting, ...)
        include_output: attach a dump of the return value to the trace event

    Example:
        @trace_log(layer="intent_router", action="classify")
        async def classify(self, message: str) -> ClassificationResult:
            ...
    """

    def decorator(func: F) -> F:
        def _emit(start: float, result: Any, error: Optional[str]) -> None:
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            event: dict[str, Any] = {
                "layer": layer,
                "action": action,
                "duration_ms": duration_ms,
                "success": error is None,
            }
            if error is not None:
                logger.warning("Stage failed", error=error, **event)
                return
            if include_output:
                event["output"] = _summarize_output(result)
            logger.debug("Stage completed", **event)

        @wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            start = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                _emit(start, None, str(e) or type(e).__name__)
                raise
            _emit(start, result, None)
            return result

        @wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                _emit(start, None, str(e) or type(e).__name__)
                raise
            _emit(start, result, None)
            return result

        if inspect.iscoroutinefunction(func):
            return async_wrapper  # type: ignore
        return sync_wrapper  # type: ignore

    return decorator
