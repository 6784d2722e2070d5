"""
Utility decorators for input validation and common functionality.
"""

import functools
import inspect
import time
import uuid
from collections.abc import Callable, Sized
from typing import Any, TypeVar

from loguru import logger

from tradejournal.core.utils.validation import validate_month, validate_year

F = TypeVar("F", bound=Callable[..., Any])

_CONTEXT_PARAMS = ("month", "year", "basis", "use_cash_basis", "trades", "records")


def _validate_calendar_parameter(param_name: str, value: Any, bound_args: Any) -> None:
    """Validate a single calendar parameter in place."""
    if param_name == "month" and value is not None:
        bound_args.arguments[param_name] = validate_month(value)
    elif param_name == "year" and value is not None:
        bound_args.arguments[param_name] = validate_year(value)


def _bind_arguments(
    func: Callable[..., Any], args: tuple[Any, ...], kwargs: dict[str, Any]
) -> inspect.BoundArguments:
    """Bind call arguments to the function signature with defaults applied."""
    bound_args = inspect.signature(func).bind(*args, **kwargs)
    bound_args.apply_defaults()
    return bound_args


def validate_calendar(func: F) -> F:
    """Decorator to validate and normalize `month` / `year` parameters.

    Full month names are shortened to 3-letter tokens before the wrapped
    function runs; unknown tokens raise InvalidMonthError.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        bound_args = _bind_arguments(func, args, kwargs)
        for param_name, value in bound_args.arguments.items():
            if param_name != "self":
                _validate_calendar_parameter(param_name, value, bound_args)
        return func(*bound_args.args, **bound_args.kwargs)

    return wrapper  # type: ignore


def _serialize_parameter_value(value: Any) -> Any:
    """Serialize parameter value for logging."""
    if hasattr(value, "value"):
        return str(value.value)  # Handle enum values
    if isinstance(value, Sized) and not isinstance(value, str):
        return f"{len(value)} items"
    return value


def _extract_context(bound_args: inspect.BoundArguments) -> dict[str, Any]:
    """Extract loggable context from function arguments."""
    return {
        name: _serialize_parameter_value(value)
        for name, value in bound_args.arguments.items()
        if name in _CONTEXT_PARAMS
    }


def log_operation(func: F) -> F:
    """Decorator to log journal operations with correlation IDs and timing."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        correlation_id = str(uuid.uuid4())[:8]
        func_name = func.__qualname__
        context = {
            "correlation_id": correlation_id,
            **_extract_context(_bind_arguments(func, args, kwargs)),
        }

        logger.debug(f"Journal operation started: {func_name}", extra=context)
        start_time = time.perf_counter()

        try:
            result = func(*args, **kwargs)
        except Exception as e:
            execution_time_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                f"Journal operation failed: {func_name} ({type(e).__name__}: {e})",
                extra={**context, "execution_time_ms": round(execution_time_ms, 2)},
            )
            raise

        execution_time_ms = (time.perf_counter() - start_time) * 1000
        logger.debug(
            f"Journal operation completed: {func_name} in {execution_time_ms:.2f}ms",
            extra={**context, "execution_time_ms": round(execution_time_ms, 2)},
        )
        return result

    return wrapper  # type: ignore
