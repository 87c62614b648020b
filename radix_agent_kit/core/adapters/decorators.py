from __future__ import annotations

from collections.abc import Callable, Coroutine
from functools import wraps
from typing import Any, TypeVar

from radix_agent_kit.core.constants.base import (
    OPERATION_MAX_ATTEMPTS,
    OPERATION_RETRY_BASE_DELAY_S,
)
from radix_agent_kit.core.errors import NetworkUnsupportedError, ValidationError
from radix_agent_kit.core.utils.redact import redact
from radix_agent_kit.core.utils.retry import is_transient_error, retry_async

T = TypeVar("T")


def status_tuple(
    fn: Callable[..., Coroutine[Any, Any, T]],
) -> Callable[..., Coroutine[Any, Any, tuple[bool, T | str]]]:
    """Wrap an async read-only adapter method to return ``(True, result)`` or ``(False, error_str)``.

    Exceptions are caught, logged via ``self.logger``, and returned as ``(False, str(e))``.
    """

    @wraps(fn)
    async def wrapper(self: Any, *args: Any, **kwargs: Any) -> tuple[bool, T | str]:
        try:
            result = await fn(self, *args, **kwargs)
            return (True, result)
        except Exception as exc:
            self.logger.error(f"Error in {fn.__name__}: {exc}")
            return (False, str(exc))

    return wrapper  # type: ignore[return-value]


def operation_tuple(
    fn: Callable[..., Coroutine[Any, Any, T]],
) -> Callable[..., Coroutine[Any, Any, tuple[bool, T | str]]]:
    """Wrap a state-changing operation.

    Bad input and unsupported networks come back as ``(False, message)``.
    Build, submission and duplicate errors propagate to the caller.
    """

    @wraps(fn)
    async def wrapper(self: Any, *args: Any, **kwargs: Any) -> tuple[bool, T | str]:
        try:
            result = await fn(self, *args, **kwargs)
        except (ValidationError, NetworkUnsupportedError) as exc:
            self.logger.warning(
                f"{fn.__name__} rejected: {exc} (params={redact(kwargs)})"
            )
            return (False, str(exc))
        except Exception as exc:
            self.logger.error(
                f"{fn.__name__} failed: {exc} (params={redact(kwargs)})"
            )
            raise
        return (True, result)

    return wrapper  # type: ignore[return-value]


def retry_operation(
    fn: Callable[..., Coroutine[Any, Any, T]],
) -> Callable[..., Coroutine[Any, Any, T]]:
    """Re-run an operation on transient failures, rebuilding it from scratch each time.

    Attempts and base delay come from ``self.retry_max_attempts`` and
    ``self.retry_base_delay_s`` when set.
    """

    @wraps(fn)
    async def wrapper(self: Any, *args: Any, **kwargs: Any) -> T:
        max_attempts = getattr(self, "retry_max_attempts", OPERATION_MAX_ATTEMPTS)
        base_delay_s = getattr(self, "retry_base_delay_s", OPERATION_RETRY_BASE_DELAY_S)

        def _on_retry(attempt: int, exc: Exception, delay_s: float) -> None:
            self.logger.warning(
                f"{fn.__name__} attempt {attempt + 1}/{max_attempts} failed: {exc}; "
                f"retrying in {delay_s:.2f}s"
            )

        return await retry_async(
            lambda: fn(self, *args, **kwargs),
            max_retries=max_attempts,
            base_delay_s=base_delay_s,
            should_retry=is_transient_error,
            on_retry=_on_retry,
        )

    return wrapper
