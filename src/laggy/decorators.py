"""Decorator for applying chaos decisions to arbitrary callables."""

from __future__ import annotations

import functools
import inspect
from typing import Any, Callable, TypeVar

from laggy.interceptor import ChaosInterceptor

F = TypeVar("F", bound=Callable[..., Any])


def with_chaos(
    interceptor: ChaosInterceptor,
    target: str,
    method: str = "CALL",
) -> Callable[[F], F]:
    """Decorator that runs each call of the wrapped function through *interceptor*.

    The call is treated as a request to *target*.  Out-of-scope targets and
    passthrough decisions call straight through; delays sleep first; failures
    and timeouts raise the laggy exceptions instead of calling the function.
    Coroutine functions are awaited and use non-blocking sleeps.

    Example::

        @with_chaos(interceptor, "grpc://inventory/Reserve", method="RPC")
        def reserve(item_id: str) -> bool:
            ...
    """

    def decorator(func: F) -> F:
        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                await interceptor.intercept_async(target, method)
                return await func(*args, **kwargs)

            return async_wrapper  # type: ignore[return-value]

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            interceptor.intercept(target, method)
            return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator


__all__ = ["with_chaos"]
