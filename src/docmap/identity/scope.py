"""
Unit-of-work scoping around the identity map.
"""

from __future__ import annotations

import functools
import inspect
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional, TypeVar

from .identity_map import IdentityMap, Scope, identity_map as default_identity_map

F = TypeVar("F", bound=Callable[..., Any])


def _resolve(identity_map: Optional[IdentityMap]) -> IdentityMap:
    return identity_map if identity_map is not None else default_identity_map


def begin_scope(identity_map: Optional[IdentityMap] = None) -> Scope:
    """
    Start a unit of work with an empty scope and return its handle.
    """

    target = _resolve(identity_map)
    target.clear()
    return target.scope()


def end_scope(identity_map: Optional[IdentityMap] = None) -> None:
    _resolve(identity_map).clear()


@contextmanager
def unit_of_work(identity_map: Optional[IdentityMap] = None) -> Iterator[Scope]:
    """
    Wrap a unit of work so the identity map is cleared on every exit path.
    """

    target = _resolve(identity_map)
    scope = begin_scope(target)
    try:
        yield scope
    finally:
        end_scope(target)


def scoped(func: F | None = None, *, identity_map: Optional[IdentityMap] = None):
    """
    Decorate a function or coroutine function to run inside :func:`unit_of_work`.
    """

    def decorator(inner: F) -> F:
        if inspect.iscoroutinefunction(inner):

            @functools.wraps(inner)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                with unit_of_work(identity_map):
                    return await inner(*args, **kwargs)

            return async_wrapper  # type: ignore[return-value]

        @functools.wraps(inner)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            with unit_of_work(identity_map):
                return inner(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    if func is not None:
        return decorator(func)
    return decorator
