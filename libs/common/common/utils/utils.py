import sys
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager, AbstractContextManager
from contextvars import ContextVar, Token
from functools import wraps
from typing import Any, TypeGuard, TypeVar, cast

import structlog

T = TypeVar("T")
R_co = TypeVar("R_co", covariant=True)


def is_dict(obj: Any) -> TypeGuard[dict[str, Any]]:
    return isinstance(obj, dict)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    if name is None:
        # 0 would be get_logger, 1 is the caller
        frame = sys._getframe(1)  # type: ignore
        name = frame.f_globals["__name__"].rsplit(".", 1)[-1]
    return structlog.stdlib.get_logger(name)


class ContextVarManager(AbstractContextManager[T], AbstractAsyncContextManager[T]):
    """Sets a context variable for the duration of a ``with`` / ``async with`` block."""

    _var: ContextVar[T]
    _value: T
    _token: Token[T] | None

    def __init__(self, var: ContextVar[T], value: T) -> None:
        self._var = var
        self._value = value
        self._token = None

    def __enter__(self) -> T:
        self._token = self._var.set(self._value)
        return self._value

    def __exit__(self, *exc_details: object) -> None:
        if self._token is not None:
            self._var.reset(self._token)
            self._token = None

    async def __aenter__(self) -> T:
        return self.__enter__()

    async def __aexit__(self, *exc_details: object) -> None:
        self.__exit__(*exc_details)


def use_context_var(var: ContextVar[T], value: T) -> ContextVarManager[T]:
    return ContextVarManager(var, value)


def deep_merge(base: dict[str, Any], update: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries.

    Args:
        base: Base dictionary that will be updated
        update: Dictionary with values to update

    Returns:
        A new dictionary; nested dictionaries present on both sides are merged recursively.
    """
    merged = base.copy()

    for key, value in update.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = deep_merge(merged[key], cast(dict[str, Any], value))
        else:
            merged[key] = value

    return merged


def lookup_dotted(data: dict[str, Any], key: str) -> tuple[bool, Any]:
    """Resolve ``a.b.c`` against nested dictionaries.

    Returns ``(found, value)`` so that stored ``None`` values can be told apart from missing keys.
    """
    value: Any = data
    for part in key.split("."):
        if is_dict(value) and part in value:
            value = value[part]
        else:
            return False, None
    return True, value


def cached_classmethod(func: Callable[..., R_co]) -> Any:
    """Classmethod memoized per class and argument tuple; used for process-wide singletons."""

    @wraps(func)
    def wrapper(cls: type[Any], *args: Any, **kwargs: Any) -> R_co:
        cache: dict[Any, Any] | None = cls.__dict__.get("_cached_classmethod_results")
        if cache is None:
            cache = {}
            setattr(cls, "_cached_classmethod_results", cache)
        key = (func.__name__, args, frozenset(kwargs.items()))
        if key not in cache:
            cache[key] = func(cls, *args, **kwargs)
        return cast("R_co", cache[key])

    return classmethod(wrapper)
