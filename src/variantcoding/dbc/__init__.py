# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Design by contract utilities for :mod:`variantcoding`.

Contracts are off by default and cost a single flag lookup per call. Set
``VARIANTCODING_DBC=1`` or use :func:`dbc_enabled` in tests to evaluate them.
"""

from __future__ import annotations

import builtins
import contextvars
import copy
import logging
import os
from collections.abc import Callable, Iterator, Mapping, Sequence
from contextlib import ExitStack, contextmanager
from functools import wraps
from pathlib import Path
from typing import ParamSpec, TypeVar, cast

from ..types import ContractResult

P = ParamSpec("P")
R = TypeVar("R")

ContractCallable = Callable[..., ContractResult | object]

_ENV_FLAG = "VARIANTCODING_DBC"
_forced_state: bool | None = None
_scoped_state: contextvars.ContextVar[bool | None] = contextvars.ContextVar(
    "variantcoding_dbc", default=None
)


def _coerce_flag(value: str | None) -> bool:
    if value is None:
        return False
    return value.strip().lower() not in {"", "0", "false", "off", "no"}


def dbc_active() -> bool:
    """Return ``True`` when contract checks should run.

    A :func:`dbc_enabled` block of the current context wins over
    :func:`enable_dbc` and :func:`disable_dbc`, which win over the environment.
    """

    scoped = _scoped_state.get()
    if scoped is not None:
        return scoped
    if _forced_state is not None:
        return _forced_state
    return _coerce_flag(os.getenv(_ENV_FLAG))


def enable_dbc() -> None:
    """Force contract checks on for the whole process."""

    global _forced_state
    _forced_state = True


def disable_dbc() -> None:
    """Force contract checks off for the whole process."""

    global _forced_state
    _forced_state = False


@contextmanager
def dbc_enabled(*, active: bool = True) -> Iterator[None]:
    """Set the contract flag for the current thread or task inside a ``with`` block."""

    token = _scoped_state.set(active)
    try:
        yield
    finally:
        _scoped_state.reset(token)


def _qualname(target: object) -> str:
    return getattr(target, "__qualname__", repr(target))


def _normalize_result(result: ContractResult | object) -> tuple[bool, str | None]:
    if isinstance(result, tuple):
        items = cast(Sequence[object], result)
        if not items:
            raise TypeError("Contract callables must not return empty tuples")
        detail = None if len(items) == 1 else str(items[1])
        return bool(items[0]), detail
    if result is None:
        return False, None
    return bool(result), None


def _check(
    *,
    kind: str,
    func: Callable[..., object],
    predicate: ContractCallable,
    args: tuple[object, ...],
    kwargs: Mapping[str, object],
) -> None:
    try:
        result = predicate(*args, **kwargs)
    except AssertionError:
        raise
    except Exception as exc:
        msg = f"{kind} contract for {_qualname(func)} raised {type(exc).__name__}: {exc}"
        raise AssertionError(msg) from exc
    outcome, detail = _normalize_result(result)
    if outcome:
        return
    predicate_name = getattr(predicate, "__name__", repr(predicate))
    msg = f"{kind} contract for {_qualname(func)} failed via {predicate_name}."
    if detail:
        msg = f"{msg} Details: {detail}"
    raise AssertionError(msg)


def require(
    *predicates: ContractCallable,
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Validate preconditions before invoking the wrapped callable."""

    if not predicates:
        raise ValueError("@require expects at least one predicate")

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @wraps(func)
        def wrapped(*args: P.args, **kwargs: P.kwargs) -> R:
            if dbc_active():
                for predicate in predicates:
                    _check(
                        kind="require",
                        func=func,
                        predicate=predicate,
                        args=tuple(args),
                        kwargs=dict(kwargs),
                    )
            return func(*args, **kwargs)

        return wrapped

    return decorator


def ensure(*predicates: ContractCallable) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Validate postconditions on the returned value.

    Predicates receive the call arguments plus ``result=``. Calls that raise
    are not checked; the exception propagates unchanged.
    """

    if not predicates:
        raise ValueError("@ensure expects at least one predicate")

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @wraps(func)
        def wrapped(*args: P.args, **kwargs: P.kwargs) -> R:
            result = func(*args, **kwargs)
            if dbc_active():
                for predicate in predicates:
                    _check(
                        kind="ensure",
                        func=func,
                        predicate=predicate,
                        args=tuple(args),
                        kwargs={**kwargs, "result": result},
                    )
            return result

        return wrapped

    return decorator


_SNAPSHOT_SENTINEL = object()


def _snapshot(value: object) -> object:
    try:
        return copy.deepcopy(value)
    except Exception:
        return _SNAPSHOT_SENTINEL


def _forbidden(func: Callable[..., object], target: str) -> Callable[..., object]:
    def raiser(*args: object, **kwargs: object) -> object:
        raise AssertionError(
            f"pure contract for {_qualname(func)} forbids calling {target}"
        )

    return raiser


@contextmanager
def _patch(
    obj: object, attribute: str, replacement: Callable[..., object]
) -> Iterator[None]:
    original = getattr(obj, attribute)
    setattr(obj, attribute, replacement)
    try:
        yield
    finally:
        setattr(obj, attribute, original)


@contextmanager
def _pure_environment(func: Callable[..., object]) -> Iterator[None]:
    with ExitStack() as stack:
        stack.enter_context(_patch(builtins, "open", _forbidden(func, "builtins.open")))
        stack.enter_context(
            _patch(Path, "write_text", _forbidden(func, "Path.write_text"))
        )
        stack.enter_context(
            _patch(Path, "write_bytes", _forbidden(func, "Path.write_bytes"))
        )
        stack.enter_context(_patch(logging.Logger, "_log", _forbidden(func, "logging")))
        yield


def pure(func: Callable[P, R]) -> Callable[P, R]:  # noqa: UP047
    """Validate that the wrapped callable neither mutates its inputs nor does I/O."""

    @wraps(func)
    def wrapped(*args: P.args, **kwargs: P.kwargs) -> R:
        if not dbc_active():
            return func(*args, **kwargs)

        snap_args = tuple(_snapshot(arg) for arg in args)
        snap_kwargs = {key: _snapshot(value) for key, value in kwargs.items()}

        with _pure_environment(func):
            result = func(*args, **kwargs)

        for index, (original, snapshot) in enumerate(zip(args, snap_args, strict=True)):
            if snapshot is not _SNAPSHOT_SENTINEL and original != snapshot:
                raise AssertionError(
                    f"pure contract for {_qualname(func)} detected mutation of "
                    f"positional argument {index}"
                )
        for key, snapshot in snap_kwargs.items():
            if snapshot is not _SNAPSHOT_SENTINEL and kwargs[key] != snapshot:
                raise AssertionError(
                    f"pure contract for {_qualname(func)} detected mutation of "
                    f"keyword argument '{key}'"
                )
        return result

    return wrapped


__all__ = [
    "dbc_active",
    "dbc_enabled",
    "disable_dbc",
    "enable_dbc",
    "ensure",
    "pure",
    "require",
]
