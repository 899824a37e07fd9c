"""Service call tracing for ``--verbose`` runs.

A traced service method opens a root span; ``trace_span`` blocks inside it
(the merge stages, for instance) hang child spans off that root.  The
finished tree lands in ``ServiceResult.meta["telemetry"]``.  With tracing
off, both helpers reduce to one ContextVar lookup.
"""

from __future__ import annotations

import functools
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, ParamSpec, TypeVar

import structlog

from listkeeper.services.result import ServiceResult

_tracing: ContextVar[bool] = ContextVar("listkeeper_tracing", default=False)
_active: ContextVar[Span | None] = ContextVar("listkeeper_active_span", default=None)

log = structlog.get_logger("listkeeper.telemetry")

_P = ParamSpec("_P")
_R = TypeVar("_R")


@dataclass
class Span:
    name: str
    started: float = field(default_factory=time.perf_counter)
    finished: float | None = None
    annotations: dict[str, Any] = field(default_factory=dict)
    children: list[Span] = field(default_factory=list)

    def annotate(self, key: str, value: Any) -> None:
        self.annotations[key] = value

    def close(self) -> None:
        self.finished = time.perf_counter()

    @property
    def elapsed_ms(self) -> float:
        if self.finished is None:
            return 0.0
        return round((self.finished - self.started) * 1000, 2)

    def to_dict(self) -> dict[str, Any]:
        tree: dict[str, Any] = {"name": self.name, "duration_ms": self.elapsed_ms}
        if self.annotations:
            tree["annotations"] = dict(self.annotations)
        if self.children:
            tree["children"] = [child.to_dict() for child in self.children]
        return tree


@contextmanager
def _activate(span: Span) -> Iterator[Span]:
    token = _active.set(span)
    try:
        yield span
    finally:
        span.close()
        _active.reset(token)


@contextmanager
def trace_span(name: str) -> Iterator[Span | None]:
    """Record a child span of the running traced call.

    Yields ``None`` when tracing is off or no traced call is running, so
    callers guard annotations with ``if span is not None``.
    """
    parent = _active.get() if _tracing.get() else None
    if parent is None:
        yield None
        return
    child = Span(name)
    parent.children.append(child)
    with _activate(child):
        yield child


def traced(func: Callable[_P, _R]) -> Callable[_P, _R]:  # noqa: UP047
    """Trace a service method; its span tree is merged into the result's meta."""

    @functools.wraps(func)
    def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> _R:
        if not _tracing.get():
            return func(*args, **kwargs)

        root = Span(func.__name__)
        try:
            with _activate(root):
                result = func(*args, **kwargs)
        except Exception:
            log.debug("trace.aborted", call=root.name, duration_ms=root.elapsed_ms)
            raise

        log.debug("trace.finished", call=root.name, duration_ms=root.elapsed_ms)
        if not isinstance(result, ServiceResult):
            return result
        meta = dict(result.meta or {})
        meta["telemetry"] = root.to_dict()
        return result.model_copy(update={"meta": meta})  # type: ignore[return-value]

    return wrapper


def enable_telemetry() -> None:
    _tracing.set(True)


def disable_telemetry() -> None:
    _tracing.set(False)
