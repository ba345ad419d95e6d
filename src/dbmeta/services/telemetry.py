"""Timing spans for ``--verbose`` runs.

A service method decorated with :func:`traced` becomes the root span;
:func:`trace_span` blocks inside it (catalog read, split, each executed
statement) become children. The finished tree is attached to the
returned ServiceResult under ``meta["telemetry"]``.

With telemetry off every helper is a single ContextVar lookup.
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

from dbmeta.services.result import ServiceResult

log = structlog.get_logger("dbmeta.telemetry")

_enabled: ContextVar[bool] = ContextVar("dbmeta_telemetry_enabled", default=False)
_current_span: ContextVar[Span | None] = ContextVar("dbmeta_current_span", default=None)


@dataclass
class Span:
    """One timed step, with its sub-steps and free-form annotations."""

    name: str
    parent: Span | None = None
    children: list[Span] = field(default_factory=list)
    start_time: float = field(default_factory=time.perf_counter)
    end_time: float | None = None
    annotations: dict[str, Any] = field(default_factory=dict)

    @property
    def duration_ms(self) -> float:
        if self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time) * 1000

    def child(self, name: str) -> Span:
        span = Span(name=name, parent=self)
        self.children.append(span)
        return span

    def end(self) -> None:
        self.end_time = time.perf_counter()

    def annotate(self, key: str, value: Any) -> None:
        self.annotations[key] = value

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"name": self.name, "duration_ms": round(self.duration_ms, 2)}
        if self.annotations:
            out["annotations"] = self.annotations
        if self.children:
            out["children"] = [c.to_dict() for c in self.children]
        return out


@contextmanager
def _active(span: Span) -> Iterator[Span]:
    """Make *span* current for the duration of the block, then end it."""
    token = _current_span.set(span)
    try:
        yield span
    finally:
        span.end()
        _current_span.reset(token)


@contextmanager
def trace_span(name: str) -> Iterator[Span | None]:
    """Time the enclosed block as a child of the current span.

    Yields None when telemetry is off or no traced call is running, so
    callers guard annotations with ``if span:``.
    """
    parent = _current_span.get() if _enabled.get() else None
    if parent is None:
        yield None
        return
    with _active(parent.child(name)) as span:
        yield span


_P = ParamSpec("_P")
_R = TypeVar("_R")


def traced(func: Callable[_P, _R]) -> Callable[_P, _R]:  # noqa: UP047
    """Run *func* as a root span and attach the tree to its ServiceResult."""

    @functools.wraps(func)
    def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> _R:
        if not _enabled.get():
            return func(*args, **kwargs)

        root = Span(name=func.__qualname__)
        try:
            with _active(root):
                result = func(*args, **kwargs)
        except Exception:
            log.debug("span.complete", span_name=root.name, ok=False)
            raise

        if not isinstance(result, ServiceResult):
            return result
        log.debug(
            "span.complete",
            span_name=root.name,
            duration_ms=round(root.duration_ms, 2),
            ok=result.ok,
            children=len(root.children),
        )
        meta = {**(result.meta or {}), "telemetry": root.to_dict()}
        return result.model_copy(update={"meta": meta})  # type: ignore[return-value]

    return wrapper


def enable_telemetry() -> None:
    _enabled.set(True)


def disable_telemetry() -> None:
    _enabled.set(False)


def get_current_span() -> Span | None:
    """The innermost running span, or None when telemetry is off."""
    return _current_span.get() if _enabled.get() else None
