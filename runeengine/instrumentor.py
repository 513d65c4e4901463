"""Scope profiling written as Chrome trace-event JSON."""

from __future__ import annotations

import functools
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, ClassVar, TextIO, TypeVar

F = TypeVar("F", bound=Callable[..., Any])


@dataclass(frozen=True)
class ProfileResult:
    """One timed scope; times are in microseconds."""

    name: str
    start: int
    end: int
    thread_id: int


class Instrumentor:
    """Writes profile results of one session to a trace file."""

    _instance: ClassVar[Instrumentor | None] = None

    def __init__(self) -> None:
        self._session: str | None = None
        self._stream: TextIO | None = None
        self._profile_count = 0
        self._lock = threading.RLock()

    @classmethod
    def get(cls) -> Instrumentor:
        """Return the shared instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @property
    def session_name(self) -> str | None:
        return self._session

    def begin_session(self, name: str, filepath: str = "results.json") -> None:
        """Open ``filepath`` and start a session; any open session is ended first."""
        with self._lock:
            if self._stream is not None:
                self.end_session()
            self._stream = open(filepath, "w", encoding="utf-8")
            self.write_header()
            self._session = name

    def end_session(self) -> None:
        with self._lock:
            if self._stream is not None:
                self.write_footer()
                self._stream.close()
            self._stream = None
            self._session = None
            self._profile_count = 0

    def write_profile(self, result: ProfileResult) -> None:
        """Append one trace event; ignored when no session is open."""
        with self._lock:
            if self._stream is None:
                return
            separator = "," if self._profile_count > 0 else ""
            self._profile_count += 1
            name = result.name.replace('"', "'")
            self._stream.write(
                f'{separator}{{"cat":"function",'
                f'"dur":{result.end - result.start},'
                f'"name":"{name}",'
                f'"ph":"X",'
                f'"pid":0,'
                f'"tid":{result.thread_id},'
                f'"ts":{result.start}}}'
            )
            self._stream.flush()

    def write_header(self) -> None:
        with self._lock:
            if self._stream is not None:
                self._stream.write('{"otherData": {},"traceEvents":[')
                self._stream.flush()

    def write_footer(self) -> None:
        with self._lock:
            if self._stream is not None:
                self._stream.write("]}")
                self._stream.flush()


def _now_us() -> int:
    return time.perf_counter_ns() // 1000


class InstrumentationTimer:
    """Times a scope from construction until stopped or the ``with`` block exits."""

    def __init__(self, name: str, instrumentor: Instrumentor | None = None) -> None:
        self.name = name
        self._instrumentor = instrumentor
        self._start = _now_us()
        self.stopped = False

    def stop(self) -> None:
        end = _now_us()
        target = self._instrumentor if self._instrumentor is not None else Instrumentor.get()
        thread_id = threading.get_ident() & 0xFFFFFFFF
        target.write_profile(ProfileResult(self.name, self._start, end, thread_id))
        self.stopped = True

    def __enter__(self) -> InstrumentationTimer:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if not self.stopped:
            self.stop()


def profile_scope(name: str) -> InstrumentationTimer:
    """Return a timer for use in a ``with`` block."""
    return InstrumentationTimer(name)


def profile_function(func: F) -> F:
    """Decorate ``func`` so each call is recorded under its qualified name."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        with InstrumentationTimer(func.__qualname__):
            return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]