#!/usr/bin/env python3
# glyphgen/dispatcher.py
"""
Background render dispatcher.

One long-lived daemon thread per engine kind, each fed by a depth-1 mailbox:
a newer request replaces an unstarted older one, which is then never run.
A request that is already running finishes; its result still carries its own
sequence number, so consumers keep only the newest (see ResultTracker).

Results arrive on a queue in completion order. Failures, expected or not,
become RenderFailure results; nothing raised by an engine reaches the worker
loop.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from glyphgen.capabilities import TerminalCapabilities
from glyphgen.errors import ErrorKind, RenderError
from glyphgen.rendering.cells import FrameFrag
from glyphgen.rendering.renderer import EngineKind, Payload, RenderConfig, engine_for, render, validate

log = logging.getLogger(__name__)

__all__ = [
    "RenderRequest",
    "RenderResult",
    "RenderSuccess",
    "RenderFailure",
    "Mailbox",
    "RenderDispatcher",
    "ResultTracker",
]


@dataclass(frozen=True)
class RenderRequest:
    engine: EngineKind
    payload: Payload
    config: RenderConfig
    sequence: int


@dataclass(frozen=True)
class RenderResult:
    engine: EngineKind
    sequence: int

    @property
    def ok(self) -> bool:
        return isinstance(self, RenderSuccess)


@dataclass(frozen=True)
class RenderSuccess(RenderResult):
    output: str
    elapsed_ms: float
    fragments: FrameFrag


@dataclass(frozen=True)
class RenderFailure(RenderResult):
    kind: ErrorKind
    message: str


class Mailbox:
    """Single-slot hand-off between the submitting side and one worker."""

    def __init__(self):
        self._cond = threading.Condition()
        self._slot: Optional[RenderRequest] = None
        self._closed = False

    def put(self, request: RenderRequest) -> Optional[RenderRequest]:
        """
        Store request unless a newer one is already waiting.

        Returns whichever request lost: the displaced older one, or request
        itself when it arrived after a newer one. Raises RuntimeError once closed.
        """
        with self._cond:
            if self._closed:
                raise RuntimeError("render dispatcher is shut down")
            current = self._slot
            if current is not None and current.sequence > request.sequence:
                return request
            self._slot = request
            self._cond.notify()
            return current

    def discard_older(self, sequence: int) -> Optional[RenderRequest]:
        """Drop the waiting request if it is older than sequence."""
        with self._cond:
            if self._slot is None or self._slot.sequence >= sequence:
                return None
            displaced, self._slot = self._slot, None
            return displaced

    def take(self) -> Optional[RenderRequest]:
        """Block until a request is available. None once closed and empty."""
        with self._cond:
            while self._slot is None and not self._closed:
                self._cond.wait()
            request, self._slot = self._slot, None
            return request

    def close(self, abandon_pending: bool = True) -> Optional[RenderRequest]:
        with self._cond:
            self._closed = True
            dropped = None
            if abandon_pending:
                dropped, self._slot = self._slot, None
            self._cond.notify_all()
            return dropped

    @property
    def pending(self) -> bool:
        with self._cond:
            return self._slot is not None


class RenderDispatcher:
    """
    Owns the engine workers.

    submit() never blocks on rendering. Results are read with poll_results()
    or get_result(), or pushed to on_result (called on the worker thread).
    """

    def __init__(
        self,
        capabilities: Optional[TerminalCapabilities] = None,
        on_result: Optional[Callable[[RenderResult], None]] = None,
        autostart: bool = True,
    ):
        self.capabilities = capabilities
        self.on_result = on_result
        self._lock = threading.Lock()
        self._results: "queue.Queue[RenderResult]" = queue.Queue()
        self._sequences: Dict[EngineKind, int] = {kind: 0 for kind in EngineKind}
        self._mailboxes: Dict[EngineKind, Mailbox] = {kind: Mailbox() for kind in EngineKind}
        self._threads: Dict[EngineKind, threading.Thread] = {
            kind: threading.Thread(
                target=self._worker, args=(kind,), name=f"glyphgen-{kind.value}", daemon=True
            )
            for kind in EngineKind
        }
        self._started = False
        self._closed = False
        if autostart:
            self.start()

    # -------- lifecycle --------

    def start(self) -> None:
        with self._lock:
            if self._started or self._closed:
                return
            self._started = True
        for thread in self._threads.values():
            thread.start()
        log.debug("render dispatcher started (%d workers)", len(self._threads))

    def shutdown(self, wait: bool = True, abandon_pending: bool = True, timeout: Optional[float] = None) -> None:
        """
        Stop accepting work and stop the workers. Safe to call more than once.

        With wait, joins the workers; timeout bounds the whole join, after
        which a worker still inside an engine is left to finish as a daemon.
        """
        with self._lock:
            first = not self._closed
            self._closed = True
        if first:
            for kind, mailbox in self._mailboxes.items():
                dropped = mailbox.close(abandon_pending)
                if dropped is not None:
                    log.debug("abandoned %s request #%d at shutdown", kind.value, dropped.sequence)
        if wait and self._started:
            deadline = None if timeout is None else time.monotonic() + timeout
            for kind, thread in self._threads.items():
                remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
                thread.join(remaining)
                if thread.is_alive():
                    log.warning("%s worker still busy after shutdown timeout", kind.value)
        if first:
            log.debug("render dispatcher stopped")

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self) -> "RenderDispatcher":
        return self

    def __exit__(self, *exc) -> None:
        self.shutdown()

    # -------- submitting --------

    def submit(self, payload: Payload, config: RenderConfig) -> RenderRequest:
        """
        Queue a render and return the request with its sequence number.

        A request that fails validation is answered at once with a
        RenderFailure on the result channel; it is never queued and it
        supersedes any older request still waiting for that engine. Requests
        racing in from several threads settle on the highest sequence.
        Raises InvalidConfig when config is not a render config at all and
        RuntimeError after shutdown.
        """
        kind = engine_for(config)
        with self._lock:
            if self._closed:
                raise RuntimeError("render dispatcher is shut down")
            self._sequences[kind] += 1
            request = RenderRequest(kind, payload, config, self._sequences[kind])

        mailbox = self._mailboxes[kind]
        try:
            validate(payload, config, self.capabilities)
        except RenderError as exc:
            dropped = mailbox.discard_older(request.sequence)
            if dropped is not None:
                log.debug("dropped superseded %s request #%d", kind.value, dropped.sequence)
            log.warning("%s request #%d rejected: %s", kind.value, request.sequence, exc.message)
            self._post(RenderFailure(kind, request.sequence, exc.kind, exc.message))
            return request

        dropped = mailbox.put(request)
        if dropped is not None:
            log.debug("dropped superseded %s request #%d", kind.value, dropped.sequence)
        return request

    # -------- results --------

    def poll_results(self) -> List[RenderResult]:
        """Drain every result delivered so far without blocking."""
        out: List[RenderResult] = []
        while True:
            try:
                out.append(self._results.get_nowait())
            except queue.Empty:
                break
        return out

    def get_result(self, timeout: Optional[float] = None) -> Optional[RenderResult]:
        try:
            return self._results.get(timeout=timeout)
        except queue.Empty:
            return None

    def latest_sequence(self, engine: EngineKind) -> int:
        with self._lock:
            return self._sequences[engine]

    def is_current(self, result: RenderResult) -> bool:
        return result.sequence == self.latest_sequence(result.engine)

    def _post(self, result: RenderResult) -> None:
        self._results.put(result)
        if self.on_result is not None:
            try:
                self.on_result(result)
            except Exception:
                log.exception("result callback failed")

    # -------- worker --------

    def _worker(self, kind: EngineKind) -> None:
        mailbox = self._mailboxes[kind]
        while True:
            request = mailbox.take()
            if request is None:
                break
            self._post(self._execute(request))

    def _execute(self, request: RenderRequest) -> RenderResult:
        t0 = time.perf_counter()
        try:
            rendered = render(request.payload, request.config, self.capabilities)
        except RenderError as exc:
            log.warning("%s request #%d failed: %s", request.engine.value, request.sequence, exc.message)
            return RenderFailure(request.engine, request.sequence, exc.kind, exc.message)
        except Exception as exc:
            log.exception("%s request #%d crashed", request.engine.value, request.sequence)
            return RenderFailure(
                request.engine, request.sequence, ErrorKind.INTERNAL_FAILURE, f"{type(exc).__name__}: {exc}"
            )
        elapsed_ms = (time.perf_counter() - t0) * 1000.0
        return RenderSuccess(request.engine, request.sequence, rendered.output, elapsed_ms, rendered.fragments)


class ResultTracker:
    """Consumer-side filter: keeps only results newer than any already accepted per engine."""

    def __init__(self):
        self._lock = threading.Lock()
        self._accepted: Dict[EngineKind, int] = {}

    def accept(self, result: RenderResult) -> bool:
        with self._lock:
            if result.sequence <= self._accepted.get(result.engine, 0):
                return False
            self._accepted[result.engine] = result.sequence
            return True

    def last_accepted(self, engine: EngineKind) -> int:
        with self._lock:
            return self._accepted.get(engine, 0)
