"""Background evaluation workers and the bridge back into the UI queue.

Requests go to worker threads over an unbounded queue and every request
yields exactly one response on a second unbounded queue. A forwarder thread
turns responses into ``data`` messages for the single UI message queue.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from queue import SimpleQueue

from .errors import WorkerChannelClosed
from .messages import Message
from .path import BrowserPath
from .path_data import PathData

logger = logging.getLogger(__name__)

NIX_VALUE_KINDS = frozenset(
    {
        "thunk",
        "int",
        "float",
        "bool",
        "string",
        "path",
        "null",
        "attrs",
        "list",
        "function",
        "external",
        "error",
    }
)

_STOP = object()


@dataclass(frozen=True)
class NixValue:
    """Shape of one evaluated node as reported by the evaluator.

    ``value`` holds the scalar for scalar kinds, the ordered key names for
    ``attrs``, the length for ``list``, and the message for ``error``.
    """

    kind: str
    value: object = None

    def __post_init__(self) -> None:
        if self.kind not in NIX_VALUE_KINDS:
            raise ValueError(f"unknown nix value kind: {self.kind!r}")

    @classmethod
    def error(cls, message: str) -> NixValue:
        return cls("error", message)

    @classmethod
    def attrs(cls, names: list[str]) -> NixValue:
        return cls("attrs", tuple(names))

    @classmethod
    def list_of_length(cls, length: int) -> NixValue:
        return cls("list", int(length))


@dataclass(frozen=True)
class EvaluationRequest:
    path: BrowserPath
    root_expr: str

    @property
    def expr(self) -> str:
        """Display form of the requested node, rooted at the startup expression."""
        selector = self.path.to_expr()
        if not selector:
            return self.root_expr
        return f"({self.root_expr}).{selector}"


@dataclass(frozen=True)
class EvaluationResponse:
    path: BrowserPath
    value: NixValue


Evaluate = Callable[[EvaluationRequest], NixValue]


class WorkerHost:
    """Pool of evaluation threads with unbounded request/response queues."""

    def __init__(self, root_expr: str, evaluate: Evaluate, num_workers: int = 1) -> None:
        self.root_expr = root_expr
        self._evaluate = evaluate
        self._requests: SimpleQueue[object] = SimpleQueue()
        self._responses: SimpleQueue[object] = SimpleQueue()
        self._lock = threading.Lock()
        self._closed = False
        worker_count = max(1, num_workers)
        self._live_workers = worker_count
        self._threads = [
            threading.Thread(
                target=self._worker,
                name=f"nix-inspect-eval-{idx}",
                daemon=True,
            )
            for idx in range(worker_count)
        ]
        for thread in self._threads:
            thread.start()

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    def _worker(self) -> None:
        try:
            while True:
                item = self._requests.get()
                if item is _STOP:
                    return
                assert isinstance(item, EvaluationRequest)
                try:
                    value = self._evaluate(item)
                except Exception as exc:
                    logger.exception("evaluation of %s failed", item.expr)
                    value = NixValue.error(str(exc) or type(exc).__name__)
                self._responses.put(EvaluationResponse(path=item.path, value=value))
        finally:
            with self._lock:
                self._live_workers -= 1
                last_worker = self._live_workers == 0
            if last_worker:
                self._responses.put(_STOP)

    def request(self, path: BrowserPath) -> None:
        """Queue evaluation of ``path``; never blocks."""
        with self._lock:
            if self._closed:
                logger.debug("dropping request for %s: worker host closed", path)
                return
            self._requests.put(EvaluationRequest(path=path, root_expr=self.root_expr))

    def recv(self, timeout: float | None = None) -> EvaluationResponse:
        """Block for the next response.

        Raises ``WorkerChannelClosed`` once every worker has exited and all of
        their responses were consumed, and on every call after that.
        ``queue.Empty`` is raised when ``timeout`` elapses first.
        """
        item = self._responses.get(timeout=timeout)
        if item is _STOP:
            self._responses.put(_STOP)
            raise WorkerChannelClosed("evaluation workers have stopped")
        assert isinstance(item, EvaluationResponse)
        return item

    def close(self) -> None:
        """Stop the workers after the requests already queued."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            for _ in self._threads:
                self._requests.put(_STOP)

    def join(self, timeout: float | None = None) -> None:
        for thread in self._threads:
            thread.join(timeout)


class ResponseForwarder:
    """Adapter thread moving worker responses into the UI message queue."""

    def __init__(self, host: WorkerHost, post: Callable[[Message], None]) -> None:
        self._host = host
        self._post = post
        self._thread = threading.Thread(
            target=self.run,
            name="nix-inspect-forwarder",
            daemon=True,
        )

    def start(self) -> None:
        self._thread.start()

    def join(self, timeout: float | None = None) -> None:
        self._thread.join(timeout)

    def is_alive(self) -> bool:
        return self._thread.is_alive()

    def run(self) -> None:
        while True:
            try:
                response = self._host.recv()
            except WorkerChannelClosed:
                logger.warning("evaluation channel closed; no further results will arrive")
                return
            self._post(Message.data_for(response.path, PathData.from_value(response.value)))


__all__ = [
    "EvaluationRequest",
    "EvaluationResponse",
    "NIX_VALUE_KINDS",
    "NixValue",
    "ResponseForwarder",
    "WorkerHost",
]
