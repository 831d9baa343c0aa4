"""Interactive UI loop.

Wires the evaluation workers, the response forwarder, the key reader and the
terminal around one ``Model``. Every thread talks to the UI thread through a
single message queue; only the UI thread mutates the model.
"""

from __future__ import annotations

import logging
import os
import queue
import shutil
import sys
from collections.abc import Callable
from pathlib import Path

from . import messages as msg
from .errors import BrowserError
from .evaluator import NixEvaluator
from .input import KeyReader
from .locking import ReadWriteLock
from .messages import Message
from .model import Model
from .render import ViewData, render_frame
from .terminal import TerminalController
from .update import UpdateContext
from .workers import Evaluate, ResponseForwarder, WorkerHost

logger = logging.getLogger(__name__)

SHUTDOWN_JOIN_SECONDS = 0.5


def apply_message(context: UpdateContext, view: ViewData, model: Model, message: Message) -> None:
    """Apply ``message`` and every message it chains to.

    A ``BrowserError`` ends the chain; its text becomes the status message.
    """
    if message.kind == msg.TERM_EVENT and message.key != "RESIZE":
        model.status_message = ""
    pending: Message | None = message
    while pending is not None:
        logger.debug("applying %r", pending)
        try:
            pending = context.update(view, model, pending)
        except BrowserError as exc:
            logger.warning("%s", exc)
            model.status_message = str(exc)
            return


class BrowserSession:
    """Shared state of one run: the model, its lock and the message queue."""

    def __init__(
        self,
        model: Model,
        context: UpdateContext,
        messages: queue.Queue[Message] | None = None,
        lock: ReadWriteLock | None = None,
    ) -> None:
        self.model = model
        self.context = context
        self.messages: queue.Queue[Message] = messages if messages is not None else queue.Queue()
        self.lock = lock or ReadWriteLock()
        self.view = ViewData()

    def post(self, message: Message) -> None:
        self.messages.put(message)

    def render(self, width: int, height: int) -> str:
        with self.lock.read():
            frame, self.view = render_frame(self.model, width, height)
        return frame

    def process(self, message: Message) -> None:
        """Apply one received message under the write lock."""
        with self.lock.write():
            apply_message(self.context, self.view, self.model, message)

    @property
    def running(self) -> bool:
        with self.lock.read():
            return self.model.running


def run_browser(
    model: Model,
    root_expr: str,
    *,
    config_path: Path | None = None,
    evaluate: Evaluate | None = None,
    num_workers: int = 1,
    eval_timeout: float | None = None,
    terminal_size: Callable[[], os.terminal_size] | None = None,
) -> None:
    """Run the interactive browser until the user quits."""
    stdin_fd = sys.stdin.fileno()
    stdout_fd = sys.stdout.fileno()
    terminal = TerminalController(stdin_fd, stdout_fd)
    get_size = terminal_size or (lambda: shutil.get_terminal_size((80, 24)))

    if evaluate is None:
        evaluate = NixEvaluator() if eval_timeout is None else NixEvaluator(timeout_seconds=eval_timeout)
    host = WorkerHost(root_expr, evaluate, num_workers)
    session = BrowserSession(model, UpdateContext(host.request, config_path))
    forwarder = ResponseForwarder(host, session.post)
    keys = KeyReader(stdin_fd, session.post, terminal_size=get_size)
    logger.info("browsing %s with %d worker(s)", root_expr, num_workers)

    forwarder.start()
    try:
        with terminal.raw_mode():
            keys.start()
            while session.running:
                size = get_size()
                terminal.write(session.render(size.columns, size.lines))
                session.process(session.messages.get())
    finally:
        keys.stop()
        keys.join(SHUTDOWN_JOIN_SECONDS)
        host.close()
        host.join(SHUTDOWN_JOIN_SECONDS)
        logger.info("session ended")


__all__ = ["BrowserSession", "apply_message", "run_browser"]
