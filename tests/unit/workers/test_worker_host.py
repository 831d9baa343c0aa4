"""Tests for the background evaluation pool and the response forwarder."""

from __future__ import annotations

import queue
import threading
import time
import unittest

from nixinspect import messages as msg
from nixinspect.errors import WorkerChannelClosed
from nixinspect.path import ROOT, BrowserPath
from nixinspect.workers import EvaluationRequest, NixValue, ResponseForwarder, WorkerHost


def _collect(host: WorkerHost, count: int, timeout_seconds: float = 2.0) -> dict[BrowserPath, NixValue]:
    deadline = time.monotonic() + timeout_seconds
    out: dict[BrowserPath, NixValue] = {}
    while len(out) < count and time.monotonic() < deadline:
        try:
            response = host.recv(timeout=0.05)
        except queue.Empty:
            continue
        out[response.path] = response.value
    return out


class WorkerHostTests(unittest.TestCase):
    def test_every_request_yields_one_response(self) -> None:
        def evaluate(request: EvaluationRequest) -> NixValue:
            return NixValue("string", request.path.to_expr())

        host = WorkerHost("{ }", evaluate, num_workers=3)
        try:
            paths = [ROOT.child(str(idx)) for idx in range(10)]
            for path in paths:
                host.request(path)
            results = _collect(host, len(paths))
        finally:
            host.close()

        self.assertEqual(set(results), set(paths))
        self.assertEqual(results[ROOT.child("4")], NixValue("string", "4"))

    def test_evaluator_exception_becomes_error_for_that_path_only(self) -> None:
        def evaluate(request: EvaluationRequest) -> NixValue:
            if request.path.last == "bad":
                raise RuntimeError("kaboom")
            return NixValue("int", 1)

        host = WorkerHost("{ }", evaluate)
        try:
            host.request(ROOT.child("bad"))
            host.request(ROOT.child("good"))
            results = _collect(host, 2)
        finally:
            host.close()

        self.assertEqual(results[ROOT.child("bad")], NixValue.error("kaboom"))
        self.assertEqual(results[ROOT.child("good")], NixValue("int", 1))

    def test_request_does_not_block_on_a_busy_worker(self) -> None:
        release = threading.Event()

        def evaluate(_request: EvaluationRequest) -> NixValue:
            release.wait(timeout=2.0)
            return NixValue("null")

        host = WorkerHost("{ }", evaluate)
        try:
            started = time.monotonic()
            for idx in range(50):
                host.request(ROOT.child(str(idx)))
            self.assertLess(time.monotonic() - started, 0.5)
        finally:
            release.set()
            host.close()

    def test_recv_raises_after_close_once_queued_work_drains(self) -> None:
        host = WorkerHost("{ }", lambda _request: NixValue("null"))
        host.request(ROOT)
        host.close()
        self.assertEqual(host.recv(timeout=2.0).path, ROOT)
        with self.assertRaises(WorkerChannelClosed):
            host.recv(timeout=2.0)
        with self.assertRaises(WorkerChannelClosed):
            host.recv(timeout=2.0)
        self.assertTrue(host.closed)

    def test_requests_after_close_are_dropped(self) -> None:
        calls: list[BrowserPath] = []

        def evaluate(request: EvaluationRequest) -> NixValue:
            calls.append(request.path)
            return NixValue("null")

        host = WorkerHost("{ }", evaluate)
        host.close()
        host.request(ROOT)
        host.join(2.0)
        self.assertEqual(calls, [])


class EvaluationRequestTests(unittest.TestCase):
    def test_expr_is_rooted_at_startup_expression(self) -> None:
        request = EvaluationRequest(path=BrowserPath.rooted('hosts."a.b"'), root_expr="import ./x.nix")
        self.assertEqual(request.expr, '(import ./x.nix).hosts."a.b"')
        self.assertEqual(EvaluationRequest(path=ROOT, root_expr="x").expr, "x")


class ResponseForwarderTests(unittest.TestCase):
    def test_forwards_responses_as_data_messages_and_exits_on_close(self) -> None:
        posted: queue.Queue = queue.Queue()
        host = WorkerHost("{ }", lambda _request: NixValue.attrs(["a", "b"]))
        forwarder = ResponseForwarder(host, posted.put)
        forwarder.start()

        host.request(ROOT)
        message = posted.get(timeout=2.0)
        host.close()
        forwarder.join(2.0)

        self.assertEqual(message.kind, msg.DATA)
        self.assertEqual(message.path, ROOT)
        self.assertEqual(message.data.list_data.items, ["a", "b"])
        self.assertFalse(forwarder.is_alive())


if __name__ == "__main__":
    unittest.main()
