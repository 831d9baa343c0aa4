"""Node evaluation through the ``nix`` command-line tool.

Each request runs one ``nix eval --json`` over a small probe expression that
walks from the root expression to the node and reports its type together with
its keys, length, or scalar value. Failures become error values.
"""

from __future__ import annotations

import json
import logging
import subprocess

from .workers import EvaluationRequest, NixValue

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 120.0
NIX_EXPERIMENTAL_FEATURES = "nix-command flakes"

_TYPE_TO_KIND = {
    "set": "attrs",
    "list": "list",
    "lambda": "function",
    "int": "int",
    "float": "float",
    "bool": "bool",
    "string": "string",
    "path": "path",
    "null": "null",
}

_PROBE_TEMPLATE = """\
let
  root = {root};
  select = v: seg:
    if builtins.isList v
    then builtins.elemAt v (builtins.fromJSON seg)
    else builtins.getAttr seg v;
  v = builtins.foldl' select root {segments};
  t = builtins.typeOf v;
in
  if t == "set" then {{ type = t; value = builtins.attrNames v; }}
  else if t == "list" then {{ type = t; value = builtins.length v; }}
  else if t == "lambda" then {{ type = t; }}
  else if t == "path" then {{ type = t; value = toString v; }}
  else {{ type = t; value = v; }}
"""


def nix_string_literal(text: str) -> str:
    """Quote ``text`` as a Nix string literal with no interpolation."""
    escaped = text.replace("\\", "\\\\").replace('"', '\\"').replace("$", "\\$")
    escaped = escaped.replace("\n", "\\n").replace("\r", "\\r").replace("\t", "\\t")
    return f'"{escaped}"'


def build_probe(request: EvaluationRequest) -> str:
    segments = list(request.path.segments)
    if segments and segments[0] == "":
        segments = segments[1:]
    segment_list = "[ " + " ".join(nix_string_literal(s) for s in segments) + " ]"
    return _PROBE_TEMPLATE.format(root=f"({request.root_expr})", segments=segment_list)


def parse_probe_output(stdout: str) -> NixValue:
    """Decode the JSON printed by ``nix eval --json`` for one probe."""
    try:
        payload = json.loads(stdout)
    except json.JSONDecodeError as exc:
        return NixValue.error(f"unreadable evaluator output: {exc}")
    if not isinstance(payload, dict):
        return NixValue.error("unexpected evaluator output")

    kind = _TYPE_TO_KIND.get(str(payload.get("type")))
    if kind is None:
        return NixValue("external")
    value = payload.get("value")
    if kind == "attrs":
        return NixValue.attrs([str(name) for name in value or []])
    if kind == "list":
        return NixValue.list_of_length(int(value or 0))
    if kind == "function":
        return NixValue("function")
    if kind == "null":
        return NixValue("null")
    return NixValue(kind, value)


def error_summary(stderr: str) -> str:
    """Pick the most specific ``error:`` line out of nix's trace output."""
    lines = [line.strip() for line in stderr.splitlines() if line.strip()]
    error_lines = [line for line in lines if line.startswith("error:")]
    if error_lines:
        return error_lines[-1]
    if lines:
        return lines[-1]
    return "evaluation failed"


class NixEvaluator:
    """Callable evaluator used by ``WorkerHost``."""

    def __init__(
        self,
        nix_binary: str = "nix",
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.nix_binary = nix_binary
        self.timeout_seconds = timeout_seconds

    def command(self, request: EvaluationRequest) -> list[str]:
        return [
            self.nix_binary,
            "--extra-experimental-features",
            NIX_EXPERIMENTAL_FEATURES,
            "eval",
            "--impure",
            "--json",
            "--expr",
            build_probe(request),
        ]

    def __call__(self, request: EvaluationRequest) -> NixValue:
        logger.debug("evaluating %s", request.expr)
        try:
            proc = subprocess.run(
                self.command(request),
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                stdin=subprocess.DEVNULL,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=False,
                timeout=self.timeout_seconds,
            )
        except FileNotFoundError:
            return NixValue.error(f"{self.nix_binary}: command not found")
        except subprocess.TimeoutExpired:
            return NixValue.error(f"evaluation timed out after {self.timeout_seconds:g}s")

        if proc.returncode != 0:
            message = error_summary(proc.stderr)
            logger.info("evaluation of %s failed: %s", request.expr, message)
            return NixValue.error(message)
        return parse_probe_output(proc.stdout)


__all__ = [
    "DEFAULT_TIMEOUT_SECONDS",
    "NixEvaluator",
    "build_probe",
    "error_summary",
    "nix_string_literal",
    "parse_probe_output",
]
