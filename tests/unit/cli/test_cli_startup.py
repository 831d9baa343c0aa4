"""CLI argument and startup-failure behavior tests.

Verifies how ``nixinspect.cli.main`` resolves the root expression and config
before handing over to the browser, and how startup errors exit.
"""

from __future__ import annotations

import io
import sys
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from nixinspect import cli
from nixinspect.errors import StartupError
from nixinspect.model import Model


class CliStartupTests(unittest.TestCase):
    def _config_path(self, tmp: str) -> Path:
        config_path = Path(tmp) / "config.json"
        config_path.write_text('{"bookmarks": [{"display": "h", "path": "nixosConfigurations.h"}]}', encoding="utf-8")
        return config_path

    def test_expression_argument_is_passed_to_browser(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = self._config_path(tmp)
            with mock.patch("nixinspect.cli.initialize_logging", return_value=Path(tmp) / "log"), mock.patch(
                "nixinspect.config.CONFIG_PATH", config_path
            ), mock.patch("nixinspect.cli.run_browser") as run_browser:
                cli.main(["-e", "{ a = 1; }", "-p", "/ignored"])

        run_browser.assert_called_once()
        model, root_expr = run_browser.call_args.args
        self.assertIsInstance(model, Model)
        self.assertEqual(root_expr, "{ a = 1; }")
        self.assertEqual([b.display for b in model.config.bookmarks], ["h"])
        self.assertEqual(run_browser.call_args.kwargs["config_path"], config_path)

    def test_worker_settings_come_from_environment(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = self._config_path(tmp)
            env = {"NIX_INSPECT_WORKERS": "3", "NIX_INSPECT_EVAL_TIMEOUT": "9"}
            with mock.patch("nixinspect.cli.initialize_logging", return_value=Path(tmp) / "log"), mock.patch(
                "nixinspect.config.CONFIG_PATH", config_path
            ), mock.patch.dict("os.environ", env), mock.patch("nixinspect.cli.run_browser") as run_browser:
                cli.main(["--expr", "{ }"])

        self.assertEqual(run_browser.call_args.kwargs["num_workers"], 3)
        self.assertEqual(run_browser.call_args.kwargs["eval_timeout"], 9.0)

    def test_startup_error_exits_with_status_one(self) -> None:
        stderr = io.StringIO()
        with mock.patch(
            "nixinspect.cli.initialize_logging", side_effect=StartupError("could not open log file")
        ), mock.patch.object(sys, "stderr", stderr), mock.patch("nixinspect.cli.run_browser") as run_browser:
            with self.assertRaises(SystemExit) as raised:
                cli.main([])

        self.assertEqual(raised.exception.code, 1)
        self.assertIn("could not open log file", stderr.getvalue())
        run_browser.assert_not_called()

    def test_terminal_failure_inside_browser_exits_with_status_one(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = self._config_path(tmp)
            with mock.patch("nixinspect.cli.initialize_logging", return_value=Path(tmp) / "log"), mock.patch(
                "nixinspect.config.CONFIG_PATH", config_path
            ), mock.patch(
                "nixinspect.cli.run_browser", side_effect=StartupError("stdin is not a terminal")
            ), mock.patch.object(sys, "stderr", io.StringIO()):
                with self.assertRaises(SystemExit) as raised:
                    cli.main(["-e", "{ }"])
        self.assertEqual(raised.exception.code, 1)


if __name__ == "__main__":
    unittest.main()
