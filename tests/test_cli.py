import io
import json
import os
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path
from unittest.mock import patch

from archdemo.cli import main
from archdemo.errors import NetworkError

from fakes import FakeDeploymentClient, network_error


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        root = Path(self._tmp.name)
        self.config_dir = root / "config"
        self.config_dir.mkdir()
        self.base = root / "arch"
        (self.config_dir / "config.toml").write_text(
            f'[project]\ndirectory = "{self.base.as_posix()}"\n'
        )
        self._env = patch.dict(os.environ, {"ARCH_DEMO_CONFIG_DIR": str(self.config_dir)})
        self._env.start()

    def tearDown(self) -> None:
        self._env.stop()
        self._tmp.cleanup()

    def _main(self, argv: list[str]) -> tuple[int, str, str]:
        out = io.StringIO()
        err = io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            rc = main(argv)
        return rc, out.getvalue(), err.getvalue()

    def test_start_provisions_and_persists_keys(self) -> None:
        fake = FakeDeploymentClient()
        with patch("archdemo.cli.build_client", return_value=fake) as build:
            rc, out, _ = self._main(["start", "--rpc-url", "http://node:9002", "--retries", "5"])
        self.assertEqual(rc, 0)
        self.assertEqual(build.call_args.args[0].attempts, 5)
        keys = json.loads((self.config_dir / "keys.json").read_text())
        self.assertEqual(sorted(keys), ["graffiti", "graffiti_wall_state"])
        self.assertIn(keys["graffiti"]["public_key"], out)
        self.assertIn("http://node:9002", out)

    def test_start_reports_network_failure(self) -> None:
        fake = FakeDeploymentClient(failures={"create_account": [network_error("node unreachable")]})
        with patch("archdemo.cli.build_client", return_value=fake):
            rc, _, err = self._main(["start"])
        self.assertEqual(rc, 1)
        self.assertIn("node unreachable", err)

    def test_start_without_project_directory(self) -> None:
        (self.config_dir / "config.toml").write_text("")
        with patch("archdemo.cli.build_client", return_value=FakeDeploymentClient()):
            rc, _, err = self._main(["start"])
        self.assertEqual(rc, 1)
        self.assertIn("project.directory", err)

    def test_missing_explicit_config(self) -> None:
        rc, _, err = self._main(["status", "--config", str(self.config_dir / "nope.toml")])
        self.assertEqual(rc, 1)
        self.assertIn("Config file not found", err)

    def test_status_and_keys_after_start(self) -> None:
        with patch("archdemo.cli.build_client", return_value=FakeDeploymentClient()):
            self.assertEqual(self._main(["start"])[0], 0)
        rc, out, _ = self._main(["status"])
        self.assertEqual(rc, 0)
        self.assertIn("present", out)
        self.assertIn("graffiti", out)

        rc, out, _ = self._main(["keys", "list"])
        self.assertEqual(rc, 0)
        self.assertIn("graffiti_wall_state", out)

        rc, out, _ = self._main(["keys", "show", "graffiti"])
        self.assertEqual(rc, 0)

    def test_keys_show_missing_name(self) -> None:
        rc, _, err = self._main(["keys", "show", "missing"])
        self.assertEqual(rc, 1)
        self.assertIn("missing", err)

    def test_invalid_retry_count(self) -> None:
        rc, _, err = self._main(["start", "--retries", "0"])
        self.assertEqual(rc, 1)
        self.assertIn("retry attempts", err)


if __name__ == "__main__":
    unittest.main()
