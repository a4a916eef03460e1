import contextlib
import io
import logging
import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

from remote_ssh.cli import build_parser, resolve_config, run_cli
from remote_ssh.config import SSHConfig
from remote_ssh.errors import DialError
from remote_ssh.ssh import CommandResult
from remote_ssh.utils.logging import cli_level, get_logger


def fake_connect(client: MagicMock) -> MagicMock:
    connect = MagicMock()
    connect.return_value.__enter__.return_value = client
    return connect


class ResolveConfigTests(unittest.TestCase):
    def test_target_with_overrides(self) -> None:
        args = build_parser().parse_args(
            ["--key-file", "/keys/deploy", "exec", "deploy@box:2200", "uptime"]
        )
        config = resolve_config(args)
        self.assertEqual(
            config, SSHConfig(host="box", port="2200", username="deploy", key_file="/keys/deploy")
        )

    def test_dash_target_uses_config_loader(self) -> None:
        args = build_parser().parse_args(["--password", "pw", "cat", "-", "/etc/hostname"])
        with patch("remote_ssh.cli.load_config", return_value=SSHConfig(host="box")) as loader:
            config = resolve_config(args)
        loader.assert_called_once_with(None)
        self.assertEqual(config.password, "pw")


class RunCliTests(unittest.TestCase):
    def test_exec_prints_output_and_returns_exit_status(self) -> None:
        client = MagicMock()
        client.run.return_value = CommandResult("ls /srv", "app\n", "", 0)
        stdout = io.StringIO()
        with patch("remote_ssh.cli.connect", fake_connect(client)), contextlib.redirect_stdout(stdout):
            code = run_cli(["exec", "deploy@box", "ls", "/srv"])
        self.assertEqual(code, 0)
        self.assertEqual(stdout.getvalue(), "app\n")
        client.run.assert_called_once_with("ls /srv")

    def test_exec_stdout_only_and_quiet(self) -> None:
        client = MagicMock()
        quiet = client.with_no_log.return_value
        narrowed = quiet.with_stdout_only.return_value
        narrowed.run.return_value = CommandResult("false", "", "", 1)
        connect = fake_connect(client)
        with patch("remote_ssh.cli.connect", connect), contextlib.redirect_stdout(io.StringIO()):
            code = run_cli(["--quiet", "exec", "--stdout-only", "deploy@box", "false"])
        self.assertEqual(code, 1)
        narrowed.run.assert_called_once_with("false")
        self.assertEqual(connect.call_args.kwargs["logger"].level, logging.WARNING)

    def test_put_uploads_file(self) -> None:
        client = MagicMock()
        with tempfile.TemporaryDirectory() as tmp:
            local = Path(tmp) / "app.env"
            local.write_bytes(b"KEY=value\n")
            with patch("remote_ssh.cli.connect", fake_connect(client)), contextlib.redirect_stderr(io.StringIO()):
                code = run_cli(["put", "deploy@box", str(local), "/srv/app.env"])
        self.assertEqual(code, 0)
        client.create_file.assert_called_once_with("/srv/app.env", b"KEY=value\n")

    def test_parse_error_returns_one(self) -> None:
        stderr = io.StringIO()
        with contextlib.redirect_stderr(stderr):
            code = run_cli(["exec", "box", "uptime"])
        self.assertEqual(code, 1)
        self.assertIn("missing username", stderr.getvalue())

    def test_connect_error_returns_one(self) -> None:
        connect = MagicMock(side_effect=DialError("dial", address="box:22"))
        stderr = io.StringIO()
        with patch("remote_ssh.cli.connect", connect), contextlib.redirect_stderr(stderr):
            code = run_cli(["exec", "deploy:pw@box", "uptime"])
        self.assertEqual(code, 1)
        self.assertIn("box:22", stderr.getvalue())


class LoggerLevelTests(unittest.TestCase):
    def test_cli_level(self) -> None:
        self.assertEqual(cli_level(), logging.INFO)
        self.assertEqual(cli_level(verbose=True), logging.DEBUG)
        self.assertEqual(cli_level(quiet=True), logging.WARNING)
        self.assertEqual(cli_level(verbose=True, quiet=True), logging.WARNING)

    def test_get_logger_applies_flags(self) -> None:
        log = get_logger("tests.remote_ssh.cli", verbose=True)
        self.assertEqual(log.level, logging.DEBUG)
        log = get_logger("tests.remote_ssh.cli", quiet=True)
        self.assertEqual(log.level, logging.WARNING)


if __name__ == "__main__":
    unittest.main()
