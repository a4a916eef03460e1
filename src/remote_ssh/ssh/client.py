"""Authenticated SSH client built on Paramiko."""

from __future__ import annotations

import io
import logging
import time
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Optional

import paramiko

from ..config import SSHConfig
from ..errors import CommandExecutionError, DialError, SessionOpenError
from .sftp import RemoteFile, create_file, open_file
from .signer import load_signer

logger = logging.getLogger(__name__)

_RECV_BUFSIZE = 32768
_POLL_INTERVAL = 0.05

# Errors raised by Paramiko or the socket layer once a connection exists.
TRANSPORT_ERRORS = (paramiko.SSHException, OSError, EOFError)


@dataclass
class CommandResult:
    command: str
    output: str
    stderr: str
    exit_status: int
    elapsed: float = 0.0

    @property
    def ok(self) -> bool:
        return self.exit_status == 0


@dataclass(frozen=True)
class SSHClient:
    """High-level wrapper around a connected paramiko.SSHClient.

    Instances are immutable; the ``with_*`` builders return modified copies
    that share the same underlying connection.
    """

    connection: paramiko.SSHClient
    log: logging.Logger = field(default=logger, compare=False)
    log_input: bool = True
    log_output: bool = True
    stdout_only: bool = False

    def with_no_log_output(self) -> "SSHClient":
        return replace(self, log_output=False)

    def with_no_log_input(self) -> "SSHClient":
        return replace(self, log_input=False)

    def with_no_log(self) -> "SSHClient":
        return replace(self, log_input=False, log_output=False)

    def with_stdout_only(self) -> "SSHClient":
        return replace(self, stdout_only=True)

    def with_logger(self, log: logging.Logger) -> "SSHClient":
        return replace(self, log=log)

    @property
    def logging_enabled(self) -> bool:
        return self.log_input or self.log_output

    def __enter__(self) -> "SSHClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        self.close()

    def close(self) -> None:
        self.connection.close()

    def execute(self, command: str) -> str:
        """Run `command` remotely and return its output.

        A non-zero exit status is logged as a warning, not raised.
        """
        return self.run(command).output

    def run(self, command: str) -> CommandResult:
        """
        Execute a command on a fresh channel of the existing connection.

        Args:
            command: Shell command interpreted by the remote host.

        Returns:
            CommandResult with output, separate stderr (stdout-only mode)
            and exit status.

        Raises:
            SessionOpenError: the channel could not be opened.
            CommandExecutionError: the channel failed before the command
                reported an exit status.
        """
        started = time.monotonic()
        if self.log_input:
            self.log.debug("👉 ssh: %s", command)

        channel = self._open_channel(command)
        stdout_buf = io.BytesIO()
        stderr_buf = io.BytesIO()
        try:
            if not self.stdout_only:
                channel.set_combine_stderr(True)
            channel.exec_command(command)
            self._drain(channel, stdout_buf, stderr_buf)
            exit_status = channel.recv_exit_status()
        except TRANSPORT_ERRORS as exc:
            raise self._execution_error(command, exc, stderr_buf) from exc
        finally:
            self._close_channel(channel, command)

        if exit_status == -1:
            raise self._execution_error(
                command, "remote command exited without exit status", stderr_buf
            )

        result = CommandResult(
            command=command,
            output=_decode(stdout_buf),
            stderr=_decode(stderr_buf),
            exit_status=exit_status,
            elapsed=time.monotonic() - started,
        )
        if not result.ok and self.logging_enabled:
            message = f"⚠️ ssh: {command}: exited with status {exit_status}"
            if result.stderr.strip():
                message += "\n" + result.stderr.strip()
            self.log.warning(message)

        if self.log_output:
            duration = f"{result.elapsed:.3f}s"
            text = result.output.strip()
            if text:
                self.log.debug("👈 ssh: %s %s", text, duration)
            else:
                self.log.debug("👈 ssh: %s", duration)
        return result

    def open_file(self, path: str) -> RemoteFile:
        return open_file(self.connection, path, self.log, log_enabled=self.logging_enabled)

    def create_file(self, path: str, data: bytes) -> None:
        create_file(self.connection, path, data, self.log, log_enabled=self.logging_enabled)

    def _open_channel(self, command: str) -> paramiko.Channel:
        transport = self.connection.get_transport()
        if transport is None:
            raise SessionOpenError("ssh: open session: not connected", command=command)
        try:
            return transport.open_session()
        except TRANSPORT_ERRORS as exc:
            raise SessionOpenError("ssh: open session", command=command) from exc

    def _drain(
        self,
        channel: paramiko.Channel,
        stdout_buf: io.BytesIO,
        stderr_buf: io.BytesIO,
    ) -> None:
        # Read both streams as they arrive so a full stderr window cannot stall stdout.
        while True:
            progressed = False
            while channel.recv_ready():
                stdout_buf.write(channel.recv(_RECV_BUFSIZE))
                progressed = True
            while channel.recv_stderr_ready():
                stderr_buf.write(channel.recv_stderr(_RECV_BUFSIZE))
                progressed = True
            finished = channel.exit_status_ready() and (
                channel.eof_received or channel.closed
            )
            if finished and not channel.recv_ready() and not channel.recv_stderr_ready():
                return
            if not progressed:
                time.sleep(_POLL_INTERVAL)

    def _execution_error(
        self, command: str, cause: Any, stderr_buf: io.BytesIO
    ) -> CommandExecutionError:
        context: Dict[str, Any] = {
            "command": command,
            "error": str(cause) or type(cause).__name__,
        }
        if self.stdout_only:
            context["stderr"] = _decode(stderr_buf).strip()
        return CommandExecutionError("ssh: execute remotely and get output", **context)

    def _close_channel(self, channel: paramiko.Channel, command: str) -> None:
        try:
            channel.close()
        except EOFError:
            pass
        except Exception as exc:
            if self.logging_enabled:
                self.log.error("⚠️ ssh: failed to close session after %s: %s", command, exc)


def _decode(buffer: io.BytesIO) -> str:
    return buffer.getvalue().decode("utf-8", errors="replace")


def connect(
    config: SSHConfig,
    *,
    logger: Optional[logging.Logger] = None,
    client_factory: Callable[[], paramiko.SSHClient] | None = None,
) -> SSHClient:
    """Open one authenticated SSH connection.

    Password authentication is used when ``config.password`` is set, otherwise
    public-key authentication with ``config.key_file`` (``~/.ssh/id_rsa`` by
    default). Host keys are accepted without verification.

    Raises:
        SignerCreationError: key-based auth was selected and the key is unusable.
        DialError: the network dial or SSH handshake failed.
    """
    config = config.with_defaults()
    log = logger or logging.getLogger(__name__)

    connect_kwargs: Dict[str, Any] = {
        "hostname": config.host,
        "username": config.username,
        "look_for_keys": False,
        "allow_agent": False,
    }
    if config.password:
        connect_kwargs["password"] = config.password
        auth_context = {"password": "***"}
    else:
        signer, key_file = load_signer(config.key_file)
        connect_kwargs["pkey"] = signer
        auth_context = {"key_file": key_file}

    try:
        connect_kwargs["port"] = int(config.port)
    except ValueError as exc:
        raise DialError("dial: invalid port", address=config.address, **auth_context) from exc

    client = (client_factory or paramiko.SSHClient)()
    client.set_missing_host_key_policy(paramiko.AutoAddPolicy())
    try:
        client.connect(**connect_kwargs)
    except TRANSPORT_ERRORS as exc:
        client.close()
        raise DialError("dial", address=config.address, **auth_context) from exc

    log.debug("🍀 Connected to ssh host: %s", config.address)
    return SSHClient(connection=client, log=log)
