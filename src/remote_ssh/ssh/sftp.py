"""SFTP file operations over an existing SSH connection.

Every operation opens its own SFTP sub-connection, so file transfers are
isolated from each other and from command execution.
"""

from __future__ import annotations

import logging
from typing import Iterator

import paramiko

from ..errors import (
    CloseError,
    RemoteFileCreateError,
    RemoteFileOpenError,
    RemoteWriteError,
    SubconnectionError,
)
from ..utils.release import close_all, close_quietly

logger = logging.getLogger(__name__)

_SFTP_ERRORS = (paramiko.SSHException, OSError, EOFError)


class RemoteFile:
    """A remote file opened for reading together with its SFTP sub-connection.

    Both are closed by :meth:`close`; use as a context manager to make sure
    neither is leaked.
    """

    def __init__(self, path: str, file: paramiko.SFTPFile, sftp: paramiko.SFTPClient) -> None:
        self.path = path
        self.file = file
        self.sftp = sftp
        self._closed = False

    @property
    def name(self) -> str:
        return self.path

    @property
    def closed(self) -> bool:
        return self._closed

    def read(self, size: int = -1) -> bytes:
        return self.file.read(size)

    def readable(self) -> bool:
        return True

    def __iter__(self) -> Iterator[bytes]:
        return iter(self.file)

    def __enter__(self) -> "RemoteFile":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        self.close()

    def connection_alive(self) -> bool:
        channel = self.sftp.get_channel()
        if channel is None or channel.closed:
            return False
        transport = channel.get_transport()
        return transport is not None and transport.is_active()

    def close(self) -> None:
        """Close the file stream and the sub-connection.

        Both are released even when the connection has already gone away,
        since Paramiko closes quietly on a dead transport.

        Raises:
            CloseError: if either close failed, the handle was already closed,
                or the connection was closed before the file.
        """
        if self._closed:
            raise CloseError(f"close remote file {self.path}: already closed")
        self._closed = True
        alive = self.connection_alive()
        close_all(self.file.close, self.sftp.close, what=f"remote file {self.path}")
        if not alive:
            raise CloseError(f"close remote file {self.path}: connection already closed")


def _open_sftp(connection: paramiko.SSHClient) -> paramiko.SFTPClient:
    try:
        sftp = connection.open_sftp()
    except _SFTP_ERRORS as exc:
        raise SubconnectionError("SFTP: create new client on conn") from exc
    if sftp is None:
        raise SubconnectionError("SFTP: create new client on conn: channel refused")
    return sftp


def open_file(
    connection: paramiko.SSHClient,
    path: str,
    log: logging.Logger = logger,
    *,
    log_enabled: bool = True,
) -> RemoteFile:
    """Open `path` for reading over a fresh SFTP sub-connection.

    Raises:
        SubconnectionError: SFTP could not be started.
        RemoteFileOpenError: the remote open failed; a failure closing the
            sub-connection is reported as ``close_error``.
    """
    sftp = _open_sftp(connection)
    try:
        file = sftp.open(path, "rb")
    except _SFTP_ERRORS as exc:
        context = {"path": path, "error": str(exc) or type(exc).__name__}
        try:
            sftp.close()
        except Exception as close_exc:
            context["close_error"] = str(close_exc) or type(close_exc).__name__
        raise RemoteFileOpenError("open SFTP file", **context) from exc

    if log_enabled:
        log.debug("🍀 SFTP: opened %s", path)
    return RemoteFile(path, file, sftp)


def create_file(
    connection: paramiko.SSHClient,
    path: str,
    data: bytes,
    log: logging.Logger = logger,
    *,
    log_enabled: bool = True,
) -> None:
    """Create or truncate `path` and write `data` to it in full.

    The file and the sub-connection are closed on every path; close failures
    are logged, not raised.

    Raises:
        SubconnectionError: SFTP could not be started.
        RemoteFileCreateError: the remote file could not be created.
        RemoteWriteError: writing the data failed.
    """
    sftp = _open_sftp(connection)
    try:
        try:
            file = sftp.open(path, "wb")
        except _SFTP_ERRORS as exc:
            raise RemoteFileCreateError("SFTP: create file", path=path) from exc
        try:
            file.write(data)
            file.flush()
        except _SFTP_ERRORS as exc:
            raise RemoteWriteError("SFTP: write file", path=path, size=len(data)) from exc
        finally:
            close_quietly(file.close, log, f"SFTP file {path}", log=log_enabled)
    finally:
        close_quietly(sftp.close, log, "SFTP connection", log=log_enabled)

    if log_enabled:
        log.debug("🍀 SFTP: wrote %d bytes to %s", len(data), path)
