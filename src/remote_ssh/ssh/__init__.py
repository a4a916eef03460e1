"""SSH utilities for remote-ssh."""

from .client import CommandResult, SSHClient, connect
from .sftp import RemoteFile, create_file, open_file
from .signer import load_signer

__all__ = [
    "CommandResult",
    "SSHClient",
    "connect",
    "RemoteFile",
    "create_file",
    "open_file",
    "load_signer",
]
