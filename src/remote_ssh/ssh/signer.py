"""Private key loading for public-key authentication."""

from __future__ import annotations

import io
from pathlib import Path
from typing import Tuple, Type

import paramiko

from ..errors import SignerCreationError

_KEY_CLASSES: Tuple[Type[paramiko.PKey], ...] = (
    paramiko.RSAKey,
    paramiko.ECDSAKey,
    paramiko.Ed25519Key,
)


def default_key_file() -> str:
    try:
        home = Path.home()
    except (RuntimeError, KeyError) as exc:
        raise SignerCreationError(
            "failed to create SSH signer: get home dir path"
        ) from exc
    return str(home / ".ssh" / "id_rsa")


def parse_private_key(data: str) -> paramiko.PKey:
    """Try each supported key type in turn; raise the last parse error."""
    last_exc: Exception = paramiko.SSHException("unsupported private key format")
    for key_class in _KEY_CLASSES:
        try:
            return key_class.from_private_key(io.StringIO(data))
        except (paramiko.SSHException, ValueError) as exc:
            last_exc = exc
    raise last_exc


def load_signer(key_file: str = "") -> Tuple[paramiko.PKey, str]:
    """Load the private key used to sign the authentication request.

    Args:
        key_file: Path to the private key. ``~/.ssh/id_rsa`` when empty.

    Returns:
        The parsed key and the path it was read from.

    Raises:
        SignerCreationError: if the home directory, the file or its
            contents cannot be used.
    """
    if not key_file:
        key_file = default_key_file()

    try:
        data = Path(key_file).expanduser().read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SignerCreationError(
            "failed to create SSH signer: read private key", key_file=key_file
        ) from exc

    try:
        signer = parse_private_key(data)
    except (paramiko.SSHException, ValueError) as exc:
        raise SignerCreationError(
            "failed to create SSH signer: parse private key", key_file=key_file
        ) from exc
    return signer, key_file
