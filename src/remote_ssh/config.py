"""Connection configuration for remote-ssh."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import unquote, urlsplit

from dotenv import load_dotenv

from .errors import (
    ConfigParseError,
    MalformedConnectionStringError,
    MissingHostError,
    MissingUsernameError,
)

DEFAULT_PORT = "22"
DEFAULT_USERNAME = "root"
SCHEME_PREFIX = "ssh://"

_DEFAULT_CONFIG_PATH = Path("config/remote_ssh.json")


@dataclass(frozen=True)
class SSHConfig:
    """Where and how to connect."""

    host: str
    port: str = DEFAULT_PORT
    username: str = ""
    password: str = ""
    key_file: str = ""

    def what(self) -> str:
        """Human readable ``user@host[:port]`` label, for display only."""
        label = self.host
        if self.port and self.port != DEFAULT_PORT:
            label += ":" + self.port
        if self.username:
            label = self.username + "@" + label
        return label

    def with_defaults(self) -> "SSHConfig":
        return replace(
            self,
            username=self.username or DEFAULT_USERNAME,
            port=self.port or DEFAULT_PORT,
        )

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port or DEFAULT_PORT}"

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "SSHConfig":
        # 过滤掉以下划线开头的注释字段
        payload = {k: v for k, v in payload.items() if not k.startswith("_")}
        url = payload.pop("url", None)
        base = parse_connection_string(url) if url else cls(host="")
        known = {f.name for f in fields(cls)}
        overrides = {k: str(v) for k, v in payload.items() if k in known and v is not None}
        return replace(base, **overrides)


def parse_connection_string(conn_str: str) -> SSHConfig:
    """Parse ``[user[:password]@]host[:port]`` into an :class:`SSHConfig`."""
    if not conn_str.startswith(SCHEME_PREFIX):
        conn_str = SCHEME_PREFIX + conn_str

    try:
        parts = urlsplit(conn_str)
        port = parts.port
    except ValueError as exc:
        raise MalformedConnectionStringError(
            "parse connection string", value=conn_str
        ) from exc

    if parts.username is None:
        raise MissingUsernameError("missing username", value=conn_str)

    hostname = parts.hostname or ""
    if not hostname:
        raise MissingHostError("missing host", value=conn_str)

    return SSHConfig(
        host=hostname,
        port=str(port) if port is not None else DEFAULT_PORT,
        username=unquote(parts.username),
        password=unquote(parts.password or ""),
    )


def load_config(path: Optional[str] = None) -> SSHConfig:
    """Load connection settings from `path`, the default location and the environment.

    Environment variables (higher priority than config file):
    - REMOTE_SSH_URL: full connection string
    - REMOTE_SSH_HOST: SSH host
    - REMOTE_SSH_PORT: SSH port
    - REMOTE_SSH_USERNAME: SSH username
    - REMOTE_SSH_PASSWORD: SSH password
    - REMOTE_SSH_KEY_FILE: Path to SSH private key
    """
    load_dotenv()

    if path and not Path(path).is_file():
        raise FileNotFoundError(f"Could not find configuration file: {path}")

    config = SSHConfig(host="")
    candidate = Path(path) if path else _DEFAULT_CONFIG_PATH
    if candidate.is_file():
        with candidate.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
        config = SSHConfig.from_dict(data or {})

    env_url = os.getenv("REMOTE_SSH_URL")
    if env_url:
        parsed = parse_connection_string(env_url)
        config = replace(
            parsed,
            key_file=config.key_file,
            password=parsed.password or config.password,
        )

    env_overrides = {
        "host": os.getenv("REMOTE_SSH_HOST"),
        "port": os.getenv("REMOTE_SSH_PORT"),
        "username": os.getenv("REMOTE_SSH_USERNAME"),
        "password": os.getenv("REMOTE_SSH_PASSWORD"),
        "key_file": os.getenv("REMOTE_SSH_KEY_FILE"),
    }
    config = replace(config, **{k: v for k, v in env_overrides.items() if v})

    if not config.host:
        raise ConfigParseError("missing host", path=str(candidate))
    return config
