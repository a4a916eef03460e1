"""Command-line interface for remote-ssh."""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional

from .config import SSHConfig, load_config, parse_connection_string
from .errors import RemoteSSHError
from .ssh import SSHClient, connect
from .utils.logging import get_logger

_CHUNK_SIZE = 32768


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="remote-ssh",
        description="Run commands and transfer files over SSH.",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to a JSON config file, used when TARGET is '-'.",
    )
    parser.add_argument("--password", default=None, help="SSH password")
    parser.add_argument(
        "--key-file", default=None, help="Path to SSH private key (default: ~/.ssh/id_rsa)"
    )
    parser.add_argument(
        "--quiet", "-q", action="store_true", help="Do not log commands or their output"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Log commands, output and timings"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    exec_parser = subparsers.add_parser("exec", help="Run a command on the remote host")
    exec_parser.add_argument("target", help="[user[:password]@]host[:port], or '-' for config")
    exec_parser.add_argument("remote_command", nargs="+", help="Command to run")
    exec_parser.add_argument(
        "--stdout-only", action="store_true",
        help="Keep stderr out of the printed output",
    )

    cat_parser = subparsers.add_parser("cat", help="Print a remote file")
    cat_parser.add_argument("target", help="[user[:password]@]host[:port], or '-' for config")
    cat_parser.add_argument("path", help="Remote file path")

    put_parser = subparsers.add_parser("put", help="Upload a local file")
    put_parser.add_argument("target", help="[user[:password]@]host[:port], or '-' for config")
    put_parser.add_argument("local", help="Local file path")
    put_parser.add_argument("remote", help="Remote destination path")

    return parser


def resolve_config(args: argparse.Namespace) -> SSHConfig:
    if args.target == "-":
        config = load_config(args.config)
    else:
        config = parse_connection_string(args.target)
    if args.password is not None:
        config = replace(config, password=args.password)
    if args.key_file is not None:
        config = replace(config, key_file=args.key_file)
    return config


def handle_exec_command(client: SSHClient, args: argparse.Namespace) -> int:
    if args.stdout_only:
        client = client.with_stdout_only()
    result = client.run(" ".join(args.remote_command))
    sys.stdout.write(result.output)
    sys.stdout.flush()
    return result.exit_status


def handle_cat_command(client: SSHClient, args: argparse.Namespace) -> int:
    with client.open_file(args.path) as remote:
        while True:
            chunk = remote.read(_CHUNK_SIZE)
            if not chunk:
                break
            sys.stdout.buffer.write(chunk)
    sys.stdout.flush()
    return 0


def handle_put_command(client: SSHClient, args: argparse.Namespace) -> int:
    data = Path(args.local).read_bytes()
    client.create_file(args.remote, data)
    print(f"✅ {args.local} -> {args.remote} ({len(data)} bytes)", file=sys.stderr)
    return 0


_HANDLERS = {
    "exec": handle_exec_command,
    "cat": handle_cat_command,
    "put": handle_put_command,
}


def dispatch_command(args: argparse.Namespace) -> int:
    handler = _HANDLERS.get(args.command)
    if handler is None:
        raise ValueError(f"Unsupported command: {args.command}")

    logger = get_logger("remote_ssh", verbose=args.verbose, quiet=args.quiet)

    config = resolve_config(args)
    with connect(config, logger=logger) as client:
        if args.quiet:
            client = client.with_no_log()
        return handler(client, args)


def run_cli(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return dispatch_command(args)
    except (RemoteSSHError, OSError) as exc:
        print(f"❌ {exc}", file=sys.stderr)
        return 1


def app_main() -> None:
    sys.exit(run_cli())


if __name__ == "__main__":  # pragma: no cover
    app_main()
