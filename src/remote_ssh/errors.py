"""Exception hierarchy for remote-ssh."""

from __future__ import annotations

from typing import Any, Iterable, List, Optional


class RemoteSSHError(RuntimeError):
    """Base error carrying a message prefix and contextual arguments."""

    def __init__(self, message: str, **context: Any) -> None:
        self.message = message
        self.context = context
        super().__init__(self._render())

    def _render(self) -> str:
        if not self.context:
            return self.message
        args = ", ".join(f"{key}={value!r}" for key, value in self.context.items())
        return f"{self.message} ({args})"


class ConfigParseError(RemoteSSHError):
    """Raised when a connection string or config file cannot be used."""

    pass


class MissingUsernameError(ConfigParseError):
    pass


class MissingHostError(ConfigParseError):
    pass


class MalformedConnectionStringError(ConfigParseError):
    pass


class SignerCreationError(RemoteSSHError):
    """Raised when the private key cannot be located, read or parsed."""

    pass


class DialError(RemoteSSHError):
    """Raised when the SSH connection cannot be established."""

    pass


class SessionOpenError(RemoteSSHError):
    pass


class CommandExecutionError(RemoteSSHError):
    """Raised for failures other than a non-zero remote exit status."""

    pass


class SubconnectionError(RemoteSSHError):
    pass


class RemoteFileOpenError(RemoteSSHError):
    pass


class RemoteFileCreateError(RemoteSSHError):
    pass


class RemoteWriteError(RemoteSSHError):
    pass


class CloseError(RemoteSSHError):
    """Raised when one or more resources fail to close.

    ``errors`` keeps every underlying failure in the order it happened.
    """

    def __init__(
        self,
        message: str,
        errors: Optional[Iterable[BaseException]] = None,
        **context: Any,
    ) -> None:
        self.errors: List[BaseException] = list(errors or [])
        super().__init__(message, **context)

    def _render(self) -> str:
        text = super()._render()
        if not self.errors:
            return text
        return text + ": " + "\n".join(str(err) or type(err).__name__ for err in self.errors)
