"""Atmos exceptions."""

from typing import List, Optional


class AtmosError(Exception):
    """Base class for errors surfaced by staging and execution.

    Carries an exit code so the CLI can map failures without inspecting
    the concrete type.
    """

    def __init__(self, message: str, exit_code: int = 2):
        self.exit_code = exit_code
        super().__init__(message)


class ConfigurationError(AtmosError):
    """Raised when required configuration is missing or malformed."""


class SecretRetrievalError(AtmosError):
    """Raised when the secret manager cannot be reached or returns garbage."""


class FilesystemError(AtmosError):
    """Raised when a link or generated file cannot be created or removed."""


class ProcessFailed(AtmosError):
    """Raised when the terraform subprocess exits non-zero.

    Only raised after both output relays have drained, so everything the
    process wrote has already reached the host streams.
    """

    def __init__(self, exit_code: int, command: Optional[List[str]] = None):
        self.command = command or []
        message = f"Terraform exited with status {exit_code}"
        if self.command:
            message += f": {' '.join(self.command)}"
        super().__init__(message, exit_code=exit_code)
