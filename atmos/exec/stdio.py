"""Stdio wiring for the terraform subprocess."""

import sys
from dataclasses import dataclass
from typing import IO, Optional

from .stream_relay import Transform


@dataclass
class StdioWiring:
    """
    How the three standard streams of the subprocess are connected.

    Stdin is always inherited from the host so terraform can prompt
    interactively. Stdout and stderr are relayed live to the given
    destinations, resolved to the host's current sys.stdout/sys.stderr
    when left unset.

    Attributes:
        stdout: Destination for the child's stdout
        stderr: Destination for the child's stderr
        stdout_transform: Optional per-chunk transform for stdout
        stderr_transform: Optional per-chunk transform for stderr
    """
    stdout: Optional[IO] = None
    stderr: Optional[IO] = None
    stdout_transform: Optional[Transform] = None
    stderr_transform: Optional[Transform] = None

    def stdout_dest(self) -> IO:
        return self.stdout if self.stdout is not None else sys.stdout

    def stderr_dest(self) -> IO:
        return self.stderr if self.stderr is not None else sys.stderr
