"""
Execution module for atmos.
Handles terraform process execution and live output relay.
"""

from .stream_relay import RelayHandle, pipe_stream
from .stdio import StdioWiring
from .terraform_executor import TerraformExecutor

__all__ = [
    "RelayHandle",
    "pipe_stream",
    "StdioWiring",
    "TerraformExecutor",
]
