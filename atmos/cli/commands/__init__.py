"""CLI command handlers."""

from .terraform import run_terraform, stage_working_dir

__all__ = ['run_terraform', 'stage_working_dir']
