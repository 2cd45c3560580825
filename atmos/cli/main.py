"""Main CLI entry point for atmos."""

import argparse
import os
import sys
from typing import Optional

from .commands import run_terraform, stage_working_dir


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the atmos CLI."""
    parser = argparse.ArgumentParser(
        prog='atmos',
        description='Terraform executor for multi-environment deployments'
    )
    parser.add_argument(
        '--root',
        type=str,
        default='.',
        help='Project root containing config/atmos.yml (default: current directory)'
    )
    parser.add_argument(
        '-e', '--atmos-env',
        type=str,
        default=os.environ.get('ATMOS_ENV', 'ops'),
        help='Environment to operate on (default: $ATMOS_ENV or ops)'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )
    parser.add_argument(
        '--quiet',
        action='store_true',
        help='Suppress non-error output'
    )
    parser.add_argument(
        '--log-level',
        choices=['debug', 'info', 'warn', 'error'],
        default='info',
        help='Set log level'
    )

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # Terraform command
    tf_parser = subparsers.add_parser(
        'terraform',
        aliases=['tf'],
        help='Stage the working directory and run a terraform subcommand'
    )
    tf_parser.add_argument(
        '--skip-secrets',
        action='store_true',
        help='Do not pass provider secrets to terraform'
    )
    tf_parser.add_argument(
        '--skip-backend',
        action='store_true',
        help='Remove the backend config so terraform uses local state'
    )
    tf_parser.add_argument(
        'subcommand',
        type=str,
        help='Terraform subcommand, e.g. init, plan, apply'
    )
    tf_parser.add_argument(
        'tf_args',
        nargs=argparse.REMAINDER,
        help='Arguments passed through to terraform unmodified'
    )

    # Stage command
    stage_parser = subparsers.add_parser(
        'stage',
        help='Only stage the terraform working directory'
    )
    stage_parser.add_argument(
        '--skip-backend',
        action='store_true',
        help='Remove the backend config so terraform uses local state'
    )

    return parser


def main(args: Optional[list] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if not parsed_args.command:
        parser.print_help()
        return 1

    if parsed_args.command in ('terraform', 'tf'):
        return run_terraform(parsed_args)
    elif parsed_args.command == 'stage':
        return stage_working_dir(parsed_args)
    else:
        parser.print_help()
        return 1


if __name__ == '__main__':
    sys.exit(main())
