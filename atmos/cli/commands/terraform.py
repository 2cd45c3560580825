"""Terraform and stage command implementations."""

import logging
from argparse import Namespace
from typing import Callable

from atmos.config import AtmosConfig
from atmos.exceptions import AtmosError, ProcessFailed
from atmos.exec import TerraformExecutor
from atmos.security import SecretMasker, SecretsMaskingFilter


logger = logging.getLogger(__name__)


def setup_logging(args: Namespace, masker: SecretMasker) -> None:
    """Configure root logging from CLI flags, masking secrets in all output."""
    log_level = getattr(logging, args.log_level.upper())
    if args.debug:
        log_level = logging.DEBUG
    elif args.quiet:
        log_level = logging.ERROR

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    for handler in logging.getLogger().handlers:
        for old in [f for f in handler.filters if isinstance(f, SecretsMaskingFilter)]:
            handler.removeFilter(old)
        handler.addFilter(SecretsMaskingFilter(masker))


def _with_executor(args: Namespace, action: Callable[[TerraformExecutor], object]) -> int:
    masker = SecretMasker()
    setup_logging(args, masker)

    try:
        config = AtmosConfig.load(args.root, args.atmos_env)
        logger.debug(f"Using environment '{config.atmos_env}' in {config.root_dir}")
        action(TerraformExecutor(config, masker=masker))
        return 0

    except ProcessFailed as e:
        logger.error(str(e))
        return e.exit_code
    except AtmosError as e:
        logger.error(f"{type(e).__name__}: {e}")
        return e.exit_code
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        return 1


def run_terraform(args: Namespace) -> int:
    """Stage the working directory and run terraform."""
    tf_args = list(args.tf_args)
    if tf_args and tf_args[0] == '--':
        tf_args = tf_args[1:]

    return _with_executor(args, lambda executor: executor.run(
        args.subcommand,
        *tf_args,
        skip_secrets=args.skip_secrets,
        skip_backend=args.skip_backend,
    ))


def stage_working_dir(args: Namespace) -> int:
    """Stage the working directory without running terraform."""
    return _with_executor(args, lambda executor: executor.setup_working_dir(
        skip_backend=args.skip_backend,
    ))
