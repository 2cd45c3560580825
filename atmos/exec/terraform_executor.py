"""
Terraform executor.

Stages the terraform working directory for an atmos environment and runs
terraform inside it with secrets passed through the environment and output
relayed live to the host streams.
"""

import logging
import os
import subprocess
from pathlib import Path
from typing import Dict, List, Optional

from atmos.config import AtmosConfig
from atmos.exceptions import ProcessFailed
from atmos.security import secrets
from atmos.security.secrets import SecretManager, SecretMasker
from atmos.staging import backend, links, tfvars

from .stdio import StdioWiring
from .stream_relay import RelayHandle, pipe_stream


logger = logging.getLogger(__name__)


class TerraformExecutor:
    """
    Prepares the working directory and drives a single terraform process.

    Each staging step is a separate method so callers and tests can run
    them independently; every step is idempotent, so rerunning
    setup_working_dir after a partial failure repairs the directory.
    """

    def __init__(
        self,
        config: AtmosConfig,
        secret_manager: Optional[SecretManager] = None,
        terraform_binary: str = "terraform",
        masker: Optional[SecretMasker] = None,
    ):
        """
        Initialize terraform executor.

        Args:
            config: Configuration of the active environment
            secret_manager: Provider secret manager (default: built from config
                            the first time secrets are needed)
            terraform_binary: Name or path of the terraform executable
            masker: Records secret values handed to terraform for log masking
        """
        self.config = config
        self.terraform_binary = terraform_binary
        self._secret_manager = secret_manager
        self.masker = masker or SecretMasker()

    @property
    def working_dir(self) -> Path:
        return self.config.tf_working_dir

    @property
    def secret_manager(self) -> SecretManager:
        if self._secret_manager is None:
            self._secret_manager = secrets.secret_manager_for(self.config)
        return self._secret_manager

    def clean_links(self) -> int:
        return links.clean_links(self.working_dir)

    def link_support_dirs(self) -> List[Path]:
        return links.link_support_dirs(self.config)

    def link_recipes(self) -> List[Path]:
        return links.link_recipes(self.config)

    def write_atmos_vars(self) -> Path:
        return tfvars.write_atmos_vars(self.config)

    def setup_backend(self, skip: bool = False) -> Optional[Path]:
        return backend.setup_backend(self.config, skip=skip)

    def secrets_env(self) -> Dict[str, str]:
        return secrets.secrets_env(self.secret_manager, self.masker)

    def setup_working_dir(self, skip_backend: bool = False) -> None:
        """Stage the working directory; the first failing step aborts."""
        logger.debug(f"Staging terraform working dir: {self.working_dir}")
        self.clean_links()
        self.link_support_dirs()
        self.link_recipes()
        self.write_atmos_vars()
        self.setup_backend(skip_backend)

    def tf_cmd(self, subcommand: str, *args: str) -> List[str]:
        return [self.terraform_binary, subcommand, *args]

    def spawn(self, command: List[str], env: Dict[str, str]) -> subprocess.Popen:
        """Start terraform with inherited stdin and piped stdout/stderr."""
        return subprocess.Popen(
            command,
            cwd=str(self.working_dir),
            env=env,
            stdin=None,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            bufsize=0,
        )

    def execute(
        self,
        subcommand: str,
        *args: str,
        skip_secrets: bool = False,
        wiring: Optional[StdioWiring] = None,
    ) -> int:
        """
        Run a terraform subcommand in the working directory.

        Args:
            subcommand: Terraform subcommand, e.g. init or apply
            *args: Extra arguments passed through verbatim
            skip_secrets: Don't pass provider secrets as TF_VAR_ variables
            wiring: Output destinations and transforms (default: host streams)

        Returns:
            Exit code (always 0)

        Raises:
            ProcessFailed: terraform exited non-zero or could not be started
        """
        env = os.environ.copy()
        if not skip_secrets:
            env.update(self.secrets_env())

        wiring = wiring or StdioWiring()
        command = self.tf_cmd(subcommand, *args)
        logger.info(f"Running: {' '.join(command)}")

        try:
            process = self.spawn(command, env)
        except OSError as e:
            logger.error(f"Failed to start terraform: {e}")
            raise ProcessFailed(127, command) from e

        relays = [
            pipe_stream(process.stdout, wiring.stdout_dest(), wiring.stdout_transform, name="stdout"),
            pipe_stream(process.stderr, wiring.stderr_dest(), wiring.stderr_transform, name="stderr"),
        ]
        try:
            exit_code = process.wait()
        finally:
            self._join_relays(relays)
            for stream in (process.stdout, process.stderr):
                if stream is not None:
                    stream.close()

        logger.debug(f"Terraform exited with status {exit_code}")
        if exit_code != 0:
            raise ProcessFailed(exit_code, command)
        return exit_code

    def run(
        self,
        subcommand: str,
        *args: str,
        skip_secrets: bool = False,
        skip_backend: bool = False,
        wiring: Optional[StdioWiring] = None,
    ) -> int:
        """Stage the working directory, then execute terraform."""
        self.setup_working_dir(skip_backend=skip_backend)
        return self.execute(subcommand, *args, skip_secrets=skip_secrets, wiring=wiring)

    @staticmethod
    def _join_relays(relays: List[RelayHandle]) -> None:
        # Join all relays before surfacing the first failure
        error = None
        for relay in relays:
            try:
                relay.join()
            except Exception as e:
                error = error or e
        if error is not None:
            raise error
