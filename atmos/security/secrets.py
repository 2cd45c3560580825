"""
Secret managers and secret-to-environment translation.

Secrets reach terraform exclusively as TF_VAR_<name> environment variables
of the child process; they are never written into the working directory.
Values handed out can be recorded on a SecretMasker so log output is masked.
"""

import logging
import os
import re
from abc import ABC, abstractmethod
from typing import Dict, Optional, Set

from atmos.config import AtmosConfig
from atmos.exceptions import ConfigurationError, SecretRetrievalError


logger = logging.getLogger(__name__)

TF_VAR_PREFIX = "TF_VAR_"


class SecretManager(ABC):
    """Capability for reading all secrets of a provider."""

    @abstractmethod
    def to_dict(self) -> Dict[str, str]:
        """Return every secret as a name to value mapping."""


class EnvironmentSecretManager(SecretManager):
    """
    Secrets sourced from the host environment.

    Every variable starting with ``prefix`` is a secret named by the rest of
    the variable name, e.g. ATMOS_SECRET_db_password -> db_password.
    Empty strings count as present.
    """

    DEFAULT_PREFIX = "ATMOS_SECRET_"

    def __init__(self, prefix: str = DEFAULT_PREFIX, environ: Optional[Dict[str, str]] = None):
        self.prefix = prefix
        self._environ = environ

    def to_dict(self) -> Dict[str, str]:
        environ = os.environ if self._environ is None else self._environ
        return {
            key[len(self.prefix):]: value
            for key, value in environ.items()
            if key.startswith(self.prefix) and len(key) > len(self.prefix)
        }


SECRET_MANAGER_TYPES = {
    "environment": EnvironmentSecretManager,
}


def secret_manager_for(config: AtmosConfig) -> SecretManager:
    """Build the secret manager configured for the active provider."""
    secret_config = dict(config.secret_config)
    manager_type = secret_config.pop("type", "environment")
    manager_cls = SECRET_MANAGER_TYPES.get(manager_type)
    if manager_cls is None:
        raise ConfigurationError(
            f"Unknown secret manager type '{manager_type}' for provider '{config.provider_name}'"
        )
    try:
        return manager_cls(**secret_config)
    except TypeError as e:
        raise ConfigurationError(f"Invalid options for secret manager '{manager_type}': {e}") from e


class SecretMasker:
    """Remembers secret values and masks them in text."""

    def __init__(self):
        self._masked_values: Set[str] = set()

    def add(self, value: str):
        """Track a value for masking; empty strings are never masked."""
        if value:
            self._masked_values.add(value)

    def mask_text(self, text: str) -> str:
        """
        Mask known secret values in text.

        Args:
            text: Text potentially containing secrets

        Returns:
            Text with secrets replaced by '***'
        """
        if not text or not self._masked_values:
            return text

        masked = text
        # Longest first so a secret containing another is masked whole
        for secret_value in sorted(self._masked_values, key=len, reverse=True):
            if secret_value in masked:
                masked = re.sub(re.escape(secret_value), '***', masked)
        return masked

    def clear(self):
        """Forget all masked values."""
        self._masked_values.clear()


def secrets_env(secret_manager: SecretManager, masker: Optional[SecretMasker] = None) -> Dict[str, str]:
    """
    Translate all secrets into terraform variable environment entries.

    Args:
        secret_manager: Provider secret manager to query
        masker: Records every value handed out, when given

    Returns:
        New mapping of TF_VAR_<name> to secret value

    Raises:
        SecretRetrievalError: manager failed or returned a non-mapping
    """
    try:
        secrets = secret_manager.to_dict()
    except SecretRetrievalError:
        raise
    except Exception as e:
        raise SecretRetrievalError(f"Failed to retrieve secrets: {e}") from e

    if not isinstance(secrets, dict):
        raise SecretRetrievalError(
            f"Secret manager returned {type(secrets).__name__}, expected a mapping"
        )

    env = {}
    for key, value in secrets.items():
        env[f"{TF_VAR_PREFIX}{key}"] = str(value)
        if masker is not None:
            masker.add(str(value))

    logger.debug(f"Passing {len(env)} secrets to terraform: {', '.join(sorted(env))}")
    return env


class SecretsMaskingFilter(logging.Filter):
    """
    Logging filter for masking secrets in log records.

    Attach to handlers so secret values recorded on the masker never reach
    log output.
    """

    def __init__(self, masker: SecretMasker):
        super().__init__()
        self.masker = masker

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = self.masker.mask_text(str(record.msg))

        if record.args:
            if isinstance(record.args, dict):
                record.args = {
                    key: self.masker.mask_text(value) if isinstance(value, str) else value
                    for key, value in record.args.items()
                }
            elif isinstance(record.args, tuple):
                record.args = tuple(
                    self.masker.mask_text(arg) if isinstance(arg, str) else arg
                    for arg in record.args
                )

        return True
