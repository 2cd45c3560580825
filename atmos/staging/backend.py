"""Terraform backend configuration for remote state."""

import logging
from pathlib import Path
from typing import Optional

from atmos.config import AtmosConfig
from atmos.exceptions import ConfigurationError, FilesystemError
from atmos.staging.tfvars import write_json


logger = logging.getLogger(__name__)

BACKEND_FILE = "atmos-backend.tf.json"


def setup_backend(config: AtmosConfig, skip: bool = False) -> Optional[Path]:
    """
    Write or remove the backend descriptor in the working dir.

    With skip set, or no backend configured for the active provider, any
    existing descriptor is deleted so terraform falls back to local state.

    Returns:
        Path of the written file, or None when removed
    """
    path = config.tf_working_dir / BACKEND_FILE
    backend = None if skip else config.backend_config

    if backend is None:
        if path.exists() or path.is_symlink():
            try:
                path.unlink()
            except OSError as e:
                raise FilesystemError(f"Failed to remove {path}: {e}") from e
            logger.debug(f"Removed backend file: {path}")
        return None

    options = dict(backend)
    backend_type = options.pop("type", None)
    if not backend_type or not isinstance(backend_type, str):
        raise ConfigurationError(
            f"Backend for provider '{config.provider_name}' requires a 'type'"
        )

    write_json(path, {"terraform": {"backend": {backend_type: options}}})
    logger.debug(f"Configured '{backend_type}' backend")
    return path
