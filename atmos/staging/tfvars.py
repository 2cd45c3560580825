"""
Terraform variable file generation.

Terraform only accepts scalar values for the variables atmos passes in, so
the nested config tree is flattened before being written out as
atmos.auto.tfvars.json, which terraform loads automatically.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict

from atmos.config import AtmosConfig
from atmos.exceptions import FilesystemError


logger = logging.getLogger(__name__)

VARS_FILE = "atmos.auto.tfvars.json"


def homogenize_for_terraform(obj: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
    """
    Flatten a nested mapping into scalar-valued keys.

    Nested mapping keys are joined with '_' ({"a": {"b": 1}} -> {"a_b": 1}),
    sequences become comma-joined strings and scalars pass through.

    Args:
        obj: Mapping to flatten
        prefix: Prepended to every resulting key

    Returns:
        New flat mapping
    """
    result: Dict[str, Any] = {}
    for key, value in obj.items():
        name = f"{prefix}{key}"
        if isinstance(value, dict):
            result.update(homogenize_for_terraform(value, f"{name}_"))
        elif isinstance(value, (list, tuple)):
            result[name] = ",".join(str(v) for v in value)
        else:
            result[name] = value
    return result


def write_json(path: Path, data: Dict[str, Any]) -> None:
    """Fully rewrite path with data as JSON."""
    try:
        with open(path, 'w') as f:
            json.dump(data, f, indent=2, default=str)
            f.write("\n")
    except OSError as e:
        raise FilesystemError(f"Failed to write {path}: {e}") from e
    logger.debug(f"Wrote {path}")


def write_atmos_vars(config: AtmosConfig) -> Path:
    """
    Write the atmos variables terraform picks up automatically.

    The file holds the flattened config (keys prefixed with var_prefix),
    the unprefixed flattened config under atmos_config, the active
    environment name and the account id of every environment.
    """
    flat = homogenize_for_terraform(config.to_dict())

    atmos_vars: Dict[str, Any] = {}
    atmos_vars.update({f"{config.var_prefix}{key}": value for key, value in flat.items()})
    atmos_vars["atmos_config"] = flat
    atmos_vars["environment"] = config.atmos_env
    atmos_vars["account_ids"] = config.account_hash

    path = config.tf_working_dir / VARS_FILE
    write_json(path, atmos_vars)
    return path
