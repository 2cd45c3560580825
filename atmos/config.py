"""Atmos project configuration loaded from config/atmos.yml."""

import copy
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from atmos.exceptions import ConfigurationError


logger = logging.getLogger(__name__)


class AtmosConfig:
    """
    Parsed configuration for a single environment of an atmos project.

    Constructed once and handed to the executor; nothing reads it from
    module-level state.
    """

    CONFIG_FILE = Path("config") / "atmos.yml"
    DEFAULT_PROVIDER = "aws"

    def __init__(self, root_dir: Union[str, Path], atmos_env: str, data: Optional[Dict[str, Any]] = None):
        """
        Initialize configuration.

        Args:
            root_dir: Project root containing config/, recipes/ and support dirs
            atmos_env: Name of the active environment
            data: Already-parsed configuration tree
        """
        self.root_dir = Path(root_dir).resolve()
        self.atmos_env = atmos_env
        self._data: Dict[str, Any] = data or {}

    @classmethod
    def load(cls, root_dir: Union[str, Path], atmos_env: str) -> "AtmosConfig":
        """Load config/atmos.yml from the project root.

        A missing or empty file yields an empty configuration.
        """
        config_path = Path(root_dir) / cls.CONFIG_FILE
        data: Any = None
        if config_path.exists():
            logger.debug(f"Loading config: {config_path}")
            try:
                with open(config_path, 'r') as f:
                    data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Failed to parse {config_path}: {e}") from e
        else:
            logger.debug(f"No config file at {config_path}, using empty config")

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"{config_path} must contain a YAML mapping, got {type(data).__name__}"
            )
        return cls(root_dir, atmos_env, data)

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def to_dict(self) -> Dict[str, Any]:
        """Deep copy of the raw configuration tree."""
        return copy.deepcopy(self._data)

    @property
    def tmp_dir(self) -> Path:
        return self.root_dir / "tmp" / self.atmos_env

    @property
    def tf_working_dir(self) -> Path:
        """Terraform working directory, created on first access."""
        path = self.tmp_dir / "tf"
        path.mkdir(parents=True, exist_ok=True)
        return path

    @property
    def provider_name(self) -> str:
        return str(self._data.get("provider") or self.DEFAULT_PROVIDER)

    @property
    def provider_config(self) -> Dict[str, Any]:
        providers = self._data.get("providers") or {}
        if not isinstance(providers, dict):
            raise ConfigurationError("'providers' must be a mapping")
        provider = providers.get(self.provider_name) or {}
        if not isinstance(provider, dict):
            raise ConfigurationError(f"'providers.{self.provider_name}' must be a mapping")
        return provider

    @property
    def backend_config(self) -> Optional[Dict[str, Any]]:
        """Backend options for the active provider, or None when unconfigured."""
        backend = self.provider_config.get("backend")
        if not backend:
            return None
        if not isinstance(backend, dict):
            raise ConfigurationError(f"'providers.{self.provider_name}.backend' must be a mapping")
        return backend

    @property
    def secret_config(self) -> Dict[str, Any]:
        secret = self.provider_config.get("secret") or {}
        if not isinstance(secret, dict):
            raise ConfigurationError(f"'providers.{self.provider_name}.secret' must be a mapping")
        return secret

    @property
    def recipes(self) -> List[str]:
        recipes = self._data.get("recipes") or []
        if not isinstance(recipes, list):
            raise ConfigurationError(f"'recipes' must be a list, got {type(recipes).__name__}")
        return [str(r) for r in recipes]

    @property
    def var_prefix(self) -> str:
        return str(self._data.get("var_prefix") or "")

    @property
    def environments(self) -> Dict[str, Any]:
        environments = self._data.get("environments") or {}
        if not isinstance(environments, dict):
            raise ConfigurationError("'environments' must be a mapping")
        return environments

    @property
    def all_env_names(self) -> List[str]:
        return sorted(self.environments.keys())

    @property
    def account_hash(self) -> Dict[str, Any]:
        """Map of environment name to its configured account id."""
        result = {}
        for name in self.all_env_names:
            env_config = self.environments[name] or {}
            if not isinstance(env_config, dict):
                raise ConfigurationError(f"'environments.{name}' must be a mapping")
            result[name] = env_config.get("account_id")
        return result
