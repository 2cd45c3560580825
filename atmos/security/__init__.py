"""Security module for provider secrets and log masking."""

from .secrets import (
    SecretManager,
    EnvironmentSecretManager,
    SecretMasker,
    SecretsMaskingFilter,
    secret_manager_for,
    secrets_env,
)

__all__ = [
    'SecretManager',
    'EnvironmentSecretManager',
    'SecretMasker',
    'SecretsMaskingFilter',
    'secret_manager_for',
    'secrets_env',
]
