"""Shared fixtures for building throwaway atmos projects."""

import pytest
import yaml

from atmos.config import AtmosConfig


@pytest.fixture
def project(tmp_path):
    """
    Factory creating a project under tmp_path.

    Call with the config tree plus optional recipe names and support dirs to
    create; returns the loaded AtmosConfig for the ops environment.
    """
    def make(config=None, recipes=(), dirs=(), atmos_env="ops"):
        config_file = tmp_path / "config" / "atmos.yml"
        config_file.parent.mkdir(parents=True, exist_ok=True)
        config_file.write_text(yaml.safe_dump(config) if config is not None else "")
        for recipe in recipes:
            recipe_file = tmp_path / "recipes" / f"{recipe}.tf"
            recipe_file.parent.mkdir(parents=True, exist_ok=True)
            recipe_file.write_text("")
        for name in dirs:
            (tmp_path / name).mkdir(parents=True, exist_ok=True)
        return AtmosConfig.load(tmp_path, atmos_env)

    return make
