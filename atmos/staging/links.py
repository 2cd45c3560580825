"""
Symlink management for the terraform working directory.

Every symlink in the working directory is created here and points into the
project root, so removing all symlinks is always safe and leaves generated
files alone.
"""

import logging
import os
from pathlib import Path
from typing import List

from atmos.config import AtmosConfig
from atmos.exceptions import ConfigurationError, FilesystemError


logger = logging.getLogger(__name__)

SUPPORT_DIRS = ("modules", "templates")


def _link(source: Path, link: Path) -> None:
    """Point ``link`` at ``source``, leaving a correct existing link alone."""
    if link.is_symlink():
        if os.readlink(link) == str(source):
            return
        logger.debug(f"Replacing stale link: {link}")
        link.unlink()
    elif link.exists():
        raise FilesystemError(f"Refusing to replace non-link {link} with link to {source}")

    try:
        link.symlink_to(source)
    except OSError as e:
        raise FilesystemError(f"Failed to link {link} -> {source}: {e}") from e
    logger.debug(f"Linked {link} -> {source}")


def _check_recipe_paths(recipe: str, source: Path, link: Path,
                        recipes_dir: Path, working_dir: Path) -> None:
    """Reject recipe names that would place a link or its target outside the project."""
    source_norm = Path(os.path.normpath(source))
    link_norm = Path(os.path.normpath(link))
    try:
        source_norm.relative_to(recipes_dir)
    except ValueError:
        raise ConfigurationError(
            f"Recipe '{recipe}' resolves outside the recipes directory {recipes_dir}"
        )
    if link_norm.parent != working_dir:
        raise ConfigurationError(
            f"Recipe '{recipe}' would be linked outside the working directory {working_dir}"
        )


def link_recipes(config: AtmosConfig) -> List[Path]:
    """Link each configured recipe into the working dir as <name>.tf."""
    working_dir = config.tf_working_dir
    recipes_dir = config.root_dir / "recipes"
    links = []
    for recipe in config.recipes:
        source = recipes_dir / f"{recipe}.tf"
        link = working_dir / f"{recipe}.tf"
        _check_recipe_paths(recipe, source, link, recipes_dir, working_dir)
        if not source.is_file():
            raise FilesystemError(f"Recipe '{recipe}' not found: {source}")
        _link(source, link)
        links.append(link)
    return links


def link_support_dirs(config: AtmosConfig) -> List[Path]:
    """Link the support directories present in the project root."""
    working_dir = config.tf_working_dir
    links = []
    for name in SUPPORT_DIRS:
        source = config.root_dir / name
        if not source.is_dir():
            continue
        link = working_dir / name
        _link(source, link)
        links.append(link)
    return links


def clean_links(working_dir: Path) -> int:
    """
    Remove every symlink below working_dir.

    Regular files and directories are left untouched; linked directories
    are removed as links and never descended into.

    Returns:
        Number of links removed
    """
    removed = 0
    for dirpath, dirnames, filenames in os.walk(working_dir):
        for name in dirnames + filenames:
            path = Path(dirpath) / name
            if not path.is_symlink():
                continue
            try:
                path.unlink()
            except OSError as e:
                raise FilesystemError(f"Failed to remove link {path}: {e}") from e
            logger.debug(f"Removed link: {path}")
            removed += 1
    return removed
