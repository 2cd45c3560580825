"""
Tests for working directory symlink management.
"""

import os
from pathlib import Path

import pytest

from atmos.exceptions import ConfigurationError, FilesystemError
from atmos.staging.links import clean_links, link_recipes, link_support_dirs


def symlinks_under(path: Path):
    found = []
    for dirpath, dirnames, filenames in os.walk(path):
        for name in dirnames + filenames:
            candidate = Path(dirpath) / name
            if candidate.is_symlink():
                found.append(candidate)
    return sorted(found)


class TestLinkRecipes:
    """Test recipe linking."""

    def test_links_recipes_into_working_dir(self, project):
        config = project({'recipes': ['foo', 'bar']}, recipes=['foo', 'bar'])

        link_recipes(config)

        for name in ['foo', 'bar']:
            link = config.tf_working_dir / f"{name}.tf"
            assert link.is_symlink()
            assert os.readlink(link) == str(config.root_dir / "recipes" / f"{name}.tf")

    def test_relinking_is_idempotent(self, project):
        config = project({'recipes': ['foo']}, recipes=['foo'])

        link_recipes(config)
        first = symlinks_under(config.tf_working_dir)
        link_recipes(config)

        assert symlinks_under(config.tf_working_dir) == first
        assert len(first) == 1

    def test_replaces_stale_link(self, project):
        config = project({'recipes': ['foo']}, recipes=['foo'])
        link = config.tf_working_dir / "foo.tf"
        link.symlink_to(config.root_dir / "elsewhere.tf")

        link_recipes(config)

        assert os.readlink(link) == str(config.root_dir / "recipes" / "foo.tf")

    def test_missing_recipe_raises(self, project):
        config = project({'recipes': ['missing']})

        with pytest.raises(FilesystemError, match="missing"):
            link_recipes(config)

    def test_recipe_escaping_project_rejected(self, project, tmp_path):
        outside = tmp_path.parent / f"{tmp_path.name}_outside"
        outside.mkdir()
        (outside / "evil.tf").write_text("")
        config = project({'recipes': [f"../../{outside.name}/evil"]})

        with pytest.raises(ConfigurationError, match="outside"):
            link_recipes(config)

        assert symlinks_under(tmp_path) == []

    def test_recipe_in_subdirectory_rejected(self, project):
        config = project({'recipes': ['nested/foo']})
        (config.root_dir / "recipes" / "nested").mkdir(parents=True)
        (config.root_dir / "recipes" / "nested" / "foo.tf").write_text("")

        with pytest.raises(ConfigurationError, match="working directory"):
            link_recipes(config)

    def test_regular_file_in_the_way_raises(self, project):
        config = project({'recipes': ['foo']}, recipes=['foo'])
        (config.tf_working_dir / "foo.tf").write_text("hand written")

        with pytest.raises(FilesystemError):
            link_recipes(config)
        assert (config.tf_working_dir / "foo.tf").read_text() == "hand written"

    def test_no_recipes_configured(self, project):
        config = project()

        assert link_recipes(config) == []


class TestLinkSupportDirs:
    """Test support directory linking."""

    def test_links_dirs_into_working_dir(self, project):
        config = project(recipes=['foo'], dirs=['modules', 'templates'])

        link_support_dirs(config)
        link_support_dirs(config)

        for name in ['modules', 'templates']:
            link = config.tf_working_dir / name
            assert link.is_symlink()
            assert os.readlink(link) == str(config.root_dir / name)

    def test_skips_absent_dirs(self, project):
        config = project(dirs=['modules'])

        links = link_support_dirs(config)

        assert links == [config.tf_working_dir / "modules"]
        assert not (config.tf_working_dir / "templates").exists()


class TestCleanLinks:
    """Test symlink removal."""

    def test_removes_all_links(self, project):
        config = project({'recipes': ['foo']}, recipes=['foo'], dirs=['modules', 'templates'])
        link_support_dirs(config)
        link_recipes(config)
        assert len(symlinks_under(config.tf_working_dir)) == 3

        removed = clean_links(config.tf_working_dir)

        assert removed == 3
        assert symlinks_under(config.tf_working_dir) == []

    def test_leaves_regular_files_and_link_targets(self, project):
        config = project({'recipes': ['foo']}, recipes=['foo'], dirs=['modules'])
        (config.root_dir / "modules" / "mod.tf").write_text("module")
        working_dir = config.tf_working_dir
        (working_dir / "generated.json").write_text("{}")
        (working_dir / "nested").mkdir()
        (working_dir / "nested" / "keep.txt").write_text("keep")
        (working_dir / "nested" / "link.tf").symlink_to(config.root_dir / "recipes" / "foo.tf")
        link_support_dirs(config)
        link_recipes(config)

        clean_links(working_dir)

        assert (working_dir / "generated.json").read_text() == "{}"
        assert (working_dir / "nested" / "keep.txt").read_text() == "keep"
        assert not (working_dir / "nested" / "link.tf").exists()
        assert (config.root_dir / "modules" / "mod.tf").read_text() == "module"
        assert (config.root_dir / "recipes" / "foo.tf").exists()

    def test_removes_broken_links(self, tmp_path):
        (tmp_path / "dangling.tf").symlink_to(tmp_path / "gone.tf")

        assert clean_links(tmp_path) == 1
        assert not (tmp_path / "dangling.tf").is_symlink()
