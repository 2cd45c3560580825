"""
Working directory staging.

Links recipes and support dirs into the terraform working dir and writes the
generated variable and backend files.
"""

from .links import SUPPORT_DIRS, clean_links, link_recipes, link_support_dirs
from .tfvars import VARS_FILE, homogenize_for_terraform, write_atmos_vars
from .backend import BACKEND_FILE, setup_backend

__all__ = [
    "SUPPORT_DIRS",
    "clean_links",
    "link_recipes",
    "link_support_dirs",
    "VARS_FILE",
    "homogenize_for_terraform",
    "write_atmos_vars",
    "BACKEND_FILE",
    "setup_backend",
]
