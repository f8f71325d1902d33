"""Binary directory configuration sources.

Each provider implements ``get_binary_directory() -> str`` and returns an
empty string when nothing is configured. An empty string is a valid relative
path (the current working directory), not an error.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from security_checker_installer.errors import ConfigurationError
from security_checker_installer.logging import get_logger

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

logger = get_logger(__name__)

BIN_DIR_ENV = "SECURITY_CHECKER_BIN_DIR"
PYPROJECT_FILENAME = "pyproject.toml"
PYPROJECT_TABLE = "security-checker-installer"
PYPROJECT_KEY = "bin-dir"


@dataclass(frozen=True)
class StaticBinaryDirectory:
    """A fixed binary directory."""

    path: str = ""

    def get_binary_directory(self) -> str:
        return self.path


@dataclass(frozen=True)
class EnvironmentBinaryDirectory:
    """Binary directory taken from an environment variable."""

    var: str = BIN_DIR_ENV

    def get_binary_directory(self) -> str:
        return os.environ.get(self.var, "")


@dataclass(frozen=True)
class PyprojectBinaryDirectory:
    """Binary directory from ``[tool.security-checker-installer] bin-dir``.

    Relative values are resolved against the project root.
    """

    project_root: Path

    @property
    def pyproject_path(self) -> Path:
        return Path(self.project_root) / PYPROJECT_FILENAME

    def get_binary_directory(self) -> str:
        path = self.pyproject_path
        if not path.exists():
            return ""

        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigurationError(str(path), str(e)) from e

        tool = data.get("tool", {})
        if not isinstance(tool, dict):
            raise ConfigurationError(str(path), "tool must be a table")
        table = tool.get(PYPROJECT_TABLE, {})
        if not isinstance(table, dict):
            raise ConfigurationError(str(path), f"tool.{PYPROJECT_TABLE} must be a table")

        value = table.get(PYPROJECT_KEY)
        if value is None:
            return ""
        if not isinstance(value, str):
            raise ConfigurationError(str(path), f"{PYPROJECT_KEY} must be a string")
        if value == "":
            return ""

        bin_dir = Path(value)
        if not bin_dir.is_absolute():
            bin_dir = Path(self.project_root) / bin_dir
        return str(bin_dir)


def resolve_provider(
    project_root: Union[str, Path, None] = None, bin_dir: Optional[str] = None
) -> Union[StaticBinaryDirectory, EnvironmentBinaryDirectory, PyprojectBinaryDirectory]:
    """Pick a provider: explicit value, then environment, then pyproject."""
    if bin_dir is not None:
        return StaticBinaryDirectory(bin_dir)

    if os.environ.get(BIN_DIR_ENV):
        return EnvironmentBinaryDirectory()

    root = Path(project_root) if project_root is not None else Path.cwd()
    logger.debug({"event": "using_pyproject_config", "project_root": str(root)})
    return PyprojectBinaryDirectory(root)
