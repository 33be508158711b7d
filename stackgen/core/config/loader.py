"""
Configuration loader — reads one directory's stackgen.yml into a DirConfig.

This is the lowest layer of configuration handling.  It parses a single
file, validates it against the Pydantic schema and returns the typed
model.  Merging across ancestor directories lives in ``hierarchy`` and
``globals``.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from stackgen.core.models.config import DirConfig

logger = logging.getLogger(__name__)

# Per-directory config filename
CONFIG_FILE = "stackgen.yml"


class ConfigError(Exception):
    """Raised when a directory configuration is invalid or unreadable."""


def load_dir_config(directory: Path) -> DirConfig:
    """Load and validate the configuration declared in a single directory.

    A directory without ``stackgen.yml`` declares nothing: an empty
    ``DirConfig`` is returned, which is a normal outcome (e.g. "no backend
    configured here").

    Args:
        directory: Directory to read the config from.

    Returns:
        Validated DirConfig model.

    Raises:
        ConfigError: If the file cannot be read, is not valid YAML or does
            not match the schema.
    """
    path = directory / CONFIG_FILE
    if not path.is_file():
        return DirConfig()

    logger.debug("Loading directory config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return DirConfig()

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        return DirConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e


def find_project_root(start_dir: Path | None = None) -> Path | None:
    """Search for the project root starting from the given directory, walking up.

    The project root is the nearest directory whose stackgen.yml declares
    a ``project`` section.  This allows running commands from stack
    subdirectories and still finding the root.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Absolute project root, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    while True:
        if (current / CONFIG_FILE).is_file():
            try:
                if load_dir_config(current).is_project_root:
                    return current
            except ConfigError as e:
                logger.warning("Ignoring unreadable config while looking for root: %s", e)
        parent = current.parent
        if parent == current:
            return None  # filesystem root
        current = parent


def project_path(root: Path, directory: Path) -> str:
    """Return the ``/``-rooted posix project path of a directory under root."""
    rel = directory.relative_to(root).as_posix()
    return "/" if rel == "." else f"/{rel}"
