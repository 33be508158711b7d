"""
Stack loader — discovers stacks under the project root.

A stack is any directory whose stackgen.yml declares a ``stack``
section.  Discovery walks the project tree in sorted order, skipping
hidden directories and Terraform caches, so the resulting order is
stable across runs.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from stackgen.core.config.loader import ConfigError, load_dir_config, project_path
from stackgen.core.models.config import DirConfig
from stackgen.core.models.stack import Stack

logger = logging.getLogger(__name__)

_SKIP_DIRS = frozenset({
    "node_modules", "__pycache__",
})


def _new_stack(root: Path, directory: Path, cfg: DirConfig) -> Stack:
    return Stack(
        abs_path=directory,
        path=project_path(root, directory),
        name=cfg.stack.name or directory.name or "root",
        description=cfg.stack.description,
    )


def list_stacks(root: Path) -> list[Stack]:
    """Discover every stack under ``root``, in sorted walk order.

    Raises:
        ConfigError: If any directory config is invalid or the tree
            can't be walked.  Discovery is all-or-nothing.
    """
    if not root.is_dir():
        raise ConfigError(f"project root {root} is not a directory")

    stacks: list[Stack] = []

    def _on_error(err: OSError) -> None:
        raise ConfigError(f"listing stacks: {err}") from err

    for dirpath, dirnames, _ in os.walk(root, onerror=_on_error):
        dirnames[:] = sorted(
            d for d in dirnames
            if not d.startswith(".") and d not in _SKIP_DIRS
        )
        directory = Path(dirpath)
        cfg = load_dir_config(directory)
        if cfg.is_stack:
            stacks.append(_new_stack(root, directory, cfg))

    logger.info("Discovered %d stacks under %s", len(stacks), root)
    return stacks
