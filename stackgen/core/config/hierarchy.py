"""
Configuration hierarchy — effective per-stack settings from ancestor dirs.

Configuration for a stack is spread across every directory from the
project root down to the stack directory.  Merge rules, per key:

    codegen           nearest directory that sets a field wins
    export_as_locals  nearest directory that declares a name wins
    generate_hcl      nearest directory that declares a filename wins
    globals           see ``stackgen.core.config.globals``
    backend           nearest directory wins, searched by the backend
                      generator itself (it stops at the root boundary)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from stackgen.core.config.loader import ConfigError, load_dir_config
from stackgen.core.engine.evaluator import Evaluator
from stackgen.core.models.config import CodegenSettings, DirConfig
from stackgen.core.models.stack import Stack

logger = logging.getLogger(__name__)

DEFAULT_BACKEND_CFG_FILENAME = "_gen_backend_cfg.tf"
DEFAULT_LOCALS_FILENAME = "_gen_locals.tf"


def config_chain(root: Path, directory: Path) -> list[tuple[Path, DirConfig]]:
    """Load every directory config from ``root`` down to ``directory``.

    Returns:
        ``(dir, config)`` pairs ordered root first, so that iterating and
        overriding yields "nearest wins" semantics.

    Raises:
        ConfigError: If ``directory`` is outside ``root`` or a config is invalid.
    """
    if not directory.is_relative_to(root):
        raise ConfigError(f"{directory} is outside of project root {root}")

    dirs = [directory, *directory.parents]
    dirs = dirs[: dirs.index(root) + 1]
    return [(d, load_dir_config(d)) for d in reversed(dirs)]


def validate_filename(filename: str, what: str) -> str:
    """Ensure a generated filename is a plain basename inside the stack dir."""
    if not filename or filename in (".", "..") or "/" in filename or "\\" in filename:
        raise ConfigError(f"invalid {what} {filename!r}: must be a plain file name")
    return filename


def load_stack_codegen_config(root: Path, stack: Stack) -> CodegenSettings:
    """Resolve the backend/locals filenames for a stack.

    Returns:
        CodegenSettings with every field set.
    """
    settings = CodegenSettings(
        backend_config_filename=DEFAULT_BACKEND_CFG_FILENAME,
        locals_filename=DEFAULT_LOCALS_FILENAME,
    )
    for _, cfg in config_chain(root, stack.abs_path):
        if cfg.codegen is None:
            continue
        overrides = cfg.codegen.model_dump(exclude_none=True)
        settings = settings.model_copy(update=overrides)

    validate_filename(settings.backend_config_filename, "backend_config_filename")
    validate_filename(settings.locals_filename, "locals_filename")

    logger.debug(
        "Codegen config for %s: backend=%s locals=%s",
        stack, settings.backend_config_filename, settings.locals_filename,
    )
    return settings


def load_stack_exported_locals(
    root: Path,
    stack: Stack,
    globals_: dict[str, Any],
) -> dict[str, Any]:
    """Resolve and evaluate the ``export_as_locals`` attributes of a stack.

    Raises:
        ConfigError: If a config in the chain is invalid.
        EvaluationError: If any attribute fails to evaluate.
    """
    exprs: dict[str, Any] = {}
    for _, cfg in config_chain(root, stack.abs_path):
        exprs.update(cfg.export_as_locals)

    if not exprs:
        return {}

    evaluator = new_stack_evaluator(stack, globals_)
    return {name: evaluator.eval(expr) for name, expr in exprs.items()}


def new_stack_evaluator(stack: Stack, globals_: dict[str, Any]) -> Evaluator:
    """Evaluator with the ``stack`` and ``global`` namespaces injected."""
    evaluator = Evaluator(stack.abs_path)
    evaluator.set_namespace("stack", stack.metadata())
    evaluator.set_namespace("global", globals_)
    return evaluator
