"""
Backend config generator — the Terraform backend block of a stack.

The backend is searched upwards from the stack directory; the nearest
directory declaring one wins.  The search never leaves the project root.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from stackgen.core.config.hierarchy import new_stack_evaluator
from stackgen.core.config.loader import load_dir_config
from stackgen.core.models.stack import Stack
from stackgen.core.services.codegen_common import prepend_header
from stackgen.core.services.generators.hcl_block import evaluate_body
from stackgen.core.services.hcl_writer import render_block

logger = logging.getLogger(__name__)


def _search_dirs(root: Path, start: Path) -> Iterator[Path]:
    """Yield ``start`` and its ancestors while they are within ``root``."""
    current = start
    while current.is_relative_to(root):
        yield current
        if current == current.parent:
            return  # filesystem root
        current = current.parent


def generate_backend_cfg_code(
    root: Path,
    stack: Stack,
    globals_: dict[str, Any],
) -> str:
    """Render the backend config of a stack, or ``""`` when none is declared.

    Every attribute is evaluated before anything is rendered, so a single
    failing expression fails the whole artifact.

    Raises:
        ConfigError: If a directory config is invalid.
        EvaluationError: If any backend attribute fails to evaluate.
        HclRenderError: If an evaluated value can't be rendered.
    """
    for configdir in _search_dirs(root, stack.abs_path):
        backend = load_dir_config(configdir).backend
        if backend is None:
            continue

        logger.debug("Using backend declared in %s for %s", configdir, stack)

        evaluator = new_stack_evaluator(stack, globals_)
        attributes, blocks = evaluate_body(evaluator, backend)
        code = render_block(
            "terraform", [], {}, [("backend", backend.labels, attributes, blocks)],
        )
        return prepend_header(code)

    logger.debug("No backend config found for %s", stack)
    return ""
