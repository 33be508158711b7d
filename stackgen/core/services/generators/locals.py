"""
Exported locals generator — a ``locals { }`` block from export_as_locals.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from stackgen.core.config.hierarchy import load_stack_exported_locals
from stackgen.core.models.stack import Stack
from stackgen.core.services.codegen_common import prepend_header
from stackgen.core.services.hcl_writer import render_block

logger = logging.getLogger(__name__)


def generate_stack_locals_code(
    root: Path,
    stack: Stack,
    globals_: dict[str, Any],
) -> str:
    """Render the exported locals of a stack, or ``""`` when there are none.

    Raises:
        ConfigError: If a config in the chain is invalid.
        EvaluationError: If any exported local fails to evaluate.
        HclRenderError: If an evaluated value can't be rendered.
    """
    exported = load_stack_exported_locals(root, stack, globals_)
    if not exported:
        return ""

    # Resolved locals have no meaningful order; sort or output drifts between runs
    attributes = {name: exported[name] for name in sorted(exported)}

    logger.debug("Rendering %d exported locals for %s", len(attributes), stack)
    return prepend_header(render_block("locals", [], attributes))
