"""
generate_hcl generator — arbitrary HCL files declared by configuration.

Each ``generate_hcl`` entry maps a target filename to an HCL body.  The
nearest directory declaring a filename wins.  Bodies are evaluated for
the stack, rendered, and prefixed with the header plus a comment naming
the stackgen.yml the block came from.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from stackgen.core.config.hierarchy import (
    config_chain,
    new_stack_evaluator,
    validate_filename,
)
from stackgen.core.config.loader import CONFIG_FILE, project_path
from stackgen.core.engine.evaluator import Evaluator
from stackgen.core.models.config import HclBody
from stackgen.core.models.stack import Stack
from stackgen.core.models.template import GeneratedFile
from stackgen.core.services.codegen_common import prepend_gen_hcl_header
from stackgen.core.services.hcl_writer import Block, render_body

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeneratedHcl:
    """Rendered (header-less) code of one generate_hcl entry."""

    origin: str
    code: str


def evaluate_body(evaluator: Evaluator, body: HclBody) -> tuple[dict[str, Any], list[Block]]:
    """Evaluate every attribute of a body, nested blocks included."""
    attributes = {name: evaluator.eval(expr) for name, expr in body.attributes.items()}
    blocks: list[Block] = []
    for block in body.blocks:
        attrs, nested = evaluate_body(evaluator, block)
        blocks.append((block.type, block.labels, attrs, nested))
    return attributes, blocks


def load_generated_hcl(
    root: Path,
    stack: Stack,
    globals_: dict[str, Any],
) -> dict[str, GeneratedHcl]:
    """Load, evaluate and render every generate_hcl entry of a stack.

    Returns:
        Mapping of target filename → GeneratedHcl, sorted by filename.

    Raises:
        ConfigError: If a config is invalid or a filename isn't a basename.
        EvaluationError: If any attribute fails to evaluate.
        HclRenderError: If an evaluated value can't be rendered.
    """
    declared: dict[str, tuple[str, HclBody | None]] = {}
    for directory, cfg in config_chain(root, stack.abs_path):
        origin = project_path(root, directory / CONFIG_FILE)
        for filename, block in cfg.generate_hcl.items():
            validate_filename(filename, "generate_hcl label")
            declared[filename] = (origin, block.content if block else None)

    if not declared:
        return {}

    evaluator = new_stack_evaluator(stack, globals_)
    generated: dict[str, GeneratedHcl] = {}
    for filename in sorted(declared):
        origin, content = declared[filename]
        code = ""
        if content is not None and not content.is_empty():
            attributes, blocks = evaluate_body(evaluator, content)
            code = render_body(attributes, blocks)
        generated[filename] = GeneratedHcl(origin=origin, code=code)

    return generated


def generate_hcl_files(
    root: Path,
    stack: Stack,
    globals_: dict[str, Any],
) -> list[GeneratedFile]:
    """Candidates for every generate_hcl entry of a stack.

    An entry rendering to empty code yields a candidate with an empty
    body, meaning "no file", never a header-only stub.
    """
    files: list[GeneratedFile] = []
    for filename, genhcl in load_generated_hcl(root, stack, globals_).items():
        if not genhcl.code:
            files.append(GeneratedFile(name=filename, body=""))
            continue
        files.append(GeneratedFile(
            name=filename,
            body=prepend_gen_hcl_header(genhcl.origin, genhcl.code),
        ))
        logger.debug("Generated HCL %s for %s", filename, stack)
    return files
