"""
Outdated code detection — what ``generate`` would change, without changing it.

A file is outdated when the freshly rendered body differs from what is on
disk (or the file is new), or when it is a generated file that no current
configuration produces anymore.  Nothing here ever writes or removes.
"""

from __future__ import annotations

import logging
from pathlib import Path

from stackgen.core.models.report import CheckReport
from stackgen.core.models.stack import Stack
from stackgen.core.services.codegen_common import (
    BootstrapError,
    CodegenError,
    list_stack_gen_files,
    load_generated_code,
)
from stackgen.core.services.codegen_conflicts import (
    StringSet,
    check_generated_files_conflicts,
)
from stackgen.core.services.codegen_ops import (
    generate_stack_files,
    load_stack_inputs,
    select_stacks,
)

logger = logging.getLogger(__name__)


def check_stack(root: Path, stack: Stack) -> list[str]:
    """Return the outdated filenames of a stack, ordered lexicographically.

    Args:
        root: The project root, absolute.
        stack: The stack to check.

    Raises:
        StackConfigError: If the stack configuration is invalid.
        ConflictError: If two configurations produce the same file.
        ManualCodeExistsError: If a target exists without a stackgen header.
        CodegenIOError: If the stack files can't be read.
    """
    root = Path(root)

    logger.debug("Checking for outdated code on %s", stack)

    cfg, globals_ = load_stack_inputs(root, stack)
    genfiles = generate_stack_files(root, stack, globals_, cfg)
    check_generated_files_conflicts(genfiles)

    current = StringSet(*list_stack_gen_files(stack))
    outdated: list[str] = []

    for genfile in genfiles:
        current_body, found = load_generated_code(stack.abs_path / genfile.name)
        if not found and not genfile.body:
            logger.debug("%s not outdated: no file and nothing to generate", genfile.name)
            continue

        current.remove(genfile.name)
        if genfile.body != current_body:
            logger.debug("Detected outdated %s on %s", genfile.name, stack)
            outdated.append(genfile.name)

    # Generated files no configuration produces anymore
    outdated.extend(current.slice())
    return sorted(outdated)


def check_stacks(root: Path, working_dir: Path) -> CheckReport:
    """Run ``check_stack`` over every stack inside ``working_dir``.

    Failures are collected per stack and never abort the run.
    """
    root = Path(root)
    report = CheckReport()

    try:
        stacks = select_stacks(root, working_dir)
    except BootstrapError as e:
        report.bootstrap_error = e
        return report

    for stack in stacks:
        try:
            report.outdated[stack.path] = check_stack(root, stack)
        except CodegenError as e:
            report.errors[stack.path] = e

    return report
