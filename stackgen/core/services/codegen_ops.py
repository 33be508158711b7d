"""
Code generation operations — channel-independent service.

Walks every stack inside a working dir and (re)generates its code:

    1. resolve codegen config + globals
    2. render candidates (backend, exported locals, generate_hcl)
    3. reject conflicting candidates
    4. remove every previously generated file (bodies kept in memory)
    5. write non-empty candidates
    6. classify created / changed / deleted against the removed files

Configuration is read from the whole project up to the root, so a
stackgen.yml outside the working dir still applies to stacks inside it.
Failures are collected in the Report; they never abort the run.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from stackgen.core.config.globals import Globals, load_stack_globals
from stackgen.core.config.hierarchy import load_stack_codegen_config
from stackgen.core.config.loader import ConfigError
from stackgen.core.config.stack_loader import list_stacks
from stackgen.core.engine.evaluator import EvaluationError
from stackgen.core.models.config import CodegenSettings
from stackgen.core.models.report import Report, StackReport
from stackgen.core.models.stack import Stack
from stackgen.core.models.template import GeneratedFile
from stackgen.core.services.codegen_common import (
    BackendConfigGenError,
    BootstrapError,
    CodegenError,
    ExportingLocalsGenError,
    GenerateHclError,
    LoadingGlobalsError,
    LoadingStackCfgError,
    WorkingDirError,
    remove_stack_generated_files,
    write_generated_code,
)
from stackgen.core.services.codegen_conflicts import check_generated_files_conflicts
from stackgen.core.services.generators.backend import generate_backend_cfg_code
from stackgen.core.services.generators.hcl_block import generate_hcl_files
from stackgen.core.services.generators.locals import generate_stack_locals_code
from stackgen.core.services.hcl_writer import HclRenderError

logger = logging.getLogger(__name__)

# Errors a collaborator may raise while resolving or rendering config
_RESOLUTION_ERRORS = (ConfigError, EvaluationError, HclRenderError)

StackFunc = Callable[[Stack, Globals, CodegenSettings], StackReport]


# ═══════════════════════════════════════════════════════════════════
#  Candidates
# ═══════════════════════════════════════════════════════════════════


def generate_stack_files(
    root: Path,
    stack: Stack,
    globals_: Globals,
    cfg: CodegenSettings,
) -> list[GeneratedFile]:
    """Render every candidate file of a stack, without touching the disk.

    Raises:
        StackConfigError: One of its subclasses, naming the failed generator.
    """
    attrs = globals_.attributes()
    genfiles: list[GeneratedFile] = []

    logger.debug("Generate stack backend config for %s", stack)
    try:
        backend_code = generate_backend_cfg_code(root, stack, attrs)
    except _RESOLUTION_ERRORS as e:
        raise BackendConfigGenError(f"generating backend config: {e}") from e
    genfiles.append(GeneratedFile(name=cfg.backend_config_filename, body=backend_code))

    logger.debug("Generate stack locals for %s", stack)
    try:
        locals_code = generate_stack_locals_code(root, stack, attrs)
    except _RESOLUTION_ERRORS as e:
        raise ExportingLocalsGenError(f"generating locals: {e}") from e
    genfiles.append(GeneratedFile(name=cfg.locals_filename, body=locals_code))

    logger.debug("Generate stack generate_hcl files for %s", stack)
    try:
        genfiles.extend(generate_hcl_files(root, stack, attrs))
    except _RESOLUTION_ERRORS as e:
        raise GenerateHclError(f"generating generate_hcl code: {e}") from e

    return genfiles


def load_stack_inputs(root: Path, stack: Stack) -> tuple[CodegenSettings, Globals]:
    """Resolve the codegen config and globals of a stack.

    Raises:
        LoadingStackCfgError: If the codegen config can't be resolved.
        LoadingGlobalsError: If globals can't be loaded or evaluated.
    """
    try:
        cfg = load_stack_codegen_config(root, stack)
    except ConfigError as e:
        raise LoadingStackCfgError(f"loading stack code gen config: {e}") from e

    try:
        globals_ = load_stack_globals(root, stack)
    except (ConfigError, EvaluationError) as e:
        raise LoadingGlobalsError(f"loading globals: {e}") from e

    return cfg, globals_


# ═══════════════════════════════════════════════════════════════════
#  Generate
# ═══════════════════════════════════════════════════════════════════


def generate(root: Path, working_dir: Path) -> Report:
    """Generate code for every stack inside ``working_dir``.

    Args:
        root: The project root, absolute.
        working_dir: Absolute path equal to ``root`` or below it.

    Returns:
        Report with one entry per visited stack.  It must be inspected
        for failures: partial results are expected.
    """
    root = Path(root)
    return for_each_stack(
        root,
        working_dir,
        lambda stack, globals_, cfg: _generate_stack(root, stack, globals_, cfg),
    )


def _generate_stack(
    root: Path,
    stack: Stack,
    globals_: Globals,
    cfg: CodegenSettings,
) -> StackReport:
    report = StackReport(stack=stack)

    try:
        genfiles = generate_stack_files(root, stack, globals_, cfg)
        logger.debug("Checking for conflicts on generated files of %s", stack)
        check_generated_files_conflicts(genfiles)
    except CodegenError as e:
        report.error = e
        return report

    logger.debug("Removing outdated generated files of %s", stack)

    removed: dict[str, bytes] = {}
    try:
        for filename, body in remove_stack_generated_files(stack):
            removed[filename] = body

        for genfile in genfiles:
            # Never generate files with just a header inside
            if not genfile.body:
                logger.debug("Ignoring empty code for %s", genfile.name)
                continue

            write_generated_code(stack.abs_path / genfile.name, genfile.body)

            old_body = removed.pop(genfile.name, None)
            if old_body is None:
                report.add_created(genfile.name)
            elif old_body != genfile.body.encode("utf-8"):
                report.add_changed(genfile.name)
            logger.debug("Saved generated file %s", genfile.name)
    except CodegenError as e:
        logger.debug("Generation failed for %s: %s", stack, e)
        report.error = e

    for filename in removed:
        report.add_deleted(filename)
    return report


def select_stacks(root: Path, working_dir: Path) -> list[Stack]:
    """List the stacks at or below ``working_dir``, in discovery order.

    Raises:
        WorkingDirError: If ``working_dir`` is not ``root`` or below it.
        BootstrapError: If stacks can't be listed.
    """
    root, working_dir = Path(root), Path(working_dir)

    if not working_dir.is_relative_to(root):
        raise WorkingDirError(
            f"working dir {str(working_dir)!r} is not inside project root {str(root)!r}"
        )

    logger.debug("Listing stacks under %s", root)
    try:
        stacks = list_stacks(root)
    except ConfigError as e:
        raise BootstrapError(f"listing stacks: {e}") from e

    selected = [s for s in stacks if s.abs_path.is_relative_to(working_dir)]
    logger.debug("Selected %d of %d stacks inside %s", len(selected), len(stacks), working_dir)
    return selected


def for_each_stack(root: Path, working_dir: Path, fn: StackFunc) -> Report:
    """Resolve inputs for every stack inside ``working_dir`` and call ``fn``.

    Stacks are visited sequentially, in discovery order.  A stack whose
    inputs can't be resolved gets a failure entry and is skipped.
    """
    root = Path(root)
    report = Report()

    try:
        stacks = select_stacks(root, working_dir)
    except BootstrapError as e:
        report.fail_bootstrap(e)
        return report

    for stack in stacks:
        try:
            cfg, globals_ = load_stack_inputs(root, stack)
        except CodegenError as e:
            report.add_failure(stack, e)
            continue

        report.add_stack_report(fn(stack, globals_, cfg))

    return report
