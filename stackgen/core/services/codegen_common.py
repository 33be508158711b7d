"""
Codegen common — ownership headers, guarded writes and the error taxonomy.

Safety invariant: stackgen never overwrites or deletes a file it did not
create.  A file is owned when its content starts with one of the
recognized headers.  Older header formats stay in ``RECOGNIZED_HEADERS``
so files generated by previous versions are still recognized.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

from stackgen.core.models.stack import Stack

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  Headers
# ═══════════════════════════════════════════════════════════════════

# Current header used by stackgen code generation
HEADER = "// STACKGEN: GENERATED AUTOMATICALLY DO NOT EDIT"

# First header used by stackgen code generation
HEADER_V0 = "// GENERATED BY STACKGEN: DO NOT EDIT"

# Checked in order; new formats are added here, old ones are never removed.
RECOGNIZED_HEADERS: tuple[str, ...] = (HEADER, HEADER_V0)


def has_stackgen_header(code: bytes) -> bool:
    """Check whether file content starts with a recognized header."""
    return any(code.startswith(header.encode()) for header in RECOGNIZED_HEADERS)


def prepend_header(code: str) -> str:
    return f"{HEADER}\n\n{code}"


def prepend_gen_hcl_header(origin: str, code: str) -> str:
    return (
        f"{HEADER}\n"
        f"// STACKGEN: originated from generate_hcl block on {origin}\n\n"
        f"{code}"
    )


# ═══════════════════════════════════════════════════════════════════
#  Errors
# ═══════════════════════════════════════════════════════════════════


class CodegenError(Exception):
    """Base class of every code generation failure."""


class BootstrapError(CodegenError):
    """Stack enumeration failed; nothing was processed."""


class WorkingDirError(BootstrapError):
    """The working dir is not the project root or one of its descendants."""


class StackConfigError(CodegenError):
    """Resolving or evaluating a stack's configuration failed."""


class LoadingStackCfgError(StackConfigError):
    """Loading the stack code generation config failed."""


class LoadingGlobalsError(StackConfigError):
    """Loading the stack globals failed."""


class BackendConfigGenError(StackConfigError):
    """Generating the backend config failed."""


class ExportingLocalsGenError(StackConfigError):
    """Generating the exported locals failed."""


class GenerateHclError(StackConfigError):
    """Generating code from generate_hcl blocks failed."""


class ConflictError(CodegenError):
    """Two configurations produce the same file."""


class ManualCodeExistsError(CodegenError):
    """A target file exists but was not generated by stackgen."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"manually defined code found at {str(path)!r}")
        self.path = path


class CodegenIOError(CodegenError):
    """A filesystem operation on generated code failed."""

    def __init__(self, operation: str, path: Path, cause: Exception) -> None:
        super().__init__(f"{operation} {str(path)!r}: {cause}")
        self.operation = operation
        self.path = path


# ═══════════════════════════════════════════════════════════════════
#  Guarded read / write
# ═══════════════════════════════════════════════════════════════════


def load_generated_code(path: Path) -> tuple[str, bool]:
    """Load the generated code at the given path.

    Returns:
        ``(code, True)`` when a generated file exists, ``("", False)``
        when nothing exists at ``path``.  Bytes that are not valid UTF-8
        are kept as surrogate escapes, so such a file never matches a
        freshly rendered body.

    Raises:
        ManualCodeExistsError: If the file exists without a stackgen header.
        CodegenIOError: If the file can't be inspected or read.
    """
    try:
        path.stat()
    except FileNotFoundError:
        return "", False
    except OSError as e:
        raise CodegenIOError("loading code: can't stat", path, e) from e

    try:
        data = path.read_bytes()
    except OSError as e:
        raise CodegenIOError("loading code: can't read", path, e) from e

    if not has_stackgen_header(data):
        raise ManualCodeExistsError(path)

    return data.decode("utf-8", errors="surrogateescape"), True


def check_file_can_be_overwritten(path: Path) -> None:
    load_generated_code(path)


def write_generated_code(target: Path, code: str) -> None:
    """Write generated code, refusing to clobber files stackgen doesn't own.

    Raises:
        ManualCodeExistsError: If ``target`` exists without a stackgen header.
        CodegenIOError: If the write fails.
    """
    logger.debug("Checking code can be written to %s", target)
    check_file_can_be_overwritten(target)

    try:
        target.write_bytes(code.encode("utf-8"))
    except OSError as e:
        raise CodegenIOError("writing generated code", target, e) from e


def list_stack_gen_files(stack: Stack) -> list[str]:
    """List the filenames of all generated code inside a stack.

    The scan is non-recursive: subdirectories are skipped.  Filenames are
    ordered lexicographically.

    Raises:
        CodegenIOError: If the stack dir or one of its files can't be read.
    """
    try:
        entries = sorted(stack.abs_path.iterdir())
    except OSError as e:
        raise CodegenIOError("listing stack files", stack.abs_path, e) from e

    genfiles: list[str] = []
    for entry in entries:
        if not entry.is_file():
            continue
        try:
            data = entry.read_bytes()
        except OSError as e:
            raise CodegenIOError("checking if file is generated", entry, e) from e
        if has_stackgen_header(data):
            genfiles.append(entry.name)

    logger.debug("Found %d generated files in %s", len(genfiles), stack)
    return genfiles


def remove_stack_generated_files(stack: Stack) -> Iterator[tuple[str, bytes]]:
    """Remove every generated file of a stack.

    Yields ``(filename, body)`` right after each removal, so a caller that
    is interrupted by an error still knows exactly what was removed.  The
    body is the raw file content; it is never decoded.

    Raises:
        CodegenIOError: If listing, reading or removing fails.
    """
    for filename in list_stack_gen_files(stack):
        path = stack.abs_path / filename
        try:
            body = path.read_bytes()
        except OSError as e:
            raise CodegenIOError("reading generated file before removal", path, e) from e

        try:
            path.unlink()
        except OSError as e:
            raise CodegenIOError("removing generated file", path, e) from e

        logger.debug("Removed generated file %s", path)
        yield filename, body
