"""
Conflict detection — two generation sources must never target one file.

Runs on a stack's full candidate set before any file is removed or
written, so a conflicting stack is left exactly as it was.
"""

from __future__ import annotations

from collections.abc import Iterable

from stackgen.core.models.template import GeneratedFile
from stackgen.core.services.codegen_common import ConflictError


class StringSet:
    """A small string set with the operations codegen needs."""

    def __init__(self, *vals: str) -> None:
        self._vals: set[str] = set(vals)

    def add(self, val: str) -> None:
        self._vals.add(val)

    def has(self, val: str) -> bool:
        return val in self._vals

    def remove(self, val: str) -> None:
        self._vals.discard(val)

    def slice(self) -> list[str]:
        """Members as a sorted list."""
        return sorted(self._vals)

    def __len__(self) -> int:
        return len(self._vals)


def check_generated_files_conflicts(genfiles: Iterable[GeneratedFile]) -> None:
    """Raise ConflictError on the first filename produced twice."""
    observed = StringSet()
    for genfile in genfiles:
        if observed.has(genfile.name):
            raise ConflictError(f"two configurations produce same file {genfile.name!r}")
        observed.add(genfile.name)
