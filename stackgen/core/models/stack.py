"""
Stack model — an independently generated configuration unit.

A stack is any directory under the project root whose ``stackgen.yml``
declares a ``stack`` section.  Its identity is its absolute directory;
everything else is metadata exposed to expressions as the ``stack``
namespace.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel


class Stack(BaseModel):
    """A stack discovered under the project root.

    Attributes:
        abs_path:     Absolute directory of the stack (identity).
        path:         Project path, ``/``-rooted and posix (``/stacks/app``).
        name:         Stack name, defaults to the directory basename.
        description:  Free-form description.
    """

    abs_path: Path
    path: str
    name: str
    description: str = ""

    def metadata(self) -> dict[str, str]:
        """Metadata injected into the ``stack`` evaluation namespace."""
        return {
            "name": self.name,
            "path": self.path,
            "description": self.description,
        }

    def __str__(self) -> str:
        return f'stack "{self.path}"'
