"""
Generated file model — a candidate artifact produced by the generators.
"""

from __future__ import annotations

from pydantic import BaseModel


class GeneratedFile(BaseModel):
    """A not-yet-written rendering of a generated file.

    Attributes:
        name:  Filename relative to the stack directory.
        body:  Full file content.  Empty means "this target must not exist".
    """

    name: str
    body: str = ""
