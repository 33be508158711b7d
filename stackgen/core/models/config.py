"""
Directory configuration models — the schema of ``stackgen.yml``.

Every directory of a project may carry one ``stackgen.yml``.  The file
is parsed on its own; merging across ancestor directories happens in
``stackgen.core.config.hierarchy`` and ``stackgen.core.config.globals``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class HclBody(BaseModel):
    """An HCL body: attributes (name → expression) followed by nested blocks.

    Attribute values are raw expressions.  They are only evaluated when a
    generator renders the body for a specific stack.
    """

    model_config = ConfigDict(extra="forbid")

    attributes: dict[str, Any] = Field(default_factory=dict)
    blocks: list[HclBlock] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.attributes and not self.blocks


class HclBlock(HclBody):
    """A typed, optionally labelled HCL block, e.g. ``provider "aws" { }``."""

    type: str
    labels: list[str] = Field(default_factory=list)


HclBody.model_rebuild()
HclBlock.model_rebuild()


class BackendBlock(HclBody):
    """The Terraform ``backend`` block, wrapped in ``terraform { }`` on render.

    ``labels`` holds the backend kind, e.g. ``["s3"]``.
    """

    labels: list[str] = Field(default_factory=list)


class GenerateHclBlock(BaseModel):
    """One ``generate_hcl`` entry: the content of a single target file."""

    model_config = ConfigDict(extra="forbid")

    content: HclBody | None = None


class StackSection(BaseModel):
    """Marks the directory as a stack."""

    model_config = ConfigDict(extra="forbid")

    name: str = ""
    description: str = ""


class CodegenSettings(BaseModel):
    """Filenames used for the backend and exported-locals artifacts.

    Unset fields inherit from the nearest ancestor that sets them.
    """

    model_config = ConfigDict(extra="forbid")

    backend_config_filename: str | None = None
    locals_filename: str | None = None


class DirConfig(BaseModel):
    """Everything declared in one directory's ``stackgen.yml``."""

    model_config = ConfigDict(extra="forbid")

    project: dict[str, Any] | None = None
    stack: StackSection | None = None
    codegen: CodegenSettings | None = None
    globals: dict[str, Any] = Field(default_factory=dict)
    backend: BackendBlock | None = None
    export_as_locals: dict[str, Any] = Field(default_factory=dict)
    generate_hcl: dict[str, GenerateHclBlock | None] = Field(default_factory=dict)

    @property
    def is_stack(self) -> bool:
        return self.stack is not None

    @property
    def is_project_root(self) -> bool:
        return self.project is not None

