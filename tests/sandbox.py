"""
Project sandbox — builds stackgen projects on disk for tests.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from stackgen.core.config.loader import CONFIG_FILE
from stackgen.core.config.stack_loader import list_stacks
from stackgen.core.models.report import Report
from stackgen.core.models.stack import Stack
from stackgen.core.services.codegen_ops import generate


class DirEntry:
    """A directory inside the sandbox project."""

    def __init__(self, root: Path, relpath: str) -> None:
        self.root = root
        self.path = root / relpath if relpath not in ("", ".") else root
        self.path.mkdir(parents=True, exist_ok=True)

    def create_config(self, config: dict[str, Any] | str) -> Path:
        """Write (overwrite) this directory's stackgen.yml."""
        text = config if isinstance(config, str) else yaml.safe_dump(config, sort_keys=False)
        target = self.path / CONFIG_FILE
        target.write_text(text, encoding="utf-8")
        return target

    def write_file(self, name: str, content: str) -> Path:
        target = self.path / name
        target.write_text(content, encoding="utf-8")
        return target

    def read_file(self, name: str) -> str:
        return (self.path / name).read_text(encoding="utf-8")

    def has_file(self, name: str) -> bool:
        return (self.path / name).is_file()


class StackEntry(DirEntry):
    """A stack directory: its config always keeps a ``stack`` section."""

    def create_config(self, config: dict[str, Any] | str | None = None) -> Path:
        if config is None:
            config = {}
        if isinstance(config, dict) and "stack" not in config:
            config = {"stack": {}, **config}
        return super().create_config(config)

    def load(self) -> Stack:
        """The stack as discovered by a walk of the whole project."""
        stacks = {stack.abs_path: stack for stack in list_stacks(self.root)}
        return stacks[self.path]


class Sandbox:
    """A stackgen project rooted in a temporary directory."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)
        (self.root / CONFIG_FILE).write_text("project: {}\n", encoding="utf-8")

    def create_stack(self, relpath: str) -> StackEntry:
        entry = StackEntry(self.root, relpath)
        entry.create_config()
        return entry

    def dir_entry(self, relpath: str) -> DirEntry:
        return DirEntry(self.root, relpath)

    def root_config(self, config: dict[str, Any]) -> Path:
        """Overwrite the root stackgen.yml, keeping it the project root."""
        return self.dir_entry(".").create_config({"project": {}, **config})

    def generate(self) -> Report:
        """Generate code for the whole project, failing the test on errors."""
        report = generate(self.root, self.root)
        assert not report.has_failures(), report.full()
        return report


# ── Config builders ─────────────────────────────────────────────


def block(block_type: str, *labels: str, blocks: list[dict] | None = None, **attributes: Any) -> dict:
    """An HCL block as declared in stackgen.yml."""
    data: dict[str, Any] = {"type": block_type}
    if labels:
        data["labels"] = list(labels)
    if attributes:
        data["attributes"] = attributes
    if blocks:
        data["blocks"] = blocks
    return data


def generate_hcl(files: dict[str, list[dict] | None]) -> dict:
    """A ``generate_hcl`` section: filename → top-level blocks (None = empty)."""
    return {
        "generate_hcl": {
            name: ({"content": {"blocks": blocks}} if blocks else None)
            for name, blocks in files.items()
        }
    }
