"""
Code generation reports — the sole failure channel of the codegen core.

A ``Report`` distinguishes three outcomes:

    bootstrap failure   stack enumeration failed, nothing was processed
    stack failure       one stack failed; its created/changed/deleted sets
                        still describe what really happened on disk
    success             possibly with empty sets, meaning "up to date"
"""

from __future__ import annotations

from dataclasses import dataclass, field

from stackgen.core.models.stack import Stack


@dataclass
class StackReport:
    """Outcome of generating code for a single stack."""

    stack: Stack
    created: list[str] = field(default_factory=list)
    changed: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    error: Exception | None = None

    def add_created(self, filename: str) -> None:
        self.created.append(filename)

    def add_changed(self, filename: str) -> None:
        self.changed.append(filename)

    def add_deleted(self, filename: str) -> None:
        self.deleted.append(filename)

    def finalize(self) -> StackReport:
        """Sort every filename list.  Called once, when the stack is done."""
        self.created.sort()
        self.changed.sort()
        self.deleted.sort()
        return self

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def is_empty(self) -> bool:
        return not (self.created or self.changed or self.deleted)

    def to_dict(self) -> dict:
        return {
            "stack": self.stack.path,
            "created": self.created,
            "changed": self.changed,
            "deleted": self.deleted,
            "error": str(self.error) if self.error else None,
        }


@dataclass
class Report:
    """Aggregated outcome of a code generation run.

    ``stacks`` is keyed by stack project path, in discovery order.
    When ``bootstrap_error`` is set, ``stacks`` is always empty.
    """

    stacks: dict[str, StackReport] = field(default_factory=dict)
    bootstrap_error: Exception | None = None

    def add_stack_report(self, stack_report: StackReport) -> None:
        self.stacks[stack_report.stack.path] = stack_report.finalize()

    def add_failure(self, stack: Stack, error: Exception) -> None:
        self.add_stack_report(StackReport(stack=stack, error=error))

    def fail_bootstrap(self, error: Exception) -> None:
        self.stacks.clear()
        self.bootstrap_error = error

    @property
    def successes(self) -> list[StackReport]:
        return [r for r in self.stacks.values() if r.ok]

    @property
    def failures(self) -> list[StackReport]:
        return [r for r in self.stacks.values() if not r.ok]

    def has_failures(self) -> bool:
        return self.bootstrap_error is not None or bool(self.failures)

    def to_dict(self) -> dict:
        return {
            "bootstrap_error": str(self.bootstrap_error) if self.bootstrap_error else None,
            "stacks": [r.to_dict() for r in self.stacks.values()],
        }

    def full(self) -> str:
        """Human-readable rendering of the whole report."""
        if self.bootstrap_error is not None:
            return (
                "Fatal failure while initializing code generation: "
                f"{self.bootstrap_error}"
            )

        successes = [r for r in self.successes if not r.is_empty]
        failures = self.failures
        if not successes and not failures:
            return "Nothing to do, generated code is up to date"

        lines = ["Code generation report", ""]

        if successes:
            lines += ["Successes:", ""]
            for r in successes:
                lines.append(f"- {r.stack.path}")
                lines += _file_lines(r)
                lines.append("")

        if failures:
            lines += ["Failures:", ""]
            for r in failures:
                lines.append(f"- {r.stack.path}")
                lines.append(f"\terror: {r.error}")
                lines += _file_lines(r)
                lines.append("")

        lines.append(
            "Hint: '+', '~' and '-' means the file was created, changed "
            "and deleted, respectively."
        )
        return "\n".join(lines)


def _file_lines(r: StackReport) -> list[str]:
    return (
        [f"\t[+] {name}" for name in r.created]
        + [f"\t[~] {name}" for name in r.changed]
        + [f"\t[-] {name}" for name in r.deleted]
    )


@dataclass
class CheckReport:
    """Outdated files per stack, as reported by a check run."""

    outdated: dict[str, list[str]] = field(default_factory=dict)
    errors: dict[str, Exception] = field(default_factory=dict)
    bootstrap_error: Exception | None = None

    def has_outdated(self) -> bool:
        return any(self.outdated.values())

    def has_failures(self) -> bool:
        return self.bootstrap_error is not None or bool(self.errors)

    def to_dict(self) -> dict:
        return {
            "bootstrap_error": str(self.bootstrap_error) if self.bootstrap_error else None,
            "outdated": {path: files for path, files in self.outdated.items() if files},
            "errors": {path: str(err) for path, err in self.errors.items()},
        }
