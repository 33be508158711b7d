"""
Globals — project-wide named values injected into generation expressions.

Globals are declared under ``globals:`` in any stackgen.yml between the
project root and a stack.  A deeper directory overrides a global of the
same name.  Globals may reference each other (``${global.env}``); they
are evaluated in rounds until every one resolves or no progress is made.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from stackgen.core.config.hierarchy import config_chain
from stackgen.core.engine.evaluator import EvaluationError, Evaluator
from stackgen.core.models.stack import Stack

logger = logging.getLogger(__name__)


class Globals:
    """Evaluated globals of a single stack."""

    def __init__(self, attributes: dict[str, Any] | None = None) -> None:
        self._attributes = dict(attributes or {})

    def attributes(self) -> dict[str, Any]:
        return dict(self._attributes)

    def __len__(self) -> int:
        return len(self._attributes)

    def __repr__(self) -> str:
        return f"Globals({self._attributes!r})"


def load_stack_globals(root: Path, stack: Stack) -> Globals:
    """Load, merge and evaluate the globals visible from a stack.

    Raises:
        ConfigError: If a config in the chain is invalid.
        EvaluationError: If some globals can't be evaluated.
    """
    pending: dict[str, Any] = {}
    for _, cfg in config_chain(root, stack.abs_path):
        pending.update(cfg.globals)

    resolved: dict[str, Any] = {}
    while pending:
        errors: dict[str, EvaluationError] = {}
        progressed = False

        for name, expr in list(pending.items()):
            evaluator = Evaluator(stack.abs_path)
            evaluator.set_namespace("stack", stack.metadata())
            evaluator.set_namespace("global", resolved)
            try:
                resolved[name] = evaluator.eval(expr)
            except EvaluationError as e:
                errors[name] = e
                continue
            del pending[name]
            progressed = True

        if not progressed:
            details = "; ".join(f"global.{n}: {e}" for n, e in sorted(errors.items()))
            raise EvaluationError(f"unable to evaluate globals for {stack}: {details}")

    logger.debug("Loaded %d globals for %s", len(resolved), stack)
    return Globals(resolved)

