"""
Expression evaluator — ``${ ... }`` expressions over injected namespaces.

Configuration values are plain YAML data.  Strings may contain Jinja2
expressions delimited by ``${`` and ``}``:

    "${global.env}"                  whole-string expression, the native
                                     value is returned (list, dict, int…)
    "prefix-${stack.name}-suffix"    interpolation, always a string
    "plain"                          returned unchanged

Only the ``${ ... }`` spans are evaluated; everything around them is
literal text (Jinja's ``{% %}`` / ``{# #}`` syntax has no meaning here).
Expressions run in a Jinja2 sandbox, so configuration can read values but
never reach Python internals.  On mappings, ``a.b`` always means the key
``b``, never a dict method.

Lists and mappings are evaluated recursively.  Undefined names and
attributes are errors, never empty strings.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from jinja2 import StrictUndefined, TemplateError, Undefined
from jinja2.sandbox import SandboxedEnvironment

logger = logging.getLogger(__name__)

_EXPR_START = "${"

# One expression span, e.g. "${ global.tags }".  Braces can't nest.
_EXPR = re.compile(r"\$\{([^{}]*)\}")


class EvaluationError(Exception):
    """Raised when an expression cannot be evaluated."""


class _ExpressionEnvironment(SandboxedEnvironment):
    """Sandbox where attribute access on mappings is key lookup only."""

    def getattr(self, obj: Any, attribute: str) -> Any:
        if isinstance(obj, Mapping):
            try:
                return obj[attribute]
            except KeyError:
                return self.undefined(obj=obj, name=attribute)
        return super().getattr(obj, attribute)


class Evaluator:
    """Evaluates configuration values for one scope (usually a stack).

    Namespaces must be injected with ``set_namespace`` before evaluating.
    """

    def __init__(self, scope_dir: Path) -> None:
        self.scope_dir = scope_dir
        self._namespaces: dict[str, dict[str, Any]] = {}
        self._env = _ExpressionEnvironment(undefined=StrictUndefined, autoescape=False)

    def set_namespace(self, name: str, values: Mapping[str, Any]) -> None:
        """Make ``values`` reachable as ``<name>.<key>`` in expressions."""
        if not name.isidentifier():
            raise EvaluationError(f"invalid namespace name {name!r}")
        if not isinstance(values, Mapping):
            raise EvaluationError(
                f"namespace {name!r} must be a mapping, got {type(values).__name__}"
            )
        self._namespaces[name] = dict(values)

    def eval(self, value: Any) -> Any:
        """Evaluate a configuration value, recursing into lists and mappings."""
        if isinstance(value, str):
            return self._eval_string(value)
        if isinstance(value, list):
            return [self.eval(item) for item in value]
        if isinstance(value, Mapping):
            return {key: self.eval(item) for key, item in value.items()}
        return value

    def _eval_string(self, value: str) -> Any:
        if _EXPR_START not in value:
            return value

        whole = _EXPR.fullmatch(value)
        if whole:
            return self._eval_expression(whole.group(1), value)

        parts: list[str] = []
        pos = 0
        for match in _EXPR.finditer(value):
            parts.append(self._literal(value[pos:match.start()], value))
            parts.append(self._interpolate(self._eval_expression(match.group(1), value), value))
            pos = match.end()
        parts.append(self._literal(value[pos:], value))
        return "".join(parts)

    def _eval_expression(self, expr: str, source: str) -> Any:
        try:
            result = self._env.compile_expression(
                expr.strip(), undefined_to_none=False,
            )(**self._namespaces)
            if isinstance(result, Undefined):
                # Touching a StrictUndefined raises with a useful message
                str(result)
            return result
        except TemplateError as e:
            raise EvaluationError(f"evaluating {source!r} in {self.scope_dir}: {e}") from e
        except (TypeError, ValueError, ArithmeticError, LookupError) as e:
            raise EvaluationError(f"evaluating {source!r} in {self.scope_dir}: {e}") from e

    def _literal(self, text: str, source: str) -> str:
        if _EXPR_START in text:
            raise EvaluationError(
                f"evaluating {source!r} in {self.scope_dir}: unterminated or nested '${{'"
            )
        return text

    def _interpolate(self, result: Any, source: str) -> str:
        if isinstance(result, bool):
            return "true" if result else "false"
        if isinstance(result, (str, int, float)):
            return str(result)
        raise EvaluationError(
            f"evaluating {source!r} in {self.scope_dir}: "
            f"can't interpolate {type(result).__name__} into a string"
        )
