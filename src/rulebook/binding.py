# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""RuleBinding and rule-spec parsing.

Accepted rule specs:
    "Boolean"                 # name, no params
    "MinLength[3]"            # name with literal params
    "Between[1, 10]"
    {"MinLength": [3]}        # one-key mapping
    RuleBinding(...)          # used as-is
    BooleanRule()             # inline Rule instance
    lambda v: v > 0           # callable, wrapped in FunctionRule
"""

from __future__ import annotations

import ast
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from rulebook.errors import InvalidRuleError
from rulebook.rules.rule import FunctionRule, Rule

__all__ = ("RuleBinding", "RuleSpec", "parse_rule_string", "to_binding", "to_bindings")

RuleSpec = Any
"""str | Mapping[str, Any] | RuleBinding | Rule | Callable"""

_BRACKETED = re.compile(r"^(?P<name>[^\[\]]+)\[(?P<params>.*)\]$", re.DOTALL)


@dataclass(frozen=True)
class RuleBinding:
    """A rule reference plus its parameters.

    Attributes:
        rule: Registered rule name or an inline Rule instance.
        params: Positional parameters handed to ``check``.
    """

    rule: str | Rule
    params: tuple[Any, ...] = ()

    @property
    def name(self) -> str:
        return self.rule if isinstance(self.rule, str) else self.rule.name

    def __repr__(self) -> str:
        if self.params:
            return f"RuleBinding({self.name}{list(self.params)})"
        return f"RuleBinding({self.name})"


def _parse_params(raw: str) -> tuple[Any, ...]:
    raw = raw.strip()
    if not raw:
        return ()
    try:
        return ast.literal_eval(f"({raw},)")
    except (ValueError, SyntaxError):
        # Bare words such as "Enum[red, green]"
        return tuple(p.strip() for p in raw.split(",") if p.strip())


def parse_rule_string(spec: str) -> RuleBinding:
    """Parse ``"Name"`` or ``"Name[p1, p2]"`` into a RuleBinding.

    Raises:
        InvalidRuleError: If the string is empty or brackets are malformed.
    """
    if not spec:
        raise InvalidRuleError("Rule name must be a non-empty string")

    match = _BRACKETED.match(spec)
    if match is not None:
        name = match.group("name").strip()
        return RuleBinding(name, _parse_params(match.group("params")))

    if "[" in spec or "]" in spec:
        raise InvalidRuleError(
            f"Malformed rule spec '{spec}'. Expected 'Name' or 'Name[params]'",
            details={"spec": spec},
        )
    return RuleBinding(spec)


def to_binding(spec: RuleSpec) -> RuleBinding:
    """Normalize one rule spec into a RuleBinding.

    Raises:
        InvalidRuleError: If spec is of an unsupported shape.
    """
    if isinstance(spec, RuleBinding):
        return spec
    if isinstance(spec, str):
        return parse_rule_string(spec)
    if isinstance(spec, Rule):
        return RuleBinding(spec)
    if isinstance(spec, Mapping):
        if len(spec) != 1:
            raise InvalidRuleError(
                "Mapping rule spec must have exactly one key",
                details={"keys": list(spec)},
            )
        ((name, params),) = spec.items()
        if not isinstance(name, str) or not name:
            raise InvalidRuleError("Rule name must be a non-empty string")
        if params is None:
            params = ()
        elif not isinstance(params, (list, tuple)):
            params = (params,)
        return RuleBinding(name, tuple(params))
    if isinstance(spec, type):
        raise InvalidRuleError(
            f"Rule spec must be an instance, got class {spec.__name__}",
            details={"type": spec.__name__},
        )
    if callable(getattr(spec, "check", None)) and getattr(spec, "name", None):
        return RuleBinding(spec)
    if callable(spec):
        return RuleBinding(FunctionRule(spec))
    raise InvalidRuleError(
        f"Unsupported rule spec {spec!r}",
        details={"type": type(spec).__name__},
    )


def to_bindings(specs: RuleSpec | Iterable[RuleSpec] | None) -> tuple[RuleBinding, ...]:
    """Normalize a spec or a sequence of specs, preserving order."""
    if specs is None:
        return ()
    if isinstance(specs, (str, Mapping, RuleBinding, Rule)) or callable(specs):
        return (to_binding(specs),)
    return tuple(to_binding(s) for s in specs)
