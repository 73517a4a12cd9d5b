# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Rule base classes.

A rule is anything exposing ``name`` and ``check(value, params, ctx)``.
``check`` may be sync or async and returns one of:
- True or None: pass
- False: fail with the configured default message
- str: fail with that message
- RuleOutcome: explicit result

Example:
    class Even(Rule):
        name = "Even"

        def check(self, value, params=(), ctx=None):
            return isinstance(value, int) and value % 2 == 0

    @function_rule("Positive")
    async def positive(value):
        return value > 0 or "Positive: value must be greater than zero"
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from rulebook.errors import InvalidRuleError

if TYPE_CHECKING:
    from rulebook.validator import Validator

__all__ = (
    "FunctionRule",
    "Rule",
    "RuleContext",
    "RuleOutcome",
    "function_rule",
    "to_outcome",
)


@dataclass(frozen=True, slots=True)
class RuleOutcome:
    """Normalized result of one rule check."""

    ok: bool
    message: str | None = None

    @classmethod
    def passed(cls) -> RuleOutcome:
        return cls(ok=True)

    @classmethod
    def failed(cls, message: str | None = None) -> RuleOutcome:
        return cls(ok=False, message=message)


@dataclass(frozen=True, slots=True)
class RuleContext:
    """Call-site information handed to rules.

    Attributes:
        field: Field name when validating a target, else None.
        data: Whole object or mapping being validated (target validation).
        context: Arbitrary caller value passed through validate calls.
        validator: Running Validator, used by composite rules to recurse.
    """

    field: str | None = None
    data: Any = None
    context: Any = None
    validator: Validator | None = None


class Rule:
    """Base class for validation rules.

    Subclasses set ``name`` and implement ``check``. Rules must be stateless:
    one instance serves every concurrent validation.
    """

    name: str = ""

    def __init__(self, name: str | None = None) -> None:
        if name is not None:
            self.name = name
        if not self.name:
            raise InvalidRuleError(
                f"{type(self).__name__} requires a non-empty name",
                details={"rule": type(self).__name__},
            )

    def check(
        self,
        value: Any,
        params: tuple[Any, ...] = (),
        ctx: RuleContext | None = None,
    ) -> Any:
        raise NotImplementedError

    def skips(self, value: Any) -> bool:
        """Return True to short-circuit the whole run as successful for value."""
        return False

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class FunctionRule(Rule):
    """Adapt a plain (sync or async) function into a Rule.

    The function receives as many of ``(value, params, ctx)`` as its
    positional signature accepts.
    """

    def __init__(self, func: Callable[..., Any], name: str | None = None) -> None:
        self.func = func
        self._arity = _positional_arity(func)
        super().__init__(name or getattr(func, "__name__", None))

    def check(
        self,
        value: Any,
        params: tuple[Any, ...] = (),
        ctx: RuleContext | None = None,
    ) -> Any:
        return self.func(*(value, params, ctx)[: self._arity])

    def __repr__(self) -> str:
        return f"FunctionRule(name={self.name!r}, func={self.func!r})"


def _positional_arity(func: Callable[..., Any]) -> int:
    try:
        sig = inspect.signature(func)
    except (TypeError, ValueError):
        return 1

    count = 0
    for param in sig.parameters.values():
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            return 3
        if param.kind in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            count += 1
    return max(1, min(count, 3))


def function_rule(name: str | None = None) -> Callable[[Callable[..., Any]], FunctionRule]:
    """Decorator turning a function into a FunctionRule.

    Args:
        name: Rule name. Defaults to the function name.

    Returns:
        Decorator producing a FunctionRule (not registered anywhere).
    """

    def decorator(func: Callable[..., Any]) -> FunctionRule:
        return FunctionRule(func, name=name)

    return decorator


def to_outcome(result: Any) -> RuleOutcome | None:
    """Normalize a check return value. Returns None for unsupported types."""
    if isinstance(result, RuleOutcome):
        return result
    if result is True or result is None:
        return RuleOutcome.passed()
    if result is False:
        return RuleOutcome.failed()
    if isinstance(result, str):
        return RuleOutcome.failed(result or None)
    return None
