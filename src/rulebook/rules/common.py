# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Built-in rules registered by ensure_rules_registered()."""

from __future__ import annotations

import math
from collections.abc import Sized
from typing import Any

from rulebook._sentinel import Undefined
from rulebook.errors import InvalidRuleError

from .rule import Rule, RuleContext, RuleOutcome

__all__ = (
    "BUILTIN_RULES",
    "BooleanRule",
    "EmptyRule",
    "MaxLengthRule",
    "MinLengthRule",
    "NullableRule",
    "NumberRule",
    "OptionalRule",
    "RequiredRule",
    "StringRule",
)

_BOOLEAN_STRINGS = frozenset({"0", "1", "true", "false"})


class BooleanRule(Rule):
    """Accept values that can be read as a boolean.

    Valid: True/False, the numbers 0 and 1 (including -0.0 and 1.0), and the
    strings "0", "1", "true", "false" in any case. Whitespace is significant.
    """

    name = "Boolean"

    def check(
        self,
        value: Any,
        params: tuple[Any, ...] = (),
        ctx: RuleContext | None = None,
    ) -> RuleOutcome:
        if isinstance(value, bool):
            return RuleOutcome.passed()
        if isinstance(value, (int, float)):
            if value == 0 or value == 1:
                return RuleOutcome.passed()
        elif isinstance(value, str) and value.lower() in _BOOLEAN_STRINGS:
            return RuleOutcome.passed()
        return RuleOutcome.failed(
            f"Boolean: {value!r} is not one of true, false, 1, 0, '1', '0'"
        )


class RequiredRule(Rule):
    """Reject None, missing values, empty strings and empty containers."""

    name = "Required"

    def check(
        self,
        value: Any,
        params: tuple[Any, ...] = (),
        ctx: RuleContext | None = None,
    ) -> RuleOutcome:
        if value is None or value is Undefined:
            return RuleOutcome.failed("Required: a value is required")
        if isinstance(value, (str, bytes, list, tuple, dict, set, frozenset)):
            if len(value) == 0:
                return RuleOutcome.failed("Required: value must not be empty")
        return RuleOutcome.passed()


class StringRule(Rule):
    name = "String"

    def check(
        self,
        value: Any,
        params: tuple[Any, ...] = (),
        ctx: RuleContext | None = None,
    ) -> RuleOutcome:
        if isinstance(value, str):
            return RuleOutcome.passed()
        return RuleOutcome.failed(f"String: expected a string, got {type(value).__name__}")


class NumberRule(Rule):
    """Finite int or float. Booleans are not numbers here."""

    name = "Number"

    def check(
        self,
        value: Any,
        params: tuple[Any, ...] = (),
        ctx: RuleContext | None = None,
    ) -> RuleOutcome:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return RuleOutcome.failed(f"Number: expected a number, got {value!r}")
        if isinstance(value, float) and not math.isfinite(value):
            return RuleOutcome.failed(f"Number: {value!r} is not finite")
        return RuleOutcome.passed()


class _LengthRule(Rule):
    def _limit(self, params: tuple[Any, ...]) -> int:
        if len(params) != 1 or isinstance(params[0], bool) or not isinstance(params[0], int):
            raise InvalidRuleError(
                f"{self.name} expects one integer parameter, e.g. '{self.name}[3]'",
                details={"rule": self.name, "params": list(params)},
            )
        return params[0]

    @staticmethod
    def _length(value: Any) -> int | None:
        if isinstance(value, Sized):
            return len(value)
        return None


class MinLengthRule(_LengthRule):
    name = "MinLength"

    def check(
        self,
        value: Any,
        params: tuple[Any, ...] = (),
        ctx: RuleContext | None = None,
    ) -> RuleOutcome:
        limit = self._limit(params)
        length = self._length(value)
        if length is None:
            return RuleOutcome.failed(f"MinLength: {value!r} has no length")
        if length < limit:
            return RuleOutcome.failed(
                f"MinLength: length {length} is shorter than {limit}"
            )
        return RuleOutcome.passed()


class MaxLengthRule(_LengthRule):
    name = "MaxLength"

    def check(
        self,
        value: Any,
        params: tuple[Any, ...] = (),
        ctx: RuleContext | None = None,
    ) -> RuleOutcome:
        limit = self._limit(params)
        length = self._length(value)
        if length is None:
            return RuleOutcome.failed(f"MaxLength: {value!r} has no length")
        if length > limit:
            return RuleOutcome.failed(
                f"MaxLength: length {length} is longer than {limit}"
            )
        return RuleOutcome.passed()


# Skip markers: evaluated only when the value does not trigger the skip


class NullableRule(Rule):
    """Skip all rules of a value that is None or missing from the data."""

    name = "Nullable"

    def check(self, value, params=(), ctx=None):
        return True

    def skips(self, value: Any) -> bool:
        return value is None or value is Undefined


class OptionalRule(Rule):
    """Skip all rules of a value that is missing from the data."""

    name = "Optional"

    def check(self, value, params=(), ctx=None):
        return True

    def skips(self, value: Any) -> bool:
        return value is Undefined


class EmptyRule(Rule):
    """Skip all rules of an empty string."""

    name = "Empty"

    def check(self, value, params=(), ctx=None):
        return True

    def skips(self, value: Any) -> bool:
        return isinstance(value, str) and value == ""


BUILTIN_RULES: tuple[Rule, ...] = (
    BooleanRule(),
    RequiredRule(),
    StringRule(),
    NumberRule(),
    MinLengthRule(),
    MaxLengthRule(),
    NullableRule(),
    OptionalRule(),
    EmptyRule(),
)
