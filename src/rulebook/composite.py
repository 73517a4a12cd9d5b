# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Composite rules built from other rule specs.

Composite rules are inline: they are bound as instances (see OneOf, AllOf,
ArrayOf, ValidateNested markers in rulebook.fields) and never registered by
name. They recurse through the running validator found in RuleContext.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from rulebook.binding import RuleBinding, RuleSpec, to_bindings
from rulebook.config import ValidationMode
from rulebook.errors import InvalidRuleError
from rulebook.rules.rule import Rule, RuleContext

if TYPE_CHECKING:
    from rulebook.pipeline import ValidationPipeline
    from rulebook.validator import Validator

__all__ = ("AllOfRule", "ArrayOfRule", "NestedRule", "OneOfRule")


def _validator(ctx: RuleContext | None, rule_name: str) -> Validator:
    if ctx is None or ctx.validator is None:
        raise InvalidRuleError(
            f"{rule_name} must run inside a Validator",
            details={"rule": rule_name},
        )
    return ctx.validator


class _MultiRule(Rule):
    """Base for rules combining several sub-bindings."""

    def __init__(self, *specs: RuleSpec) -> None:
        super().__init__()
        self.bindings: tuple[RuleBinding, ...] = to_bindings(specs)
        if not self.bindings:
            raise InvalidRuleError(f"{self.name} requires at least one rule")

    async def _run(
        self,
        pipeline: ValidationPipeline,
        value: Any,
        bindings: tuple[RuleBinding, ...],
        mode: ValidationMode,
        ctx: RuleContext,
    ):
        return await pipeline.run(
            value,
            bindings,
            mode,
            field=ctx.field,
            data=ctx.data,
            context=ctx.context,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({', '.join(b.name for b in self.bindings)})"


class OneOfRule(_MultiRule):
    """Pass when any sub-rule passes. Sub-rules are tried in order."""

    name = "OneOf"

    async def check(self, value, params=(), ctx=None):
        pipeline = _validator(ctx, self.name).pipeline
        messages: list[str] = []
        for binding in self.bindings:
            result = await self._run(
                pipeline, value, (binding,), ValidationMode.FAIL_FAST, ctx
            )
            if result.success:
                return True
            messages.append(result.errors[0].message)
        return f"OneOf: {'; '.join(messages)}"


class AllOfRule(_MultiRule):
    """Pass when every sub-rule passes; the message lists every failure."""

    name = "AllOf"

    async def check(self, value, params=(), ctx=None):
        pipeline = _validator(ctx, self.name).pipeline
        result = await self._run(
            pipeline, value, self.bindings, ValidationMode.COLLECT_ALL, ctx
        )
        if result.success:
            return True
        return f"AllOf: {'; '.join(err.message for err in result.errors)}"


class ArrayOfRule(_MultiRule):
    """Apply the sub-rules to every item of a list or tuple."""

    name = "ArrayOf"

    async def check(self, value, params=(), ctx=None):
        if not isinstance(value, (list, tuple)):
            return f"ArrayOf: expected a list, got {type(value).__name__}"

        pipeline = _validator(ctx, self.name).pipeline
        failures: list[str] = []
        for index, item in enumerate(value):
            result = await self._run(
                pipeline, item, self.bindings, ValidationMode.COLLECT_ALL, ctx
            )
            for err in result.errors:
                failures.append(f"[{index}] {err.message}")
        if failures:
            return f"ArrayOf: {'; '.join(failures)}"
        return True


class NestedRule(Rule):
    """Validate the value as a target of another class."""

    name = "ValidateNested"

    def __init__(self, target: type) -> None:
        if not isinstance(target, type):
            raise InvalidRuleError(
                "ValidateNested requires a class",
                details={"target": repr(target)},
            )
        super().__init__()
        self.target = target

    async def check(self, value, params=(), ctx=None):
        validator = _validator(ctx, self.name)
        if not isinstance(value, (self.target, Mapping)):
            return (
                f"ValidateNested: expected {self.target.__name__} or a mapping, "
                f"got {type(value).__name__}"
            )
        result = await validator.validate_target(
            self.target, value, context=ctx.context
        )
        if result.success:
            return True
        return f"ValidateNested: {'; '.join(err.message for err in result.errors)}"

    def __repr__(self) -> str:
        return f"NestedRule({self.target.__name__})"
