# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""ValidationPipeline: run an ordered list of rule bindings against one value.

Rules run strictly in binding order, each awaited before the next, so
fail-fast results are deterministic. Separate runs share no mutable state and
may execute concurrently.
"""

from __future__ import annotations

import inspect
import logging
import time
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from rulebook.binding import RuleBinding, RuleSpec, to_bindings
from rulebook.config import ValidationMode, ValidatorConfig
from rulebook.errors import RuleExecutionError, RulebookError
from rulebook.result import RuleViolation, ValidationResult
from rulebook.rules.registry import RuleRegistry
from rulebook.rules.rule import Rule, RuleContext, RuleOutcome, to_outcome

if TYPE_CHECKING:
    from rulebook.validator import Validator

__all__ = ("ValidationPipeline",)

logger = logging.getLogger(__name__)


class ValidationPipeline:
    """Execute rule bindings for a single value.

    Args:
        registry: Source for named rules.
        config: Message and mode defaults.
        validator: Owning Validator, exposed to rules via RuleContext.
    """

    def __init__(
        self,
        registry: RuleRegistry,
        config: ValidatorConfig | None = None,
        validator: Validator | None = None,
    ) -> None:
        self.registry = registry
        self.config = config or ValidatorConfig()
        self.validator = validator

    def resolve(self, binding: RuleBinding) -> Rule:
        """Rule for a binding. Raises UnknownRuleError for unknown names."""
        if isinstance(binding.rule, str):
            return self.registry.resolve(binding.rule)
        return binding.rule

    async def run(
        self,
        value: Any,
        bindings: Iterable[RuleSpec],
        mode: ValidationMode = ValidationMode.FAIL_FAST,
        *,
        field: str | None = None,
        data: Any = None,
        context: Any = None,
    ) -> ValidationResult:
        """Check ``value`` against ``bindings`` in order.

        Args:
            value: Value under validation. Never mutated.
            bindings: Rule specs, normalized with to_bindings.
            mode: FAIL_FAST stops at the first failure, COLLECT_ALL runs all.
            field: Field name recorded on violations.
            data: Enclosing object, visible to rules through RuleContext.
            context: Caller value passed through to rules.

        Returns:
            ValidationResult with violations in binding order.

        Raises:
            UnknownRuleError: A binding names an unregistered rule. Raised
                before any rule runs.
            RuleExecutionError: A rule raised while checking.
        """
        started = time.perf_counter()
        resolved = [(b, self.resolve(b)) for b in to_bindings(bindings)]

        if any(_skips(rule, value) for _, rule in resolved):
            return ValidationResult(
                success=True,
                value=value,
                duration=time.perf_counter() - started,
            )

        ctx = RuleContext(
            field=field,
            data=data,
            context=context,
            validator=self.validator,
        )
        errors: list[RuleViolation] = []
        for binding, rule in resolved:
            outcome = await self._invoke(rule, binding, value, ctx)
            if outcome.ok:
                continue
            errors.append(
                RuleViolation(
                    rule_name=rule.name,
                    message=self._message(rule.name, outcome.message, value),
                    value=value,
                    params=binding.params,
                    field=field,
                )
            )
            if mode is ValidationMode.FAIL_FAST:
                break

        if errors:
            logger.debug(
                "Validation failed%s: %s",
                f" for field '{field}'" if field else "",
                [e.rule_name for e in errors],
            )
        return ValidationResult(
            success=not errors,
            value=value,
            errors=errors,
            duration=time.perf_counter() - started,
        )

    async def _invoke(
        self,
        rule: Rule,
        binding: RuleBinding,
        value: Any,
        ctx: RuleContext,
    ) -> RuleOutcome:
        try:
            result = rule.check(value, binding.params, ctx)
            if inspect.isawaitable(result):
                result = await result
        except RulebookError:
            raise
        except Exception as exc:
            raise RuleExecutionError(
                f"Rule '{rule.name}' raised {type(exc).__name__}: {exc}",
                details={
                    "rule": rule.name,
                    "field": ctx.field,
                    "params": list(binding.params),
                },
            ) from exc

        outcome = to_outcome(result)
        if outcome is None:
            raise RuleExecutionError(
                f"Rule '{rule.name}' returned unsupported value {result!r}",
                details={"rule": rule.name, "type": type(result).__name__},
            )
        return outcome

    def _message(self, rule_name: str, message: str | None, value: Any) -> str:
        if not message:
            message = self.config.default_message.format(rule=rule_name, value=value)
        if rule_name not in message:
            message = f"{rule_name}: {message}"
        return message


def _skips(rule: Rule, value: Any) -> bool:
    # Plain objects with only name and check never skip
    skips = getattr(rule, "skips", None)
    return callable(skips) and bool(skips(value))
