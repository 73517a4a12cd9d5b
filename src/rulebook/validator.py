# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Validator facade: the public entry points.

A Validator is an explicit context object bundling a RuleRegistry, a
FieldMetadataStore and a ValidatorConfig. Module-level ``validate`` and
``validate_target`` use a process-wide default Validator whose registry is
bootstrapped with the built-in rules.

Example:
    from rulebook import IsBoolean, validate, validate_target, validated

    result = await validate(1, ["Boolean"])
    assert result.success

    @validated
    class Flags:
        enabled: Annotated[str, IsBoolean()]

    flags = Flags()
    flags.enabled = "maybe"
    outcome = await validate_target(Flags, flags)
    assert outcome.errors[0].rule_name == "Boolean"
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable
from typing import Any

from rulebook.binding import RuleSpec
from rulebook.config import ValidationMode, ValidatorConfig
from rulebook.fields import FieldMetadataStore, get_default_store
from rulebook.pipeline import ValidationPipeline
from rulebook.result import TargetResult, ValidationResult
from rulebook.rules.registry import (
    RuleRegistry,
    ensure_rules_registered,
    get_default_registry,
)
from rulebook.target import TargetValidator

__all__ = (
    "Validator",
    "get_default_validator",
    "reset_default_validator",
    "validate",
    "validate_target",
)


class Validator:
    """Wire registry, field store, pipeline and target validation together.

    Args:
        registry: Rule source. Defaults to the process-wide registry. It must
            be bootstrapped before validating (see ensure_rules_registered).
        store: Field bindings. Defaults to the process-wide store.
        config: Validation defaults.
    """

    def __init__(
        self,
        registry: RuleRegistry | None = None,
        store: FieldMetadataStore | None = None,
        config: ValidatorConfig | None = None,
    ) -> None:
        self.registry = registry if registry is not None else get_default_registry()
        self.store = store if store is not None else get_default_store()
        self.config = config or ValidatorConfig()
        self.pipeline = ValidationPipeline(self.registry, self.config, validator=self)
        self.targets = TargetValidator(self.pipeline, self.store, self.config)

    async def validate(
        self,
        value: Any,
        rules: RuleSpec | Iterable[RuleSpec],
        *,
        mode: ValidationMode | None = None,
        context: Any = None,
    ) -> ValidationResult:
        """Validate a bare value.

        Args:
            value: Value to check.
            rules: Rule spec or ordered rule specs ("Boolean", "MinLength[3]",
                {"MaxLength": [5]}, Rule instances, callables).
            mode: Defaults to config.default_mode (fail-fast).
            context: Caller value passed through to rules.

        Returns:
            ValidationResult. Failures are returned, never raised.
        """
        return await self.pipeline.run(
            value,
            rules,
            mode or self.config.default_mode,
            context=context,
        )

    async def validate_target(
        self,
        cls: type,
        data: Any,
        *,
        context: Any = None,
        field_message_template: str | None = None,
        message_builder: Callable[..., str] | None = None,
    ) -> TargetResult:
        """Validate every bound field of ``data`` (instance or mapping).

        Call-site options override those declared on the class with
        ``@validated``, which override the config.
        """
        return await self.targets.validate_target(
            cls,
            data,
            context=context,
            field_message_template=field_message_template,
            message_builder=message_builder,
        )

    async def validate_many(
        self,
        cls: type,
        items: Iterable[Any],
        *,
        context: Any = None,
        field_message_template: str | None = None,
        message_builder: Callable[..., str] | None = None,
    ) -> list[TargetResult]:
        """Validate a batch of targets concurrently, keeping input order."""
        return await self.targets.validate_many(
            cls,
            items,
            context=context,
            field_message_template=field_message_template,
            message_builder=message_builder,
        )

    def __repr__(self) -> str:
        return f"Validator(registry={self.registry!r}, store={self.store!r})"


_default_validator: Validator | None = None
_default_lock = threading.Lock()


def get_default_validator() -> Validator:
    """Process-wide Validator over the bootstrapped default registry."""
    global _default_validator
    if _default_validator is None:
        with _default_lock:
            if _default_validator is None:
                ensure_rules_registered()
                _default_validator = Validator()
    return _default_validator


def reset_default_validator() -> None:
    """Drop the process-wide Validator. Intended for tests."""
    global _default_validator
    with _default_lock:
        _default_validator = None


async def validate(
    value: Any,
    rules: RuleSpec | Iterable[RuleSpec],
    *,
    mode: ValidationMode | None = None,
    context: Any = None,
) -> ValidationResult:
    """Validate a bare value with the default Validator."""
    return await get_default_validator().validate(
        value, rules, mode=mode, context=context
    )


async def validate_target(
    cls: type,
    data: Any,
    *,
    context: Any = None,
    field_message_template: str | None = None,
    message_builder: Callable[..., str] | None = None,
) -> TargetResult:
    """Validate an object with the default Validator."""
    return await get_default_validator().validate_target(
        cls,
        data,
        context=context,
        field_message_template=field_message_template,
        message_builder=message_builder,
    )
