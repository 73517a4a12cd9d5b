# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""rulebook - Declarative value validation.

Attach named rules to a bare value (``validate``) or to class fields
(``@validated`` with ``Annotated`` markers, then ``validate_target``).
Public names are loaded lazily on first access.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

_LAZY_IMPORTS: dict[str, tuple[str, str]] = {
    # binding
    "RuleBinding": ("rulebook.binding", "RuleBinding"),
    "to_binding": ("rulebook.binding", "to_binding"),
    "to_bindings": ("rulebook.binding", "to_bindings"),
    # config
    "TargetOptions": ("rulebook.config", "TargetOptions"),
    "ValidationMode": ("rulebook.config", "ValidationMode"),
    "ValidatorConfig": ("rulebook.config", "ValidatorConfig"),
    # errors
    "DuplicateRuleError": ("rulebook.errors", "DuplicateRuleError"),
    "InvalidRuleError": ("rulebook.errors", "InvalidRuleError"),
    "RuleExecutionError": ("rulebook.errors", "RuleExecutionError"),
    "RulebookError": ("rulebook.errors", "RulebookError"),
    "UninitializedRegistryError": ("rulebook.errors", "UninitializedRegistryError"),
    "UnknownRuleError": ("rulebook.errors", "UnknownRuleError"),
    # fields
    "AllOf": ("rulebook.fields", "AllOf"),
    "ArrayOf": ("rulebook.fields", "ArrayOf"),
    "FieldMetadataStore": ("rulebook.fields", "FieldMetadataStore"),
    "IsBoolean": ("rulebook.fields", "IsBoolean"),
    "IsEmpty": ("rulebook.fields", "IsEmpty"),
    "IsNullable": ("rulebook.fields", "IsNullable"),
    "IsNumber": ("rulebook.fields", "IsNumber"),
    "IsOptional": ("rulebook.fields", "IsOptional"),
    "IsRequired": ("rulebook.fields", "IsRequired"),
    "IsString": ("rulebook.fields", "IsString"),
    "MaxLength": ("rulebook.fields", "MaxLength"),
    "MinLength": ("rulebook.fields", "MinLength"),
    "OneOf": ("rulebook.fields", "OneOf"),
    "ValidateNested": ("rulebook.fields", "ValidateNested"),
    "get_default_store": ("rulebook.fields", "get_default_store"),
    "reset_default_store": ("rulebook.fields", "reset_default_store"),
    "rule_marker": ("rulebook.fields", "rule_marker"),
    "validated": ("rulebook.fields", "validated"),
    # results
    "RuleViolation": ("rulebook.result", "RuleViolation"),
    "TargetResult": ("rulebook.result", "TargetResult"),
    "ValidationResult": ("rulebook.result", "ValidationResult"),
    # rules
    "FunctionRule": ("rulebook.rules", "FunctionRule"),
    "Rule": ("rulebook.rules", "Rule"),
    "RuleContext": ("rulebook.rules", "RuleContext"),
    "RuleOutcome": ("rulebook.rules", "RuleOutcome"),
    "RuleRegistry": ("rulebook.rules", "RuleRegistry"),
    "ensure_rules_registered": ("rulebook.rules", "ensure_rules_registered"),
    "get_default_registry": ("rulebook.rules", "get_default_registry"),
    "reset_default_registry": ("rulebook.rules", "reset_default_registry"),
    "function_rule": ("rulebook.rules", "function_rule"),
    # sentinel
    "Undefined": ("rulebook._sentinel", "Undefined"),
    # validation
    "ValidationPipeline": ("rulebook.pipeline", "ValidationPipeline"),
    "TargetValidator": ("rulebook.target", "TargetValidator"),
    "Validator": ("rulebook.validator", "Validator"),
    "get_default_validator": ("rulebook.validator", "get_default_validator"),
    "reset_default_validator": ("rulebook.validator", "reset_default_validator"),
    "validate": ("rulebook.validator", "validate"),
    "validate_target": ("rulebook.validator", "validate_target"),
}

_LOADED: dict[str, object] = {}


def __getattr__(name: str) -> object:
    """Lazy import attributes on first access."""
    if name in _LOADED:
        return _LOADED[name]

    if name in _LAZY_IMPORTS:
        from importlib import import_module

        module_name, attr_name = _LAZY_IMPORTS[name]
        module = import_module(module_name)
        value = getattr(module, attr_name)
        _LOADED[name] = value
        return value

    raise AttributeError(f"module 'rulebook' has no attribute {name!r}")


def __dir__() -> list[str]:
    """Return all available attributes for autocomplete."""
    return list(__all__)


if TYPE_CHECKING:
    from ._sentinel import Undefined
    from .binding import RuleBinding, to_binding, to_bindings
    from .config import TargetOptions, ValidationMode, ValidatorConfig
    from .errors import (
        DuplicateRuleError,
        InvalidRuleError,
        RuleExecutionError,
        RulebookError,
        UninitializedRegistryError,
        UnknownRuleError,
    )
    from .fields import (
        AllOf,
        ArrayOf,
        FieldMetadataStore,
        IsBoolean,
        IsEmpty,
        IsNullable,
        IsNumber,
        IsOptional,
        IsRequired,
        IsString,
        MaxLength,
        MinLength,
        OneOf,
        ValidateNested,
        get_default_store,
        reset_default_store,
        rule_marker,
        validated,
    )
    from .pipeline import ValidationPipeline
    from .result import RuleViolation, TargetResult, ValidationResult
    from .rules import (
        FunctionRule,
        Rule,
        RuleContext,
        RuleOutcome,
        RuleRegistry,
        ensure_rules_registered,
        get_default_registry,
        reset_default_registry,
        function_rule,
    )
    from .target import TargetValidator
    from .validator import (
        Validator,
        get_default_validator,
        reset_default_validator,
        validate,
        validate_target,
    )

__all__ = sorted(_LAZY_IMPORTS)
