# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Rules module: rule abstraction, built-in rules and the rule registry.

Core exports:
- Rule, RuleOutcome, RuleContext, FunctionRule, function_rule: Base rule classes
- RuleRegistry: Name-to-rule mapping with explicit bootstrap
- ensure_rules_registered: Bootstrap the default registry with built-ins
- Built-in rules: BooleanRule, RequiredRule, StringRule, NumberRule,
  MinLengthRule, MaxLengthRule, NullableRule, OptionalRule, EmptyRule
"""

from .common import (
    BUILTIN_RULES,
    BooleanRule,
    EmptyRule,
    MaxLengthRule,
    MinLengthRule,
    NullableRule,
    NumberRule,
    OptionalRule,
    RequiredRule,
    StringRule,
)
from .registry import (
    RuleRegistry,
    ensure_rules_registered,
    get_default_registry,
    reset_default_registry,
)
from .rule import (
    FunctionRule,
    Rule,
    RuleContext,
    RuleOutcome,
    function_rule,
    to_outcome,
)

__all__ = (
    # Base classes
    "FunctionRule",
    "Rule",
    "RuleContext",
    "RuleOutcome",
    "function_rule",
    "to_outcome",
    # Registry
    "RuleRegistry",
    "ensure_rules_registered",
    "get_default_registry",
    "reset_default_registry",
    # Built-in rules
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
