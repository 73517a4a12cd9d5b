# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Tests for rulebook.rules.registry - RuleRegistry and bootstrap."""

from __future__ import annotations

import threading

import pytest

from rulebook.errors import (
    DuplicateRuleError,
    InvalidRuleError,
    UninitializedRegistryError,
    UnknownRuleError,
)
from rulebook.rules import (
    BUILTIN_RULES,
    BooleanRule,
    FunctionRule,
    Rule,
    RuleRegistry,
    ensure_rules_registered,
    get_default_registry,
)


class EvenRule(Rule):
    name = "Even"

    def check(self, value, params=(), ctx=None):
        return isinstance(value, int) and value % 2 == 0


# =============================================================================
# Tests: register
# =============================================================================


class TestRegister:
    """Tests for RuleRegistry.register."""

    def test_register_and_has(self):
        registry = RuleRegistry()
        rule = EvenRule()
        assert registry.register(rule) is rule
        assert registry.has("Even")
        assert "Even" in registry
        assert len(registry) == 1

    def test_register_under_custom_name(self):
        registry = RuleRegistry()
        registry.register(EvenRule(), name="IsEven")
        assert registry.list_names() == ["IsEven"]

    def test_same_instance_twice_is_noop(self):
        """Re-registering the identical instance is allowed."""
        registry = RuleRegistry()
        rule = EvenRule()
        registry.register(rule)
        registry.register(rule)
        assert len(registry) == 1

    def test_different_rule_same_name_raises(self):
        registry = RuleRegistry()
        registry.register(EvenRule())
        with pytest.raises(DuplicateRuleError, match="already registered") as exc:
            registry.register(EvenRule())
        assert exc.value.details["rule"] == "Even"

    def test_override_replaces(self):
        registry = RuleRegistry().bootstrap()
        first, second = EvenRule(), EvenRule()
        registry.register(first)
        registry.register(second, override=True)
        assert registry.resolve("Even") is second

    def test_rejects_object_without_check(self):
        class NotARule:
            name = "Nope"

        with pytest.raises(InvalidRuleError):
            RuleRegistry().register(NotARule())

    def test_rejects_empty_name(self):
        with pytest.raises(InvalidRuleError):
            RuleRegistry().register(EvenRule(), name="")

    def test_explicit_name_is_lookup_key(self):
        registry = RuleRegistry().bootstrap()
        rule = registry.register(EvenRule(), name="Alias")
        assert registry.resolve("Alias") is rule
        assert "Even" not in registry

    def test_rule_decorator_registers_function(self):
        registry = RuleRegistry().bootstrap()

        @registry.rule("Positive")
        def positive(value):
            return value > 0

        assert isinstance(positive, FunctionRule)
        assert registry.resolve("Positive") is positive

    def test_unregister(self):
        registry = RuleRegistry()
        registry.register(EvenRule())
        assert registry.unregister("Even") is True
        assert registry.unregister("Even") is False


# =============================================================================
# Tests: resolve and bootstrap
# =============================================================================


class TestResolve:
    """Tests for RuleRegistry.resolve lifecycle."""

    def test_resolve_before_bootstrap_raises(self):
        registry = RuleRegistry()
        registry.register(EvenRule())
        with pytest.raises(UninitializedRegistryError):
            registry.resolve("Even")

    def test_resolve_unknown_raises(self):
        registry = RuleRegistry().bootstrap([BooleanRule()])
        with pytest.raises(UnknownRuleError, match="Nope") as exc:
            registry.resolve("Nope")
        assert exc.value.details["available"] == ["Boolean"]

    def test_lookup_is_case_sensitive(self):
        registry = RuleRegistry().bootstrap([BooleanRule()])
        with pytest.raises(UnknownRuleError):
            registry.resolve("boolean")

    def test_resolve_returns_same_instance(self):
        registry = ensure_rules_registered(RuleRegistry())
        assert registry.resolve("Boolean") is registry.resolve("Boolean")

    def test_bootstrap_is_idempotent(self):
        registry = RuleRegistry()
        ensure_rules_registered(registry)
        ensure_rules_registered(registry)
        assert registry.initialized
        assert len(registry) == len(BUILTIN_RULES)

    def test_bootstrap_concurrently(self):
        """Many threads bootstrapping at once register each rule once."""
        registry = RuleRegistry()
        errors = []

        def boot():
            try:
                ensure_rules_registered(registry)
            except Exception as exc:  # pragma: no cover - surfaced below
                errors.append(exc)

        threads = [threading.Thread(target=boot) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert len(registry) == len(BUILTIN_RULES)

    def test_default_registry_bootstrapped(self):
        registry = ensure_rules_registered()
        assert registry is get_default_registry()
        assert "Boolean" in registry

    def test_repr(self):
        assert "uninitialized" in repr(RuleRegistry())
