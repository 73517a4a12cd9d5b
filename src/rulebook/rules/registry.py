# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Rule registry: name-to-rule lookup with an explicit bootstrap step.

A registry must be bootstrapped before ``resolve`` is allowed. The
process-wide default registry is bootstrapped with the built-in rules by
``ensure_rules_registered()``.

Duplicate policy: registering the same instance twice is a no-op, a different
implementation under a taken name raises DuplicateRuleError unless
``override=True``.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from typing import Any

from rulebook.errors import (
    DuplicateRuleError,
    InvalidRuleError,
    UninitializedRegistryError,
    UnknownRuleError,
)

from .common import BUILTIN_RULES
from .rule import FunctionRule, Rule

__all__ = (
    "RuleRegistry",
    "ensure_rules_registered",
    "get_default_registry",
    "reset_default_registry",
)

logger = logging.getLogger(__name__)


class RuleRegistry:
    """Map rule names to rule instances.

    Example:
        registry = RuleRegistry()
        registry.bootstrap([BooleanRule()])

        @registry.rule("Even")
        def even(value):
            return value % 2 == 0

        registry.resolve("Boolean")
    """

    def __init__(self) -> None:
        self._rules: dict[str, Rule] = {}
        self._initialized = False
        self._lock = threading.Lock()

    @property
    def initialized(self) -> bool:
        return self._initialized

    def register(
        self,
        rule: Rule,
        *,
        name: str | None = None,
        override: bool = False,
    ) -> Rule:
        """Register rule under ``name`` (defaults to ``rule.name``).

        Args:
            rule: Object exposing ``name`` and ``check``.
            name: Lookup key override.
            override: Replace an existing different rule.

        Returns:
            The registered rule.

        Raises:
            InvalidRuleError: If name is empty or rule has no check method.
            DuplicateRuleError: If name is taken by another rule and override=False.
        """
        key = getattr(rule, "name", None) if name is None else name
        if not isinstance(key, str) or not key:
            raise InvalidRuleError("Rule name must be a non-empty string")
        if not callable(getattr(rule, "check", None)):
            raise InvalidRuleError(
                f"Rule '{key}' must define a callable check()",
                details={"rule": repr(rule)},
            )

        existing = self._rules.get(key)
        if existing is rule:
            return rule
        if existing is not None:
            if not override:
                raise DuplicateRuleError(
                    f"Rule '{key}' already registered. Use override=True to replace.",
                    details={"rule": key, "existing": repr(existing)},
                )
            logger.warning("Overriding rule '%s' (%r -> %r)", key, existing, rule)

        self._rules[key] = rule
        logger.debug("Registered rule '%s'", key)
        return rule

    def rule(
        self,
        name: str | None = None,
        *,
        override: bool = False,
    ) -> Callable[[Callable[..., Any]], FunctionRule]:
        """Decorator registering a function as a FunctionRule."""

        def decorator(func: Callable[..., Any]) -> FunctionRule:
            fn_rule = FunctionRule(func, name=name)
            self.register(fn_rule, override=override)
            return fn_rule

        return decorator

    def bootstrap(self, rules: Iterable[Rule] = ()) -> RuleRegistry:
        """Register ``rules`` and mark the registry ready. Safe to repeat."""
        if self._initialized:
            return self
        with self._lock:
            if self._initialized:
                return self
            for r in rules:
                self.register(r)
            self._initialized = True
        logger.debug("Rule registry bootstrapped with %d rules", len(self._rules))
        return self

    def resolve(self, name: str) -> Rule:
        """Get rule by exact name.

        Raises:
            UninitializedRegistryError: If bootstrap has not run.
            UnknownRuleError: If no rule is registered under name.
        """
        if not self._initialized:
            raise UninitializedRegistryError(
                f"Cannot resolve rule '{name}': registry not bootstrapped. "
                "Call ensure_rules_registered() first."
            )
        try:
            return self._rules[name]
        except KeyError:
            raise UnknownRuleError(
                f"Rule '{name}' not registered. Available: {self.list_names()}",
                details={"rule": name, "available": self.list_names()},
            ) from None

    def has(self, name: str) -> bool:
        return name in self._rules

    def unregister(self, name: str) -> bool:
        """Remove registration. Returns True if existed."""
        return self._rules.pop(name, None) is not None

    def list_names(self) -> list[str]:
        return list(self._rules.keys())

    def __contains__(self, name: str) -> bool:
        return name in self._rules

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        state = "ready" if self._initialized else "uninitialized"
        return f"RuleRegistry(rules={self.list_names()}, {state})"


_default_registry: RuleRegistry | None = None
_default_lock = threading.Lock()


def get_default_registry() -> RuleRegistry:
    """Return the process-wide registry, creating it on first use."""
    global _default_registry
    if _default_registry is None:
        with _default_lock:
            if _default_registry is None:
                _default_registry = RuleRegistry()
    return _default_registry


def reset_default_registry() -> None:
    """Drop the process-wide registry. Intended for tests."""
    global _default_registry
    with _default_lock:
        _default_registry = None


def ensure_rules_registered(registry: RuleRegistry | None = None) -> RuleRegistry:
    """Bootstrap ``registry`` (default: process-wide) with the built-in rules.

    Idempotent and safe to call from several threads.
    """
    registry = registry if registry is not None else get_default_registry()
    return registry.bootstrap(BUILTIN_RULES)
