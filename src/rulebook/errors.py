# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Error taxonomy for setup and rule defects.

Validation failures are data and are returned inside results. The errors
defined here signal programmer mistakes (bad rule specs, missing or duplicate
rules, an uninitialized registry) or a rule that crashed while checking.
"""

from __future__ import annotations

from typing import Any

__all__ = (
    "DuplicateRuleError",
    "InvalidRuleError",
    "RuleExecutionError",
    "RulebookError",
    "UninitializedRegistryError",
    "UnknownRuleError",
)


class RulebookError(Exception):
    """Base error with structured details.

    Attributes:
        message: Human readable message (falls back to default_message).
        details: Extra structured context for callers and logs.
        retryable: Whether retrying the same call could succeed.
    """

    default_message: str = "Rulebook error"
    default_retryable: bool = False

    def __init__(
        self,
        message: str | None = None,
        *,
        details: dict[str, Any] | None = None,
        retryable: bool | None = None,
    ):
        self.message = message or self.default_message
        self.details = details or {}
        self.retryable = self.default_retryable if retryable is None else retryable
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dict."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "retryable": self.retryable,
            "details": dict(self.details),
        }


class InvalidRuleError(RulebookError):
    """Rule spec could not be parsed or its parameters are unusable."""

    default_message = "Invalid rule"


class UnknownRuleError(RulebookError):
    """No rule registered under the requested name."""

    default_message = "Unknown rule"


class DuplicateRuleError(RulebookError):
    """A different rule is already registered under the name."""

    default_message = "Rule already registered"


class UninitializedRegistryError(RulebookError):
    """Registry was used before bootstrap."""

    default_message = "Rule registry has not been bootstrapped"


class RuleExecutionError(RulebookError):
    """A rule raised while checking a value."""

    default_message = "Rule crashed during check"
