# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Validation results.

ValidationResult is returned for a single value, TargetResult for an object.
Both enforce ``success == (not errors)`` at construction.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

__all__ = ("RuleViolation", "TargetResult", "ValidationResult")


def _now() -> datetime:
    return datetime.now(timezone.utc)


# Per-run metadata, ignored by result equality
_TIMING_FIELDS = frozenset({"validated_at", "duration"})


class RuleViolation(BaseModel):
    """One failing rule.

    Attributes:
        rule_name: Name of the failing rule. Always contained in message.
        message: Diagnostic message.
        value: Value that was checked.
        params: Parameters the rule was bound with.
        field: Originating field for target validation, else None.
    """

    model_config = ConfigDict(frozen=True)

    rule_name: str
    message: str
    value: Any = None
    params: tuple[Any, ...] = ()
    field: str | None = None


class _ResultBase(BaseModel):
    success: bool
    errors: list[RuleViolation] = Field(default_factory=list)
    validated_at: datetime = Field(default_factory=_now)
    duration: float = Field(default=0.0, description="Seconds spent validating")

    @model_validator(mode="after")
    def check_success_matches_errors(self):
        if self.success == bool(self.errors):
            raise ValueError(
                f"success={self.success} inconsistent with {len(self.errors)} error(s)"
            )
        return self

    @property
    def error(self) -> RuleViolation | None:
        """First violation, or None on success."""
        return self.errors[0] if self.errors else None

    def __bool__(self) -> bool:
        return self.success

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return all(
            getattr(self, name) == getattr(other, name)
            for name in type(self).model_fields
            if name not in _TIMING_FIELDS
        )


class ValidationResult(_ResultBase):
    """Outcome of validating one value."""

    value: Any = None

    def __repr__(self) -> str:
        if self.success:
            return f"ValidationResult(success=True, value={self.value!r})"
        return f"ValidationResult(success=False, error={self.errors[0].message!r})"


class TargetResult(_ResultBase):
    """Outcome of validating every bound field of an object.

    Attributes:
        data: The validated instance or mapping.
        message: Summary of the failure, empty on success.
    """

    data: Any = None
    message: str = ""

    @property
    def failure_count(self) -> int:
        return len(self.errors)

    @property
    def failed_fields(self) -> list[str]:
        """Failing field names in declaration order, without duplicates."""
        seen: dict[str, None] = {}
        for err in self.errors:
            if err.field is not None:
                seen.setdefault(err.field, None)
        return list(seen)

    def errors_for(self, field: str) -> list[RuleViolation]:
        return [err for err in self.errors if err.field == field]

    def __repr__(self) -> str:
        if self.success:
            return "TargetResult(success=True)"
        return f"TargetResult(success=False, failed_fields={self.failed_fields})"
