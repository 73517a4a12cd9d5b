# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Validator configuration.

Provides ValidatorConfig, the ValidationMode switch used by the pipeline and
the per-class TargetOptions applied by target validation.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

__all__ = ("TargetOptions", "ValidationMode", "ValidatorConfig")


class ValidationMode(str, Enum):
    """How a pipeline reacts to a failing rule."""

    FAIL_FAST = "fail_fast"
    COLLECT_ALL = "collect_all"


class ValidatorConfig(BaseModel):
    """Configuration shared by a Validator and its components.

    Attributes:
        default_mode: Mode used by Validator.validate when none is passed.
        field_message_template: Format for field errors of target validation.
            Receives ``field``, ``message`` and ``rule``.
        default_message: Message for rules that fail without one.
            Receives ``rule`` and ``value``.
        max_concurrency: Cap on concurrently validated fields or batch items.
            None means unbounded.
    """

    model_config = ConfigDict(frozen=True)

    default_mode: ValidationMode = Field(default=ValidationMode.FAIL_FAST)
    field_message_template: str = Field(default="[{field}] : {message}")
    default_message: str = Field(default="Value failed {rule} validation")
    max_concurrency: int | None = Field(default=None)

    @field_validator("max_concurrency")
    @classmethod
    def check_positive_concurrency(cls, v: int | None) -> int | None:
        if v is not None and v < 1:
            raise ValueError("max_concurrency must be a positive integer")
        return v

    @field_validator("field_message_template")
    @classmethod
    def check_template_keeps_message(cls, v: str) -> str:
        # Rule names must survive formatting
        if "{message}" not in v:
            raise ValueError("field_message_template must contain '{message}'")
        return v


class TargetOptions(BaseModel):
    """Target validation options carried by a class or passed per call.

    Only explicitly set fields take part in merging, so a subclass or a call
    site overrides exactly what it names.

    Attributes:
        field_message_template: Replaces ValidatorConfig.field_message_template.
        message_builder: ``builder(field, message, violation) -> str``. Takes
            precedence over any template.
        context: Default caller value passed through to rules.
    """

    model_config = ConfigDict(frozen=True)

    field_message_template: str | None = Field(default=None)
    message_builder: Callable[..., str] | None = Field(default=None)
    context: Any = Field(default=None)

    @field_validator("field_message_template")
    @classmethod
    def check_template_keeps_message(cls, v: str | None) -> str | None:
        if v is not None and "{message}" not in v:
            raise ValueError("field_message_template must contain '{message}'")
        return v

    @classmethod
    def from_set(cls, **values: Any) -> TargetOptions:
        """Build options from the non-None values only."""
        return cls(**{k: v for k, v in values.items() if v is not None})

    def merged(self, other: TargetOptions) -> TargetOptions:
        """Return self with the fields explicitly set on ``other`` applied."""
        if not other.model_fields_set:
            return self
        update = {name: getattr(other, name) for name in other.model_fields_set}
        return self.model_copy(update=update)
