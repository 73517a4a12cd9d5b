# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""TargetValidator: validate every bound field of an object.

Fields are checked concurrently, each in collect-all mode. Results are
aggregated in field-declaration order, then rule order within a field, so
``errors[0]`` is reproducible regardless of scheduling.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable, Mapping
from typing import Any

import anyio

from rulebook._sentinel import Undefined
from rulebook.config import TargetOptions, ValidationMode, ValidatorConfig
from rulebook.errors import RulebookError
from rulebook.fields import FieldMetadataStore
from rulebook.pipeline import ValidationPipeline
from rulebook.result import RuleViolation, TargetResult, ValidationResult

__all__ = ("TargetValidator", "read_field")

logger = logging.getLogger(__name__)


def read_field(data: Any, field: str) -> Any:
    """Field value from a mapping or an object; Undefined when absent."""
    if isinstance(data, Mapping):
        return data.get(field, Undefined)
    return getattr(data, field, Undefined)


class TargetValidator:
    """Replay a class's field bindings against instances or mappings."""

    def __init__(
        self,
        pipeline: ValidationPipeline,
        store: FieldMetadataStore,
        config: ValidatorConfig | None = None,
    ) -> None:
        self.pipeline = pipeline
        self.store = store
        self.config = config or pipeline.config

    def _limiter(self) -> anyio.CapacityLimiter | None:
        if self.config.max_concurrency is None:
            return None
        return anyio.CapacityLimiter(self.config.max_concurrency)

    async def validate_target(
        self,
        cls: type,
        data: Any,
        *,
        context: Any = None,
        field_message_template: str | None = None,
        message_builder: Callable[..., str] | None = None,
    ) -> TargetResult:
        """Validate ``data`` against the bindings declared for ``cls``.

        Args:
            cls: Class whose field bindings apply (inherited ones included).
            data: Instance of cls, or a mapping of field values.
            context: Caller value passed through to rules. Overrides the
                class-level context.
            field_message_template: Overrides the class and config templates.
            message_builder: Overrides every template.

        Returns:
            TargetResult, failed when any field has a violation.

        Raises:
            UnknownRuleError: A field binding names an unregistered rule.
            RuleExecutionError: A rule raised while checking.
        """
        started = time.perf_counter()
        options = self.store.get_options(cls).merged(
            TargetOptions.from_set(
                context=context,
                field_message_template=field_message_template,
                message_builder=message_builder,
            )
        )
        context = options.context
        fields = self.store.fields(cls)
        plan = [(field, self.store.get_bindings(cls, field)) for field in fields]

        # Resolve up front so setup errors surface before any rule runs
        for _, bindings in plan:
            for binding in bindings:
                self.pipeline.resolve(binding)

        results: list[ValidationResult | None] = [None] * len(plan)
        crashes: list[RulebookError | None] = [None] * len(plan)
        limiter = self._limiter()

        async def run_field(index: int, field: str, bindings: tuple) -> None:
            try:
                if limiter is None:
                    results[index] = await self._run_field(
                        field, bindings, data, context
                    )
                else:
                    async with limiter:
                        results[index] = await self._run_field(
                            field, bindings, data, context
                        )
            except RulebookError as exc:
                crashes[index] = exc

        async with anyio.create_task_group() as tg:
            for index, (field, bindings) in enumerate(plan):
                tg.start_soon(run_field, index, field, bindings)

        for exc in crashes:
            if exc is not None:
                raise exc

        errors: list[RuleViolation] = []
        for (field, _), result in zip(plan, results):
            if result is None or result.success:
                continue
            errors.extend(self._format(field, err, options) for err in result.errors)

        duration = time.perf_counter() - started
        if not errors:
            return TargetResult(success=True, data=data, duration=duration)

        failed = len({err.field for err in errors})
        logger.debug(
            "%s failed validation on %d field(s)", cls.__qualname__, failed
        )
        return TargetResult(
            success=False,
            data=data,
            errors=errors,
            message=f"Validation failed for {failed} field{'s' if failed != 1 else ''}",
            duration=duration,
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
        """Validate a batch concurrently. Results follow input order.

        Keyword arguments are forwarded to validate_target for every item.
        """
        items = list(items)
        results: list[TargetResult | None] = [None] * len(items)
        crashes: list[RulebookError | None] = [None] * len(items)
        limiter = self._limiter()

        overrides = {
            "context": context,
            "field_message_template": field_message_template,
            "message_builder": message_builder,
        }

        async def run_item(index: int, item: Any) -> None:
            try:
                if limiter is None:
                    results[index] = await self.validate_target(cls, item, **overrides)
                else:
                    async with limiter:
                        results[index] = await self.validate_target(
                            cls, item, **overrides
                        )
            except RulebookError as exc:
                crashes[index] = exc

        async with anyio.create_task_group() as tg:
            for index, item in enumerate(items):
                tg.start_soon(run_item, index, item)

        for exc in crashes:
            if exc is not None:
                raise exc
        return [r for r in results if r is not None]

    async def _run_field(
        self,
        field: str,
        bindings: tuple,
        data: Any,
        context: Any,
    ) -> ValidationResult:
        return await self.pipeline.run(
            read_field(data, field),
            bindings,
            ValidationMode.COLLECT_ALL,
            field=field,
            data=data,
            context=context,
        )

    def _format(
        self,
        field: str,
        err: RuleViolation,
        options: TargetOptions,
    ) -> RuleViolation:
        if options.message_builder is not None:
            message = options.message_builder(field, err.message, err)
        else:
            template = (
                options.field_message_template or self.config.field_message_template
            )
            message = template.format(
                field=field,
                message=err.message,
                rule=err.rule_name,
            )
        return err.model_copy(update={"message": message, "field": field})
