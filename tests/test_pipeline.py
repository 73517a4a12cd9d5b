# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Tests for rulebook.pipeline - ValidationPipeline execution."""

from __future__ import annotations

import anyio
import pytest

from rulebook._sentinel import Undefined
from rulebook.config import ValidationMode, ValidatorConfig
from rulebook.errors import (
    InvalidRuleError,
    RuleExecutionError,
    UninitializedRegistryError,
    UnknownRuleError,
)
from rulebook.pipeline import ValidationPipeline
from rulebook.rules import Rule, RuleOutcome, RuleRegistry, ensure_rules_registered

# =============================================================================
# Test Helpers
# =============================================================================


class AlwaysFail(Rule):
    """Fails with a message carrying its own name."""

    def check(self, value, params=(), ctx=None):
        return RuleOutcome.failed(f"{self.name} rejected {value!r}")


class SlowPass(Rule):
    """Async rule that records its call order."""

    name = "SlowPass"

    def __init__(self, log: list[str], delay: float = 0.01):
        super().__init__()
        self.log = log
        self.delay = delay

    async def check(self, value, params=(), ctx=None):
        self.log.append("start")
        await anyio.sleep(self.delay)
        self.log.append("end")
        return True


class Crashing(Rule):
    name = "Crashing"

    def check(self, value, params=(), ctx=None):
        raise ZeroDivisionError("boom")


class DuckRule:
    """Plain object exposing only name and check."""

    name = "Duck"

    def check(self, value, params=(), ctx=None):
        return value == "quack" or "Duck: expected a quack"


@pytest.fixture
def registry():
    registry = ensure_rules_registered(RuleRegistry())
    for name in ("FailA", "FailB", "FailC"):
        registry.register(AlwaysFail(name))
    return registry


@pytest.fixture
def pipeline(registry):
    return ValidationPipeline(registry)


# =============================================================================
# Tests: modes
# =============================================================================


class TestModes:
    """Fail-fast versus collect-all."""

    @pytest.mark.anyio
    async def test_fail_fast_one_error(self, pipeline):
        result = await pipeline.run(1, ["FailA", "FailB", "FailC"])
        assert result.success is False
        assert len(result.errors) == 1
        assert result.error.rule_name == "FailA"

    @pytest.mark.anyio
    async def test_collect_all_in_order(self, pipeline):
        result = await pipeline.run(
            1, ["FailA", "FailB", "FailC"], ValidationMode.COLLECT_ALL
        )
        assert [e.rule_name for e in result.errors] == ["FailA", "FailB", "FailC"]

    @pytest.mark.anyio
    async def test_fail_fast_surfaces_first_failing_rule(self, pipeline):
        result = await pipeline.run("x", ["Boolean", "FailB"])
        assert result.error.rule_name == "Boolean"

    @pytest.mark.anyio
    async def test_no_rules_succeeds(self, pipeline):
        result = await pipeline.run("anything", [])
        assert result.success is True
        assert result.error is None

    @pytest.mark.anyio
    async def test_params_recorded(self, pipeline):
        result = await pipeline.run("ab", ["MinLength[3]"])
        assert result.error.params == (3,)
        assert "MinLength" in result.error.message


# =============================================================================
# Tests: ordering and async
# =============================================================================


class TestOrdering:
    @pytest.mark.anyio
    async def test_async_rules_run_sequentially(self, registry):
        log: list[str] = []
        registry.register(SlowPass(log))
        pipeline = ValidationPipeline(registry)

        result = await pipeline.run(1, ["SlowPass", "SlowPass"])

        assert result.success is True
        assert log == ["start", "end", "start", "end"]

    @pytest.mark.anyio
    async def test_independent_runs_concurrent(self, pipeline):
        """Many runs over one pipeline do not interfere."""
        values = ["true", "maybe", 1, 2, "0", None]
        results = {}

        async def run(v):
            results[repr(v)] = await pipeline.run(v, ["Boolean"])

        async with anyio.create_task_group() as tg:
            for v in values:
                tg.start_soon(run, v)

        assert {k: r.success for k, r in results.items()} == {
            "'true'": True,
            "'maybe'": False,
            "1": True,
            "2": False,
            "'0'": True,
            "None": False,
        }


# =============================================================================
# Tests: messages and outcomes
# =============================================================================


class TestMessages:
    @pytest.mark.anyio
    async def test_false_uses_default_message(self, registry):
        class Nope(Rule):
            name = "Nope"

            def check(self, value, params=(), ctx=None):
                return False

        registry.register(Nope())
        result = await ValidationPipeline(registry).run(1, ["Nope"])
        assert result.error.message == "Value failed Nope validation"

    @pytest.mark.anyio
    async def test_message_without_name_is_prefixed(self, pipeline):
        result = await pipeline.run(5, [lambda value: "too big"])
        assert result.error.message == "<lambda>: too big"

    @pytest.mark.anyio
    async def test_custom_default_message(self, registry):
        config = ValidatorConfig(default_message="{rule} said no to {value!r}")
        pipeline = ValidationPipeline(registry, config)

        def strict(value):
            return False

        result = await pipeline.run(3, [strict])
        assert result.error.message == "strict said no to 3"


# =============================================================================
# Tests: skip markers
# =============================================================================


class TestSkip:
    @pytest.mark.anyio
    async def test_nullable_skips_none(self, pipeline):
        result = await pipeline.run(None, ["Boolean", "Nullable"])
        assert result.success is True

    @pytest.mark.anyio
    async def test_nullable_skips_undefined(self, pipeline):
        result = await pipeline.run(Undefined, ["Nullable", "Required"])
        assert result.success is True

    @pytest.mark.anyio
    async def test_nullable_does_not_skip_values(self, pipeline):
        result = await pipeline.run("maybe", ["Nullable", "Boolean"])
        assert result.success is False

    @pytest.mark.anyio
    async def test_optional_skips_undefined(self, pipeline):
        assert (await pipeline.run(Undefined, ["Optional", "Required"])).success
        assert not (await pipeline.run(None, ["Optional", "Required"])).success

    @pytest.mark.anyio
    async def test_empty_skips_empty_string(self, pipeline):
        assert (await pipeline.run("", ["Empty", "MinLength[3]"])).success


# =============================================================================
# Tests: rules that do not subclass Rule
# =============================================================================


class TestPlainObjectRules:
    """Objects with only name and check work inline and by name."""

    @pytest.mark.anyio
    async def test_registered_by_name(self, registry, pipeline):
        registry.register(DuckRule())
        assert (await pipeline.run("quack", ["Duck"])).success

        result = await pipeline.run("moo", ["Duck"])
        assert result.success is False
        assert result.error.message == "Duck: expected a quack"

    @pytest.mark.anyio
    async def test_bound_inline(self, pipeline):
        result = await pipeline.run("moo", [DuckRule(), "Nullable"])
        assert result.error.rule_name == "Duck"

    @pytest.mark.anyio
    async def test_never_skips(self, pipeline):
        result = await pipeline.run(None, [DuckRule()])
        assert result.success is False


# =============================================================================
# Tests: programmer errors
# =============================================================================


class TestErrors:
    """Setup problems and crashing rules raise instead of failing."""

    @pytest.mark.anyio
    async def test_unknown_rule_raises_before_running(self, registry):
        log: list[str] = []
        registry.register(SlowPass(log))
        pipeline = ValidationPipeline(registry)

        with pytest.raises(UnknownRuleError):
            await pipeline.run(1, ["SlowPass", "Missing"])
        assert log == []

    @pytest.mark.anyio
    async def test_uninitialized_registry(self):
        pipeline = ValidationPipeline(RuleRegistry())
        with pytest.raises(UninitializedRegistryError):
            await pipeline.run(1, ["Boolean"])

    @pytest.mark.anyio
    async def test_crashing_rule(self, registry):
        registry.register(Crashing())
        with pytest.raises(RuleExecutionError, match="Crashing") as exc:
            await ValidationPipeline(registry).run(1, ["Crashing"])
        assert isinstance(exc.value.__cause__, ZeroDivisionError)

    @pytest.mark.anyio
    async def test_async_crash(self, pipeline):
        async def broken(value):
            raise KeyError("k")

        with pytest.raises(RuleExecutionError, match="broken"):
            await pipeline.run(1, [broken])

    @pytest.mark.anyio
    async def test_unsupported_return_value(self, pipeline):
        with pytest.raises(RuleExecutionError, match="unsupported"):
            await pipeline.run(1, [lambda value: 42])

    @pytest.mark.anyio
    async def test_rule_setup_error_propagates_unchanged(self, pipeline):
        with pytest.raises(InvalidRuleError):
            await pipeline.run("abc", ["MinLength"])
