# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Tests for rulebook.config - ValidatorConfig and TargetOptions."""

from __future__ import annotations

import pytest

from rulebook.config import TargetOptions, ValidationMode, ValidatorConfig


class TestValidatorConfig:
    """Tests for ValidatorConfig."""

    def test_defaults(self):
        """Config should have sensible defaults."""
        config = ValidatorConfig()
        assert config.default_mode is ValidationMode.FAIL_FAST
        assert config.field_message_template == "[{field}] : {message}"
        assert "{rule}" in config.default_message
        assert config.max_concurrency is None

    def test_custom_values(self):
        config = ValidatorConfig(
            default_mode="collect_all",
            field_message_template="{field}: {message}",
            max_concurrency=4,
        )
        assert config.default_mode is ValidationMode.COLLECT_ALL
        assert config.max_concurrency == 4

    def test_rejects_non_positive_concurrency(self):
        with pytest.raises(Exception):
            ValidatorConfig(max_concurrency=0)

    def test_template_must_keep_message(self):
        with pytest.raises(Exception):
            ValidatorConfig(field_message_template="{field} is invalid")

    def test_frozen(self):
        config = ValidatorConfig()
        with pytest.raises(Exception):
            config.max_concurrency = 3


class TestTargetOptions:
    """Only explicitly set options take part in merging."""

    def test_from_set_drops_none(self):
        options = TargetOptions.from_set(
            context=None, field_message_template="{message}"
        )
        assert options.model_fields_set == {"field_message_template"}

    def test_merged_applies_set_fields_only(self):
        base = TargetOptions(field_message_template="{field}: {message}", context="a")
        merged = base.merged(TargetOptions(context="b"))
        assert merged.context == "b"
        assert merged.field_message_template == "{field}: {message}"

    def test_merged_with_nothing_set(self):
        base = TargetOptions(context="a")
        assert base.merged(TargetOptions()) is base

    def test_merged_keeps_explicit_none(self):
        base = TargetOptions(context="a")
        assert base.merged(TargetOptions(context=None)).context is None

    def test_template_must_keep_message(self):
        with pytest.raises(Exception):
            TargetOptions(field_message_template="{field} is invalid")
