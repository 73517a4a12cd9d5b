# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Sentinel for values that are absent rather than None."""

from __future__ import annotations

from typing import Any, Final

__all__ = ("Undefined", "UndefinedType", "is_undefined")


class UndefinedType:
    """Singleton marking a field missing from the validated data."""

    _instance: UndefinedType | None = None

    def __new__(cls) -> UndefinedType:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "Undefined"

    def __reduce__(self) -> str:
        return "Undefined"


Undefined: Final = UndefinedType()


def is_undefined(value: Any) -> bool:
    return value is Undefined
