# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Field metadata: which rules apply to which field of a class.

Bindings are declared once per class, either explicitly:

    store.add_binding(User, "active", IsBoolean())

or through ``typing.Annotated`` metadata collected by ``@validated``, which
also accepts class-level target options:

    @validated(field_message_template="{field} is invalid: {message}")
    class User:
        active: Annotated[bool, IsBoolean()]
        name: Annotated[str, IsRequired(), MinLength(3)]

Subclasses inherit parent bindings; parent rules run first.
"""

from __future__ import annotations

import inspect
import logging
import threading
import weakref
from collections.abc import Callable, Mapping
from typing import Annotated, Any, get_args, get_origin

from rulebook.binding import RuleBinding, RuleSpec, to_binding
from rulebook.config import TargetOptions
from rulebook.composite import AllOfRule, ArrayOfRule, NestedRule, OneOfRule

__all__ = (
    "AllOf",
    "ArrayOf",
    "FieldMetadataStore",
    "IsBoolean",
    "IsEmpty",
    "IsNullable",
    "IsNumber",
    "IsOptional",
    "IsRequired",
    "IsString",
    "MaxLength",
    "MinLength",
    "OneOf",
    "ValidateNested",
    "get_default_store",
    "reset_default_store",
    "rule_marker",
    "validated",
)

logger = logging.getLogger(__name__)


class FieldMetadataStore:
    """Ordered (class, field) -> rule bindings mapping.

    Entries are append-only. Classes are held weakly so locally defined
    classes do not leak.
    """

    def __init__(self) -> None:
        self._bindings: weakref.WeakKeyDictionary[
            type, dict[str, list[RuleBinding]]
        ] = weakref.WeakKeyDictionary()
        self._options: weakref.WeakKeyDictionary[type, TargetOptions] = (
            weakref.WeakKeyDictionary()
        )
        self._lock = threading.Lock()

    def add_binding(self, cls: type, field: str, binding: RuleSpec) -> RuleBinding:
        """Append a binding to ``cls.field``. Returns the normalized binding."""
        if not isinstance(cls, type):
            raise TypeError(f"Expected a class, got {type(cls).__name__}")
        if not isinstance(field, str) or not field:
            raise ValueError("Field name must be a non-empty string")

        normalized = to_binding(binding)
        with self._lock:
            per_class = self._bindings.setdefault(cls, {})
            per_class.setdefault(field, []).append(normalized)
        logger.debug("Bound %r to %s.%s", normalized, cls.__qualname__, field)
        return normalized

    def get_bindings(self, cls: type, field: str) -> tuple[RuleBinding, ...]:
        """Bindings for ``field`` across the MRO, parent first. Empty if none."""
        collected: list[RuleBinding] = []
        for klass in reversed(cls.__mro__):
            per_class = self._bindings.get(klass)
            if per_class and field in per_class:
                collected.extend(per_class[field])
        return tuple(collected)

    def fields(self, cls: type) -> list[str]:
        """Bound field names, parent fields first, each in declaration order."""
        names: dict[str, None] = {}
        for klass in reversed(cls.__mro__):
            per_class = self._bindings.get(klass)
            if per_class:
                for name in per_class:
                    names.setdefault(name, None)
        return list(names)

    def set_options(self, cls: type, options: TargetOptions) -> TargetOptions:
        """Merge ``options`` into the target options declared on ``cls``."""
        if not isinstance(cls, type):
            raise TypeError(f"Expected a class, got {type(cls).__name__}")
        with self._lock:
            current = self._options.get(cls, TargetOptions())
            self._options[cls] = current.merged(options)
            return self._options[cls]

    def get_options(self, cls: type) -> TargetOptions:
        """Target options across the MRO; subclass values win."""
        options = TargetOptions()
        for klass in reversed(cls.__mro__):
            own = self._options.get(klass)
            if own is not None:
                options = options.merged(own)
        return options

    def has_bindings(self, cls: type) -> bool:
        return any(self._bindings.get(klass) for klass in cls.__mro__)

    def clear(self, cls: type | None = None) -> None:
        """Drop bindings and options declared directly on ``cls``, or everything."""
        with self._lock:
            if cls is None:
                self._bindings.clear()
                self._options.clear()
            else:
                self._bindings.pop(cls, None)
                self._options.pop(cls, None)

    def __contains__(self, cls: type) -> bool:
        return self.has_bindings(cls)

    def __repr__(self) -> str:
        return f"FieldMetadataStore(classes={len(self._bindings)})"


_default_store: FieldMetadataStore | None = None
_default_lock = threading.Lock()


def get_default_store() -> FieldMetadataStore:
    """Return the process-wide store, creating it on first use."""
    global _default_store
    if _default_store is None:
        with _default_lock:
            if _default_store is None:
                _default_store = FieldMetadataStore()
    return _default_store


def reset_default_store() -> None:
    """Drop the process-wide store. Intended for tests."""
    global _default_store
    with _default_lock:
        _default_store = None


def validated(
    cls: type | None = None,
    *,
    store: FieldMetadataStore | None = None,
    localns: Mapping[str, Any] | None = None,
    field_message_template: str | None = None,
    message_builder: Callable[..., str] | None = None,
    context: Any = None,
) -> Any:
    """Class decorator collecting ``Annotated`` rule bindings.

    Only annotations declared on the class itself are read; inherited
    bindings are merged at lookup time by the store.

    Args:
        cls: Class being decorated (when used bare).
        store: Target store. Defaults to the process-wide store.
        localns: Extra names for resolving string annotations of classes
            defined inside functions.
        field_message_template: Class-level field error format (see
            TargetOptions).
        message_builder: Class-level field error formatter.
        context: Default context passed to rules of this class.

    Returns:
        The class unchanged, or a decorator when called with options.
    """

    def decorate(target: type) -> type:
        target_store = store if store is not None else get_default_store()
        options = TargetOptions.from_set(
            field_message_template=field_message_template,
            message_builder=message_builder,
            context=context,
        )
        if options.model_fields_set:
            target_store.set_options(target, options)

        locals_ = None
        if localns is not None:
            locals_ = {**vars(target), **localns}
        own = inspect.get_annotations(target, locals=locals_, eval_str=True)

        for field, hint in own.items():
            if get_origin(hint) is not Annotated:
                continue
            for meta in get_args(hint)[1:]:
                if isinstance(meta, RuleBinding):
                    target_store.add_binding(target, field, meta)
        return target

    if cls is not None:
        return decorate(cls)
    return decorate


def rule_marker(name: str) -> Callable[..., RuleBinding]:
    """Build a marker factory binding rule ``name`` with call-time params."""

    def marker(*params: Any) -> RuleBinding:
        return RuleBinding(name, tuple(params))

    marker.__name__ = marker.__qualname__ = f"Is{name}"
    marker.__doc__ = f"Bind the '{name}' rule to a field."
    return marker


IsBoolean = rule_marker("Boolean")
IsRequired = rule_marker("Required")
IsString = rule_marker("String")
IsNumber = rule_marker("Number")
IsNullable = rule_marker("Nullable")
IsOptional = rule_marker("Optional")
IsEmpty = rule_marker("Empty")


def MinLength(limit: int) -> RuleBinding:
    return RuleBinding("MinLength", (limit,))


def MaxLength(limit: int) -> RuleBinding:
    return RuleBinding("MaxLength", (limit,))


def OneOf(*specs: RuleSpec) -> RuleBinding:
    """Pass when at least one of the given rules passes."""
    return RuleBinding(OneOfRule(*specs))


def AllOf(*specs: RuleSpec) -> RuleBinding:
    """Pass when every given rule passes; reports all failures."""
    return RuleBinding(AllOfRule(*specs))


def ArrayOf(*specs: RuleSpec) -> RuleBinding:
    """Apply the given rules to every item of a list or tuple."""
    return RuleBinding(ArrayOfRule(*specs))


def ValidateNested(target: type) -> RuleBinding:
    """Validate the field value as an instance (or mapping) of ``target``."""
    return RuleBinding(NestedRule(target))
