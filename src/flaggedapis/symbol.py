# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Canonical symbol identities for classes, fields and methods.

Each input format spells the fully qualified name of a Java element
differently: ``android.util.Clazz.Inner#foo`` in one place,
``android/util/Clazz$Inner`` in another. Every parsed element is converted to
a ``Symbol`` so that identities can be compared across formats.

Names are encoded close to JVM descriptor syntax, with ``/`` as the only
delimiter (``#``, ``$`` and ``.`` are all rewritten). A method
``foo(int, int[], android.util.Clazz)`` on ``android.util.Outer.Inner`` is::

    MemberSymbol("android/util/Outer/Inner", "foo(I[ILandroid/util/Clazz;)")
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass, field

FORBIDDEN_CHARS = ("#", "$", ".")
INTERNAL_DELIMITER = "/"


class SymbolError(ValueError):
    """Represent a structurally invalid symbol construction."""


class Symbol(ABC):
    """Base of the class and member symbol variants."""

    @abstractmethod
    def to_pretty_string(self) -> str:
        """Return the human-readable form used in reports."""


@dataclass(frozen=True)
class ClassSymbol(Symbol):
    """Represent a class declaration.

    Attributes:
        name: Internal-format class name.
        superclass: Internal-format superclass name, if any.
        interfaces: Internal-format names of implemented interfaces.

    Only ``name`` takes part in equality and hashing.
    """

    name: str
    superclass: str | None = field(default=None, compare=False)
    interfaces: frozenset[str] = field(default_factory=frozenset, compare=False)

    def to_pretty_string(self) -> str:
        return self.name


@dataclass(frozen=True)
class MemberSymbol(Symbol):
    """Represent a field or a method of a class.

    Attributes:
        class_name: Internal-format name of the owning class.
        member: Field name, or method name followed by its parameter encoding.
    """

    class_name: str
    member: str

    def to_pretty_string(self) -> str:
        return f"{self.class_name}/{self.member}"


def to_internal_format(name: str) -> str:
    """Rewrite every nesting delimiter in ``name`` to ``/``."""
    for ch in FORBIDDEN_CHARS:
        name = name.replace(ch, INTERNAL_DELIMITER)
    return name


def create_class(
    name: str, superclass: str | None, interfaces: Iterable[str]
) -> ClassSymbol:
    """Create a class symbol.

    Args:
        name: Class name in any supported notation.
        superclass: Superclass name, or ``None``.
        interfaces: Names of the interfaces the class implements.

    Returns:
        Normalized class symbol.
    """
    return ClassSymbol(
        name=to_internal_format(name),
        superclass=to_internal_format(superclass) if superclass is not None else None,
        interfaces=frozenset(to_internal_format(i) for i in interfaces),
    )


def create_field(class_name: str, field_name: str) -> MemberSymbol:
    """Create a field symbol.

    Raises:
        SymbolError: If ``field_name`` looks like a method signature.
    """
    if "(" in field_name or ")" in field_name:
        raise SymbolError(
            f"Field name must not contain parentheses: {class_name}/{field_name}"
        )
    return MemberSymbol(
        class_name=to_internal_format(class_name),
        member=to_internal_format(field_name),
    )


def create_method(class_name: str, method: str) -> MemberSymbol:
    """Create a method symbol from ``name(<parameter encoding>)``."""
    return MemberSymbol(
        class_name=to_internal_format(class_name),
        member=to_internal_format(method),
    )
