# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Cross-reference flagged symbols against flag states and the built artifact."""

from collections.abc import Iterable, Mapping, Set

from flaggedapis.errors import (
    ApiError,
    DisabledFlaggedApiIsPresentError,
    EnabledFlaggedApiNotPresentError,
    UnknownFlagError,
)
from flaggedapis.flag import Flag
from flaggedapis.symbol import ClassSymbol, MemberSymbol, Symbol, create_method


def index_classes(symbols: Iterable[Symbol]) -> dict[str, ClassSymbol]:
    """Map class names to the class symbols found in ``symbols``."""
    return {
        symbol.name: symbol for symbol in symbols if isinstance(symbol, ClassSymbol)
    }


def contains_symbol(
    symbols: Set[Symbol],
    symbol: Symbol,
    classes: Mapping[str, ClassSymbol] | None = None,
) -> bool:
    """Tell whether ``symbol`` is visible in ``symbols``.

    A member that is not listed verbatim still counts as present when the
    owning class is listed and one of its direct interfaces declares the same
    member. Superclasses are not searched.

    Args:
        symbols: Symbols present in the built artifact.
        symbol: Symbol to look for.
        classes: Pre-built ``index_classes(symbols)``; computed when omitted.

    Returns:
        ``True`` if the symbol is present.
    """
    if symbol in symbols:
        return True
    if not isinstance(symbol, MemberSymbol):
        return False

    if classes is None:
        classes = index_classes(symbols)
    clazz = classes.get(symbol.class_name)
    if clazz is None:
        return False

    # create_method rather than create_field: the member may carry parentheses
    return any(
        create_method(interface, symbol.member) in symbols
        for interface in clazz.interfaces
    )


def find_errors(
    flagged_symbols: Iterable[tuple[Symbol, Flag]],
    flags: Mapping[Flag, bool],
    symbols_in_output: Set[Symbol],
) -> set[ApiError]:
    """Find flagged symbols whose presence disagrees with their flag.

    Args:
        flagged_symbols: Symbols flagged in the API signature, with their flag.
        flags: Flag states; ``True`` means enabled.
        symbols_in_output: Symbols present in the built artifact.

    Returns:
        The set of errors found.
    """
    classes = index_classes(symbols_in_output)
    errors: set[ApiError] = set()
    for symbol, flag in flagged_symbols:
        enabled = flags.get(flag)
        if enabled is None:
            errors.add(UnknownFlagError(symbol=symbol, flag=flag))
            continue
        present = contains_symbol(symbols_in_output, symbol, classes)
        if enabled and not present:
            errors.add(EnabledFlaggedApiNotPresentError(symbol=symbol, flag=flag))
        elif not enabled and present:
            errors.add(DisabledFlaggedApiIsPresentError(symbol=symbol, flag=flag))
    return errors
