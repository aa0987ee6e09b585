# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
import itertools

import pytest

from flaggedapis.checker import contains_symbol, find_errors
from flaggedapis.errors import (
    ApiError,
    DisabledFlaggedApiIsPresentError,
    EnabledFlaggedApiNotPresentError,
    UnknownFlagError,
)
from flaggedapis.flag import Flag
from flaggedapis.symbol import (
    ClassSymbol,
    MemberSymbol,
    create_class,
    create_field,
    create_method,
)


def test_chk_001_enabled_flag_missing_class_is_reported() -> None:
    symbol = create_class("a.B", None, [])

    errors = find_errors({(symbol, Flag("f"))}, {Flag("f"): True}, set())

    assert errors == {EnabledFlaggedApiNotPresentError(symbol=symbol, flag=Flag("f"))}


def test_chk_002_disabled_flag_present_member_is_reported() -> None:
    symbol = MemberSymbol("a/B", "m()")

    errors = find_errors({(symbol, Flag("f"))}, {Flag("f"): False}, {symbol})

    assert errors == {DisabledFlaggedApiIsPresentError(symbol=symbol, flag=Flag("f"))}


def test_chk_003_member_found_through_interface_of_owning_class() -> None:
    symbol = MemberSymbol("a/B", "m()")
    output = {ClassSymbol("a/B", None, frozenset({"a/I"})), MemberSymbol("a/I", "m()")}

    errors = find_errors({(symbol, Flag("f"))}, {Flag("f"): True}, output)

    assert errors == set()


def test_chk_004_missing_flag_state_is_unknown_flag() -> None:
    symbol = create_class("a.B", None, [])

    errors = find_errors({(symbol, Flag("missing"))}, {}, {symbol})

    assert errors == {UnknownFlagError(symbol=symbol, flag=Flag("missing"))}


def test_chk_005_consistent_states_produce_no_errors() -> None:
    present = create_method("a.B", "m(I)")
    absent = create_field("a.B", "F")
    output = {create_class("a.B", None, []), present}

    errors = find_errors(
        {(present, Flag("on")), (absent, Flag("off"))},
        {Flag("on"): True, Flag("off"): False},
        output,
    )

    assert errors == set()


def test_chk_006_class_symbols_never_use_interface_fallback() -> None:
    missing = create_class("a.B", None, [])
    output = {
        create_class("a.C", None, ["a.B"]),
        create_class("a.B.Inner", None, []),
    }

    assert contains_symbol(output, missing) is False


def test_chk_007_member_absent_when_owning_class_absent() -> None:
    output = {create_class("a.I", None, []), create_method("a.I", "m()")}

    assert contains_symbol(output, create_method("a.B", "m()")) is False


def test_chk_008_superclass_members_are_not_searched() -> None:
    output = {
        create_class("a.B", "a.Base", []),
        create_class("a.Base", None, []),
        create_method("a.Base", "m()"),
    }

    assert contains_symbol(output, create_method("a.B", "m()")) is False


def test_chk_009_interface_fallback_applies_to_fields() -> None:
    output = {create_class("a.B", None, ["a.I"]), create_field("a.I", "CONST")}

    assert contains_symbol(output, create_field("a.B", "CONST")) is True


def test_chk_010_interface_fallback_is_order_independent() -> None:
    interfaces = ["a.I", "a.J", "a.K"]
    member = create_method("a.B", "m(J)")
    results = set()
    for ordering in itertools.permutations(interfaces):
        output = {create_class("a.B", None, ordering), create_method("a.J", "m(J)")}
        results.add(contains_symbol(output, member))

    assert results == {True}


def test_chk_011_errors_are_deduplicated_and_cover_every_kind() -> None:
    class_symbol = create_class("a.B", None, [])
    member = create_method("a.B", "m()")
    associations = [
        (class_symbol, Flag("on")),
        (class_symbol, Flag("on")),
        (member, Flag("off")),
        (member, Flag("unknown")),
    ]
    output = {member}

    errors = find_errors(associations, {Flag("on"): True, Flag("off"): False}, output)

    assert errors == {
        EnabledFlaggedApiNotPresentError(symbol=class_symbol, flag=Flag("on")),
        DisabledFlaggedApiIsPresentError(symbol=member, flag=Flag("off")),
        UnknownFlagError(symbol=member, flag=Flag("unknown")),
    }


def test_chk_012_error_messages_match_report_format() -> None:
    class_symbol = create_class("android.Clazz", None, [])
    member = create_method("android.Clazz", "foo(I)")
    flag = Flag("android.flag.foo")

    assert str(EnabledFlaggedApiNotPresentError(symbol=class_symbol, flag=flag)) == (
        "error: enabled @FlaggedApi not present in built artifact: "
        "symbol=android/Clazz flag=android.flag.foo"
    )
    assert str(DisabledFlaggedApiIsPresentError(symbol=member, flag=flag)) == (
        "error: disabled @FlaggedApi is present in built artifact: "
        "symbol=android/Clazz/foo(I) flag=android.flag.foo"
    )
    assert str(UnknownFlagError(symbol=member, flag=flag)) == (
        "error: unknown flag: symbol=android/Clazz/foo(I) flag=android.flag.foo"
    )


def test_chk_013_error_as_dict_is_json_ready() -> None:
    error = UnknownFlagError(symbol=create_field("a.B", "F"), flag=Flag("x.y"))

    assert error.as_dict() == {
        "kind": "unknown_flag",
        "symbol": "a/B/F",
        "flag": "x.y",
        "message": "error: unknown flag: symbol=a/B/F flag=x.y",
    }


def test_chk_014_error_variants_with_same_payload_differ() -> None:
    symbol = create_class("a.B", None, [])
    flag = Flag("f")

    assert EnabledFlaggedApiNotPresentError(symbol=symbol, flag=flag) != UnknownFlagError(
        symbol=symbol, flag=flag
    )


def test_chk_015_error_base_cannot_be_instantiated() -> None:
    with pytest.raises(TypeError):
        ApiError(symbol=create_class("a.B", None, []), flag=Flag("f"))
