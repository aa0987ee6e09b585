# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Inconsistencies between flagged APIs, flag states and the built artifact."""

from dataclasses import dataclass
from typing import ClassVar, Literal

from flaggedapis.flag import Flag
from flaggedapis.symbol import Symbol

ApiErrorKind = Literal["enabled_not_present", "disabled_is_present", "unknown_flag"]


@dataclass(frozen=True)
class ApiError:
    """Represent one flagged symbol whose presence disagrees with its flag.

    Only the variants below are instantiated.

    Attributes:
        symbol: The flagged symbol.
        flag: The flag guarding ``symbol``.
    """

    kind: ClassVar[ApiErrorKind]
    description: ClassVar[str]

    symbol: Symbol
    flag: Flag

    def __post_init__(self) -> None:
        if type(self) is ApiError:
            raise TypeError("ApiError is abstract; create one of its variants")

    def __str__(self) -> str:
        return (
            f"error: {self.description}: "
            f"symbol={self.symbol.to_pretty_string()} flag={self.flag}"
        )

    def as_dict(self) -> dict[str, str]:
        """Return a JSON-ready view of the error."""
        return {
            "kind": self.kind,
            "symbol": self.symbol.to_pretty_string(),
            "flag": str(self.flag),
            "message": str(self),
        }


@dataclass(frozen=True)
class EnabledFlaggedApiNotPresentError(ApiError):
    """The flag is enabled but the symbol is missing from the artifact."""

    kind: ClassVar[ApiErrorKind] = "enabled_not_present"
    description: ClassVar[str] = "enabled @FlaggedApi not present in built artifact"


@dataclass(frozen=True)
class DisabledFlaggedApiIsPresentError(ApiError):
    """The flag is disabled but the symbol made it into the artifact."""

    kind: ClassVar[ApiErrorKind] = "disabled_is_present"
    description: ClassVar[str] = "disabled @FlaggedApi is present in built artifact"


@dataclass(frozen=True)
class UnknownFlagError(ApiError):
    """The symbol references a flag without a known state."""

    kind: ClassVar[ApiErrorKind] = "unknown_flag"
    description: ClassVar[str] = "unknown flag"
