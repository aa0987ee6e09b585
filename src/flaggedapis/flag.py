# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Feature flag identity."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Flag:
    """Represent the fully qualified name of an aconfig flag.

    The name joins the flag's package and name with a dot, e.g.
    ``com.android.aconfig.test.disabled_ro``. Flag state is kept in a separate
    ``Mapping[Flag, bool]``.
    """

    name: str

    @classmethod
    def from_parts(cls, package: str, name: str) -> "Flag":
        return cls(name=f"{package}.{name}")

    def __str__(self) -> str:
        return self.name
