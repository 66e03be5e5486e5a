"""
Package domain models for repo-upgrader.

This module contains the enum describing which kind of installed package
is being checked for updates.
"""

from __future__ import annotations

from enum import Enum
from typing import Union


class PackageKind(Enum):
    """Kinds of locally installed packages that can be upgraded."""

    PLUGIN = "Plugin"
    THEME = "Theme"

    @classmethod
    def coerce(cls, value: Union["PackageKind", str]) -> "PackageKind":
        """Accept either a member or its (case-insensitive) value."""

        if isinstance(value, cls):
            return value
        for member in cls:
            if member.value.lower() == str(value).strip().lower():
                return member
        raise ValueError(f"Invalid package kind: {value}")

    @property
    def key(self) -> str:
        return self.value.lower()


__all__ = [
    "PackageKind",
]
