"""Enums for Go API record fields."""

from enum import Enum


class Category(str, Enum):
    """Kind of exported Go identifier."""

    CONST = "const"
    FUNC = "func"
    METHOD = "method"
    TYPE = "type"
    VAR = "var"

    @classmethod
    def values(cls) -> list[str]:
        """Return the raw category strings in declaration order."""
        return [member.value for member in cls]
