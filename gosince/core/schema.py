"""Pydantic v2 models for Go API records."""

import re

from pydantic import BaseModel, Field, field_validator

from gosince.core.enums import Category

NAME_PATTERN = re.compile(r"^\w+$")


class APIRecord(BaseModel):
    """One exported Go identifier and the release it first appeared in."""

    name: str = Field(min_length=1)
    category: Category
    version: str
    package_name: str
    description: str
    golang_url: str

    def key(self) -> tuple[str, str, str, str, str]:
        """Return the tuple that identifies this record in the store."""
        return (
            self.name,
            self.category.value,
            self.version,
            self.package_name,
            self.description,
        )


class LookupQuery(BaseModel):
    """
    Validated lookup parameters.

    `name` must be a plain identifier; `category` is optional and must be
    one of the five known categories when given.
    """

    name: str
    category: Category | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Reject names with anything but [A-Za-z0-9_]."""
        v = v.strip()
        if not NAME_PATTERN.match(v):
            raise ValueError(f"{v} should only contains [A-Za-z0-9_]")
        return v

    @field_validator("category", mode="before")
    @classmethod
    def validate_category(cls, v: object) -> object:
        """Treat blank categories as absent and explain invalid ones."""
        if v is None:
            return None
        if isinstance(v, str):
            v = v.strip()
            if v == "":
                return None
            if v not in Category.values():
                choices = ", ".join(f'"{c}"' for c in Category.values())
                raise ValueError(f"{v} is not one of {choices}")
        return v
