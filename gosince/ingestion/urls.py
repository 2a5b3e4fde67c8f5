"""Documentation links for Go API records."""

from __future__ import annotations

import re

from gosince.core.enums import Category

DEFAULT_DOC_BASE_URL = "https://golang.org/pkg"

# method (*Header) FileInfo() os.FileInfo
RECEIVER_PATTERN = re.compile(r"^method \(\*?(\w+?)\) ")


def extract_receiver(description: str) -> str | None:
    """Return the receiver type of a method description, without the pointer."""
    match = RECEIVER_PATTERN.match(description)
    return match.group(1) if match else None


def build_golang_url(
    category: Category | str,
    name: str,
    package_name: str,
    description: str,
    doc_base_url: str = DEFAULT_DOC_BASE_URL,
) -> str:
    """
    Build the golang.org documentation link for a record.

    Methods link to `#Receiver.Name` when the receiver can be read from the
    description; everything else links to `#Name`.
    """
    base = doc_base_url.rstrip("/")
    if category == Category.METHOD:
        receiver = extract_receiver(description)
        if receiver:
            return f"{base}/{package_name}/#{receiver}.{name}"
    return f"{base}/{package_name}/#{name}"
