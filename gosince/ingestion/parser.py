"""
API Line Parser
===============

Turns one line of a Go API description file into a structured record.

Lines look like:

    pkg go/build, type Context struct, InstallSuffix string
    pkg log/syslog (freebsd-arm), const LOG_AUTH Priority
    pkg archive/tar, method (*Header) FileInfo() os.FileInfo

Matching is table driven: the package prefix patterns are tried in order and
the first match wins, then the category patterns are tried against the rest
of the line.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from gosince.core.enums import Category
from gosince.core.errors import UnrecognizedCategory, UnrecognizedPackagePrefix
from gosince.core.schema import APIRecord
from gosince.ingestion.urls import DEFAULT_DOC_BASE_URL, build_golang_url


@dataclass(frozen=True)
class CategoryPattern:
    """A category keyword and the regex that captures the identifier name."""

    category: Category
    pattern: re.Pattern[str]

    def extract(self, body: str) -> str | None:
        """Return the captured name, or None if the body does not match."""
        match = self.pattern.match(body)
        return match.group(1) if match else None


@dataclass(frozen=True)
class Grammar:
    """Ordered pattern tables used by the parser."""

    package_patterns: tuple[re.Pattern[str], ...]
    category_patterns: tuple[CategoryPattern, ...]


DEFAULT_GRAMMAR = Grammar(
    package_patterns=(
        # pkg go/build, type Context struct, InstallSuffix string
        re.compile(r"^pkg ([^()]+?),"),
        # pkg log/syslog (freebsd-arm), const LOG_AUTH Priority
        re.compile(r"^pkg (\S+?) \(.+?\),"),
    ),
    category_patterns=(
        # const SHA512_224 Hash
        CategoryPattern(Category.CONST, re.compile(r"^const (\w+?) ")),
        # var Chakma *RangeTable
        CategoryPattern(Category.VAR, re.compile(r"^var (\w+?) ")),
        # type Queryer interface { Query }
        CategoryPattern(Category.TYPE, re.compile(r"^type (\w+?) ")),
        # func FileInfoHeader(os.FileInfo, string) (*Header, error)
        CategoryPattern(Category.FUNC, re.compile(r"^func (\w+?)\(")),
        # method (*Header) FileInfo() os.FileInfo
        CategoryPattern(Category.METHOD, re.compile(r"^method \(.+\) (\w+?)\(")),
    ),
)


@dataclass
class ParsedLine:
    """A line broken into its parts, before version and URL are known."""

    name: str
    category: Category
    package_name: str
    description: str

    def to_record(self, version: str, doc_base_url: str = DEFAULT_DOC_BASE_URL) -> APIRecord:
        """Complete the line into a storable record."""
        return APIRecord(
            name=self.name,
            category=self.category,
            version=version,
            package_name=self.package_name,
            description=self.description,
            golang_url=build_golang_url(
                self.category,
                self.name,
                self.package_name,
                self.description,
                doc_base_url=doc_base_url,
            ),
        )


class LineParser:
    """Parses trimmed, non-comment API lines."""

    def __init__(self, grammar: Grammar = DEFAULT_GRAMMAR) -> None:
        self.grammar = grammar

    def _match_package(self, line: str) -> tuple[str, str]:
        """Return (package_name, remainder) for the first matching prefix."""
        for pattern in self.grammar.package_patterns:
            match = pattern.match(line)
            if match:
                return match.group(1), line[match.end():].strip()
        raise UnrecognizedPackagePrefix(line)

    def parse(self, line: str) -> ParsedLine:
        """
        Parse a single API line.

        Args:
            line: A stripped line from an API file

        Returns:
            ParsedLine with name, category, package and description

        Raises:
            UnrecognizedPackagePrefix: the line has no `pkg` prefix
            UnrecognizedCategory: the remainder has no known keyword
        """
        package_name, description = self._match_package(line)

        for entry in self.grammar.category_patterns:
            name = entry.extract(description)
            if name is not None:
                return ParsedLine(
                    name=name,
                    category=entry.category,
                    package_name=package_name,
                    description=description,
                )

        raise UnrecognizedCategory(line)


def parse_line(line: str) -> ParsedLine:
    """Parse a line with the default grammar."""
    return LineParser().parse(line)
