"""Error taxonomy for the ingestion pipeline."""


class GosinceError(Exception):
    """Base class for all gosince errors."""


class DiscoveryError(GosinceError):
    """Raised when the list of API sources cannot be obtained."""


class FetchError(GosinceError):
    """Raised when a single API source cannot be downloaded."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Failed to fetch {source}: {reason}")


class ParseError(GosinceError):
    """Raised when a line does not match the API grammar."""

    def __init__(self, line: str, reason: str):
        self.line = line
        self.reason = reason
        super().__init__(f"{reason}: {line}")


class UnrecognizedPackagePrefix(ParseError):
    """The line does not start with a `pkg <path>,` prefix."""

    def __init__(self, line: str):
        super().__init__(line, "could not match package name")


class UnrecognizedCategory(ParseError):
    """The line body matches none of the category keywords."""

    def __init__(self, line: str):
        super().__init__(line, "could not match proper category")


class StoreWriteError(GosinceError):
    """Raised when a record cannot be written for a reason other than a duplicate."""
