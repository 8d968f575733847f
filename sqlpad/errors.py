"""Exception hierarchy shared across sqlpad modules."""

from __future__ import annotations


class SqlpadError(RuntimeError):
    """Base class for sqlpad failures."""


class ConfigError(SqlpadError):
    """Raised when configuration references something that does not exist."""


class MetadataError(SqlpadError):
    """Raised when a schema snapshot is internally inconsistent."""


class UnknownDialectError(SqlpadError, ValueError):
    """Raised for SQL dialect names the parse adapter cannot handle."""


__all__ = ["ConfigError", "MetadataError", "SqlpadError", "UnknownDialectError"]
