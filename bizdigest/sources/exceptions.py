"""Exception hierarchy for source adapters."""

from __future__ import annotations


class SourceError(Exception):
    """Base exception for all source adapter errors."""


class SourceConnectionError(SourceError):
    """Source unreachable or returned a non-success status."""


class SourceAuthError(SourceError):
    """Source rejected the credentials."""


class SourceParseError(SourceError):
    """Failed to parse a response or export from a source."""
