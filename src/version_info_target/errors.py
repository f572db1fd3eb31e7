"""Exception types raised across configuration and build-time phases."""

from __future__ import annotations


class VersionInfoError(Exception):
    """Base class for all version-info generation failures."""


class ConfigurationError(VersionInfoError, ValueError):
    """Invalid input detected before anything is wired into the build graph."""


class BuildGraphError(VersionInfoError, RuntimeError):
    """The build graph manifest is inconsistent (unknown target, cycle...)."""


class QueryError(VersionInfoError, RuntimeError):
    """The deferred build-time step could not produce complete metadata."""


class GitQueryError(QueryError):
    """A git invocation failed or the git client is unavailable."""
