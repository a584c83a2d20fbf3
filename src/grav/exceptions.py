# MIT License (see LICENSE)
"""
grav exception hierarchy.

Everything raised on purpose by the package derives from GravError, so the
CLI can catch domain failures without a blanket ``except Exception``.
"""


class GravError(Exception):
    """Root of all grav exceptions."""


class ConfigurationError(GravError, ValueError):
    """Invalid or missing configuration values."""


class DeadEntityError(GravError, KeyError):
    """A component was inserted into an entity that is dead or stale."""


class SchedulerError(GravError):
    """The stage graph is invalid (cycle, unknown stage, write conflict)."""


class OutputError(GravError, OSError):
    """The output sink could not be opened or appended to."""
