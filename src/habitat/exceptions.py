"""Habitat exception hierarchy.

Everything the simulation raises derives from :class:`HabitatError`, so
front-ends can tell domain failures apart from unrelated bugs.
"""


class HabitatError(Exception):
    """Root of all habitat domain exceptions."""


class ConfigurationError(HabitatError, ValueError):
    """Invalid world bounds, population sizes or tuning values."""


class SimulationError(HabitatError):
    """Errors raised while a tick is being computed or committed."""


class InvariantViolation(SimulationError, AssertionError):
    """The position -> entity mapping was about to lose injectivity or bounds.

    Raised instead of silently overwriting a cell. It always indicates a bug
    in the tick algorithm or in caller-side placement, never a runtime
    condition to recover from.
    """
