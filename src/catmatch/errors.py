"""Exception types raised by the engine.

Invalid player input never raises; these cover the cases a caller must
handle (locked levels) and the ones that end a session (broken invariants).
"""


class LevelUnavailableError(ValueError):
    """Requested level does not exist or is still locked."""


class EngineInvariantError(RuntimeError):
    """Grid consistency can no longer be trusted; the session must stop."""


class CascadeLimitError(EngineInvariantError):
    """The resolving loop exceeded its safety iteration cap."""
