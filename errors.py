"""
Exception taxonomy for Black Box: Algorithm Ascension.

Every refusal is recoverable. Nothing here is fatal to the process; callers
catch these and decide what to do next.
"""


class BlackBoxError(Exception):
    """Base exception for all game errors."""
    pass


# =============================================================================
# ENGINE
# =============================================================================

class IneligibleOperation(BlackBoxError):
    """Raised when an action's preconditions are not met. State is unchanged."""
    pass


class UnknownOperation(IneligibleOperation):
    """Raised when an operation id is not in the catalog."""
    pass


class GameOverError(IneligibleOperation):
    """Raised when attempting to play after the game has ended."""
    pass


# =============================================================================
# PERSISTENCE BOUNDARY
# =============================================================================

class InvalidSaveData(BlackBoxError):
    """Raised when loaded data fails structural validation."""
    pass


class SerializationFailure(BlackBoxError):
    """Raised when a state cannot be turned into plain data."""
    pass
