"""
Engine errors.
All rule violations raise a FloorError subclass; state is never mutated on failure.
FloorError derives from ValueError so callers can catch either.
"""


class FloorError(ValueError):
    """Base class for rejected transitions."""
    code = "invalid_action"


class ValidationError(FloorError):
    """Setup preconditions unmet (players, categories, board size)."""
    code = "validation_error"


class InvalidTransition(FloorError):
    """Action is not allowed in the current phase."""
    code = "invalid_transition"


class UnknownEntity(FloorError):
    """Referenced player, square or category does not exist."""
    code = "unknown_entity"


class IllegalChallenge(FloorError):
    """Selected square is not in the active player's frontier."""
    code = "not_adjacent"


class MissingCategory(FloorError):
    """A duel side has no category assigned."""
    code = "no_category_assigned"


class NoEligibleOpponents(FloorError):
    """No active player has an adjacent opponent to challenge."""
    code = "no_eligible_opponents"


# Names used by the UI layer
NotAdjacent = IllegalChallenge
NoCategoryAssigned = MissingCategory
