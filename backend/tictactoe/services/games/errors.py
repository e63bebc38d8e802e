"""Game errors.

Socket handlers turn these into a private ``error`` event carrying
``str(exc)``, except NotFound which is ignored.
"""


class GameError(Exception):
    """Base class for all game errors."""
    message = 'game error'

    def __init__(self, message=None):
        super().__init__(message or self.message)


# ============ Malformed input ============

class ValidationError(GameError):
    message = 'invalid request'


class InvalidMove(ValidationError):
    """Position out of range or cell already marked."""
    message = 'invalid position'


# ============ Game rules ============

class RuleViolation(GameError):
    message = 'move not allowed'


class SessionFull(RuleViolation):
    message = 'session full'


class WaitingForOpponent(RuleViolation):
    message = 'waiting for opponent'


class NotYourTurn(RuleViolation):
    message = 'not your turn'


class CellTaken(RuleViolation):
    message = 'cell taken'


# ============ Missing bindings ============

class NotFound(GameError):
    """The connection is not bound to a live session."""
    def __init__(self, sid):
        self.sid = sid
        super().__init__(f"No session for connection {sid}")
