"""Game domain services: board rules and the session registry.

This package contains pure(ish) domain logic that should be imported by
socket handlers, keeping transport concerns separated from core game
mechanics.
"""

from .board import O, X, Outcome, apply_mark, evaluate
from .errors import (
    CellTaken,
    GameError,
    InvalidMove,
    NotFound,
    NotYourTurn,
    RuleViolation,
    SessionFull,
    ValidationError,
    WaitingForOpponent,
)
from .events import Event
from .registry import Session, SessionRegistry
