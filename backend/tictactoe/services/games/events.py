from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Event:
    """An outbound event produced by a session transition.

    Exactly one of ``sid`` (private, one connection) or ``game_id`` (group,
    every connection in the game's room) is set.
    """
    name: str
    payload: Dict[str, Any] = field(default_factory=dict)
    sid: Optional[str] = None
    game_id: Optional[str] = None

    @classmethod
    def private(cls, sid: str, name: str, payload: Dict[str, Any]) -> 'Event':
        return cls(name=name, payload=payload, sid=sid)

    @classmethod
    def group(cls, game_id: str, name: str, payload: Dict[str, Any]) -> 'Event':
        return cls(name=name, payload=payload, game_id=game_id)

    @property
    def is_private(self) -> bool:
        return self.sid is not None
