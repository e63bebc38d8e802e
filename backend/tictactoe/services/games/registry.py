"""Session registry: authoritative state for every running game.

Each game id maps to a Session. Every transition (join, move, restart,
leave) runs while holding that game's lock, validates before mutating, and
returns the list of Events to deliver. Delivery is the caller's job, after
the lock is released.

Connections are identified by their Socket.IO sid. A sid is bound to at most
one game at a time, and its mark is always derived from its current index in
the session's player list.
"""

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Optional

from . import board as rules
from .errors import (
    CellTaken,
    InvalidMove,
    NotFound,
    NotYourTurn,
    SessionFull,
    ValidationError,
    WaitingForOpponent,
)
from .events import Event

logger = logging.getLogger(__name__)

MAX_PLAYERS = 2


@dataclass
class Session:
    game_id: str
    board: List[Optional[str]] = field(default_factory=rules.empty_board)
    players: List[str] = field(default_factory=list)
    turn: str = rules.X
    winner: Optional[str] = None
    is_draw: bool = False

    @property
    def game_over(self) -> bool:
        return self.winner is not None or self.is_draw

    @property
    def status(self) -> str:
        if self.game_over:
            return 'finished'
        if len(self.players) < MAX_PLAYERS:
            return 'waiting'
        return 'active'

    def mark_of(self, sid: str) -> Optional[str]:
        if sid not in self.players:
            return None
        return rules.mark_for_index(self.players.index(sid))

    def reset(self) -> None:
        self.board = rules.empty_board()
        self.turn = rules.X
        self.winner = None
        self.is_draw = False


def _always_live(sid: str) -> bool:
    return True


class SessionRegistry:
    """Owns all sessions and serializes transitions per game id."""

    def __init__(self, is_connection_live: Optional[Callable[[str], bool]] = None):
        self._is_live = is_connection_live or _always_live
        # Guards the three maps below; never held while waiting on a game lock
        self._guard = threading.Lock()
        self._sessions: Dict[str, Session] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._bindings: Dict[str, str] = {}

    # ---- Lookups ----

    def __len__(self) -> int:
        with self._guard:
            return len(self._sessions)

    def __contains__(self, game_id) -> bool:
        with self._guard:
            return game_id in self._sessions

    def get(self, game_id: str) -> Optional[Session]:
        with self._guard:
            return self._sessions.get(game_id)

    def game_id_for(self, sid: str) -> Optional[str]:
        with self._guard:
            return self._bindings.get(sid)

    # ---- Transitions ----

    def join(self, game_id: str, sid: str) -> List[Event]:
        if not isinstance(game_id, str) or not game_id:
            raise ValidationError('game_id is required')

        events: List[Event] = []
        previous = self.game_id_for(sid)

        with self._exclusive(game_id):
            session = self.get(game_id)
            if session is None:
                session = Session(game_id=game_id)
                with self._guard:
                    self._sessions[game_id] = session
                logger.info(f"[session-create] game={game_id}")

            self._prune(session, keep=sid)

            if sid not in session.players and len(session.players) >= MAX_PLAYERS:
                raise SessionFull()

            if sid not in session.players:
                session.players.append(sid)
            with self._guard:
                self._bindings[sid] = game_id

            mark = session.mark_of(sid)
            count = len(session.players)
            logger.info(f"[join] sid={sid} game={game_id} mark={mark} players={count} status={session.status}")

            events.append(Event.private(sid, 'game_joined', {
                'game_id': game_id,
                'mark': mark,
                'board': list(session.board),
                'turn': session.turn,
                'players_count': count,
            }))
            events.append(Event.group(game_id, 'player_joined', {'players_count': count}))
            if count == MAX_PLAYERS:
                events.append(Event.group(game_id, 'game_start', {
                    'board': list(session.board),
                    'turn': session.turn,
                }))

        if previous is not None and previous != game_id:
            # A connection plays in one game at a time
            events = self._depart(sid, previous) + events
        return events

    def move(self, sid: str, position) -> List[Event]:
        with self._bound_session(sid) as session:
            if session.game_over:
                return []
            if not rules.is_valid_position(position):
                raise InvalidMove()
            if len(session.players) < MAX_PLAYERS:
                raise WaitingForOpponent()
            mark = session.mark_of(sid)
            if mark != session.turn:
                raise NotYourTurn()
            if session.board[position] is not None:
                raise CellTaken()

            session.board = rules.apply_mark(session.board, position, mark)
            session.turn = rules.other_mark(session.turn)
            outcome = rules.evaluate(session.board)

            if outcome.is_terminal:
                session.winner = outcome.winner
                session.is_draw = outcome.is_draw
                logger.info(
                    f"[game-over] game={session.game_id} winner={outcome.winner} draw={outcome.is_draw}"
                )
                return [Event.group(session.game_id, 'game_over', {
                    'board': list(session.board),
                    'winner': outcome.winner,
                    'is_draw': outcome.is_draw,
                })]
            return [Event.group(session.game_id, 'move_made', {
                'board': list(session.board),
                'turn': session.turn,
            })]

    def restart(self, sid: str) -> List[Event]:
        with self._bound_session(sid) as session:
            self._prune(session, keep=sid)
            if len(session.players) == MAX_PLAYERS:
                # Swap marks for the new game
                session.players.reverse()
            session.reset()
            logger.info(f"[restart] game={session.game_id} players={session.players}")
            return [
                Event.private(player, 'game_restarted', {
                    'game_id': session.game_id,
                    'board': list(session.board),
                    'turn': session.turn,
                    'mark': session.mark_of(player),
                })
                for player in session.players
            ]

    def leave(self, sid: str) -> List[Event]:
        game_id = self.game_id_for(sid)
        if game_id is None:
            return []
        with self._exclusive(game_id):
            with self._guard:
                # Re-check under the game lock; a concurrent leave may have won
                if self._bindings.get(sid) != game_id:
                    return []
                del self._bindings[sid]
                session = self._sessions.get(game_id)
            if session is None:
                return []
            return self._remove_player(session, sid)

    # ---- Internals ----

    def _depart(self, sid: str, game_id: str) -> List[Event]:
        """Drop ``sid`` from a game it no longer has a binding to."""
        with self._exclusive(game_id):
            session = self.get(game_id)
            if session is None or sid not in session.players:
                return []
            return self._remove_player(session, sid)

    def _remove_player(self, session: Session, sid: str) -> List[Event]:
        if sid in session.players:
            session.players.remove(sid)
        count = len(session.players)
        logger.info(f"[leave] sid={sid} game={session.game_id} players={count}")
        if count == 0:
            with self._guard:
                self._sessions.pop(session.game_id, None)
            logger.info(f"[session-delete] game={session.game_id}")
        return [Event.group(session.game_id, 'player_left', {'players_count': count})]

    @contextmanager
    def _exclusive(self, game_id: str) -> Iterator[None]:
        while True:
            with self._guard:
                lock = self._locks.setdefault(game_id, threading.Lock())
            lock.acquire()
            with self._guard:
                current = self._locks.get(game_id)
            if current is lock:
                break
            # The game was dropped while we waited; take the fresh lock
            lock.release()
        try:
            yield
        finally:
            with self._guard:
                # Waiters on a dropped lock retry with a new one
                if game_id not in self._sessions and self._locks.get(game_id) is lock:
                    del self._locks[game_id]
            lock.release()

    @contextmanager
    def _bound_session(self, sid: str) -> Iterator[Session]:
        game_id = self.game_id_for(sid)
        if game_id is None:
            raise NotFound(sid)
        with self._exclusive(game_id):
            session = self.get(game_id)
            if session is None or self.game_id_for(sid) != game_id or sid not in session.players:
                raise NotFound(sid)
            yield session

    def _prune(self, session: Session, keep: Optional[str] = None) -> None:
        dead = [p for p in session.players if p != keep and not self._is_live(p)]
        if not dead:
            return
        session.players = [p for p in session.players if p not in dead]
        with self._guard:
            for p in dead:
                if self._bindings.get(p) == session.game_id:
                    del self._bindings[p]
        logger.warning(f"[prune] game={session.game_id} dropped stale connections {dead}")

