from flask import current_app, request
from flask_socketio import join_room, leave_room, emit
from tictactoe import socketio
from tictactoe.services.games import Event, GameError, NotFound, SessionRegistry
from typing import Callable, List


def room_for(game_id: str) -> str:
    return f"game:{game_id}"


def handle_connect():
    current_app.logger.info(f"[connect] sid={_get_sid()}")
    emit('connected', {'message': f'Connected to {_namespace()}'})


def handle_disconnect(reason=None):
    sid = _get_sid()
    current_app.logger.info(f"[disconnect] sid={sid} reason={reason}")
    dispatch(_registry().leave(sid))


def handle_join_game(data=None):
    # Accept {'game_id': ...} or a bare id
    game_id = data.get('game_id') if isinstance(data, dict) else data
    sid = _get_sid()
    registry = _registry()
    previous = registry.game_id_for(sid)
    # Enter the room before the player is bound so no group event can miss it
    entered = isinstance(game_id, str) and bool(game_id) and game_id != previous
    if entered:
        join_room(room_for(game_id))
    events = _run(registry.join, game_id, sid)
    if registry.game_id_for(sid) != game_id:
        if entered:
            leave_room(room_for(game_id))
    elif previous is not None and previous != game_id:
        leave_room(room_for(previous))
    dispatch(events)


def handle_make_move(data=None):
    position = data.get('position') if isinstance(data, dict) else None
    registry = _registry()
    dispatch(_run(registry.move, _get_sid(), position))


def handle_restart_game(data=None):
    registry = _registry()
    dispatch(_run(registry.restart, _get_sid()))


def handle_leave_game(data=None):
    sid = _get_sid()
    registry = _registry()
    game_id = registry.game_id_for(sid)
    if game_id is None:
        return
    events = registry.leave(sid)
    leave_room(room_for(game_id))
    emit('left', {'game_id': game_id})
    dispatch(events)


def handle_ping(data=None):
    emit('pong', data or {})


def handle_error(exc):
    current_app.logger.exception(f"[socket-error] sid={_get_sid()} event={request.event}")
    emit('error', {'message': 'internal server error'})

# ---- Dispatch helpers ----

def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore

def _namespace() -> str:
    return current_app.config.get('SOCKETIO_NAMESPACE', '/ws')

def _registry() -> SessionRegistry:
    return current_app.extensions['session_registry']

def _run(transition: Callable[..., List[Event]], *args) -> List[Event]:
    """Apply a registry transition, turning game errors into a private error event."""
    sid = _get_sid()
    try:
        return transition(*args)
    except NotFound:
        current_app.logger.debug(f"[ignored] sid={sid} has no game")
        return []
    except GameError as exc:
        current_app.logger.info(f"[rejected] sid={sid} {type(exc).__name__}: {exc}")
        return [Event.private(sid, 'error', {'message': str(exc)})]

def dispatch(events: List[Event]) -> None:
    namespace = _namespace()
    for event in events:
        to = event.sid if event.is_private else room_for(event.game_id)
        socketio.emit(event.name, event.payload, to=to, namespace=namespace)


def register_socketio_handlers(namespace: str = '/ws') -> None:
    """Register Socket.IO event handlers on the game namespace."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('join_game', handle_join_game, namespace=namespace)
    socketio.on_event('make_move', handle_make_move, namespace=namespace)
    socketio.on_event('restart_game', handle_restart_game, namespace=namespace)
    socketio.on_event('leave_game', handle_leave_game, namespace=namespace)
    socketio.on_event('ping', handle_ping, namespace=namespace)
    socketio.on_error(namespace)(handle_error)
