from flask import request
from flask_socketio import join_room, leave_room, emit
from bingo import socketio
from bingo.exceptions import AlreadyJoined, BingoError, RoomNotFound, RoomNotJoinable
from bingo.services.game import events as ev
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)

NAMESPACE = '/ws'


def channel(room_id: str) -> str:
    return f"room:{room_id}"


def publish_events(room_id: str, events: List[ev.Event]) -> None:
    """Deliver room events; untargeted ones go to everyone in the room."""
    for event in events:
        socketio.emit(event.name, event.payload, to=event.to or channel(room_id), namespace=NAMESPACE)
        if event.name == ev.KICKED_FROM_ROOM:
            socketio.server.leave_room(event.to, channel(room_id), namespace=NAMESPACE)


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _room_id(data) -> Optional[str]:
    room_id = data.get('room_id') if isinstance(data, dict) else data
    if room_id is None or room_id == '':
        logger.warning(f"[bad-request] sid={_get_sid()} payload={data!r} missing room_id")
        emit('error', {'message': 'room_id is required'})
        return None
    return str(room_id)


class SessionGateway:
    """Maps Socket.IO events onto room operations.

    Room errors are answered on the originating connection only.
    """

    def __init__(self, registry):
        self.registry = registry
        self.connections = set()

    def on_connect(self, auth=None):
        self.connections.add(_get_sid())
        emit('connected', {'message': 'Connected to /ws'})

    def on_disconnect(self, reason=None):
        sid = _get_sid()
        self.connections.discard(sid)
        logger.info(f"[disconnect] sid={sid}")
        for room in self.registry.rooms_for(sid):
            room.leave(sid)

    def on_start_game(self, data=None):
        self._join(self.registry.default_room, None)

    def on_join_room(self, data):
        room_id = _room_id(data)
        if room_id is None:
            return
        name = data.get('player_name') if isinstance(data, dict) else None
        self._join(self.registry.get_or_create(room_id), name)

    def _join(self, room, name):
        sid = _get_sid()
        # enter first so the joiner also receives the join broadcasts
        join_room(channel(room.room_id))
        try:
            room.join(sid, name)
        except AlreadyJoined as exc:
            emit(ev.PLAYER_JOINED, room.join_payload(exc.player))
        except RoomNotJoinable as exc:
            if not room.has_player(sid):
                leave_room(channel(room.room_id))
            emit(ev.JOIN_ERROR, {
                'message': str(exc),
                'room_status': exc.status.value,
                'room_id': room.room_id,
            })

    def on_call_number(self, data):
        room_id = _room_id(data)
        if room_id is None:
            return
        try:
            self.registry.require(room_id).manual_draw()
        except BingoError as exc:
            emit('error', {'message': str(exc), 'room_id': room_id})

    def on_resync_numbers(self, data=None):
        room_id = (data or {}).get('room_id') if isinstance(data, dict) else data
        room_id = room_id or self.registry.default_room_id
        try:
            room = self.registry.require(room_id)
        except RoomNotFound:
            emit(ev.RESYNC_NUMBERS_ERROR, {'message': 'Room not found', 'room_id': room_id})
            return
        emit(ev.RESYNC_NUMBERS_RESULT, {'room_id': room.room_id, 'called_numbers': room.called_numbers})

    def on_stop_game(self, data):
        room_id = _room_id(data)
        if room_id is None:
            return
        room = self.registry.get(room_id)
        if room is not None:
            room.stop_round()

    def on_claim_bingo(self, data):
        room_id = _room_id(data)
        if room_id is None:
            return
        try:
            self.registry.require(room_id).claim_win(_get_sid())
        except BingoError as exc:
            emit(ev.BINGO_RESULT, {'success': False, 'message': str(exc)})

    def on_check_room_status(self, data):
        room_id = _room_id(data)
        if room_id is None:
            return
        try:
            info = self.registry.require(room_id).status_info()
        except RoomNotFound:
            info = {
                'room_id': room_id,
                'status': 'not_found',
                'players': 0,
                'min_players': self.registry.default_room.settings.min_players,
                'max_players': self.registry.default_room.settings.max_players,
                'can_join': True,
            }
        emit(ev.ROOM_STATUS_INFO, info)

    def on_leave_game(self, data):
        room_id = _room_id(data)
        if room_id is None:
            return
        room = self.registry.get(room_id)
        if room is None or not room.leave(_get_sid()):
            return
        leave_room(channel(room_id))
        emit(ev.LEFT_GAME, {'message': 'You have left the game', 'room_id': room_id})

    def log_status(self):
        logger.info(
            f"[status] connections={len(self.connections)} players={self.registry.player_count()} rooms={len(self.registry)}"
        )


def register_socketio_handlers(gateway: SessionGateway) -> None:
    """Register Socket.IO event handlers on namespace '/ws'."""
    socketio.on_event('connect', gateway.on_connect, namespace=NAMESPACE)
    socketio.on_event('disconnect', gateway.on_disconnect, namespace=NAMESPACE)
    socketio.on_event('start_game', gateway.on_start_game, namespace=NAMESPACE)
    socketio.on_event('join_room', gateway.on_join_room, namespace=NAMESPACE)
    socketio.on_event('call_number', gateway.on_call_number, namespace=NAMESPACE)
    socketio.on_event('resync_numbers', gateway.on_resync_numbers, namespace=NAMESPACE)
    socketio.on_event('stop_game', gateway.on_stop_game, namespace=NAMESPACE)
    socketio.on_event('claim_bingo', gateway.on_claim_bingo, namespace=NAMESPACE)
    socketio.on_event('check_room_status', gateway.on_check_room_status, namespace=NAMESPACE)
    socketio.on_event('leave_game', gateway.on_leave_game, namespace=NAMESPACE)
