from flask import Blueprint, jsonify, current_app

from bingo.exceptions import RoomNotFound

rooms = Blueprint('rooms', __name__)


def _registry():
    return current_app.extensions['bingo_registry']


@rooms.errorhandler(RoomNotFound)
def room_not_found(exc):
    return jsonify({'error': str(exc)}), 404


@rooms.route('', methods=['GET'])
def list_rooms():
    return jsonify([room.status_info() for room in _registry().rooms()])


@rooms.route('/<string:room_id>', methods=['GET'])
def get_room_status(room_id):
    room = _registry().require(room_id)
    payload = room.status_info()
    payload['called_numbers'] = room.called_numbers
    return jsonify(payload)
