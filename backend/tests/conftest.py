import heapq
import itertools
import os
import sys
import pytest

# Ensure the backend root (containing the `bingo` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from bingo import create_app, socketio
from bingo.services.game.room import Room, RoomSettings
from bingo.services.game.timers import TimerHandle


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    PORT = 0
    CORS_ALLOWED_ORIGINS = '*'
    MIN_PLAYERS = 1
    MAX_PLAYERS = 2
    WAITING_DURATION_SEC = 30
    COUNTDOWN_TICK_SEC = 1
    DRAW_INTERVAL_SEC = 3
    RESET_GRACE_SEC = 10
    STATUS_LOG_INTERVAL_SEC = 0


class ManualScheduler:
    """Virtual clock: timers only fire when a test calls ``advance``."""

    def __init__(self):
        self.clock = 0.0
        # when False, cancelled handles still fire so the room has to drop them
        self.honor_cancel = True
        self._queue = []
        self._seq = itertools.count()

    def now(self):
        return self.clock

    def call_later(self, delay, fn):
        handle = TimerHandle()
        heapq.heappush(self._queue, (self.clock + delay, next(self._seq), handle, fn))
        return handle

    def advance(self, seconds):
        target = self.clock + seconds
        while self._queue and self._queue[0][0] <= target:
            due, _, handle, fn = heapq.heappop(self._queue)
            self.clock = due
            if not (self.honor_cancel and handle.cancelled):
                fn()
        self.clock = target

    def pending(self):
        return sum(1 for _, _, handle, _ in self._queue if not handle.cancelled)


class EventRecorder:
    """Stands in for the Socket.IO publisher."""

    def __init__(self):
        self.events = []

    def __call__(self, room_id, events):
        self.events.extend(events)

    def names(self):
        return [e.name for e in self.events]

    def of(self, name):
        return [e for e in self.events if e.name == name]

    def clear(self):
        self.events = []


@pytest.fixture()
def scheduler():
    return ManualScheduler()


@pytest.fixture()
def recorder():
    return EventRecorder()


@pytest.fixture()
def make_room(scheduler, recorder):
    import random

    def _make(room_id='r1', seed=7, **overrides):
        settings = RoomSettings(**{
            'min_players': 1,
            'max_players': 2,
            'waiting_duration': 30,
            'countdown_interval': 1,
            'draw_interval': 3,
            'reset_grace': 10,
            **overrides,
        })
        return Room(room_id, settings, scheduler, recorder, rng=random.Random(seed))
    return _make


@pytest.fixture()
def flask_app(scheduler):
    application = create_app(TestConfig, scheduler=scheduler)
    with application.app_context():
        yield application


@pytest.fixture()
def registry(flask_app):
    return flask_app.extensions['bingo_registry']


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass


@pytest.fixture()
def make_sio_client(flask_app):
    clients = []

    def _make():
        c = socketio.test_client(flask_app, namespace='/ws')
        clients.append(c)
        return c
    yield _make
    for c in clients:
        try:
            c.disconnect(namespace='/ws')
        except Exception:
            pass
