import time

from bingo import socketio
from bingo.services.game import events as ev
from bingo.services.game.room import Room, RoomSettings
from bingo.services.game.timers import SocketIOScheduler, TimerHandle

FAST = RoomSettings(
    min_players=1,
    max_players=2,
    waiting_duration=30,
    countdown_interval=1,
    draw_interval=0.05,
    reset_grace=10,
)


def test_background_draws_stop_with_the_round(flask_app, recorder):
    room = Room('live', FAST, SocketIOScheduler(socketio, step=0.01), recorder)
    room.join('a')
    room.join('b')
    socketio.sleep(0.4)
    assert len(recorder.of(ev.NUMBER_CALLED)) >= 3

    room.stop_round()
    drawn = len(room.called_numbers)
    socketio.sleep(0.3)
    assert len(room.called_numbers) == drawn

    room.leave('a')
    room.leave('b')
    assert room.armed_timers() == frozenset()


def test_cancelled_handle_never_calls_back(flask_app):
    scheduler = SocketIOScheduler(socketio, step=0.01)
    fired = []
    scheduler.call_later(0.05, lambda: fired.append('cancelled')).cancel()
    scheduler.call_later(0.05, lambda: fired.append('kept'))
    socketio.sleep(0.3)
    assert fired == ['kept']


def test_cancelled_task_stops_sleeping_early(flask_app):
    scheduler = SocketIOScheduler(socketio, step=0.01)
    handle = TimerHandle()
    handle.cancel()
    fired = []
    started = time.monotonic()
    scheduler._run(60, handle, lambda: fired.append(1))
    assert time.monotonic() - started < 1
    assert fired == []


def test_failing_callback_is_logged(flask_app, caplog):
    scheduler = SocketIOScheduler(socketio, step=0.01)

    def boom():
        raise RuntimeError('boom')

    scheduler._run(0.01, TimerHandle(), boom)
    assert '[timer-error]' in caplog.text
