"""Timer scheduling for rooms.

A scheduler only promises to call ``fn`` roughly ``delay`` seconds later
unless the handle was cancelled first. Rooms do not rely on cancellation
being prompt: every firing re-enters the room under its lock and is
dropped there if the timer has since been disarmed.
"""
import time
import logging

logger = logging.getLogger(__name__)


class TimerHandle:
    __slots__ = ('cancelled',)

    def __init__(self):
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class SocketIOScheduler:
    """Runs each timer as a Socket.IO background task.

    ``socketio.sleep`` and ``start_background_task`` follow whatever async
    mode the server picked (threading, eventlet or gevent).
    """

    def __init__(self, socketio, step: float = 1.0):
        self.socketio = socketio
        # cancelled tasks notice within one step instead of sleeping out the delay
        self.step = step

    def now(self) -> float:
        return time.monotonic()

    def call_later(self, delay: float, fn) -> TimerHandle:
        handle = TimerHandle()
        self.socketio.start_background_task(self._run, delay, handle, fn)
        return handle

    def _run(self, delay, handle, fn):
        slept = 0.0
        while slept < delay:
            if handle.cancelled:
                return
            step = min(self.step, delay - slept)
            self.socketio.sleep(step)
            slept += step
        if handle.cancelled:
            return
        try:
            fn()
        except Exception:
            logger.exception("[timer-error] callback %r failed", fn)
