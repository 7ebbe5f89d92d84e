"""Room lifecycle: waiting -> playing -> finished -> waiting.

A room owns its players, its number pool and up to one timer of each kind.
Every mutation, whether it comes from a client event or from a timer
firing, runs while holding the room lock, and the events it produces are
handed to ``publish`` before the lock is released. Timers never touch room
state from their own context: a firing re-enters through ``_fire``, which
drops it unless that exact timer is still armed.

Invariants kept by the operations below:

- ``draw`` timer armed  <=>  status is PLAYING
- waiting timers armed   =>  status is WAITING with at least one player
- ``reset`` timer armed  =>  status is FINISHED
"""
import logging
import math
import random
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from functools import partial
from typing import Callable, Dict, List, Optional

from bingo.exceptions import AlreadyJoined, InvalidClaim, RoomNotJoinable, RoundNotActive
from bingo.models import Player, RoomStatus, Winner
from . import events as ev
from .cards import generate_card, generate_player_name
from .events import Event
from .numbers import ALL_NUMBERS, NumberPool
from .patterns import find_winning_pattern

logger = logging.getLogger(__name__)

DRAW_TIMER = 'draw'
WAITING_EXPIRY_TIMER = 'waiting_expiry'
WAITING_COUNTDOWN_TIMER = 'waiting_countdown'
RESET_TIMER = 'reset'
WAITING_TIMERS = (WAITING_EXPIRY_TIMER, WAITING_COUNTDOWN_TIMER)

REASON_BINGO = 'bingo'
REASON_EXHAUSTED = 'numbers exhausted'
REASON_STOPPED = 'Game stopped by player'
REASON_WAITING_EXPIRED = 'Time expired - Game started!'
REASON_ROOM_FULL = 'Enough players joined - Game started!'


@dataclass(frozen=True)
class RoomSettings:
    min_players: int = 2
    max_players: int = 10
    waiting_duration: float = 120
    countdown_interval: float = 1
    draw_interval: float = 3
    reset_grace: float = 10

    @classmethod
    def from_config(cls, config) -> 'RoomSettings':
        return cls(
            min_players=int(config.get('MIN_PLAYERS', 2)),
            max_players=int(config.get('MAX_PLAYERS', 10)),
            waiting_duration=int(config.get('WAITING_DURATION_SEC', 120)),
            countdown_interval=int(config.get('COUNTDOWN_TICK_SEC', 1)),
            draw_interval=int(config.get('DRAW_INTERVAL_SEC', 3)),
            reset_grace=int(config.get('RESET_GRACE_SEC', 10)),
        )


class _Timer:
    __slots__ = ('kind', 'callback', 'interval', 'handle')

    def __init__(self, kind, callback, interval=None):
        self.kind = kind
        self.callback = callback
        self.interval = interval
        self.handle = None


class Room:
    def __init__(self, room_id: str, settings: RoomSettings, scheduler,
                 publish: Callable[[str, List[Event]], None],
                 rng: Optional[random.Random] = None):
        self.room_id = room_id
        self.settings = settings
        self._scheduler = scheduler
        self._publish = publish
        self._rng = rng or random.Random()
        self._lock = threading.RLock()
        self._timers: Dict[str, _Timer] = {}

        self.players: List[Player] = []
        self.pool = NumberPool(self._rng)
        self.status = RoomStatus.WAITING
        self.winner: Optional[Winner] = None
        self.waiting_started_at: Optional[float] = None

    # ---- Serialization ----

    @contextmanager
    def _exclusive(self):
        """Hold the room lock for one operation and publish what it produced.

        Operations raise only before mutating, so an exception here means
        nothing changed and nothing is published.
        """
        with self._lock:
            events: List[Event] = []
            yield events
            if events:
                try:
                    self._publish(self.room_id, events)
                except Exception:
                    # delivery is fire-and-forget; state stays as is
                    logger.exception(f"[publish-failed] room={self.room_id} events={len(events)}")

    # ---- Read-only views ----

    @property
    def called_numbers(self) -> List[int]:
        with self._lock:
            return self.pool.called

    def armed_timers(self) -> frozenset:
        with self._lock:
            return frozenset(self._timers)

    def has_player(self, player_id: str) -> bool:
        with self._lock:
            return self._find(player_id) is not None

    def status_info(self) -> dict:
        with self._lock:
            payload = self._status_payload()
            payload['can_join'] = self.status == RoomStatus.WAITING
            return payload

    def join_payload(self, player: Player) -> dict:
        with self._lock:
            return {
                'name': player.name,
                'room_id': self.room_id,
                'card': player.card.to_list() if player.card else None,
                'all_numbers': list(ALL_NUMBERS),
                'called_numbers': self.pool.called,
            }

    # ---- Client operations ----

    def join(self, player_id: str, name: Optional[str] = None) -> Player:
        """Seat a connection and deal it a card.

        Raises RoomNotJoinable unless the room is waiting for players, and
        AlreadyJoined (carrying the existing seat) for a repeat join.
        """
        with self._exclusive() as events:
            if self.status != RoomStatus.WAITING:
                logger.info(f"[join-rejected] room={self.room_id} player={player_id} status={self.status.value}")
                raise RoomNotJoinable(self.room_id, self.status)
            existing = self._find(player_id)
            if existing is not None:
                raise AlreadyJoined(existing)

            player = Player(
                id=player_id,
                name=name or generate_player_name(self._rng),
                card=generate_card(self._rng),
            )
            self.players.append(player)
            logger.info(f"[join] room={self.room_id} player={player_id} name={player.name} seated={len(self.players)}")

            events.append(self._roster_event())
            events.append(self._status_event())
            events.append(Event(ev.PLAYER_JOINED, self.join_payload(player), to=player_id))
            self._evaluate_waiting_entry(events)
            return player

    def leave(self, player_id: str) -> bool:
        with self._exclusive() as events:
            player = self._find(player_id)
            if player is None:
                return False
            self.players.remove(player)
            logger.info(f"[leave] room={self.room_id} player={player_id} seated={len(self.players)}")
            events.append(self._roster_event())
            if not self.players:
                logger.info(f"[empty] room={self.room_id} resetting")
                self._reset(events)
            events.append(self._status_event())
            return True

    def manual_draw(self) -> Optional[int]:
        """Draw one number now, leaving the automatic cadence untouched."""
        with self._exclusive() as events:
            if self.status != RoomStatus.PLAYING:
                raise RoundNotActive(self.room_id, self.status)
            return self._draw(events, source='manual')

    def claim_win(self, player_id: str) -> str:
        """Verify a bingo claim against the server's own called numbers.

        Returns the winning pattern and ends the round; a rejected claim
        raises before anything changes.
        """
        with self._exclusive() as events:
            if self.status != RoomStatus.PLAYING:
                raise RoundNotActive(self.room_id, self.status)
            player = self._find(player_id)
            if player is None or player.card is None:
                raise InvalidClaim("Player not found or no bingo card")

            pattern = find_winning_pattern(player.card, self.pool.called)
            if pattern is None:
                logger.info(f"[claim-rejected] room={self.room_id} player={player.name}")
                raise InvalidClaim("Invalid BINGO claim")

            logger.info(f"[claim] room={self.room_id} player={player.name} pattern={pattern}")
            events.append(Event(ev.BINGO_RESULT, {
                'success': True,
                'message': 'BINGO! You won!',
                'pattern': pattern,
            }, to=player_id))
            self._end_round(events, REASON_BINGO, Winner(player.id, player.name, pattern))
            return pattern

    def stop_round(self) -> bool:
        """Abort a running round straight back to waiting.

        Unlike a natural end there is no finished phase and no reset: the
        seated players and the called numbers stay.
        """
        with self._exclusive() as events:
            if self.status != RoomStatus.PLAYING:
                return False
            self._disarm(DRAW_TIMER)
            self.status = RoomStatus.WAITING
            logger.info(f"[round-stop] room={self.room_id} called={len(self.pool)}")
            events.append(Event(ev.GAME_STOPPED, {
                'reason': REASON_STOPPED,
                'called_numbers': self.pool.called,
            }))
            events.append(self._status_event())
            self._evaluate_waiting_entry(events, allow_early_start=False)
            return True

    # ---- Lifecycle operations ----

    def start_round(self) -> bool:
        with self._exclusive() as events:
            return self._start_round(events)

    def end_round(self, reason: str, winner: Optional[Winner] = None) -> bool:
        with self._exclusive() as events:
            return self._end_round(events, reason, winner)

    def reset_round(self) -> None:
        with self._exclusive() as events:
            self._reset(events)

    # ---- Transitions (lock held) ----

    def _evaluate_waiting_entry(self, events, allow_early_start=True):
        if self.status != RoomStatus.WAITING:
            return
        seated = len(self.players)
        if allow_early_start and seated >= self.settings.max_players:
            logger.info(f"[room-full] room={self.room_id} seated={seated} starting early")
            events.append(Event(ev.WAITING_ENDED, {'reason': REASON_ROOM_FULL}))
            self._start_round(events)
        elif seated > 0 and WAITING_EXPIRY_TIMER not in self._timers:
            self._start_waiting_period(events)

    def _start_waiting_period(self, events):
        duration = self.settings.waiting_duration
        self.waiting_started_at = self._scheduler.now()
        self._arm(WAITING_EXPIRY_TIMER, duration, self._on_waiting_expired)
        self._arm(WAITING_COUNTDOWN_TIMER, self.settings.countdown_interval,
                  self._on_countdown_tick, periodic=True)
        events.append(Event(ev.WAITING_STARTED, {
            'max_waiting_time': duration,
            'message': f"Waiting for more players. Game will start automatically in {duration} seconds.",
            'all_numbers': list(ALL_NUMBERS),
            'called_numbers': self.pool.called,
        }))

    def _start_round(self, events) -> bool:
        if self.status != RoomStatus.WAITING:
            return False
        self._disarm_waiting()
        self.status = RoomStatus.PLAYING
        logger.info(f"[round-start] room={self.room_id} seated={len(self.players)}")
        events.append(Event(ev.GAME_START, {
            'message': 'Game is starting now!',
            'all_numbers': list(ALL_NUMBERS),
            'called_numbers': self.pool.called,
        }))
        events.append(self._status_event())
        self._arm(DRAW_TIMER, self.settings.draw_interval, self._on_draw_tick, periodic=True)
        return True

    def _draw(self, events, source) -> Optional[int]:
        number = self.pool.draw()
        if number is None:
            logger.info(f"[exhausted] room={self.room_id} all numbers called")
            self._end_round(events, REASON_EXHAUSTED)
            return None
        logger.info(f"[draw] room={self.room_id} number={number} source={source} remaining={self.pool.remaining}")
        events.append(Event(ev.NUMBER_CALLED, {
            'number': number,
            'total_called': len(self.pool),
            'remaining': self.pool.remaining,
        }))
        self._log_available_wins()
        return number

    def _end_round(self, events, reason, winner=None) -> bool:
        if self.status != RoomStatus.PLAYING:
            return False
        self._disarm(DRAW_TIMER)
        self.status = RoomStatus.FINISHED
        self.winner = winner
        logger.info(f"[round-end] room={self.room_id} reason={reason} winner={winner.name if winner else None}")
        events.append(Event(ev.GAME_END, {
            'reason': reason,
            'winner': winner.to_dict() if winner else None,
            'called_numbers': self.pool.called,
            'total_numbers_called': len(self.pool),
        }))
        events.append(self._status_event())
        self._arm(RESET_TIMER, self.settings.reset_grace, self._on_reset_due)
        return True

    def _reset(self, events):
        """Kick everyone and return to an empty waiting room."""
        if self.players:
            logger.info(f"[reset] room={self.room_id} kicking={len(self.players)}")
            events.append(Event(ev.ROOM_RESET, {
                'message': 'Game ended! You have been disconnected from the room.',
                'kicked': True,
                'all_numbers': list(ALL_NUMBERS),
                'called_numbers': [],
            }))
            for player in self.players:
                events.append(Event(ev.KICKED_FROM_ROOM, {
                    'message': 'You have been disconnected from the room after game ended.',
                    'room_id': self.room_id,
                }, to=player.id))
        for kind in list(self._timers):
            self._disarm(kind)
        self.players = []
        self.pool.reset()
        self.winner = None
        self.status = RoomStatus.WAITING
        self.waiting_started_at = None

    # ---- Timer callbacks (lock held, via _fire) ----

    def _on_waiting_expired(self, events):
        if self.status != RoomStatus.WAITING:
            return
        logger.info(f"[waiting-expired] room={self.room_id} seated={len(self.players)}")
        events.append(Event(ev.WAITING_ENDED, {'reason': REASON_WAITING_EXPIRED}))
        self._start_round(events)

    def _on_countdown_tick(self, events):
        if self.status != RoomStatus.WAITING or self.waiting_started_at is None:
            self._disarm(WAITING_COUNTDOWN_TIMER)
            return
        elapsed = self._scheduler.now() - self.waiting_started_at
        remaining = max(0.0, self.settings.waiting_duration - elapsed)
        if remaining <= 0:
            self._disarm(WAITING_COUNTDOWN_TIMER)
            return
        events.append(Event(ev.WAITING_COUNTDOWN, {
            'remaining_time': int(remaining * 1000),
            'remaining_seconds': math.ceil(remaining),
        }))

    def _on_draw_tick(self, events):
        if self.status != RoomStatus.PLAYING:
            self._disarm(DRAW_TIMER)
            return
        self._draw(events, source='auto')

    def _on_reset_due(self, events):
        if self.status != RoomStatus.FINISHED:
            logger.info(f"[timer-abort] room={self.room_id} kind={RESET_TIMER} status={self.status.value}")
            return
        self._reset(events)
        events.append(self._status_event())

    # ---- Timers ----

    def _arm(self, kind, delay, callback, periodic=False):
        self._disarm(kind)
        timer = _Timer(kind, callback, delay if periodic else None)
        timer.handle = self._scheduler.call_later(delay, partial(self._fire, timer))
        self._timers[kind] = timer
        logger.info(f"[timer-set] room={self.room_id} kind={kind} delay={delay}s periodic={periodic}")

    def _disarm(self, kind) -> bool:
        timer = self._timers.pop(kind, None)
        if timer is None:
            return False
        timer.handle.cancel()
        logger.debug(f"[timer-clear] room={self.room_id} kind={kind}")
        return True

    def _disarm_waiting(self):
        for kind in WAITING_TIMERS:
            self._disarm(kind)
        self.waiting_started_at = None

    def _fire(self, timer):
        with self._exclusive() as events:
            if self._timers.get(timer.kind) is not timer:
                logger.debug(f"[timer-abort] room={self.room_id} kind={timer.kind} disarmed")
                return
            if timer.interval is not None:
                timer.handle = self._scheduler.call_later(timer.interval, partial(self._fire, timer))
            else:
                del self._timers[timer.kind]
            timer.callback(events)

    # ---- Helpers ----

    def _find(self, player_id) -> Optional[Player]:
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def _status_payload(self):
        return {
            'room_id': self.room_id,
            'status': self.status.value,
            'players': len(self.players),
            'min_players': self.settings.min_players,
            'max_players': self.settings.max_players,
        }

    def _status_event(self):
        return Event(ev.UPDATE_ROOM_STATUS, self._status_payload())

    def _roster_event(self):
        return Event(ev.UPDATE_PLAYERS, [p.to_dict() for p in self.players])

    def _log_available_wins(self):
        called = self.pool.called
        for player in self.players:
            if player.card is None:
                continue
            pattern = find_winning_pattern(player.card, called)
            if pattern:
                logger.info(f"[bingo-available] room={self.room_id} player={player.name} pattern={pattern}")
