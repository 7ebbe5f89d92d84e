"""Bingo domain services: number pool, cards, win patterns, rooms and timers.

Nothing in this package talks to Flask or Socket.IO directly; rooms hand
their outbound events to a publish callable and their timers to a
scheduler, both supplied by the application factory.
"""
