import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    PORT = int(os.environ.get('PORT', '3000'))
    # Comma separated list, or '*' for any origin
    CORS_ALLOWED_ORIGINS = os.environ.get('CORS_ALLOWED_ORIGINS', '*')
    # Players needed before a round is considered well attended (reported to clients)
    MIN_PLAYERS = int(os.environ.get('MIN_PLAYERS', '2'))
    # Seating this many players starts the round without waiting
    MAX_PLAYERS = int(os.environ.get('MAX_PLAYERS', '10'))
    # Room timers (seconds)
    WAITING_DURATION_SEC = int(os.environ.get('WAITING_DURATION_SEC', '120'))
    COUNTDOWN_TICK_SEC = int(os.environ.get('COUNTDOWN_TICK_SEC', '1'))
    DRAW_INTERVAL_SEC = int(os.environ.get('DRAW_INTERVAL_SEC', '3'))
    # Results stay on screen this long before the room resets
    RESET_GRACE_SEC = int(os.environ.get('RESET_GRACE_SEC', '10'))
    # Connection/player totals log line (sec). 0 disables.
    STATUS_LOG_INTERVAL_SEC = int(os.environ.get('STATUS_LOG_INTERVAL_SEC', '30'))
    # Level for the 'bingo' logger tree
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
