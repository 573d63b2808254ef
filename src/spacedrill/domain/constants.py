"""Centralized constants for spacedrill.

All magic numbers and scheduling defaults live here so every layer
imports from a single source of truth.
"""

# ---------- Ease factor ----------
DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3
MAX_EASE_FACTOR = 3.0
EASE_DECIMALS = 4

# ---------- Rating transitions ----------
HARD_INTERVAL_MULTIPLIER = 1.2
HARD_EASE_PENALTY = 0.15
EASY_INTERVAL_BONUS = 1.3
EASY_EASE_BONUS = 0.1
GOOD_NEW_INTERVAL = 1  # days
EASY_NEW_INTERVAL = 4  # days

# ---------- Retention model ----------
STABILITY_SCALE = 10.0
REVISION_STABILITY_BONUS = 0.5
DEFAULT_PROJECTION_DAYS = 30

# ---------- Session ----------
MINUTES_PER_ITEM = 1.5
TIMER_TICK_SECONDS = 1.0

# ---------- Leeches ----------
DEFAULT_LEECH_THRESHOLD = 3

# ---------- Topic revisions ----------
TOPIC_REVISION_INTERVALS = (1, 3, 7, 21, 45)

# ---------- HTTP store ----------
REQUEST_TIMEOUT = 30.0
