"""
The Floor - Turn Engine
Territory-conquest trivia game rules without web framework or UI.
"""

DEFAULT_DUEL_SECONDS = 60

# Bonus time: a side with a long enough win streak may add time once per duel
BONUS_SECONDS = 5
BONUS_STREAK_THRESHOLD = 3

# Presentation pauses after a duel answer (seconds). The clock is frozen meanwhile.
CORRECT_ANSWER_DELAY = 0.5
SKIP_DELAY = 1.5

# Setup requirements
MIN_PLAYERS = 2
MIN_CATEGORIES = 2
MIN_BOARD_SIZE = 3
MAX_BOARD_SIZE = 10
