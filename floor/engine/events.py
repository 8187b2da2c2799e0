"""
Events emitted by the reducer.
The UI animates from them and the session logs them; the state snapshot stays the source of truth.
"""

from dataclasses import dataclass
from typing import Any


@dataclass
class GameEvent:
    """Base event class. All events have a type and payload."""
    type: str
    payload: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "payload": self.payload}


# ===== Event Type Constants =====

# Setup events
GAME_STARTED = "game_started"
GAME_REPLAYED = "game_replayed"
GAME_RESET = "game_reset"
SQUARE_ASSIGNED = "square_assigned"
PLAYER_CATEGORY_ASSIGNED = "player_category_assigned"

# Turn events
PHASE_CHANGED = "phase_changed"
PLAYER_DRAFTED = "player_drafted"
DRAFT_FAILED = "draft_failed"
TURN_CONTINUED = "turn_continued"
TURN_ENDED = "turn_ended"

# Duel events
DUEL_STARTED = "duel_started"
CLOCK_STARTED = "clock_started"
TIME_EXPIRED = "time_expired"
ANSWER_CORRECT = "answer_correct"
QUESTION_SKIPPED = "question_skipped"
BONUS_USED = "bonus_used"
DUEL_ENDED = "duel_ended"
DUEL_CANCELLED = "duel_cancelled"

# Territory events
TERRITORY_CAPTURED = "territory_captured"
CATEGORY_REVEALED = "category_revealed"

# Streak events
STREAK_CHANGED = "streak_changed"

# Victory events
GAME_OVER = "game_over"


# ===== Event Factory Functions =====

def game_started(rows: int, cols: int, placements: dict[str, str]) -> GameEvent:
    return GameEvent(GAME_STARTED, {
        "rows": rows,
        "cols": cols,
        "placements": placements,  # player_id -> square_id
    })


def game_replayed() -> GameEvent:
    return GameEvent(GAME_REPLAYED, {})


def game_reset() -> GameEvent:
    return GameEvent(GAME_RESET, {})


def square_assigned(square: str, category: str, owner: str | None) -> GameEvent:
    return GameEvent(SQUARE_ASSIGNED, {
        "square": square,
        "category": category,
        "owner": owner,
    })


def player_category_assigned(player: str, category: str) -> GameEvent:
    return GameEvent(PLAYER_CATEGORY_ASSIGNED, {
        "player": player,
        "category": category,
    })


def phase_changed(old_phase: str, new_phase: str) -> GameEvent:
    return GameEvent(PHASE_CHANGED, {
        "old_phase": old_phase,
        "new_phase": new_phase,
    })


def player_drafted(player: str, territory: list[str], available_challenges: list[str]) -> GameEvent:
    return GameEvent(PLAYER_DRAFTED, {
        "player": player,
        "territory": territory,
        "available_challenges": available_challenges,
    })


def draft_failed(reason: str) -> GameEvent:
    """Emitted when end_turn could not draft anyone; the game idles in 'playing'."""
    return GameEvent(DRAFT_FAILED, {"reason": reason})


def turn_continued(player: str, territory: list[str], available_challenges: list[str]) -> GameEvent:
    return GameEvent(TURN_CONTINUED, {
        "player": player,
        "territory": territory,
        "available_challenges": available_challenges,
    })


def turn_ended(player: str | None) -> GameEvent:
    return GameEvent(TURN_ENDED, {"player": player})


def duel_started(
    duel_id: int,
    square: str,
    attacker: str,
    defender: str,
    category: str,
    seconds: int,
) -> GameEvent:
    return GameEvent(DUEL_STARTED, {
        "duel_id": duel_id,
        "square": square,
        "attacker": attacker,
        "defender": defender,
        "category": category,
        "seconds": seconds,
    })


def clock_started(duel_id: int, player: str, remaining: int) -> GameEvent:
    return GameEvent(CLOCK_STARTED, {
        "duel_id": duel_id,
        "player": player,
        "remaining": remaining,
    })


def time_expired(duel_id: int, player: str) -> GameEvent:
    return GameEvent(TIME_EXPIRED, {"duel_id": duel_id, "player": player})


def answer_correct(duel_id: int, player: str, next_player: str, question_index: int) -> GameEvent:
    return GameEvent(ANSWER_CORRECT, {
        "duel_id": duel_id,
        "player": player,
        "next_player": next_player,
        "question_index": question_index,
    })


def question_skipped(duel_id: int, player: str, question_index: int) -> GameEvent:
    return GameEvent(QUESTION_SKIPPED, {
        "duel_id": duel_id,
        "player": player,
        "question_index": question_index,
    })


def bonus_used(duel_id: int, player: str, seconds_added: int, new_time: int) -> GameEvent:
    return GameEvent(BONUS_USED, {
        "duel_id": duel_id,
        "player": player,
        "seconds_added": seconds_added,
        "new_time": new_time,
    })


def duel_ended(duel_id: int, square: str, winner: str, loser: str, reason: str) -> GameEvent:
    return GameEvent(DUEL_ENDED, {
        "duel_id": duel_id,
        "square": square,
        "winner": winner,
        "loser": loser,
        "reason": reason,  # "reported" or "timeout"
    })


def duel_cancelled(duel_id: int, square: str) -> GameEvent:
    return GameEvent(DUEL_CANCELLED, {"duel_id": duel_id, "square": square})


def territory_captured(
    winner: str,
    loser: str,
    squares: list[str],
    category: str | None,
) -> GameEvent:
    return GameEvent(TERRITORY_CAPTURED, {
        "winner": winner,
        "loser": loser,
        "squares": squares,
        "capture_size": len(squares),
        "category": category,
    })


def category_revealed(player: str, category: str) -> GameEvent:
    return GameEvent(CATEGORY_REVEALED, {"player": player, "category": category})


def streak_changed(player: str, old_value: int, new_value: int, reason: str) -> GameEvent:
    return GameEvent(STREAK_CHANGED, {
        "player": player,
        "old_value": old_value,
        "new_value": new_value,
        "reason": reason,  # "duel_won", "duel_lost", "bonus"
    })


def game_over(winner: str, squares_owned: int) -> GameEvent:
    """Emitted when only one player owns squares."""
    return GameEvent(GAME_OVER, {
        "winner": winner,
        "squares_owned": squares_owned,
    })
