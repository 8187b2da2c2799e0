"""
Duel clock and bonus time.

Each side has its own budget; only the side holding the turn loses time, one
second per tick, and only while the clock is running. Correct answers and
skips pause the clock; the session resumes it after a short delay.
"""

from floor.engine import BONUS_SECONDS, BONUS_STREAK_THRESHOLD
from floor.engine.state import GameState, DuelState
from floor.engine.errors import InvalidTransition, UnknownEntity
from floor.engine.duel import resolve_duel
from floor.engine.events import (
    GameEvent,
    clock_started,
    time_expired,
    answer_correct,
    question_skipped,
    bonus_used,
    streak_changed,
)


def _next_question_index(state: GameState, duel: DuelState) -> int:
    """Questions are reused cyclically within one duel."""
    category = state.get_category(duel.category_id)
    count = len(category.questions) if category and category.questions else 1
    return (duel.question_index + 1) % count


def start_clock(state: GameState) -> tuple[GameState, list[GameEvent]]:
    """Start or resume the current side's clock. Already running is a no-op."""
    duel = state.duel
    if duel.is_running:
        return state, []
    duel.is_running = True
    return state, [clock_started(duel.duel_id, duel.current_player_id, duel.time_for(duel.current_player_id))]


def tick_clock(state: GameState) -> tuple[GameState, list[GameEvent]]:
    """
    One second elapsed. Decrements the current side while running.
    When the side reaches zero the other side wins immediately.
    """
    duel = state.duel
    if not duel.is_running:
        return state, []

    side = duel.current_player_id
    remaining = max(0, duel.time_for(side) - 1)
    duel.set_time_for(side, remaining)
    if remaining > 0:
        return state, []

    duel.is_running = False
    events = [time_expired(duel.duel_id, side)]
    state, evts = resolve_duel(state, duel.opponent_of(side), reason="timeout")
    events.extend(evts)
    return state, events


def correct_answer(state: GameState) -> tuple[GameState, list[GameEvent]]:
    """Pause, pass the turn to the other side and move to the next question."""
    duel = state.duel
    if not duel.is_running:
        raise InvalidTransition("Clock is not running")
    player_id = duel.current_player_id
    duel.is_running = False
    duel.current_player_id = duel.opponent_of(player_id)
    duel.question_index = _next_question_index(state, duel)
    return state, [answer_correct(duel.duel_id, player_id, duel.current_player_id, duel.question_index)]


def skip_question(state: GameState) -> tuple[GameState, list[GameEvent]]:
    """Pause and replace the question. Turn and clock side stay the same."""
    duel = state.duel
    if not duel.is_running:
        raise InvalidTransition("Clock is not running")
    duel.is_running = False
    duel.question_index = _next_question_index(state, duel)
    return state, [question_skipped(duel.duel_id, duel.current_player_id, duel.question_index)]


def can_use_bonus(state: GameState, player_id: str) -> bool:
    """Bonus is open to the side about to start its clock, once per duel, with a streak of 3+."""
    duel = state.duel
    if duel is None or duel.is_running:
        return False
    if player_id != duel.current_player_id or player_id in duel.bonus_used:
        return False
    player = state.get_player(player_id)
    return player is not None and player.win_streak >= BONUS_STREAK_THRESHOLD


def use_bonus(state: GameState, player_id: str) -> tuple[GameState, list[GameEvent]]:
    """
    Add BONUS_SECONDS to the player's clock and spend their streak.
    The streak drops to 0 at once, so a later win counts from zero.
    """
    duel = state.duel
    if player_id not in duel.participants():
        raise UnknownEntity(f"{player_id} is not in this duel")
    if player_id in duel.bonus_used:
        raise InvalidTransition(f"{player_id} already used a bonus this duel")
    if duel.is_running:
        raise InvalidTransition("Bonus must be taken before the clock starts")
    if player_id != duel.current_player_id:
        raise InvalidTransition(f"It is not {player_id}'s turn in the duel")
    player = state.get_player(player_id)
    if player.win_streak < BONUS_STREAK_THRESHOLD:
        raise InvalidTransition(
            f"{player.name} needs a win streak of {BONUS_STREAK_THRESHOLD} for a bonus "
            f"(has {player.win_streak})"
        )

    new_time = duel.time_for(player_id) + BONUS_SECONDS
    duel.set_time_for(player_id, new_time)
    duel.bonus_used.append(player_id)
    old_streak = player.win_streak
    player.win_streak = 0

    return state, [
        bonus_used(duel.duel_id, player_id, BONUS_SECONDS, new_time),
        streak_changed(player_id, old_streak, 0, "bonus"),
    ]
