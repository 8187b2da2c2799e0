"""
Turn flow after a duel: continue with a fresh frontier, or end the turn and
hand the draft to someone else.
"""

from floor.engine.state import GameState, PHASE_PLAYING, PHASE_DRAFT
from floor.engine.draft import draft_next_player, build_active_turn
from floor.engine.errors import NoEligibleOpponents
from floor.engine.events import (
    GameEvent,
    player_drafted,
    draft_failed,
    turn_continued,
    turn_ended,
)


def draft_turn(state: GameState, rng=None) -> tuple[GameState, list[GameEvent]]:
    """Draft a player and open their turn. Raises NoEligibleOpponents on failure."""
    turn = draft_next_player(state, rng)
    state.active_turn = turn
    state.continuing_player_id = None
    state.phase = PHASE_DRAFT
    return state, [player_drafted(turn.player_id, turn.territory, turn.available_challenges)]


def end_turn(state: GameState, rng=None) -> tuple[GameState, list[GameEvent]]:
    """
    Close the current turn and draft the next player automatically.

    The duel winner (or the active player, when no duel happened) is excluded
    from the draft that follows. If nobody can be drafted the game idles in
    'playing' until a manual draft succeeds.
    """
    events: list[GameEvent] = []
    ended_by = state.continuing_player_id
    if ended_by is None and state.active_turn is not None:
        ended_by = state.active_turn.player_id

    state.active_turn = None
    state.continuing_player_id = None
    state.last_ended_turn_player_id = ended_by
    state.phase = PHASE_PLAYING
    events.append(turn_ended(ended_by))

    try:
        state, evts = draft_turn(state, rng)
    except NoEligibleOpponents as e:
        events.append(draft_failed(str(e)))
        return state, events
    events.extend(evts)
    return state, events


def continue_turn(state: GameState, rng=None) -> tuple[GameState, list[GameEvent]]:
    """
    Let the duel winner challenge again.
    Territory and frontier are recomputed from the board; with nothing left to
    challenge this behaves exactly like end_turn.
    """
    player_id = state.continuing_player_id
    turn = build_active_turn(state, player_id)
    if not turn.available_challenges:
        return end_turn(state, rng)

    state.active_turn = turn
    state.continuing_player_id = None
    state.phase = PHASE_DRAFT
    return state, [turn_continued(player_id, turn.territory, turn.available_challenges)]
