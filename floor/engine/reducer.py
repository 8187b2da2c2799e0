"""
Main game reducer.
Applies actions to state, enforcing rules and producing new state.
Returns (new_state, events) where events describe what happened.
"""

from copy import deepcopy

from floor.engine.state import (
    GameState,
    PHASE_SETUP,
    PHASE_PLAYING,
    PHASE_DRAFT,
    PHASE_DUEL,
    PHASE_CONTINUE,
    PHASE_GAME_OVER,
)
from floor.engine.actions import Action
from floor.engine.setup import initialize_game_state
from floor.engine.duel import open_duel, resolve_duel, check_game_over
from floor.engine.turns import draft_turn, continue_turn, end_turn
from floor.engine import clock
from floor.engine.errors import InvalidTransition, UnknownEntity
from floor.engine.events import (
    GameEvent,
    phase_changed,
    game_started,
    game_replayed,
    game_reset,
    square_assigned,
    player_category_assigned,
    duel_cancelled,
)


# Phase rules: which action types are allowed in which phases
PHASE_ALLOWED_ACTIONS = {
    PHASE_SETUP: ["start_game", "reset_game"],
    PHASE_PLAYING: ["assign_square", "assign_player_category", "draft_player", "replay", "reset_game"],
    PHASE_DRAFT: ["select_challenge", "end_turn", "assign_player_category", "replay", "reset_game"],
    PHASE_DUEL: [
        "start_clock",
        "tick_clock",
        "correct_answer",
        "skip_question",
        "use_bonus",
        "report_duel_outcome",
        "cancel_duel",
        "replay",
        "reset_game",
    ],
    PHASE_CONTINUE: ["continue_turn", "end_turn", "assign_player_category", "replay", "reset_game"],
    PHASE_GAME_OVER: ["replay", "reset_game"],
}


def _validate_action_for_phase(action: Action, state: GameState) -> None:
    """Validate that an action is allowed in the current phase."""
    phase = state.phase
    allowed_actions = PHASE_ALLOWED_ACTIONS.get(phase, [])

    if action.type not in allowed_actions:
        if phase == PHASE_GAME_OVER:
            raise InvalidTransition(
                f"Game is over. {state.winner_id} has won. Replay or start a new game."
            )
        raise InvalidTransition(
            f"Action '{action.type}' is not allowed in phase '{phase}'. "
            f"Allowed actions: {', '.join(allowed_actions)}"
        )


def apply_action(
    state: GameState,
    action: Action,
    rng=None,
) -> tuple[GameState, list[GameEvent]]:
    """
    Apply a single action to the current state, returning new state and events.

    The input state is never mutated; on error the caller keeps its last valid state.

    Args:
        state: Current game state
        action: Action to apply
        rng: Randomness provider for drafting and placement (anything with choice()).
             Defaults to the random module.

    Returns:
        Tuple of (new_state, events) where events describe what happened
    """
    _validate_action_for_phase(action, state)

    new_state = state.copy()
    events: list[GameEvent] = []
    old_phase = state.phase

    if action.type == "start_game":
        new_state, evts = _handle_start_game(action, rng)
        events.extend(evts)

    elif action.type == "assign_square":
        new_state, evts = _handle_assign_square(new_state, action)
        events.extend(evts)

    elif action.type == "assign_player_category":
        new_state, evts = _handle_assign_player_category(new_state, action)
        events.extend(evts)

    elif action.type == "draft_player":
        new_state, evts = draft_turn(new_state, rng)
        events.extend(evts)

    elif action.type == "select_challenge":
        new_state, evts = open_duel(
            new_state,
            action.payload.get("square_id"),
            action.payload.get("duel_seconds"),
        )
        events.extend(evts)

    elif action.type == "start_clock":
        new_state, evts = clock.start_clock(new_state)
        events.extend(evts)

    elif action.type == "tick_clock":
        new_state, evts = clock.tick_clock(new_state)
        events.extend(evts)

    elif action.type == "correct_answer":
        new_state, evts = clock.correct_answer(new_state)
        events.extend(evts)

    elif action.type == "skip_question":
        new_state, evts = clock.skip_question(new_state)
        events.extend(evts)

    elif action.type == "use_bonus":
        new_state, evts = clock.use_bonus(new_state, action.payload.get("player_id"))
        events.extend(evts)

    elif action.type == "report_duel_outcome":
        new_state, evts = resolve_duel(new_state, action.payload.get("winner_id"))
        events.extend(evts)

    elif action.type == "cancel_duel":
        new_state, evts = _handle_cancel_duel(new_state)
        events.extend(evts)

    elif action.type == "continue_turn":
        new_state, evts = continue_turn(new_state, rng)
        events.extend(evts)

    elif action.type == "end_turn":
        new_state, evts = end_turn(new_state, rng)
        events.extend(evts)

    elif action.type == "replay":
        new_state, evts = _handle_replay(new_state)
        events.extend(evts)

    elif action.type == "reset_game":
        new_state = GameState()
        events.append(game_reset())

    else:
        raise InvalidTransition(f"Unknown action type: {action.type}")

    if new_state.phase != old_phase:
        events.append(phase_changed(old_phase, new_state.phase))

    return new_state, events


def _handle_start_game(action: Action, rng=None) -> tuple[GameState, list[GameEvent]]:
    """Validate the setup and build the opening board."""
    payload = action.payload
    state, placements = initialize_game_state(
        rows=payload.get("rows"),
        cols=payload.get("cols"),
        players=list(payload.get("players") or []),
        categories=list(payload.get("categories") or []),
        rng=rng,
        placements=payload.get("placements"),
        duel_seconds=payload.get("duel_seconds"),
    )
    return state, [game_started(state.rows, state.cols, placements)]


def _handle_assign_square(state: GameState, action: Action) -> tuple[GameState, list[GameEvent]]:
    """
    Set a square's category and, optionally, its owner.
    Taking the last square away from a player can leave one owner, which ends the game.
    A player without a category who receives a square takes on its category.
    """
    events: list[GameEvent] = []
    square_id = action.payload.get("square_id")
    category_id = action.payload.get("category_id")
    owner_id = action.payload.get("owner_id")

    square = state.get_square(square_id)
    if square is None:
        raise UnknownEntity(f"Unknown square: {square_id}")
    if state.get_category(category_id) is None:
        raise UnknownEntity(f"Unknown category: {category_id}")
    if owner_id is not None and state.get_player(owner_id) is None:
        raise UnknownEntity(f"Unknown player: {owner_id}")

    square.category_id = category_id
    if owner_id is not None:
        square.owner_id = owner_id
    events.append(square_assigned(square_id, category_id, square.owner_id))

    owner = state.get_player(square.owner_id)
    if owner is not None and not owner.category_id:
        # A player brought back onto the board defends the square's category
        owner.category_id = category_id
        events.append(player_category_assigned(owner.id, category_id))

    state, evts = check_game_over(state)
    events.extend(evts)
    return state, events


def _handle_assign_player_category(state: GameState, action: Action) -> tuple[GameState, list[GameEvent]]:
    """Give a player a category to defend."""
    player_id = action.payload.get("player_id")
    category_id = action.payload.get("category_id")

    player = state.get_player(player_id)
    if player is None:
        raise UnknownEntity(f"Unknown player: {player_id}")
    if state.get_category(category_id) is None:
        raise UnknownEntity(f"Unknown category: {category_id}")

    player.category_id = category_id
    return state, [player_category_assigned(player_id, category_id)]


def _handle_cancel_duel(state: GameState) -> tuple[GameState, list[GameEvent]]:
    """Drop the duel. The board, streaks and categories are left as they were."""
    duel = state.duel
    state.duel = None
    state.phase = duel.return_phase
    return state, [duel_cancelled(duel.duel_id, duel.square_id)]


def _handle_replay(state: GameState) -> tuple[GameState, list[GameEvent]]:
    """
    Restart with the same roster and categories.
    Restores the opening board and each player's starting category; streaks go to 0.
    """
    state.squares = deepcopy(state.initial_squares)
    for player in state.players:
        player.category_id = state.initial_player_categories.get(player.id)
        player.win_streak = 0

    state.phase = PHASE_PLAYING
    state.active_turn = None
    state.duel = None
    state.continuing_player_id = None
    state.drafted_this_round = []
    state.last_ended_turn_player_id = None
    state.winner_id = None
    state.revealed_player_ids = []
    return state, [game_replayed()]
