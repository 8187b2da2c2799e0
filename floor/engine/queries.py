"""
Query functions for UI integration.
These functions help the UI understand what actions are available
without mutating game state.
"""

from dataclasses import dataclass
from typing import Any

from floor.engine.state import GameState, PHASE_DUEL, PHASE_CONTINUE
from floor.engine.actions import Action
from floor.engine.adjacency import get_neighbors, get_territory, get_frontier, DIRECTIONS
from floor.engine.clock import can_use_bonus
from floor.engine.errors import FloorError
from floor.engine.reducer import apply_action, PHASE_ALLOWED_ACTIONS

# Actions the UI never issues directly
INTERNAL_ACTIONS = {"tick_clock"}

BORDER_NAMES = ("top", "right", "bottom", "left")


@dataclass
class ValidationResult:
    """Result of action validation."""
    valid: bool
    error: str | None = None
    code: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"valid": self.valid, "error": self.error, "code": self.code}


def validate_action(state: GameState, action: Action, rng=None) -> ValidationResult:
    """Validate an action without applying it (the reducer runs on a copy)."""
    try:
        apply_action(state, action, rng)
    except FloorError as e:
        return ValidationResult(False, str(e), e.code)
    return ValidationResult(True)


def get_available_action_types(state: GameState) -> list[str]:
    """Action types the UI may issue in the current phase."""
    return [a for a in PHASE_ALLOWED_ACTIONS.get(state.phase, []) if a not in INTERNAL_ACTIONS]


def get_challenge_options(state: GameState, player_id: str) -> list[dict[str, Any]]:
    """
    Opponent squares a player may challenge, with the defender and the
    category the duel would use.
    """
    options = []
    for square_id in get_frontier(state, player_id):
        square = state.get_square(square_id)
        defender = state.get_player(square.owner_id)
        options.append({
            "square_id": square_id,
            "player_id": square.owner_id,
            "category_id": defender.category_id if defender else None,
        })
    return options


def group_challenges_by_player(options: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """One entry per defender (a defender may touch the territory on several squares)."""
    grouped: dict[str, dict[str, Any]] = {}
    for option in options:
        entry = grouped.setdefault(option["player_id"], {
            "player_id": option["player_id"],
            "category_id": option["category_id"],
            "square_ids": [],
        })
        entry["square_ids"].append(option["square_id"])
    return list(grouped.values())


def get_player_stats(state: GameState) -> list[dict[str, Any]]:
    """Square counts per player for the scoreboard."""
    stats = []
    for player in state.players:
        owned = len(get_territory(state, player.id))
        stats.append({
            "player_id": player.id,
            "name": player.name,
            "squares": owned,
            "win_streak": player.win_streak,
            "eliminated": state.phase != "setup" and owned == 0,
        })
    return stats


def get_current_question(state: GameState) -> dict[str, Any] | None:
    """The question on screen in the live duel."""
    duel = state.duel
    if duel is None:
        return None
    category = state.get_category(duel.category_id)
    if category is None or not category.questions:
        return None
    question = category.questions[duel.question_index % len(category.questions)]
    return {
        "index": duel.question_index,
        "total": len(category.questions),
        "category_name": category.name,
        "question": question.to_dict(),
    }


def get_board_view(state: GameState) -> list[dict[str, Any]]:
    """
    Per-square rendering hints.
    - category_id is only shown for owners whose category has been revealed
    - borders: True where the neighbour in that direction has the same owner
    - highlighted: square is a legal challenge for the active turn
    """
    highlighted = set(state.active_turn.available_challenges) if state.active_turn else set()
    view = []
    for square in state.squares:
        neighbors = {(n.row - square.row, n.col - square.col): n for n in get_neighbors(state.squares, square)}
        borders = {}
        for name, delta in zip(BORDER_NAMES, DIRECTIONS):
            neighbor = neighbors.get(delta)
            borders[name] = bool(
                square.owner_id and neighbor is not None and neighbor.owner_id == square.owner_id
            )
        revealed = square.owner_id in state.revealed_player_ids
        view.append({
            "id": square.id,
            "row": square.row,
            "col": square.col,
            "owner_id": square.owner_id,
            "category_id": square.category_id if revealed else None,
            "same_owner_borders": borders,
            "highlighted": square.id in highlighted,
        })
    return view


def get_available_actions(state: GameState) -> dict[str, Any]:
    """Everything the UI needs to render controls for the current phase."""
    actions: dict[str, Any] = {
        "phase": state.phase,
        "action_types": get_available_action_types(state),
        "winner_id": state.winner_id,
    }

    if state.active_turn is not None:
        player_id = state.active_turn.player_id
        options = [
            o for o in get_challenge_options(state, player_id)
            if o["square_id"] in state.active_turn.available_challenges
        ]
        actions["active_player_id"] = player_id
        actions["challenges"] = options
        actions["challengers"] = group_challenges_by_player(options)

    if state.phase == PHASE_CONTINUE and state.continuing_player_id:
        player_id = state.continuing_player_id
        options = get_challenge_options(state, player_id)
        actions["continuing_player_id"] = player_id
        actions["territory"] = get_territory(state, player_id)
        actions["challengers"] = group_challenges_by_player(options)
        actions["can_continue"] = len(options) > 0

    if state.phase == PHASE_DUEL and state.duel is not None:
        duel = state.duel
        actions["duel"] = duel.to_dict()
        actions["question"] = get_current_question(state)
        actions["bonus_available"] = {
            pid: can_use_bonus(state, pid) for pid in duel.participants()
        }

    return actions
