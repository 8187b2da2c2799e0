"""
Action definitions for the game.
Actions are immutable, deterministic instructions issued by the game master UI.
"""

from dataclasses import dataclass, field

from floor.engine.state import Player, Category


@dataclass(frozen=True)
class Action:
    """Base action class. All actions have a type and payload."""
    type: str  # e.g. "draft_player", "select_challenge", "report_duel_outcome", "end_turn"
    payload: dict = field(default_factory=dict)  # Action-specific data


# ===== Setup =====

def start_game(
    rows: int,
    cols: int,
    players: list[Player],
    categories: list[Category],
    placements: dict[str, str] | None = None,  # player_id -> square_id, pins starting squares
    duel_seconds: int | None = None,
) -> Action:
    """
    Start a game on a rows x cols board.
    Each player is placed on a distinct square (random unless pinned by placements)
    and that square takes the player's category.
    """
    payload = {
        "rows": rows,
        "cols": cols,
        "players": players,
        "categories": categories,
    }
    if placements:
        payload["placements"] = placements
    if duel_seconds is not None:
        payload["duel_seconds"] = duel_seconds
    return Action(type="start_game", payload=payload)


def assign_square(square_id: str, category_id: str, owner_id: str | None = None) -> Action:
    """Set a square's category, and optionally its owner. Only while idle."""
    payload = {"square_id": square_id, "category_id": category_id}
    if owner_id is not None:
        payload["owner_id"] = owner_id
    return Action(type="assign_square", payload=payload)


def assign_player_category(player_id: str, category_id: str) -> Action:
    """
    Give a player a category to defend.
    Needed when a player who lost a duel (and so their category) gets squares back.
    """
    return Action(
        type="assign_player_category",
        payload={"player_id": player_id, "category_id": category_id},
    )


# ===== Turn =====

def draft_player() -> Action:
    """Draft the next active player (random among eligible candidates)."""
    return Action(type="draft_player")


def select_challenge(square_id: str, duel_seconds: int | None = None) -> Action:
    """
    Challenge the owner of an adjacent square.
    The duel uses the defender's category. duel_seconds overrides the game's budget for this duel.

    Example: select_challenge("1-2", duel_seconds=45)
    """
    payload: dict = {"square_id": square_id}
    if duel_seconds is not None:
        payload["duel_seconds"] = duel_seconds
    return Action(type="select_challenge", payload=payload)


def continue_turn() -> Action:
    """Duel winner keeps playing: redraft their frontier and pick another target."""
    return Action(type="continue_turn")


def end_turn() -> Action:
    """End the current turn and draft the next player automatically."""
    return Action(type="end_turn")


# ===== Duel =====

def start_clock() -> Action:
    """Start (or resume) the clock of the side holding the turn."""
    return Action(type="start_clock")


def tick_clock() -> Action:
    """One elapsed second. Issued by the duel timer, not by the UI."""
    return Action(type="tick_clock")


def correct_answer() -> Action:
    """Current side answered correctly: turn passes to the other side."""
    return Action(type="correct_answer")


def skip_question() -> Action:
    """Current side skips: next question, same side, clock keeps its time."""
    return Action(type="skip_question")


def use_bonus(player_id: str) -> Action:
    """Spend a win streak of 3+ for extra seconds. Once per side per duel."""
    return Action(type="use_bonus", payload={"player_id": player_id})


def report_duel_outcome(winner_id: str) -> Action:
    """
    Declare the duel winner.
    Used by the game master for live judging, and internally when a clock runs out.
    """
    return Action(type="report_duel_outcome", payload={"winner_id": winner_id})


def cancel_duel() -> Action:
    """Discard the duel without touching the board."""
    return Action(type="cancel_duel")


# ===== Game lifecycle =====

def replay() -> Action:
    """Restore the starting board and categories, zero all streaks."""
    return Action(type="replay")


def reset_game() -> Action:
    """Tear everything down and return to setup."""
    return Action(type="reset_game")
