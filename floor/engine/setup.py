"""
Game setup: board construction, validation and player placement.
"""

import random
from copy import deepcopy

from floor.engine import (
    DEFAULT_DUEL_SECONDS,
    MIN_PLAYERS,
    MIN_CATEGORIES,
    MIN_BOARD_SIZE,
    MAX_BOARD_SIZE,
)
from floor.engine.state import GameState, Player, Category, Square, PHASE_PLAYING
from floor.engine.errors import ValidationError

DEFAULT_EMOJIS = ["😎", "🎮", "👍", "🐶", "💀", "🐔", "🐍", "🐣", "☀️"]


def square_id(row: int, col: int) -> str:
    return f"{row}-{col}"


def build_squares(rows: int, cols: int) -> list[Square]:
    """Create one neutral square per grid cell, row-major."""
    return [
        Square(id=square_id(r, c), row=r, col=c)
        for r in range(rows)
        for c in range(cols)
    ]


def default_players(count: int = 9) -> list[Player]:
    """Starter roster offered by the setup screen. Categories still need choosing."""
    return [
        Player(
            id=str(i + 1),
            name=f"Player {i + 1}",
            emoji=DEFAULT_EMOJIS[i % len(DEFAULT_EMOJIS)],
        )
        for i in range(count)
    ]


def validate_setup(
    rows: int,
    cols: int,
    players: list[Player],
    categories: list[Category],
) -> None:
    """
    Check setup preconditions. Raises ValidationError with the first problem found.
    - Board between MIN_BOARD_SIZE and MAX_BOARD_SIZE on each side, one cell per player at least
    - At least MIN_PLAYERS players with unique ids, each with an existing category
    - At least MIN_CATEGORIES categories, each with one or more questions carrying text or an image
    """
    for label, size in (("rows", rows), ("cols", cols)):
        if not isinstance(size, int) or not MIN_BOARD_SIZE <= size <= MAX_BOARD_SIZE:
            raise ValidationError(
                f"Board {label} must be between {MIN_BOARD_SIZE} and {MAX_BOARD_SIZE}, got {size}"
            )

    if len(players) < MIN_PLAYERS:
        raise ValidationError(f"Add at least {MIN_PLAYERS} players")
    if len(categories) < MIN_CATEGORIES:
        raise ValidationError(f"Add at least {MIN_CATEGORIES} categories")
    if len(players) > rows * cols:
        raise ValidationError(
            f"Board {rows}x{cols} has only {rows * cols} squares for {len(players)} players"
        )

    player_ids = [p.id for p in players]
    if any(not pid for pid in player_ids) or len(set(player_ids)) != len(player_ids):
        raise ValidationError("Player ids must be non-empty and unique")

    category_ids = [c.id for c in categories]
    if any(not cid for cid in category_ids) or len(set(category_ids)) != len(category_ids):
        raise ValidationError("Category ids must be non-empty and unique")

    for category in categories:
        if not category.questions:
            raise ValidationError(f"Category {category.name or category.id} has no questions")
        for question in category.questions:
            if not question.text and not question.image_url:
                raise ValidationError(
                    f"Question {question.id} in {category.name or category.id} needs text or an image"
                )

    for player in players:
        if not player.category_id:
            raise ValidationError("All players must select a category")
        if player.category_id not in category_ids:
            raise ValidationError(
                f"Player {player.name or player.id} has unknown category {player.category_id}"
            )


def place_players(
    squares: list[Square],
    players: list[Player],
    rng=None,
    placements: dict[str, str] | None = None,
) -> dict[str, str]:
    """
    Put every player on a distinct square and give the square the player's category.
    Pinned placements are honoured first, the rest are drawn at random from what is left.
    Mutates squares in place.

    Returns:
        player_id -> square_id
    """
    rng = rng or random
    placements = placements or {}
    by_id = {s.id: s for s in squares}
    taken: set[str] = set()
    result: dict[str, str] = {}

    for player in players:
        pinned = placements.get(player.id)
        if pinned is None:
            continue
        if pinned not in by_id:
            raise ValidationError(f"Placement square {pinned} is not on the board")
        if pinned in taken:
            raise ValidationError(f"Placement square {pinned} is used twice")
        taken.add(pinned)
        result[player.id] = pinned

    for player in players:
        if player.id in result:
            continue
        available = [s.id for s in squares if s.id not in taken]
        chosen = rng.choice(available)
        taken.add(chosen)
        result[player.id] = chosen

    for player in players:
        square = by_id[result[player.id]]
        square.owner_id = player.id
        square.category_id = player.category_id

    return result


def initialize_game_state(
    rows: int,
    cols: int,
    players: list[Player],
    categories: list[Category],
    rng=None,
    placements: dict[str, str] | None = None,
    duel_seconds: int | None = None,
) -> tuple[GameState, dict[str, str]]:
    """
    Create the opening game state in the 'playing' phase.

    Args:
        rows, cols: Board size
        players: Roster; every player must have a category_id
        categories: Category list with questions
        rng: Randomness provider (anything with choice()), defaults to the random module
        placements: Optional player_id -> square_id pins
        duel_seconds: Default clock budget per side, DEFAULT_DUEL_SECONDS if omitted

    Returns:
        (state, placements actually used)
    """
    validate_setup(rows, cols, players, categories)
    seconds = DEFAULT_DUEL_SECONDS if duel_seconds is None else duel_seconds
    if not isinstance(seconds, int) or seconds <= 0:
        raise ValidationError(f"Duel time must be a positive number of seconds, got {duel_seconds}")

    roster = [deepcopy(p) for p in players]
    for player in roster:
        player.win_streak = 0
    squares = build_squares(rows, cols)
    used = place_players(squares, roster, rng, placements)

    state = GameState(
        phase=PHASE_PLAYING,
        rows=rows,
        cols=cols,
        players=roster,
        categories=deepcopy(categories),
        squares=squares,
        duel_seconds=seconds,
        initial_squares=deepcopy(squares),
        initial_player_categories={p.id: p.category_id for p in roster},
    )
    return state, used


def print_game_state(state: GameState) -> None:
    """Print the board as a grid of owner ids plus a per-player summary."""
    width = max([len(p.id) for p in state.players] + [1])
    print(f"\n=== PHASE: {state.phase} ===")
    for r in range(state.rows):
        cells = []
        for c in range(state.cols):
            square = state.square_at(r, c)
            owner = square.owner_id if square and square.owner_id else "."
            cells.append(owner.rjust(width))
        print("  " + " ".join(cells))
    for player in state.players:
        owned = len(state.squares_owned_by(player.id))
        category = state.get_category(player.category_id)
        category_name = category.name if category else "-"
        print(
            f"  {player.id}: {player.name} | {owned} squares | "
            f"category={category_name} | streak={player.win_streak}"
        )
    if state.winner_id:
        print(f"  *** GAME OVER - {state.winner_id} WINS ***")
