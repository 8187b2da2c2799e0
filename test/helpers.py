"""
Builders shared by the tests.
Boards are drawn as lists of strings: each letter is a player id, '.' is neutral.
"""

from copy import deepcopy

from floor.engine.state import GameState, Player, Category, Question, PHASE_PLAYING
from floor.engine.setup import build_squares
from floor.engine.reducer import apply_action


def category_for(player_id: str) -> str:
    return f"cat-{player_id}"


def make_category(category_id: str, count: int = 3) -> Category:
    return Category(
        id=category_id,
        name=category_id.title(),
        questions=[Question(id=f"{category_id}-{i}", text=f"{category_id} question {i}") for i in range(count)],
    )


def board_state(layout: list[str], questions: int = 3, duel_seconds: int = 60) -> GameState:
    """
    A game in the 'playing' phase laid out from a picture of the board.
    Player X defends category 'cat-X'; roster order is alphabetical.
    """
    rows, cols = len(layout), len(layout[0])
    ids = sorted({ch for row in layout for ch in row if ch != "."})
    players = [Player(id=pid, name=f"Player {pid}", category_id=category_for(pid)) for pid in ids]
    categories = [make_category(category_for(pid), questions) for pid in ids]

    squares = build_squares(rows, cols)
    for square in squares:
        owner = layout[square.row][square.col]
        if owner != ".":
            square.owner_id = owner
            square.category_id = category_for(owner)

    return GameState(
        phase=PHASE_PLAYING,
        rows=rows,
        cols=cols,
        players=players,
        categories=categories,
        squares=squares,
        duel_seconds=duel_seconds,
        initial_squares=deepcopy(squares),
        initial_player_categories={p.id: p.category_id for p in players},
    )


def owners(state: GameState) -> list[str]:
    """Board picture back from a state, for compact assertions."""
    rows = []
    for r in range(state.rows):
        rows.append("".join(state.square_at(r, c).owner_id or "." for c in range(state.cols)))
    return rows


class PickPreferred:
    """rng stand-in: picks the first preferred id on offer, else the first option."""

    def __init__(self, *preferred: str):
        self.preferred = list(preferred)
        self.offered: list[list[str]] = []

    def choice(self, options):
        options = list(options)
        self.offered.append(options)
        for pid in self.preferred:
            if pid in options:
                return pid
        return options[0]


def run(state: GameState, actions, rng=None) -> tuple[GameState, list]:
    """Apply actions in order, collecting every event."""
    events = []
    for action in actions:
        state, evts = apply_action(state, action, rng)
        events.extend(evts)
    return state, events


def event_types(events) -> list[str]:
    return [e.type for e in events]
