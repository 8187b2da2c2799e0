"""
Adjacency: frontier of a territory on the square grid.
"""

from floor.engine.adjacency import (
    adjacent_opponent_squares,
    get_neighbors,
    get_territory,
    get_frontier,
    remaining_owners,
    active_player_ids,
)

from helpers import board_state


def test_corner_square_has_two_neighbors():
    state = board_state(["AB.", "...", "..C"])
    corner = state.square_at(0, 0)
    ids = sorted(n.id for n in get_neighbors(state.squares, corner))
    assert ids == ["0-1", "1-0"]


def test_centre_square_has_four_neighbors():
    state = board_state(["...", ".A.", "..."])
    centre = state.square_at(1, 1)
    assert len(get_neighbors(state.squares, centre)) == 4


def test_frontier_is_orthogonal_opponents_only():
    state = board_state([
        "BBB",
        "BAB",
        "BBB",
    ])
    # Diagonals are never adjacent
    assert get_frontier(state, "A") == ["0-1", "1-0", "1-2", "2-1"]


def test_frontier_skips_neutral_and_own_squares():
    state = board_state([
        "A.B",
        "AA.",
        "C..",
    ])
    assert get_frontier(state, "A") == ["2-0"]
    assert get_frontier(state, "B") == []


def test_frontier_covers_whole_territory():
    state = board_state([
        "AB.",
        "A..",
        "AC.",
    ])
    assert get_territory(state, "A") == ["0-0", "1-0", "2-0"]
    assert set(get_frontier(state, "A")) == {"0-1", "2-1"}


def test_empty_territory_has_empty_frontier():
    state = board_state(["AB.", "...", "..."])
    assert adjacent_opponent_squares(state.squares, set()) == set()
    assert get_frontier(state, "Z") == []


def test_frontier_from_arbitrary_square_set():
    state = board_state(["AB", "CD"])
    assert adjacent_opponent_squares(state.squares, {"0-0", "1-1"}) == {"0-1", "1-0"}


def test_remaining_owners_and_active_players():
    state = board_state(["AA.", "C..", "..."])
    assert remaining_owners(state) == {"A", "C"}
    assert active_player_ids(state) == ["A", "C"]

    for square in state.squares_owned_by("C"):
        square.owner_id = "A"
    assert active_player_ids(state) == ["A"]
