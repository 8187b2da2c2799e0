"""
Adjacency calculations on the square grid.
Frontiers are recomputed from the board every time; territory shapes change
discontinuously after captures so nothing here is cached.
"""

from floor.engine.state import GameState, Square

# Orthogonal neighbours: up, right, down, left
DIRECTIONS = ((-1, 0), (0, 1), (1, 0), (0, -1))


def _index_by_position(squares: list[Square]) -> dict[tuple[int, int], Square]:
    return {(s.row, s.col): s for s in squares}


def get_neighbors(squares: list[Square], square: Square) -> list[Square]:
    """Return the up to four in-bounds orthogonal neighbours of a square."""
    by_position = _index_by_position(squares)
    neighbors = []
    for d_row, d_col in DIRECTIONS:
        neighbor = by_position.get((square.row + d_row, square.col + d_col))
        if neighbor is not None:
            neighbors.append(neighbor)
    return neighbors


def adjacent_opponent_squares(
    squares: list[Square],
    owned_square_ids: set[str],
) -> set[str]:
    """
    Calculate the challenge frontier of a set of squares.

    For every input square, each orthogonal neighbour inside the grid qualifies
    when it has an owner and that owner differs from the input square's owner.
    Neutral squares and squares of the same owner never qualify.

    Args:
        squares: Every square on the board
        owned_square_ids: Ids of the squares to expand from (normally one player's territory)

    Returns:
        Set of qualifying square ids (empty if nothing is owned or nothing touches)
    """
    by_position = _index_by_position(squares)
    frontier: set[str] = set()

    for square in squares:
        if square.id not in owned_square_ids:
            continue
        for d_row, d_col in DIRECTIONS:
            neighbor = by_position.get((square.row + d_row, square.col + d_col))
            if neighbor is None or neighbor.owner_id is None:
                continue
            if neighbor.owner_id != square.owner_id:
                frontier.add(neighbor.id)

    return frontier


def get_territory(state: GameState, player_id: str) -> list[str]:
    """Square ids owned by a player, in board order."""
    return [s.id for s in state.squares if s.owner_id == player_id]


def get_frontier(state: GameState, player_id: str) -> list[str]:
    """Adjacent opponent square ids for a player, in board order (deterministic for tests and UI)."""
    frontier = adjacent_opponent_squares(state.squares, set(get_territory(state, player_id)))
    return [s.id for s in state.squares if s.id in frontier]


def remaining_owners(state: GameState) -> set[str]:
    """Distinct owners of any square."""
    return {s.owner_id for s in state.squares if s.owner_id is not None}


def active_player_ids(state: GameState) -> list[str]:
    """Players owning at least one square, in roster order. Zero-square players are eliminated."""
    owners = remaining_owners(state)
    return [p.id for p in state.players if p.id in owners]
