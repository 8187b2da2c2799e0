"""
Draft selection: who gets the next turn.

Round-robin fairness: nobody is drafted twice before every other viable active
player has been drafted once. The player who just ended a turn is skipped by
the draft that immediately follows. Only players with at least one adjacent
opponent square can be drafted.
"""

import random

from floor.engine.state import GameState, ActiveTurn
from floor.engine.adjacency import active_player_ids, get_territory, get_frontier
from floor.engine.errors import NoEligibleOpponents


def _candidates(
    active: list[str],
    drafted: list[str],
    excluded: str | None,
) -> tuple[list[str], list[str], str | None]:
    """
    Eligible candidates for this round. When the round is exhausted it is reset
    (the just-ended player stays excluded unless they are the only one left).

    Returns:
        (candidates, drafted_after, exclusion_after)
    """
    candidates = [p for p in active if p not in drafted and p != excluded]
    if candidates:
        return candidates, drafted, excluded

    drafted = []
    candidates = [p for p in active if p != excluded]
    if candidates:
        return candidates, drafted, excluded

    return list(active), drafted, None


def build_active_turn(state: GameState, player_id: str) -> ActiveTurn:
    """Snapshot a player's territory and frontier."""
    return ActiveTurn(
        player_id=player_id,
        territory=get_territory(state, player_id),
        available_challenges=get_frontier(state, player_id),
    )


def draft_next_player(state: GameState, rng=None) -> ActiveTurn:
    """
    Pick the next active player and record the draft on state.

    Mutates state.drafted_this_round and state.last_ended_turn_player_id; the
    caller is expected to pass a copy (the reducer does). On failure nothing
    is mutated.

    Args:
        state: Game state (a working copy)
        rng: Randomness provider with choice(), defaults to the random module

    Returns:
        ActiveTurn for the drafted player

    Raises:
        NoEligibleOpponents: nobody with an adjacent opponent can be drafted,
            even after one round reset
    """
    rng = rng or random
    active = active_player_ids(state)
    drafted = [p for p in state.drafted_this_round if p in active]
    excluded = state.last_ended_turn_player_id

    frontiers = {pid: get_frontier(state, pid) for pid in active}

    candidates, drafted, excluded = _candidates(active, drafted, excluded)
    viable = [p for p in candidates if frontiers[p]]

    if not viable and drafted:
        # Everyone left this round is stuck; one reset pass is allowed.
        candidates, drafted, excluded = _candidates(active, [], excluded)
        viable = [p for p in candidates if frontiers[p]]

    if not viable:
        raise NoEligibleOpponents("No player has an adjacent opponent to challenge")

    player_id = rng.choice(viable)
    state.drafted_this_round = drafted + [player_id]
    state.last_ended_turn_player_id = None

    return ActiveTurn(
        player_id=player_id,
        territory=get_territory(state, player_id),
        available_challenges=frontiers[player_id],
    )
