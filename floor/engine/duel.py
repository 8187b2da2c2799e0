"""
Duel setup and resolution.
The winner of a duel takes the loser's whole territory, and every captured
square adopts the winner's defended category.
"""

from floor.engine.state import (
    GameState,
    DuelState,
    PHASE_DUEL,
    PHASE_CONTINUE,
    PHASE_GAME_OVER,
)
from floor.engine.adjacency import remaining_owners
from floor.engine.errors import IllegalChallenge, MissingCategory, UnknownEntity, ValidationError
from floor.engine.events import (
    GameEvent,
    duel_started,
    duel_ended,
    territory_captured,
    category_revealed,
    streak_changed,
    game_over,
)


def open_duel(
    state: GameState,
    square_id: str,
    duel_seconds: int | None = None,
) -> tuple[GameState, list[GameEvent]]:
    """
    Open a duel between the active player and the owner of an adjacent square.

    Validates:
    - The square is in the active turn's frontier snapshot
    - The square's current owner (ground truth, not the snapshot) is an opponent
    - The attacker has a category
    - The defender has a category, and that category has questions

    The clock is created paused so a bonus can be taken before it starts.
    """
    events: list[GameEvent] = []
    turn = state.active_turn
    if turn is None:
        raise IllegalChallenge("No active turn")

    square = state.get_square(square_id)
    if square is None:
        raise UnknownEntity(f"Unknown square: {square_id}")
    if square_id not in turn.available_challenges:
        raise IllegalChallenge(f"Square {square_id} is not adjacent to {turn.player_id}'s territory")

    attacker_id = turn.player_id
    defender_id = square.owner_id
    if defender_id is None or defender_id == attacker_id:
        raise IllegalChallenge(f"Square {square_id} is not held by an opponent")

    # Captured squares take the winner's category, so both sides need one
    attacker = state.get_player(attacker_id)
    if attacker is None or not attacker.category_id:
        raise MissingCategory(f"{attacker.name if attacker else attacker_id} has no category assigned")

    defender = state.get_player(defender_id)
    if defender is None:
        raise UnknownEntity(f"Unknown player: {defender_id}")
    if not defender.category_id:
        raise MissingCategory(f"{defender.name} has no category assigned")
    category = state.get_category(defender.category_id)
    if category is None:
        raise MissingCategory(f"{defender.name}'s category {defender.category_id} does not exist")
    if not category.questions:
        raise MissingCategory(f"Category {category.name} has no questions")

    seconds = state.duel_seconds if duel_seconds is None else duel_seconds
    if not isinstance(seconds, int) or seconds <= 0:
        raise ValidationError(f"Duel time must be a positive number of seconds, got {duel_seconds}")

    state.duel_counter += 1
    state.duel = DuelState(
        duel_id=state.duel_counter,
        player1_id=attacker_id,
        player2_id=defender_id,
        square_id=square_id,
        category_id=category.id,
        current_player_id=attacker_id,
        player1_time=seconds,
        player2_time=seconds,
        return_phase=state.phase,
    )
    state.phase = PHASE_DUEL
    events.append(duel_started(
        state.duel.duel_id, square_id, attacker_id, defender_id, category.id, seconds,
    ))

    if defender_id not in state.revealed_player_ids:
        state.revealed_player_ids.append(defender_id)
        events.append(category_revealed(defender_id, category.id))

    return state, events


def check_game_over(state: GameState) -> tuple[GameState, list[GameEvent]]:
    """If exactly one player owns squares, end the game in their favour."""
    events: list[GameEvent] = []
    owners = remaining_owners(state)
    if len(owners) != 1:
        return state, events

    winner_id = next(iter(owners))
    state.winner_id = winner_id
    state.phase = PHASE_GAME_OVER
    state.active_turn = None
    state.duel = None
    state.continuing_player_id = None
    events.append(game_over(winner_id, len(state.squares_owned_by(winner_id))))
    return state, events


def resolve_duel(
    state: GameState,
    winner_id: str,
    reason: str = "reported",
) -> tuple[GameState, list[GameEvent]]:
    """
    Resolve the live duel.

    In order:
    1. The loser is the participant who is not the winner
    2. Every square the loser owns (now, not at challenge time) moves to the
       winner and takes the winner's category
    3. Winner streak +1; loser streak reset and category cleared
    4. One owner left: game over. Otherwise the winner chooses continue / end turn
    """
    events: list[GameEvent] = []
    duel = state.duel
    if duel is None:
        raise IllegalChallenge("No duel in progress")
    if winner_id not in duel.participants():
        raise UnknownEntity(f"{winner_id} is not in this duel")

    loser_id = duel.opponent_of(winner_id)
    winner = state.get_player(winner_id)
    loser = state.get_player(loser_id)

    captured: list[str] = []
    for square in state.squares:
        if square.owner_id == loser_id:
            square.owner_id = winner_id
            square.category_id = winner.category_id
            captured.append(square.id)

    events.append(duel_ended(duel.duel_id, duel.square_id, winner_id, loser_id, reason))
    events.append(territory_captured(winner_id, loser_id, captured, winner.category_id))

    old_streak = winner.win_streak
    winner.win_streak += 1
    events.append(streak_changed(winner_id, old_streak, winner.win_streak, "duel_won"))

    old_streak = loser.win_streak
    loser.win_streak = 0
    loser.category_id = None
    if old_streak:
        events.append(streak_changed(loser_id, old_streak, 0, "duel_lost"))

    state.duel = None
    state.active_turn = None

    state, evts = check_game_over(state)
    events.extend(evts)
    if state.phase == PHASE_GAME_OVER:
        return state, events

    state.phase = PHASE_CONTINUE
    state.continuing_player_id = winner_id
    return state, events
