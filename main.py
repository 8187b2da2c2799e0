"""
Main entry point for The Floor turn engine.
Plays a simulated game: random drafts, random duel winners, continue while
a frontier remains, until one player owns the whole floor.
"""

import random
import sys

from floor.engine.state import GameState, Player, Category, Question, PHASE_CONTINUE, PHASE_GAME_OVER, PHASE_PLAYING
from floor.engine.actions import (
    start_game,
    draft_player,
    select_challenge,
    start_clock,
    correct_answer,
    report_duel_outcome,
    continue_turn,
    end_turn,
)
from floor.engine.reducer import apply_action
from floor.engine.setup import default_players, print_game_state

CATEGORY_NAMES = ["Geography", "Movies", "Music", "Sports", "Science", "History", "Food", "Animals", "Art"]


def demo_categories() -> list[Category]:
    categories = []
    for name in CATEGORY_NAMES:
        cid = name.lower()
        categories.append(Category(
            id=cid,
            name=name,
            questions=[Question(id=f"{cid}-{i}", text=f"{name} question {i + 1}") for i in range(5)],
        ))
    return categories


def main(seed: int = 7):
    print("The Floor - simulated game")
    print("=" * 60)

    rng = random.Random(seed)
    categories = demo_categories()
    players: list[Player] = default_players()
    for player, category in zip(players, categories):
        player.category_id = category.id

    state, events = apply_action(GameState(), start_game(3, 3, players, categories), rng)
    print(f"\n[START] placements: {events[0].payload['placements']}")
    print_game_state(state)

    duels = 0
    while state.phase != PHASE_GAME_OVER:
        if state.phase == PHASE_PLAYING:
            try:
                state, _ = apply_action(state, draft_player(), rng)
            except ValueError as e:
                print(f"✗ Draft failed: {e}")
                return
            print(f"\n[DRAFT] {state.active_turn.player_id} is up, "
                  f"can challenge {state.active_turn.available_challenges}")

        target = rng.choice(state.active_turn.available_challenges)
        state, events = apply_action(state, select_challenge(target))
        duel = state.duel
        print(f"[DUEL #{duel.duel_id}] {duel.player1_id} vs {duel.player2_id} on {target} ({duel.category_id})")

        # A couple of answers before the game master calls it
        state, _ = apply_action(state, start_clock())
        state, _ = apply_action(state, correct_answer())
        winner = rng.choice(list(duel.participants()))
        state, events = apply_action(state, report_duel_outcome(winner))
        duels += 1
        captured = next(e for e in events if e.type == "territory_captured")
        print(f"  {winner} wins and takes {captured.payload['squares']}")
        print_game_state(state)

        if state.phase == PHASE_CONTINUE:
            # Winners keep going two times out of three
            action = continue_turn() if rng.random() < 0.66 else end_turn()
            state, _ = apply_action(state, action, rng)

    print(f"\nGame over after {duels} duels. Winner: {state.winner_id}")


if __name__ == "__main__":
    main(int(sys.argv[1]) if len(sys.argv) > 1 else 7)
