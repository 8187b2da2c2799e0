"""
GameSession and DuelTimer against a real event loop, with a tiny tick interval.
"""

import asyncio

import pytest

from floor.engine.errors import InvalidTransition
from floor.engine.state import Player, PHASE_DRAFT, PHASE_GAME_OVER, PHASE_PLAYING, PHASE_SETUP
from floor.session import GameSession
from floor.timer import DuelTimer

from helpers import make_category, PickPreferred

TICK = 0.01


def _session(**kwargs) -> GameSession:
    kwargs.setdefault("tick_seconds", TICK)
    kwargs.setdefault("correct_delay", TICK)
    kwargs.setdefault("skip_delay", TICK)
    return GameSession(game_id="test", rng=PickPreferred("A"), **kwargs)


async def _open_duel(session: GameSession, seconds: int = 60, streaks=None):
    """A on 0-0 challenges B on 0-1. C sits on 1-1 so the first duel never ends the game."""
    players = [
        Player(id="A", name="Ana", category_id="cat-A"),
        Player(id="B", name="Ben", category_id="cat-B"),
        Player(id="C", name="Cy", category_id="cat-B"),
    ]
    categories = [make_category("cat-A"), make_category("cat-B")]
    await session.start_game(
        3, 3, players, categories,
        placements={"A": "0-0", "B": "0-1", "C": "1-1"},
        duel_seconds=seconds,
    )
    for player_id, streak in (streaks or {}).items():
        session.state.get_player(player_id).win_streak = streak
    turn = await session.draft_player()
    assert turn.player_id == "A"
    return await session.select_challenge("0-1")


async def _wait_for(predicate, timeout=2.0):
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not reached")
        await asyncio.sleep(TICK)


def test_timer_ticks_until_callback_stops_it():
    calls = []

    async def on_tick(duel_id):
        calls.append(duel_id)
        return len(calls) < 3

    async def scenario():
        timer = DuelTimer(7, on_tick, interval=TICK)
        timer.start()
        await _wait_for(lambda: not timer.running)

    asyncio.run(scenario())
    assert calls == [7, 7, 7]


def test_cancelled_timer_never_ticks():
    calls = []

    async def on_tick(duel_id):
        calls.append(duel_id)
        return True

    async def scenario():
        timer = DuelTimer(1, on_tick, interval=TICK)
        timer.start()
        timer.cancel()
        await asyncio.sleep(TICK * 5)
        assert not timer.running
        with pytest.raises(RuntimeError):
            timer.start()

    asyncio.run(scenario())
    assert calls == []


def test_clock_runs_out_and_defender_wins():
    async def scenario():
        session = _session()
        duel = await _open_duel(session, seconds=2)
        assert not session.timer_running
        await session.start_clock()
        assert session.timer_running
        await _wait_for(lambda: session.state.duel is None)
        await session.close()
        return session, duel

    session, duel = asyncio.run(scenario())
    state = session.state
    assert state.continuing_player_id == "B"
    assert state.get_square("0-0").owner_id == "B"
    assert state.get_player("B").win_streak == 1
    assert not session.timer_running
    reasons = [e.payload.get("reason") for e in session.recent_events if e.type == "duel_ended"]
    assert reasons == ["timeout"]
    assert duel.duel_id == 1


def test_paused_clock_does_not_lose_time():
    async def scenario():
        session = _session()
        await _open_duel(session, seconds=5)
        await asyncio.sleep(TICK * 10)
        duel = session.state.duel
        await session.close()
        return duel

    duel = asyncio.run(scenario())
    assert (duel.player1_time, duel.player2_time) == (5, 5)


def test_cancelled_duel_timer_does_not_touch_state():
    async def scenario():
        session = _session()
        await _open_duel(session, seconds=1)
        await session.start_clock()
        await session.cancel_duel()
        snapshot = session.state.to_dict()
        await asyncio.sleep(TICK * 10)
        assert session.state.to_dict() == snapshot
        return session

    session = asyncio.run(scenario())
    assert session.state.phase == PHASE_DRAFT
    assert session.state.get_square("0-0").owner_id == "A"
    assert not session.timer_running


def test_clock_resumes_after_correct_answer():
    async def scenario():
        session = _session(correct_delay=TICK * 2)
        await _open_duel(session, seconds=60)
        await session.start_clock()
        await session.correct_answer()
        assert session.state.duel.is_running is False
        await _wait_for(lambda: session.state.duel.is_running)
        duel = session.state.duel
        await session.close()
        return duel

    duel = asyncio.run(scenario())
    assert duel.current_player_id == "B"
    assert duel.question_index == 1


def test_clock_resumes_after_skip():
    async def scenario():
        session = _session()
        await _open_duel(session)
        await session.start_clock()
        await session.skip_question()
        await _wait_for(lambda: session.state.duel.is_running)
        duel = session.state.duel
        await session.close()
        return duel

    duel = asyncio.run(scenario())
    assert duel.current_player_id == "A"


def test_bonus_eligible_side_waits_for_manual_start():
    async def scenario():
        session = _session()
        await _open_duel(session, streaks={"B": 3})
        await session.start_clock()
        await session.correct_answer()
        await asyncio.sleep(TICK * 5)
        assert session.state.duel.is_running is False
        await session.use_bonus("B")
        await session.start_clock()
        duel = session.state.duel
        await session.close()
        return session, duel

    session, duel = asyncio.run(scenario())
    assert duel.is_running
    assert duel.player2_time == 65
    assert session.state.get_player("B").win_streak == 0


def test_report_outcome_stops_timer_and_game_can_end():
    async def scenario():
        session = _session()
        await _open_duel(session)
        await session.report_duel_outcome("A")
        assert not session.timer_running
        await session.end_turn()
        return session

    session = asyncio.run(scenario())
    state = session.state
    assert state.phase == PHASE_DRAFT
    assert state.active_turn.player_id == "C"


def test_replay_and_reset_stop_the_timer():
    async def scenario():
        session = _session()
        await _open_duel(session)
        await session.start_clock()
        await session.replay()
        assert not session.timer_running
        assert session.state.phase == PHASE_PLAYING

        await session.draft_player()
        await session.select_challenge("0-1")
        await session.reset_game()
        assert not session.timer_running
        return session

    session = asyncio.run(scenario())
    assert session.state.phase == PHASE_SETUP
    assert len(session.recent_events) == 0


def test_rejected_action_propagates():
    async def scenario():
        session = _session()
        with pytest.raises(InvalidTransition):
            await session.draft_player()
        return session

    session = asyncio.run(scenario())
    assert session.state.phase == PHASE_SETUP


def test_full_game_through_session():
    async def scenario():
        session = _session()
        await _open_duel(session)
        await session.report_duel_outcome("A")
        await session.continue_turn()
        assert session.state.active_turn.available_challenges == ["1-1"]
        await session.select_challenge("1-1")
        await session.report_duel_outcome("A")
        return session

    session = asyncio.run(scenario())
    assert session.state.phase == PHASE_GAME_OVER
    assert session.state.winner_id == "A"
    assert session.state.get_player("A").win_streak == 2


def test_first_second_is_charged_a_full_interval_after_clock_start():
    async def scenario():
        session = _session(tick_seconds=0.2, correct_delay=5.0)
        await _open_duel(session, seconds=60)
        assert not session.timer_running
        await asyncio.sleep(0.15)
        await session.start_clock()
        await asyncio.sleep(0.1)
        assert session.state.duel.player1_time == 60
        await _wait_for(lambda: session.state.duel.player1_time == 59)

        await session.correct_answer()
        assert not session.timer_running
        duel = session.state.duel
        await session.close()
        return duel

    duel = asyncio.run(scenario())
    assert duel.current_player_id == "B"
    assert duel.player2_time == 60
