"""
Game session: the single writer for one game.

Every transition (game-master actions, clock ticks, delayed clock resumes)
goes through one asyncio.Lock, so a tick can never interleave with an action.
The session also owns the duel timer and cancels it on every path that
discards a duel.
"""

import asyncio
import logging
import random
import uuid
from collections import deque

from floor.config import get_settings
from floor.engine import CORRECT_ANSWER_DELAY, SKIP_DELAY
from floor.engine.state import GameState, Player, Category
from floor.engine.actions import (
    Action,
    start_game,
    assign_square,
    assign_player_category,
    draft_player,
    select_challenge,
    start_clock,
    tick_clock,
    correct_answer,
    skip_question,
    use_bonus,
    report_duel_outcome,
    cancel_duel,
    continue_turn,
    end_turn,
    replay,
    reset_game,
)
from floor.engine.reducer import apply_action
from floor.engine.clock import can_use_bonus
from floor.engine.errors import FloorError
from floor.engine.events import (
    GameEvent,
    DUEL_STARTED,
    DUEL_ENDED,
    DUEL_CANCELLED,
    GAME_OVER,
    DRAFT_FAILED,
)
from floor.timer import DuelTimer

logger = logging.getLogger(__name__)

RECENT_EVENTS = 100
_INFO_EVENTS = {DUEL_STARTED, DUEL_ENDED, DUEL_CANCELLED, GAME_OVER, DRAFT_FAILED}


class GameSession:
    """Owns one GameState and serializes every change to it."""

    def __init__(
        self,
        game_id: str | None = None,
        rng=None,
        tick_seconds: float | None = None,
        correct_delay: float = CORRECT_ANSWER_DELAY,
        skip_delay: float = SKIP_DELAY,
    ):
        self.game_id = game_id or str(uuid.uuid4())
        self.state = GameState()
        self.rng = rng or random.Random()
        self.tick_seconds = get_settings().TICK_SECONDS if tick_seconds is None else tick_seconds
        self.correct_delay = correct_delay
        self.skip_delay = skip_delay
        self.lock = asyncio.Lock()
        self.recent_events: deque[GameEvent] = deque(maxlen=RECENT_EVENTS)
        self._timer: DuelTimer | None = None
        self._resume_task: asyncio.Task | None = None

    # ===== Core =====

    async def apply(self, action: Action) -> tuple[GameState, list[GameEvent]]:
        """Apply one action under the session lock."""
        async with self.lock:
            return self._apply_locked(action)

    def _apply_locked(self, action: Action) -> tuple[GameState, list[GameEvent]]:
        try:
            new_state, events = apply_action(self.state, action, self.rng)
        except FloorError as e:
            logger.warning("Game %s rejected %s: %s", self.game_id, action.type, e)
            raise
        self.state = new_state
        self.recent_events.extend(events)
        for event in events:
            level = logging.INFO if event.type in _INFO_EVENTS else logging.DEBUG
            logger.log(level, "Game %s %s %s", self.game_id, event.type, event.payload)
        self._sync_timer(action)
        return new_state, events

    def _sync_timer(self, action: Action) -> None:
        """
        Tick only while the live duel's clock runs. A fresh timer per clock start
        means the first second is charged a full interval after the start.
        Also schedules clock resumes after answers.
        """
        duel = self.state.duel
        if duel is None:
            self._stop_timer()
            self._cancel_resume()
            return

        if not duel.is_running:
            self._stop_timer()
        elif self._timer is None or self._timer.duel_id != duel.duel_id:
            self._stop_timer()
            self._timer = DuelTimer(duel.duel_id, self._on_tick, self.tick_seconds)
            self._timer.start()

        if action.type == "correct_answer":
            # A side that can take a bonus waits for the game master to start its clock
            if not can_use_bonus(self.state, duel.current_player_id):
                self._schedule_resume(self.correct_delay, duel.duel_id)
        elif action.type == "skip_question":
            self._schedule_resume(self.skip_delay, duel.duel_id)
        elif action.type in ("start_clock", "use_bonus"):
            self._cancel_resume()

    def _stop_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _cancel_resume(self) -> None:
        task = self._resume_task
        self._resume_task = None
        if task is None or task.done():
            return
        try:
            current = asyncio.current_task()
        except RuntimeError:
            current = None
        if task is not current:
            task.cancel()

    def _schedule_resume(self, delay: float, duel_id: int) -> None:
        self._cancel_resume()
        loop = asyncio.get_running_loop()
        self._resume_task = loop.create_task(self._resume_after(delay, duel_id))

    async def _resume_after(self, delay: float, duel_id: int) -> None:
        await asyncio.sleep(delay)
        async with self.lock:
            duel = self.state.duel
            if duel is None or duel.duel_id != duel_id or duel.is_running:
                return
            self._resume_task = None
            self._apply_locked(start_clock())

    async def _on_tick(self, duel_id: int) -> bool:
        async with self.lock:
            duel = self.state.duel
            if duel is None or duel.duel_id != duel_id:
                return False
            self._apply_locked(tick_clock())
            duel = self.state.duel
            return duel is not None and duel.duel_id == duel_id and duel.is_running

    @property
    def timer_running(self) -> bool:
        return self._timer is not None and self._timer.running

    async def close(self) -> None:
        """Stop background work. The state is left as is."""
        async with self.lock:
            self._stop_timer()
            self._cancel_resume()

    # ===== Transition API =====

    async def start_game(
        self,
        rows: int,
        cols: int,
        players: list[Player],
        categories: list[Category],
        placements: dict[str, str] | None = None,
        duel_seconds: int | None = None,
    ) -> GameState:
        seconds = get_settings().DUEL_SECONDS if duel_seconds is None else duel_seconds
        state, _ = await self.apply(start_game(rows, cols, players, categories, placements, seconds))
        return state

    async def assign_square(self, square_id: str, category_id: str, owner_id: str | None = None) -> GameState:
        state, _ = await self.apply(assign_square(square_id, category_id, owner_id))
        return state

    async def assign_player_category(self, player_id: str, category_id: str) -> GameState:
        state, _ = await self.apply(assign_player_category(player_id, category_id))
        return state

    async def draft_player(self):
        """Returns the new ActiveTurn; raises NoEligibleOpponents."""
        state, _ = await self.apply(draft_player())
        return state.active_turn

    async def select_challenge(self, square_id: str, duel_seconds: int | None = None):
        """Returns the new DuelState; raises IllegalChallenge or MissingCategory."""
        state, _ = await self.apply(select_challenge(square_id, duel_seconds))
        return state.duel

    async def start_clock(self) -> GameState:
        state, _ = await self.apply(start_clock())
        return state

    async def correct_answer(self) -> GameState:
        state, _ = await self.apply(correct_answer())
        return state

    async def skip_question(self) -> GameState:
        state, _ = await self.apply(skip_question())
        return state

    async def use_bonus(self, player_id: str) -> GameState:
        state, _ = await self.apply(use_bonus(player_id))
        return state

    async def report_duel_outcome(self, winner_id: str) -> GameState:
        state, _ = await self.apply(report_duel_outcome(winner_id))
        return state

    async def cancel_duel(self) -> GameState:
        state, _ = await self.apply(cancel_duel())
        return state

    async def continue_turn(self) -> GameState:
        state, _ = await self.apply(continue_turn())
        return state

    async def end_turn(self) -> GameState:
        state, _ = await self.apply(end_turn())
        return state

    async def replay(self) -> GameState:
        state, _ = await self.apply(replay())
        return state

    async def reset_game(self) -> None:
        await self.apply(reset_game())
        self.recent_events.clear()
