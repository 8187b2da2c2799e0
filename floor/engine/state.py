"""
Game state representation.
All state is treated as immutable; transitions return new state copies.
Includes dict conversion for the read-only snapshot handed to the UI.
"""

from dataclasses import dataclass, field
from copy import deepcopy
from typing import Any

from floor.engine import DEFAULT_DUEL_SECONDS


# Phases of the turn state machine
PHASE_SETUP = "setup"
PHASE_PLAYING = "playing"  # idle between turns, waiting for a draft
PHASE_DRAFT = "draft"  # a player is active and picks a square to challenge
PHASE_DUEL = "duel"
PHASE_CONTINUE = "continue"  # duel winner chooses to continue or end the turn
PHASE_GAME_OVER = "game_over"


def _str_or_none(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


@dataclass
class Player:
    """A contestant. category_id is the category they currently defend."""
    id: str
    name: str
    emoji: str | None = None
    image_url: str | None = None  # Portrait reference
    category_id: str | None = None
    win_streak: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "emoji": self.emoji,
            "image_url": self.image_url,
            "category_id": self.category_id,
            "win_streak": self.win_streak,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Player":
        if not isinstance(data, dict):
            data = {}
        try:
            streak = int(data.get("win_streak") or 0)
        except (TypeError, ValueError):
            streak = 0
        return cls(
            id=str(data.get("id") or ""),
            name=str(data.get("name") or ""),
            emoji=_str_or_none(data.get("emoji")),
            image_url=_str_or_none(data.get("image_url")),
            category_id=_str_or_none(data.get("category_id")),
            win_streak=max(0, streak),
        )


@dataclass
class Question:
    """A duel question: text, an image reference, or both."""
    id: str
    text: str = ""
    image_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "text": self.text, "image_url": self.image_url}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Question":
        if not isinstance(data, dict):
            data = {}
        return cls(
            id=str(data.get("id") or ""),
            text=str(data.get("text") or "").strip(),
            image_url=_str_or_none(data.get("image_url")),
        )


@dataclass
class Category:
    """A knowledge category. Questions are asked in order and reused cyclically."""
    id: str
    name: str
    questions: list[Question] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "questions": [q.to_dict() for q in self.questions],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Category":
        if not isinstance(data, dict):
            data = {}
        questions_raw = data.get("questions") or []
        if not isinstance(questions_raw, list):
            questions_raw = []
        questions = []
        for i, q in enumerate(questions_raw):
            if not isinstance(q, dict):
                continue
            question = Question.from_dict(q)
            if not question.id:
                question.id = f"{data.get('id') or 'q'}-{i}"
            questions.append(question)
        return cls(
            id=str(data.get("id") or ""),
            name=str(data.get("name") or ""),
            questions=questions,
        )


@dataclass
class Square:
    """One grid cell. Only owner_id and category_id change after game start."""
    id: str
    row: int
    col: int
    owner_id: str | None = None  # None = neutral
    category_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "row": self.row,
            "col": self.col,
            "owner_id": self.owner_id,
            "category_id": self.category_id,
        }


@dataclass
class ActiveTurn:
    """
    The drafted (or continuing) player's turn.
    territory and available_challenges are snapshots taken at draft/continue time.
    """
    player_id: str
    territory: list[str]  # square ids owned by player_id
    available_challenges: list[str]  # adjacent opponent square ids

    def to_dict(self) -> dict[str, Any]:
        return {
            "player_id": self.player_id,
            "territory": self.territory,
            "available_challenges": self.available_challenges,
        }


@dataclass
class DuelState:
    """
    One live duel over a contested square.
    player1 is the attacker, player2 the defender whose category is in play.
    """
    duel_id: int
    player1_id: str
    player2_id: str
    square_id: str
    category_id: str
    current_player_id: str
    player1_time: int
    player2_time: int
    question_index: int = 0
    # The clock only ticks while running (paused before start and between answers)
    is_running: bool = False
    # Player ids that consumed their bonus this duel
    bonus_used: list[str] = field(default_factory=list)
    # Phase restored if the duel is cancelled
    return_phase: str = PHASE_DRAFT

    def participants(self) -> tuple[str, str]:
        return (self.player1_id, self.player2_id)

    def opponent_of(self, player_id: str) -> str:
        return self.player2_id if player_id == self.player1_id else self.player1_id

    def time_for(self, player_id: str) -> int:
        return self.player1_time if player_id == self.player1_id else self.player2_time

    def set_time_for(self, player_id: str, seconds: int) -> None:
        if player_id == self.player1_id:
            self.player1_time = seconds
        else:
            self.player2_time = seconds

    def to_dict(self) -> dict[str, Any]:
        return {
            "duel_id": self.duel_id,
            "player1_id": self.player1_id,
            "player2_id": self.player2_id,
            "square_id": self.square_id,
            "category_id": self.category_id,
            "current_player_id": self.current_player_id,
            "player1_time": self.player1_time,
            "player2_time": self.player2_time,
            "question_index": self.question_index,
            "is_running": self.is_running,
            "bonus_used": self.bonus_used,
            "return_phase": self.return_phase,
        }


@dataclass
class GameState:
    """Complete game context. Transition functions take one and return a new one."""
    phase: str = PHASE_SETUP
    rows: int = 0
    cols: int = 0
    players: list[Player] = field(default_factory=list)
    categories: list[Category] = field(default_factory=list)
    squares: list[Square] = field(default_factory=list)
    active_turn: ActiveTurn | None = None
    duel: DuelState | None = None
    # Duel winner waiting to choose continue / end turn
    continuing_player_id: str | None = None
    # Round-robin draft fairness
    drafted_this_round: list[str] = field(default_factory=list)
    # Excluded from the draft that immediately follows their turn
    last_ended_turn_player_id: str | None = None
    winner_id: str | None = None
    duel_seconds: int = DEFAULT_DUEL_SECONDS
    # Players whose defended category has been shown on the board
    revealed_player_ids: list[str] = field(default_factory=list)
    # Snapshot taken at game start, restored by replay
    initial_squares: list[Square] = field(default_factory=list)
    initial_player_categories: dict[str, str | None] = field(default_factory=dict)
    duel_counter: int = 0

    def copy(self) -> "GameState":
        """Return a deep copy of this game state."""
        return deepcopy(self)

    # ===== Lookups =====

    def get_player(self, player_id: str | None) -> Player | None:
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def get_category(self, category_id: str | None) -> Category | None:
        for category in self.categories:
            if category.id == category_id:
                return category
        return None

    def get_square(self, square_id: str | None) -> Square | None:
        for square in self.squares:
            if square.id == square_id:
                return square
        return None

    def square_at(self, row: int, col: int) -> Square | None:
        """Squares are stored row-major, so a cell's index is row * cols + col."""
        if not (0 <= row < self.rows and 0 <= col < self.cols):
            return None
        index = row * self.cols + col
        if index < len(self.squares):
            square = self.squares[index]
            if square.row == row and square.col == col:
                return square
        for square in self.squares:
            if square.row == row and square.col == col:
                return square
        return None

    def squares_owned_by(self, player_id: str) -> list[Square]:
        return [s for s in self.squares if s.owner_id == player_id]

    # ===== Serialization =====

    def to_dict(self) -> dict[str, Any]:
        """Convert GameState to a JSON-serializable snapshot."""
        return {
            "phase": self.phase,
            "rows": self.rows,
            "cols": self.cols,
            "players": [p.to_dict() for p in self.players],
            "categories": [c.to_dict() for c in self.categories],
            "squares": [s.to_dict() for s in self.squares],
            "active_turn": self.active_turn.to_dict() if self.active_turn else None,
            "duel": self.duel.to_dict() if self.duel else None,
            "continuing_player_id": self.continuing_player_id,
            "drafted_this_round": self.drafted_this_round,
            "last_ended_turn_player_id": self.last_ended_turn_player_id,
            "winner_id": self.winner_id,
            "duel_seconds": self.duel_seconds,
            "revealed_player_ids": self.revealed_player_ids,
        }
