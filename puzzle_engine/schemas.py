"""Read-only views of board state handed to renderers and progress trackers."""

from enum import Enum
from typing import Tuple

from pydantic import BaseModel, ConfigDict


class PieceView(BaseModel):
    """Snapshot of one piece in paint order.

    ``x``/``y`` and ``correct_x``/``correct_y`` are the top-left corner of the
    piece bounding box now and when solved.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    row: int
    col: int
    x: float
    y: float
    correct_x: float
    correct_y: float
    width: float
    height: float
    is_locked: bool

    @property
    def current_position(self) -> Tuple[float, float]:
        return (self.x, self.y)

    @property
    def correct_position(self) -> Tuple[float, float]:
        return (self.correct_x, self.correct_y)


class BoardSnapshot(BaseModel):
    """Snapshot of the whole board after a mutating call."""

    model_config = ConfigDict(frozen=True)

    pieces: Tuple[PieceView, ...]
    moves: int
    is_completed: bool


class PuzzleStatus(str, Enum):
    """Coarse state of a play session."""

    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class PuzzleProgress(BaseModel):
    """Progress figures persisted by the history collaborator."""

    model_config = ConfigDict(frozen=True)

    piece_count: int
    moves: int
    elapsed_ms: int
    status: PuzzleStatus
