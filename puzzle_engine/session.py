"""A headless play session: generation, drag protocol, timing and progress."""

import logging
import random
import time
from typing import Callable, Optional

from PIL import Image

from .board import PuzzleBoard
from .config import Settings, get_settings
from .generator import PieceGenerator
from .models import Point, PuzzleSize
from .schemas import BoardSnapshot, PuzzleProgress, PuzzleStatus

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


def format_time(ms: int) -> str:
    """Format elapsed milliseconds as MM:SS."""
    total_seconds = ms // 1000
    minutes = total_seconds // 60
    seconds = total_seconds % 60
    return f"{minutes:02d}:{seconds:02d}"


class PuzzleSession:
    """Drives one puzzle board through a drag-start, drag, drag-end sequence.

    Elapsed time comes from an injected clock returning seconds; the board
    itself has no notion of time.
    """

    def __init__(
        self,
        board: PuzzleBoard,
        size: PuzzleSize,
        clock: Optional[Clock] = None,
        settings: Optional[Settings] = None,
    ):
        """Initialize the session around an existing board.

        Args:
            board: The board to play on.
            size: Puzzle size the board was built for.
            clock: Monotonic clock in seconds; defaults to time.monotonic.
            settings: Session settings; the cached settings are used if None.
        """
        self.board = board
        self.size = size
        self.settings = settings or get_settings()
        self._clock = clock or time.monotonic
        self._started_at = self._clock()
        self._elapsed_offset_ms = 0
        self._frozen_elapsed_ms: Optional[int] = None
        self.dragged_piece_id: Optional[int] = None

    @classmethod
    def create(
        cls,
        source_image: Optional[Image.Image],
        piece_count: int,
        board_width: float,
        board_height: float,
        rng: Optional[random.Random] = None,
        clock: Optional[Clock] = None,
        settings: Optional[Settings] = None,
    ) -> "PuzzleSession":
        """Cut the image, build the board and scatter the pieces.

        Raises:
            ValueError: If the piece count is unsupported or the image is missing.
        """
        settings = settings or get_settings()
        size = PuzzleSize.for_piece_count(piece_count)
        rng = rng or random.Random()

        pieces = PieceGenerator(settings).generate_pieces(
            source_image, size.rows, size.columns, board_width, board_height, rng=rng
        )
        board = PuzzleBoard(pieces, size.rows, size.columns, board_width, board_height, rng=rng, settings=settings)
        session = cls(board, size, clock=clock, settings=settings)
        board.shuffle(*session.scatter_area)
        logger.info("Started %d piece session (%dx%d)", size.piece_count, size.columns, size.rows)
        return session

    @property
    def scatter_area(self) -> Point:
        """Area pieces are scattered over: the board scaled by SCATTER_AREA_SCALE."""
        scale = self.settings.SCATTER_AREA_SCALE
        return (self.board.board_width * scale, self.board.board_height * scale)

    @property
    def elapsed_ms(self) -> int:
        """Play time in milliseconds; frozen once the puzzle is completed."""
        if self._frozen_elapsed_ms is not None:
            return self._frozen_elapsed_ms
        return self._elapsed_offset_ms + int((self._clock() - self._started_at) * 1000)

    def drag_start(self, piece_id: int) -> BoardSnapshot:
        """Raise the grabbed piece's group above everything else."""
        self.board.bring_to_front(piece_id)
        self.dragged_piece_id = piece_id
        return self.board.snapshot()

    def drag(self, piece_id: int, delta: Point) -> BoardSnapshot:
        """Move the dragged piece by a pointer delta."""
        piece = self.board.get_piece(piece_id)
        if piece is not None:
            x, y = piece.x, piece.y
            self.board.move_piece(piece_id, (x + delta[0], y + delta[1]))
        return self.board.snapshot()

    def drag_end(self, piece_id: int) -> bool:
        """Release the piece and try to snap it.

        Returns:
            True if the release snapped the piece's group.
        """
        snapped = self.board.try_snap_piece(piece_id)
        self.dragged_piece_id = None
        if self.board.is_completed and self._frozen_elapsed_ms is None:
            self._frozen_elapsed_ms = self.elapsed_ms
        return snapped

    def resume(self, moves: int, elapsed_ms: int, completed: bool) -> None:
        """Restore coarse progress saved by a previous session."""
        self.board.set_moves(moves)
        self._elapsed_offset_ms = elapsed_ms
        self._started_at = self._clock()
        if completed:
            self.board.mark_as_completed()
            self._frozen_elapsed_ms = elapsed_ms

    def play_again(self) -> None:
        """Reset the board, reshuffle and restart the clock."""
        self.board.reset_pieces(*self.scatter_area)
        self._started_at = self._clock()
        self._elapsed_offset_ms = 0
        self._frozen_elapsed_ms = None
        self.dragged_piece_id = None

    def progress(self) -> PuzzleProgress:
        """Coarse progress for the history collaborator."""
        status = PuzzleStatus.COMPLETED if self.board.is_completed else PuzzleStatus.IN_PROGRESS
        return PuzzleProgress(
            piece_count=self.size.piece_count,
            moves=self.board.moves,
            elapsed_ms=self.elapsed_ms,
            status=status,
        )
