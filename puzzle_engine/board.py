"""Puzzle board: piece movement, group snapping and completion tracking.

Pieces that snap together are merged into a group held in a disjoint-set
structure owned by the board; a group moves as one rigid unit. A group whose
member lands close to its own correct position is pulled onto the board and
locked for the rest of the session.

The board is not thread safe. Callers deliver one manipulation at a time.
"""

import logging
import math
import random
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from PIL import Image

from .config import Settings, get_settings
from .models import Piece, Point
from .schemas import BoardSnapshot, PieceView

logger = logging.getLogger(__name__)


class DisjointSet:
    """Union-find over piece ids with path compression."""

    def __init__(self, ids: Iterable[int]):
        """Start with every id in its own singleton set."""
        self._parent: Dict[int, int] = {i: i for i in ids}

    def find(self, item: int) -> int:
        """Find the root of the set containing item."""
        parent = self._parent.get(item, item)
        if parent == item:
            return item
        root = self.find(parent)
        self._parent[item] = root
        return root

    def union(self, first: int, second: int) -> bool:
        """Merge the sets of two items. Returns False if they were already joined."""
        first_root = self.find(first)
        second_root = self.find(second)
        if first_root == second_root:
            return False
        self._parent[second_root] = first_root
        return True

    def reset(self) -> None:
        """Dissolve every set back to singletons."""
        for item in self._parent:
            self._parent[item] = item


class PuzzleBoard:
    """Live state of a puzzle: positions, groups, locks and move count."""

    def __init__(
        self,
        pieces: Sequence[Piece],
        rows: int,
        cols: int,
        board_width: float,
        board_height: float,
        rng: Optional[random.Random] = None,
        settings: Optional[Settings] = None,
    ):
        """Initialize the board.

        Args:
            pieces: Pieces of a rows x cols grid; the board takes ownership.
            rows: Number of rows in the puzzle grid.
            cols: Number of columns in the puzzle grid.
            board_width: Width of the assembled puzzle in board pixels.
            board_height: Height of the assembled puzzle in board pixels.
            rng: Random source for shuffling.
            settings: Board settings; the cached settings are used if None.

        Raises:
            ValueError: If the grid or board size is degenerate, or the pieces
                do not match the grid.
        """
        if rows <= 0 or cols <= 0:
            raise ValueError(f"Grid must have at least one row and one column, got {rows}x{cols}")
        if board_width <= 0 or board_height <= 0:
            raise ValueError(f"Board size must be positive, got {board_width}x{board_height}")
        if len(pieces) != rows * cols:
            raise ValueError(f"Expected {rows * cols} pieces for a {rows}x{cols} grid, got {len(pieces)}")

        self.rows = rows
        self.cols = cols
        self.board_width = board_width
        self.board_height = board_height
        self.settings = settings or get_settings()
        self._rng = rng or random.Random()

        self._pieces: List[Piece] = list(pieces)
        self._by_id: Dict[int, Piece] = {piece.id: piece for piece in self._pieces}
        if len(self._by_id) != len(self._pieces):
            raise ValueError("Piece ids must be unique")

        self._groups = DisjointSet(self._by_id)
        self._embedded = False

        self.moves = 0
        self.is_completed = False
        self.snap_threshold = min(board_width / cols, board_height / rows) * self.settings.SNAP_THRESHOLD_RATIO

    @property
    def pieces(self) -> Tuple[PieceView, ...]:
        """Read-only views of the pieces in paint order (later = on top)."""
        return tuple(_view(p) for p in self._pieces)

    def get_piece(self, piece_id: int) -> Optional[PieceView]:
        """Read-only view of one piece, or None for an unknown id."""
        piece = self._by_id.get(piece_id)
        return _view(piece) if piece is not None else None

    def piece_image(self, piece_id: int) -> Optional[Image.Image]:
        """Rendered image of a piece; None for headless pieces and unknown ids."""
        piece = self._by_id.get(piece_id)
        return piece.image if piece is not None else None

    def embed_at(self, offset_x: float, offset_y: float) -> None:
        """Translate the solved layout once, when the board is placed in a larger area.

        Raises:
            RuntimeError: If the layout was already embedded or play has started.
        """
        if self._embedded or self.moves > 0:
            raise RuntimeError("Correct positions can only be translated once, before play starts")
        for piece in self._pieces:
            piece.correct_position = (piece.correct_position[0] + offset_x, piece.correct_position[1] + offset_y)
            piece.current_position = (piece.current_position[0] + offset_x, piece.current_position[1] + offset_y)
        self._embedded = True

    def shuffle(self, area_width: float, area_height: float) -> None:
        """Scatter every unlocked piece uniformly over the given area.

        Each piece's bounding box is kept inside the area minus the shuffle
        margin; if the area is too small the piece is placed at the margin.
        """
        margin = self.settings.SHUFFLE_MARGIN
        for piece in self._pieces:
            if piece.is_locked:
                continue
            x = self._random_coordinate(margin, area_width - piece.width - margin)
            y = self._random_coordinate(margin, area_height - piece.height - margin)
            piece.current_position = (x, y)

    def _random_coordinate(self, low: float, high: float) -> float:
        if high <= low:
            return low
        return self._rng.uniform(low, high)

    def move_piece(self, piece_id: int, new_position: Point) -> None:
        """Drag a piece, carrying its whole group along."""
        piece = self._get(piece_id)
        if piece is None or piece.is_locked:
            return
        dx = new_position[0] - piece.current_position[0]
        dy = new_position[1] - piece.current_position[1]
        self._move_group_by(piece_id, dx, dy)

    def try_snap_piece(self, piece_id: int) -> bool:
        """Snap a released piece's group to matching neighbours and to the board.

        Every attempt on an unlocked piece counts as a move.

        Returns:
            True if the group snapped to a neighbour or to the board.
        """
        piece = self._get(piece_id)
        if piece is None or piece.is_locked:
            return False
        self.moves += 1

        snapped_to_neighbors = self._snap_group_to_matching_neighbors(piece_id)
        snapped_to_board = self._snap_group_to_correct_position(piece_id)

        if not self.is_completed and self.check_completion():
            self.is_completed = True
            logger.info("Puzzle completed after %d moves", self.moves)
        return snapped_to_neighbors or snapped_to_board

    def check_completion(self) -> bool:
        """Check whether every piece sits on its correct position.

        A pure query; ``is_completed`` is only set by try_snap_piece and
        mark_as_completed, and only cleared by reset_pieces.
        """
        tolerance = self.settings.COMPLETION_TOLERANCE
        return all(piece.is_at_correct_position(tolerance) for piece in self._pieces)

    def get_piece_at(self, position: Point) -> Optional[PieceView]:
        """Topmost piece whose bounding box contains the point."""
        for piece in reversed(self._pieces):
            if piece.contains(position):
                return _view(piece)
        return None

    def bring_to_front(self, piece_id: int) -> Tuple[PieceView, ...]:
        """Move a piece's group to the top of the paint order.

        Returns:
            The pieces in their new paint order.
        """
        group_ids = self.get_group_piece_ids(piece_id)
        if group_ids:
            rest = [p for p in self._pieces if p.id not in group_ids]
            group = [p for p in self._pieces if p.id in group_ids]
            self._pieces = rest + group
        return self.pieces

    def get_group_piece_ids(self, piece_id: int) -> Set[int]:
        """Ids of every piece in the same group, or an empty set for an unknown id."""
        return {member.id for member in self._group_members(piece_id)}

    def set_moves(self, value: int) -> None:
        """Restore the move counter of a resumed session."""
        if value < 0:
            raise ValueError(f"Move count must not be negative, got {value}")
        self.moves = value

    def mark_as_completed(self) -> None:
        """Put every piece on its correct position and lock the board."""
        for piece in self._pieces:
            piece.current_position = piece.correct_position
            piece.is_locked = True
        self._groups.reset()
        self.is_completed = True

    def reset_pieces(self, area_width: float, area_height: float) -> None:
        """Start over: unlock and ungroup everything, clear progress and reshuffle."""
        for piece in self._pieces:
            piece.is_locked = False
            piece.current_position = piece.correct_position
        self._groups.reset()
        self.moves = 0
        self.is_completed = False
        self.shuffle(area_width, area_height)

    def snapshot(self) -> BoardSnapshot:
        """Immutable copy of the board state for renderers."""
        return BoardSnapshot(
            pieces=self.pieces,
            moves=self.moves,
            is_completed=self.is_completed,
        )

    def _get(self, piece_id: int) -> Optional[Piece]:
        piece = self._by_id.get(piece_id)
        if piece is None:
            logger.debug("Ignoring unknown piece id %s", piece_id)
        return piece

    def _group_members(self, piece_id: int) -> List[Piece]:
        if piece_id not in self._by_id:
            return []
        root = self._groups.find(piece_id)
        return [p for p in self._pieces if self._groups.find(p.id) == root]

    def _move_group_by(self, piece_id: int, dx: float, dy: float) -> bool:
        members = self._group_members(piece_id)
        if any(member.is_locked for member in members):
            return False
        for member in members:
            x, y = member.current_position
            member.current_position = (x + dx, y + dy)
        return True

    def _snap_group_to_matching_neighbors(self, piece_id: int) -> bool:
        snapped_any = False
        snapped_in_pass = True

        while snapped_in_pass:
            snapped_in_pass = False
            members = self._group_members(piece_id)
            if any(member.is_locked for member in members):
                break
            group_ids = {member.id for member in members}

            for member, neighbor in self._adjacent_pairs(members, group_ids):
                target_x = neighbor.current_position[0] - (neighbor.correct_position[0] - member.correct_position[0])
                target_y = neighbor.current_position[1] - (neighbor.correct_position[1] - member.correct_position[1])
                dx = target_x - member.current_position[0]
                dy = target_y - member.current_position[1]

                if math.hypot(dx, dy) <= self.snap_threshold:
                    self._move_group_by(piece_id, dx, dy)
                    self._groups.union(member.id, neighbor.id)
                    logger.debug("Piece %d snapped to neighbour %d", member.id, neighbor.id)
                    snapped_any = True
                    snapped_in_pass = True
                    # Group changed; rescan with the merged membership
                    break

        return snapped_any

    def _adjacent_pairs(self, members: List[Piece], group_ids: Set[int]) -> Iterable[Tuple[Piece, Piece]]:
        for member in members:
            for neighbor in self._pieces:
                if neighbor.id in group_ids:
                    continue
                if abs(member.row - neighbor.row) + abs(member.col - neighbor.col) == 1:
                    yield member, neighbor

    def _snap_group_to_correct_position(self, piece_id: int) -> bool:
        members = self._group_members(piece_id)
        anchor = next((m for m in members if m.is_at_correct_position(self.snap_threshold)), None)
        if anchor is None:
            return False

        self._move_group_by(
            piece_id,
            anchor.correct_position[0] - anchor.current_position[0],
            anchor.correct_position[1] - anchor.current_position[1],
        )
        for member in members:
            member.current_position = member.correct_position
            member.is_locked = True
        logger.debug("Locked group of %d pieces anchored at piece %d", len(members), anchor.id)
        return True


def _view(piece: Piece) -> PieceView:
    return PieceView(
        id=piece.id,
        row=piece.row,
        col=piece.col,
        x=piece.current_position[0],
        y=piece.current_position[1],
        correct_x=piece.correct_position[0],
        correct_y=piece.correct_position[1],
        width=piece.width,
        height=piece.height,
        is_locked=piece.is_locked,
    )
