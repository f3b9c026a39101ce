"""Cut a source image into jigsaw pieces laid out on a board."""

import logging
import random
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional, Tuple

from PIL import Image

from .config import Settings, get_settings
from .edge_map import generate_edge_map
from .geometry import synthesize_outline
from .image_masking import extract_piece
from .models import Piece, PieceEdges

logger = logging.getLogger(__name__)


@dataclass
class BoardLayout:
    """Cell and tab dimensions of a board."""

    rows: int
    cols: int
    board_width: float
    board_height: float
    tab_size_ratio: float

    @property
    def cell_width(self) -> float:
        """Width of each grid cell in board pixels."""
        return self.board_width / self.cols

    @property
    def cell_height(self) -> float:
        """Height of each grid cell in board pixels."""
        return self.board_height / self.rows

    @property
    def tab_size(self) -> float:
        """Tab margin around every piece."""
        return min(self.cell_width, self.cell_height) * self.tab_size_ratio

    def correct_position(self, row: int, col: int) -> Tuple[float, float]:
        """Board coordinate of the piece bounding box when the puzzle is solved."""
        return (col * self.cell_width, row * self.cell_height)


def make_layout(
    rows: int, cols: int, board_width: float, board_height: float, settings: Optional[Settings] = None
) -> BoardLayout:
    """Validate grid and board size and build the layout."""
    settings = settings or get_settings()
    if rows <= 0 or cols <= 0:
        raise ValueError(f"Grid must have at least one row and one column, got {rows}x{cols}")
    if board_width <= 0 or board_height <= 0:
        raise ValueError(f"Board size must be positive, got {board_width}x{board_height}")
    return BoardLayout(
        rows=rows,
        cols=cols,
        board_width=board_width,
        board_height=board_height,
        tab_size_ratio=settings.TAB_SIZE_RATIO,
    )


def _make_piece(layout: BoardLayout, row: int, col: int, image: Optional[Image.Image] = None) -> Piece:
    correct = layout.correct_position(row, col)
    return Piece(
        id=row * layout.cols + col,
        row=row,
        col=col,
        width=layout.cell_width + layout.tab_size * 2,
        height=layout.cell_height + layout.tab_size * 2,
        correct_position=correct,
        current_position=correct,
        image=image,
    )


def generate_headless_pieces(
    rows: int,
    cols: int,
    board_width: float,
    board_height: float,
    settings: Optional[Settings] = None,
) -> List[Piece]:
    """Build pieces without images, for boards that are driven without rendering."""
    layout = make_layout(rows, cols, board_width, board_height, settings)
    return [_make_piece(layout, r, c) for r in range(rows) for c in range(cols)]


class PieceGenerator:
    """Cuts puzzle images into interlocking pieces."""

    def __init__(self, settings: Optional[Settings] = None):
        """Initialize the piece generator.

        Args:
            settings: Generation settings; the cached settings are used if None.
        """
        self.settings = settings or get_settings()

    def generate_pieces(
        self,
        source_image: Optional[Image.Image],
        rows: int,
        cols: int,
        board_width: float,
        board_height: float,
        rng: Optional[random.Random] = None,
        workers: Optional[int] = None,
    ) -> List[Piece]:
        """Cut a source image into a rows x cols puzzle.

        Args:
            source_image: The decoded puzzle image.
            rows: Number of rows in the puzzle grid.
            cols: Number of columns in the puzzle grid.
            board_width: Width of the assembled puzzle in board pixels.
            board_height: Height of the assembled puzzle in board pixels.
            rng: Random source for the connector map.
            workers: Threads used for extraction; defaults to EXTRACTION_WORKERS.

        Returns:
            Pieces ordered by id, each at its correct position.

        Raises:
            ValueError: If there is no source image or the grid is degenerate.
        """
        if source_image is None:
            raise ValueError("A decoded source image is required to generate pieces")

        layout = make_layout(rows, cols, board_width, board_height, self.settings)
        edge_map = generate_edge_map(rows, cols, rng)
        workers = workers or self.settings.EXTRACTION_WORKERS

        if source_image.mode not in ("RGB", "RGBA"):
            source_image = source_image.convert("RGB")
        src_cell = (source_image.width / cols, source_image.height / rows)

        logger.info(
            "Generating %dx%d puzzle: cell %.1fx%.1f, tab %.1f",
            rows,
            cols,
            layout.cell_width,
            layout.cell_height,
            layout.tab_size,
        )

        def cut_one(cell: Tuple[int, int]) -> Piece:
            row, col = cell
            edges: PieceEdges = edge_map[row][col]
            outline = synthesize_outline(layout.cell_width, layout.cell_height, layout.tab_size, edges)
            image = extract_piece(
                source_image,
                outline,
                row,
                col,
                src_cell_size=src_cell,
                dst_cell_size=(layout.cell_width, layout.cell_height),
                tab_size=layout.tab_size,
                settings=self.settings,
            )
            return _make_piece(layout, row, col, image)

        cells = [(r, c) for r in range(rows) for c in range(cols)]

        if workers > 1:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                pieces = list(executor.map(cut_one, cells))
        else:
            pieces = [cut_one(cell) for cell in cells]

        return pieces
