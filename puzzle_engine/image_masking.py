"""Image masking utilities for cutting piece images out of a source image.

A piece image covers the piece bounding box (cell plus tab margin on every
side) in board pixels. The matching region of the source image is found by
scaling the bounding box back to source pixels; whatever part of that region
falls outside the source image is left transparent instead of failing.
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from PIL import Image, ImageChops, ImageDraw

from .config import Settings, get_settings
from .geometry import outline_polygon
from .models import BezierCurve, Point

Size = Tuple[float, float]


@dataclass
class SourceRect:
    """Source-to-destination rectangle mapping for one piece.

    Attributes:
        left, top, right, bottom: The unclamped sampling rectangle in source
            pixels. It may extend past the image for border pieces.
        box: The sampling rectangle clamped to the image, in integer pixels.
        dest_box: Where ``box`` lands inside the piece image.
    """

    left: float
    top: float
    right: float
    bottom: float
    box: Tuple[int, int, int, int]
    dest_box: Tuple[int, int, int, int]

    @property
    def is_empty(self) -> bool:
        """True when no source pixel can be sampled."""
        x0, y0, x1, y1 = self.box
        dx0, dy0, dx1, dy1 = self.dest_box
        return x1 <= x0 or y1 <= y0 or dx1 <= dx0 or dy1 <= dy0


def piece_image_size(dst_cell_size: Size, tab_size: float) -> Tuple[int, int]:
    """Pixel size of a piece image: the cell plus the tab margin on both sides."""
    return (int(dst_cell_size[0] + tab_size * 2), int(dst_cell_size[1] + tab_size * 2))


def map_source_rect(
    row: int,
    col: int,
    src_cell_size: Size,
    dst_cell_size: Size,
    tab_size: float,
    image_size: Tuple[int, int],
) -> SourceRect:
    """Map a piece bounding box back to the source image.

    Args:
        row: Piece row index.
        col: Piece column index.
        src_cell_size: (width, height) of one grid cell in source pixels.
        dst_cell_size: (width, height) of one grid cell in board pixels.
        tab_size: Tab margin in board pixels.
        image_size: (width, height) of the source image.

    Returns:
        The SourceRect for the piece.
    """
    src_w, src_h = src_cell_size
    dst_w, dst_h = dst_cell_size
    scale_x = src_w / dst_w
    scale_y = src_h / dst_h
    out_w, out_h = piece_image_size(dst_cell_size, tab_size)
    image_width, image_height = image_size

    left = col * src_w - tab_size * scale_x
    top = row * src_h - tab_size * scale_y
    right = left + out_w * scale_x
    bottom = top + out_h * scale_y

    x0 = max(0, int(round(left)))
    y0 = max(0, int(round(top)))
    x1 = min(image_width, int(round(right)))
    y1 = min(image_height, int(round(bottom)))

    # Clamped source edges expressed in piece image pixels
    dx0 = min(out_w, max(0, int(round((x0 - left) / scale_x))))
    dy0 = min(out_h, max(0, int(round((y0 - top) / scale_y))))
    dx1 = min(out_w, max(0, int(round((x1 - left) / scale_x))))
    dy1 = min(out_h, max(0, int(round((y1 - top) / scale_y))))

    return SourceRect(
        left=left,
        top=top,
        right=right,
        bottom=bottom,
        box=(x0, y0, x1, y1),
        dest_box=(dx0, dy0, dx1, dy1),
    )


def create_piece_mask(
    polygon: Sequence[Point],
    width: int,
    height: int,
    antialias_scale: int = 4,
) -> Image.Image:
    """Create a mask image for a puzzle piece with anti-aliased edges.

    Uses supersampling for anti-aliasing: renders at higher resolution
    then downsamples.

    Args:
        polygon: List of (x, y) points in piece image coordinates.
        width: Output mask width in pixels.
        height: Output mask height in pixels.
        antialias_scale: Supersampling factor (4 = render at 4x, then downsample).

    Returns:
        Grayscale PIL Image where white=inside, black=outside.
    """
    hi_res_mask = Image.new("L", (width * antialias_scale, height * antialias_scale), 0)
    draw = ImageDraw.Draw(hi_res_mask)

    scaled_polygon = [(x * antialias_scale, y * antialias_scale) for x, y in polygon]
    if len(scaled_polygon) >= 3:
        draw.polygon(scaled_polygon, fill=255)

    return hi_res_mask.resize((width, height), Image.Resampling.LANCZOS)


def draw_outline(image: Image.Image, polygon: Sequence[Point], width: int, alpha: int) -> Image.Image:
    """Composite a thin semi-transparent dark stroke along the piece contour."""
    overlay = Image.new("RGBA", image.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay)
    draw.line(list(polygon), fill=(0, 0, 0, alpha), width=width, joint="curve")
    return Image.alpha_composite(image, overlay)


def extract_piece(
    source_image: Image.Image,
    outline: Sequence[BezierCurve],
    row: int,
    col: int,
    src_cell_size: Size,
    dst_cell_size: Size,
    tab_size: float,
    settings: Optional[Settings] = None,
    stroke: bool = True,
) -> Image.Image:
    """Cut one piece out of the source image.

    Args:
        source_image: The full puzzle image.
        outline: Piece outline in piece image coordinates.
        row: Piece row index.
        col: Piece column index.
        src_cell_size: (width, height) of one grid cell in source pixels.
        dst_cell_size: (width, height) of one grid cell in board pixels.
        tab_size: Tab margin in board pixels.
        settings: Extraction settings; the cached settings are used if None.
        stroke: Draw the contour stroke.

    Returns:
        RGBA image of the piece with transparent background.
    """
    settings = settings or get_settings()
    out_w, out_h = piece_image_size(dst_cell_size, tab_size)
    rect = map_source_rect(row, col, src_cell_size, dst_cell_size, tab_size, source_image.size)

    piece = Image.new("RGBA", (out_w, out_h), (0, 0, 0, 0))
    if not rect.is_empty:
        dx0, dy0, dx1, dy1 = rect.dest_box
        region = source_image.crop(rect.box).convert("RGBA")
        region = region.resize((dx1 - dx0, dy1 - dy0), Image.Resampling.LANCZOS)
        piece.paste(region, (dx0, dy0))

    polygon = outline_polygon(outline, settings.POINTS_PER_CURVE)
    mask = create_piece_mask(polygon, out_w, out_h, antialias_scale=settings.ANTIALIAS_SCALE)
    piece.putalpha(ImageChops.multiply(piece.getchannel("A"), mask))

    if stroke and settings.OUTLINE_STROKE_WIDTH > 0:
        piece = draw_outline(piece, polygon, settings.OUTLINE_STROKE_WIDTH, settings.OUTLINE_ALPHA)

    return piece

