"""Thumbnail sizing and rendering for card grid display."""

from __future__ import annotations

import io

from PIL import Image, UnidentifiedImageError

from utils.constants import CARD_HEIGHT_TO_WIDTH, THUMBNAIL_COLUMNS


def thumbnail_size(display_width: float, columns: int = THUMBNAIL_COLUMNS) -> tuple[int, int]:
    """
    Compute the thumbnail size for a grid of card images.

    Args:
        display_width: Width available to the grid, supplied by the presentation layer
        columns: Number of grid columns the width is divided into

    Returns:
        (width, height) in whole pixels, never smaller than 1x1
    """
    if display_width <= 0:
        raise ValueError(f"display_width must be positive, got {display_width}")
    if columns <= 0:
        raise ValueError(f"columns must be positive, got {columns}")

    width = display_width / columns
    height = width * CARD_HEIGHT_TO_WIDTH
    return max(1, round(width)), max(1, round(height))


def render_thumbnail(data: bytes, size: tuple[int, int]) -> Image.Image:
    """
    Decode image bytes and stretch them to ``size``.

    Raises:
        ValueError: If the payload is not a decodable image or exceeds Pillow's pixel limit
    """
    try:
        with Image.open(io.BytesIO(data)) as source:
            source.load()
            return source.resize(size, Image.Resampling.LANCZOS)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as exc:
        raise ValueError(f"Undecodable image payload: {exc}") from exc


__all__ = ["render_thumbnail", "thumbnail_size"]
