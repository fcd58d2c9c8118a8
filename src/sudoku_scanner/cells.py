"""
Cell extraction functions for splitting the grid into individual cells.

This module handles:
- Cropping the 81 cell rectangles out of the grid region
- Removing grid-line remnants along the cell borders
- Zooming each cell to the bounding box of its digit
"""

import logging
from typing import List, Sequence

import cv2
import numpy as np

from .config import DEFAULT_CONFIG, ScannerConfig
from .grid import CellRectangle

logger = logging.getLogger(__name__)


def reset_borders(cell: np.ndarray, border_ratio: float) -> np.ndarray:
    """
    Zero a band of pixels along all four edges of a cell.

    Args:
        cell: Single-channel cell image
        border_ratio: Band width as a fraction of the cell height (top/bottom)
            and width (left/right)

    Returns:
        Copy of the cell with its borders set to 0
    """
    cleaned = cell.copy()
    h, w = cleaned.shape[:2]

    band = int(border_ratio * h)
    if band > 0:
        cleaned[:band, :] = 0
        cleaned[h - band:, :] = 0

    band = int(border_ratio * w)
    if band > 0:
        cleaned[:, :band] = 0
        cleaned[:, w - band:] = 0

    return cleaned


def filter_noise_and_repair(cell: np.ndarray, border_ratio: float = 0.1) -> np.ndarray:
    """
    Remove grid-line remnants from the cell borders, then repair the digit.

    Noise mostly sits along the edges where neighbouring grid lines were
    cropped. After zeroing the border band a small dilation fills pixels
    the binarization eroded from the strokes.
    """
    cleaned = reset_borders(cell, border_ratio)
    kernel = np.ones((2, 2), np.uint8)
    return cv2.dilate(cleaned, kernel, iterations=1)


def zoom_in(cell: np.ndarray, min_area: int) -> np.ndarray:
    """
    Zoom to the bounding box of non-zero pixels, keeping the cell size.

    Args:
        cell: Single-channel cell image
        min_area: Minimum bounding box area to count as a digit

    Returns:
        Zoomed cell with the same shape as the input, or an empty (0x0)
        matrix if the bounding box is smaller than min_area
    """
    points = cv2.findNonZero(cell)
    if points is None:
        logger.debug("Cell has no foreground pixels")
        return np.zeros((0, 0), dtype=cell.dtype)

    x, y, w, h = cv2.boundingRect(points)
    logger.debug("Digit bounding box area: %d", w * h)
    if w * h < min_area:
        return np.zeros((0, 0), dtype=cell.dtype)

    digit = cell[y:y + h, x:x + w]
    return cv2.resize(digit, (cell.shape[1], cell.shape[0]), interpolation=cv2.INTER_NEAREST)


def normalize_cell(crop: np.ndarray, config: ScannerConfig = DEFAULT_CONFIG) -> np.ndarray:
    """
    Prepare one cropped cell for digit classification.

    Process: resize to cell_size x cell_size → zero the border band →
    dilate → zoom to the digit's bounding box.

    Args:
        crop: Binary cell crop (uint8, 0/1)
        config: Scanner settings

    Returns:
        Binary cell_size x cell_size matrix, or an empty (0x0) matrix for a
        blank cell
    """
    if crop is None or crop.size == 0:
        raise ValueError("Input cell image is empty or invalid")
    if crop.ndim != 2:
        raise ValueError("Input cell image must be single-channel")

    size = config.cell_size
    resized = cv2.resize(crop.astype(np.uint8), (size, size), interpolation=cv2.INTER_LINEAR)
    repaired = filter_noise_and_repair(resized, config.border_ratio)
    return zoom_in(repaired, config.min_digit_area)


def crop_cell(image: np.ndarray, rect: CellRectangle) -> np.ndarray:
    return image[rect.row_start:rect.row_end, rect.col_start:rect.col_end].copy()


def extract_cells(region_image: np.ndarray, rectangles: Sequence[CellRectangle],
                  config: ScannerConfig = DEFAULT_CONFIG) -> List[np.ndarray]:
    """
    Crop and normalize every cell of a detected grid.

    Args:
        region_image: Binary image of the region the rectangles refer to
        rectangles: Cell rectangles in row-major order
        config: Scanner settings

    Returns:
        List of normalized cells; index 9*row + col holds cell (row, col)

    Raises:
        ValueError: If the number of rectangles does not match the grid size
    """
    if len(rectangles) != config.cell_count:
        raise ValueError(f"Expected {config.cell_count} cell rectangles, got {len(rectangles)}")

    cells = []
    for position, rect in enumerate(rectangles):
        cell = normalize_cell(crop_cell(region_image, rect), config)
        logger.debug("Cell %d (r%d c%d): %s", position, position // config.grid_lines,
                     position % config.grid_lines, "blank" if cell.size == 0 else "digit")
        cells.append(cell)

    return cells
