"""
Grid detection from detected lines.

This module handles:
- Checking that two line families form a perpendicular grid
- Choosing which family bounds rows and which bounds columns
- Converting equally spaced polar lines into 81 cell rectangles
- Searching the candidate regions of an image for the first usable grid
"""

import logging
import math
from typing import List, NamedTuple, Optional, Sequence, Tuple

import cv2
import numpy as np

from .config import DEFAULT_CONFIG, ScannerConfig
from .lines import LineFamily, cluster_lines, detect_lines
from .preprocess import Region, candidate_regions
from .spacing import select_equidistant

logger = logging.getLogger(__name__)


class GridNotFoundError(Exception):
    """Raised when a valid Sudoku grid cannot be detected in the image."""
    pass


class CellRectangle(NamedTuple):
    """Pixel bounds of one cell; end bounds are exclusive."""

    row_start: int
    row_end: int
    col_start: int
    col_end: int


class GridDetection(NamedTuple):
    """A grid found in one region of the image."""

    region: Region
    rectangles: List[CellRectangle]


def orient_families(families: Sequence[LineFamily], config: ScannerConfig = DEFAULT_CONFIG) -> Optional[Tuple[LineFamily, LineFamily]]:
    """
    Order two perpendicular families as (column lines, row lines).

    Column lines have a mean angle near 0 (|sin| at or below the configured
    limit); row lines have a mean angle near pi/2.

    Returns:
        (column_family, row_family), or None if there are not exactly two
        families or they are not close to perpendicular
    """
    if len(families) != 2:
        logger.debug("Rejecting region: %d line families instead of 2", len(families))
        return None

    first, second = families
    # perpendicular angles differ by ~90 degrees so the sine is ~1
    if abs(math.sin(second.angle - first.angle)) < config.perpendicular_threshold:
        logger.debug("Rejecting region: families at %.3f and %.3f rad are not perpendicular",
                     first.angle, second.angle)
        return None

    if abs(math.sin(first.angle)) > config.horizontal_sine_limit:
        first, second = second, first
    return first, second


def _axis_bounds(pairs, angles, project) -> List[Tuple[int, int]]:
    bounds = []
    for start, end in pairs:
        factor = project(angles[start])
        # Hough angles are float32, so sin/cos of an axis-aligned line is a hair
        # below 1; round before stepping one pixel inside the grid lines
        bounds.append((int(round(start * factor)) + 1, int(round(end * factor)) - 1))
    return bounds


def resolve_grid(families: Sequence[LineFamily], shape: Tuple[int, int],
                 config: ScannerConfig = DEFAULT_CONFIG) -> Optional[List[CellRectangle]]:
    """
    Compute the cell rectangles of a grid from its two line families.

    Rectangles are produced row by row: the outer loop walks the row lines,
    the inner loop the column lines, so index 9*row + col holds cell (row, col).

    Args:
        families: Line families from cluster_lines
        shape: (height, width) of the image the lines were detected in
        config: Scanner settings

    Returns:
        List of grid_lines**2 CellRectangles, or None if the families do not
        describe a grid that fits inside the image
    """
    oriented = orient_families(families, config)
    if oriented is None:
        return None
    column_family, row_family = oriented

    count = config.grid_lines
    column_pairs = select_equidistant(column_family.distances(), count, config.spacing_tolerance)
    row_pairs = select_equidistant(row_family.distances(), count, config.spacing_tolerance)
    logger.debug("Equidistant pairs: %d column, %d row", len(column_pairs), len(row_pairs))
    if len(column_pairs) != count or len(row_pairs) != count:
        return None

    row_bounds = _axis_bounds(row_pairs, row_family.angle_by_distance(), math.sin)
    col_bounds = _axis_bounds(column_pairs, column_family.angle_by_distance(), math.cos)

    height, width = shape[:2]
    rectangles = []
    for row_start, row_end in row_bounds:
        for col_start, col_end in col_bounds:
            rect = CellRectangle(row_start, min(row_end, height), col_start, min(col_end, width))
            if rect.row_start < 0 or rect.col_start < 0 \
                    or rect.row_end <= rect.row_start or rect.col_end <= rect.col_start:
                logger.debug("Rejecting region: cell %s is outside the %dx%d image", rect, width, height)
                return None
            rectangles.append(rect)

    return rectangles


def detect_grid_in_region(region_image: np.ndarray, config: ScannerConfig = DEFAULT_CONFIG) -> Optional[List[CellRectangle]]:
    """
    Try to find the grid in an image region.

    Returns:
        Cell rectangles relative to the region, or None when the region is
        rejected (too small, wrong line families, uneven spacing, ...)
    """
    height, width = region_image.shape[:2]
    logger.info("Searching %dx%d region for a grid", width, height)
    if height < config.min_image_side or width < config.min_image_side:
        return None

    lines = detect_lines(region_image, config.line_vote_ratio)
    families = cluster_lines(lines, config.angle_tolerance)
    return resolve_grid(families, (height, width), config)


def find_grid(binary: np.ndarray, config: ScannerConfig = DEFAULT_CONFIG) -> GridDetection:
    """
    Search the candidate regions of a binary image for a Sudoku grid.

    Regions are tried largest first; the first one that resolves to a full
    grid wins.

    Args:
        binary: Binary image (uint8, 0/1, ink as 1)
        config: Scanner settings

    Returns:
        GridDetection with the region and its cell rectangles

    Raises:
        GridNotFoundError: If the image is too small or no region holds a grid
    """
    if binary is None or binary.size == 0:
        raise GridNotFoundError("Input image is empty or invalid")
    if binary.ndim != 2:
        raise GridNotFoundError("Input image must be a single-channel binary matrix")

    height, width = binary.shape
    if height < config.min_image_side or width < config.min_image_side:
        raise GridNotFoundError(
            f"Image too small for grid detection, minimum size is "
            f"{config.min_image_side}x{config.min_image_side}, got {width}x{height}"
        )

    for region in candidate_regions(binary, config.min_grid_area):
        x, y, w, h = region
        rectangles = detect_grid_in_region(crop_region(binary, region), config)
        if rectangles is not None:
            logger.info("Grid found in region x=%d y=%d w=%d h=%d", x, y, w, h)
            return GridDetection(region, rectangles)

    raise GridNotFoundError("No region of the image contains a 9x9 grid")


def crop_region(binary: np.ndarray, region: Region) -> np.ndarray:
    x, y, w, h = region
    return binary[y:y + h, x:x + w].copy()


def create_grid_overlay(img_bgr: np.ndarray, detection: GridDetection) -> np.ndarray:
    """
    Create an overlay showing the detected region and every cell rectangle.

    Args:
        img_bgr: Input BGR image
        detection: Result of find_grid on the same image

    Returns:
        BGR image with the region in red and the cells in green
    """
    overlay = img_bgr.copy()
    x, y, w, h = detection.region
    cv2.rectangle(overlay, (x, y), (x + w - 1, y + h - 1), (0, 0, 255), 2)

    for rect in detection.rectangles:
        top_left = (x + rect.col_start, y + rect.row_start)
        bottom_right = (x + rect.col_end - 1, y + rect.row_end - 1)
        cv2.rectangle(overlay, top_left, bottom_right, (0, 255, 0), 1)

    return overlay
