"""
Image preprocessing functions for the Sudoku scanner.

This module handles the initial image processing steps including:
- Loading an image in grayscale
- Adaptive thresholding to an inverted 0/1 binary matrix
- Finding candidate regions that may hold the grid
"""

import logging
from pathlib import Path
from typing import List, Tuple, Union

import cv2
import numpy as np

logger = logging.getLogger(__name__)

Region = Tuple[int, int, int, int]  # x, y, width, height


def load_grayscale(path: Union[str, Path]) -> np.ndarray:
    """
    Read an image file as a single-channel grayscale matrix.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If OpenCV cannot decode the file
    """
    image_path = Path(path)
    if not image_path.exists():
        raise FileNotFoundError(f"Image file not found: {image_path}")

    gray = cv2.imread(str(image_path), cv2.IMREAD_GRAYSCALE)
    if gray is None:
        raise ValueError(f"Could not decode image: {image_path}")
    return gray


def to_binary_inv(gray: np.ndarray, apply_clahe: bool = False) -> np.ndarray:
    """
    Convert a grayscale image to an inverted binary matrix.

    Process: (optional CLAHE) → adaptive threshold (GAUSSIAN_C, binary inverse)
    so that ink (digits and grid lines) becomes 1 and paper becomes 0.

    The block size is 10% of the longer side (odd, at least 3). The C
    parameter falls as the mean intensity rises, so poorly lit images get a
    larger offset.

    Args:
        gray: Grayscale image (uint8)
        apply_clahe: Whether to apply CLAHE for contrast enhancement before thresholding

    Returns:
        Binary image (uint8, 0/1) with ink as 1
    """
    if gray is None or gray.ndim != 2:
        raise ValueError("Input must be a single-channel grayscale image")

    if apply_clahe:
        clahe = cv2.createCLAHE(clipLimit=2.0, tileGridSize=(8, 8))
        gray = clahe.apply(gray)

    block_size = int(0.1 * max(gray.shape[:2]))
    if block_size % 2 == 0:
        block_size += 1
    block_size = max(block_size, 3)

    c_param = 0.3 * (255 - float(np.mean(gray)))
    logger.debug("Adaptive threshold block size %d, C %.2f", block_size, c_param)

    return cv2.adaptiveThreshold(
        gray, 1, cv2.ADAPTIVE_THRESH_GAUSSIAN_C, cv2.THRESH_BINARY_INV, block_size, c_param
    )


def candidate_regions(binary: np.ndarray, min_area: float) -> List[Region]:
    """
    Bounding boxes of contours large enough to hold a grid, largest first.

    Args:
        binary: Binary image (uint8, 0/1)
        min_area: Minimum contour area in pixels

    Returns:
        List of (x, y, width, height) rectangles
    """
    contours, _ = cv2.findContours(binary.astype(np.uint8), cv2.RETR_TREE, cv2.CHAIN_APPROX_NONE)

    sized = []
    for contour in contours:
        area = cv2.contourArea(contour)
        if area < min_area:
            continue
        sized.append((area, cv2.boundingRect(contour)))

    sized.sort(key=lambda item: item[0], reverse=True)
    logger.debug("%d of %d contours reach area %d", len(sized), len(contours), min_area)
    return [tuple(int(v) for v in rect) for _, rect in sized]
