"""
End-to-end scanning: binary image → grid → cells → classified Puzzle.

The pipeline runs synchronously on the calling thread. submit_scan() hands
it to an executor for callers that must not block (e.g. a UI thread).
"""

import logging
from concurrent.futures import Executor, Future
from pathlib import Path
from typing import List, NamedTuple, Union

import numpy as np

from .cells import extract_cells
from .classifier import DigitClassifier
from .config import DEFAULT_CONFIG, ScannerConfig
from .grid import GridDetection, crop_region, find_grid
from .model import Puzzle
from .preprocess import load_grayscale, to_binary_inv

logger = logging.getLogger(__name__)


class ScanResult(NamedTuple):
    """Puzzle plus the intermediate artifacts that produced it."""

    puzzle: Puzzle
    binary: np.ndarray
    detection: GridDetection
    cells: List[np.ndarray]


def classify_cells(cells: List[np.ndarray], classifier: DigitClassifier,
                   puzzle: Puzzle) -> Puzzle:
    """Store every classified digit as a fixed value; blanks and -1 are skipped."""
    for position, cell in enumerate(cells):
        likely = classifier.likely_value(cell)
        logger.debug("Grid position %d: %s", position, likely)
        if likely.value > 0:
            puzzle.set_fixed_value_at(position, likely)
    return puzzle


def scan_binary(binary: np.ndarray, classifier: DigitClassifier,
                config: ScannerConfig = DEFAULT_CONFIG, image_path: Union[str, Path, None] = None) -> ScanResult:
    """
    Scan a binary (0/1, ink as 1) image into a Puzzle.

    Raises:
        GridNotFoundError: If no grid is found
    """
    detection = find_grid(binary, config)
    region_image = crop_region(binary, detection.region)
    cells = extract_cells(region_image, detection.rectangles, config)

    puzzle = Puzzle(Path(image_path) if image_path is not None else None, config)
    classify_cells(cells, classifier, puzzle)
    logger.info("Recognized %d fixed values", len(puzzle.fixed_positions()))
    return ScanResult(puzzle, binary, detection, cells)


def scan_image(path: Union[str, Path], classifier: DigitClassifier,
               config: ScannerConfig = DEFAULT_CONFIG, apply_clahe: bool = False) -> ScanResult:
    """
    Load an image file and scan it into a Puzzle.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file cannot be decoded
        GridNotFoundError: If no grid is found
    """
    logger.info("Loading sudoku from image file: %s", path)
    gray = load_grayscale(path)
    binary = to_binary_inv(gray, apply_clahe=apply_clahe)
    return scan_binary(binary, classifier, config, image_path=path)


def submit_scan(executor: Executor, path: Union[str, Path], classifier: DigitClassifier,
                config: ScannerConfig = DEFAULT_CONFIG) -> 'Future[ScanResult]':
    """Run scan_image on an executor; the returned Future carries the result or the error."""
    return executor.submit(scan_image, path, classifier, config)
