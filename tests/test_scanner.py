"""
End-to-end tests for the scanning pipeline on rendered Sudoku images.
"""

from concurrent.futures import ThreadPoolExecutor

import cv2
import numpy as np
import pytest
from pathlib import Path

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from sudoku_scanner.cells import normalize_cell
from sudoku_scanner.classifier import DigitClassifier, TemplateClassifier, render_digit
from sudoku_scanner.grid import GridNotFoundError
from sudoku_scanner.model import Puzzle
from sudoku_scanner.scanner import classify_cells, scan_binary, scan_image, submit_scan

ORIGIN = 20
CELL = 40

PLACEMENTS = {
    (0, 0): 5, (0, 4): 3, (1, 2): 7, (2, 8): 1, (4, 4): 9,
    (5, 1): 2, (6, 6): 4, (7, 3): 6, (8, 8): 8,
}


def create_sudoku_binary(placements, size=400):
    """
    Draw a 9x9 grid with digits in the given cells, binary (0/1), ink as 1.

    Args:
        placements: Dict mapping (row, col) to a digit
        size: Size of the square image

    Returns:
        uint8 binary image
    """
    binary = np.zeros((size, size), dtype=np.uint8)
    end = ORIGIN + 9 * CELL
    for i in range(10):
        p = ORIGIN + i * CELL
        cv2.line(binary, (p, ORIGIN), (p, end), 1, 1)
        cv2.line(binary, (ORIGIN, p), (end, p), 1, 1)

    for (row, col), digit in placements.items():
        top = ORIGIN + row * CELL + 1
        left = ORIGIN + col * CELL + 1
        binary[top:top + CELL - 2, left:left + CELL - 2] = render_digit(digit, size=CELL - 2)
    return binary


@pytest.fixture(scope="module")
def classifier():
    cells = [normalize_cell(render_digit(digit, size=CELL - 2)) for digit in range(1, 10)]
    return TemplateClassifier.from_samples(cells, list(range(1, 10)))


def expected_fixed_values(placements):
    return {9 * row + col: digit for (row, col), digit in placements.items()}


class TestScanBinary:
    """Test scanning a binary image straight into a Puzzle."""

    def test_known_placements(self, classifier):
        result = scan_binary(create_sudoku_binary(PLACEMENTS), classifier)
        puzzle = result.puzzle

        found = {p: puzzle.get_value_at(p) for p in puzzle.fixed_positions()}
        assert found == expected_fixed_values(PLACEMENTS)
        assert len(result.cells) == 81

    def test_empty_grid(self, classifier):
        result = scan_binary(create_sudoku_binary({}), classifier)
        assert result.puzzle.fixed_positions() == []
        assert all(cell.size == 0 for cell in result.cells)

    def test_no_grid(self, classifier):
        with pytest.raises(GridNotFoundError):
            scan_binary(np.zeros((400, 400), dtype=np.uint8), classifier)


class _FixedScores(DigitClassifier):
    def __init__(self, scores):
        self._scores = np.asarray(scores, dtype=np.float64)

    def scores(self, cell):
        return self._scores


class TestClassifyCells:
    """Test storing classifier output in a Puzzle."""

    def test_blank_cells_are_skipped(self):
        digit = np.ones((32, 32), dtype=np.uint8)
        blank = np.zeros((0, 0), dtype=np.uint8)
        cells = [blank] * 81
        cells[10] = digit

        scores = [0.0, 0.0, 0.0, 0.9, 0.0, 0.0, 0.0, 0.0, 0.5]
        puzzle = classify_cells(cells, _FixedScores(scores), Puzzle())

        assert puzzle.fixed_positions() == [10]
        assert puzzle.get_value_at(10) == 4
        assert puzzle.get_low_confidence_value(10).confidence_margin == pytest.approx(0.4)

    def test_unclassifiable_cell_is_skipped(self):
        cells = [np.ones((32, 32), dtype=np.uint8)] * 81
        puzzle = classify_cells(cells, _FixedScores([0.0] * 9), Puzzle())
        assert puzzle.fixed_positions() == []


@pytest.mark.slow
class TestScanImage:
    """Test the full pipeline from an image file."""

    def write_image(self, tmp_path, binary):
        path = tmp_path / "sudoku.png"
        cv2.imwrite(str(path), (255 - 255 * binary).astype(np.uint8))
        return path

    def test_scan_image(self, tmp_path, classifier):
        path = self.write_image(tmp_path, create_sudoku_binary(PLACEMENTS))
        result = scan_image(path, classifier)

        found = {p: result.puzzle.get_value_at(p) for p in result.puzzle.fixed_positions()}
        assert found == expected_fixed_values(PLACEMENTS)
        assert result.puzzle.image_path == path

    def test_submit_scan(self, tmp_path, classifier):
        path = self.write_image(tmp_path, create_sudoku_binary(PLACEMENTS))
        with ThreadPoolExecutor(max_workers=1) as executor:
            future = submit_scan(executor, path, classifier)
            result = future.result(timeout=60)
        assert sorted(result.puzzle.fixed_positions()) == sorted(expected_fixed_values(PLACEMENTS))

    def test_submit_scan_reports_errors(self, tmp_path, classifier):
        with ThreadPoolExecutor(max_workers=1) as executor:
            future = submit_scan(executor, tmp_path / "missing.png", classifier)
            with pytest.raises(FileNotFoundError):
                future.result(timeout=60)


if __name__ == "__main__":
    # Run tests if executed directly
    pytest.main([__file__, "-v"])
