"""
Tests for equidistant line selection.
"""

import pytest
from pathlib import Path

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from sudoku_scanner.spacing import select_equidistant


def evenly_spaced(start=20.0, step=40.0, count=10):
    return [start + i * step for i in range(count)]


class TestSelectEquidistant:
    """Test the greedy first-match spacing search."""

    def test_ten_even_lines_give_nine_pairs(self):
        distances = evenly_spaced()
        pairs = select_equidistant(distances)

        assert len(pairs) == 9
        assert pairs[0] == (20.0, 60.0)
        assert pairs[-1] == (340.0, 380.0)
        # consecutive pairs chain together
        for (_, end), (start, _) in zip(pairs, pairs[1:]):
            assert end == start

    def test_leading_outlier_is_skipped(self):
        """A stray line before the grid moves the run to the next reference."""
        distances = [3.0] + evenly_spaced()
        pairs = select_equidistant(distances)

        assert len(pairs) == 9
        assert pairs[0] == (20.0, 60.0)

    def test_slightly_uneven_spacing_within_tolerance(self):
        distances = [20, 61, 99, 141, 180, 222, 259, 300, 341, 380]
        assert len(select_equidistant(distances)) == 9

    def test_near_duplicate_lines_are_ignored(self):
        """Thick lines detected twice one pixel apart still give nine pairs."""
        distances = sorted(evenly_spaced() + [d + 1 for d in evenly_spaced()])
        pairs = select_equidistant(distances)

        assert len(pairs) == 9
        assert pairs[0] == (21.0, 60.0)
        assert pairs[-1] == (341.0, 380.0)

    def test_too_few_lines(self):
        assert select_equidistant(evenly_spaced(count=9)) == []
        assert select_equidistant([]) == []

    def test_eleven_even_lines_give_too_many_pairs(self):
        """Runs longer than the required count are rejected, not truncated."""
        assert select_equidistant(evenly_spaced(count=11)) == []

    def test_gap_in_the_middle_discards_the_run(self):
        distances = evenly_spaced()
        distances.insert(5, distances[4] + 20)
        assert select_equidistant(distances) == []

    def test_custom_count(self):
        pairs = select_equidistant(evenly_spaced(count=5), count=4)
        assert len(pairs) == 4

    def test_tolerance_parameter(self):
        distances = [0, 10, 22, 30, 40]
        assert select_equidistant(distances, count=4, tolerance=0.1) == []
        assert len(select_equidistant(distances, count=4, tolerance=0.25)) == 4


if __name__ == "__main__":
    # Run tests if executed directly
    pytest.main([__file__, "-v"])
