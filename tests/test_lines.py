"""
Tests for line detection, orientation clustering and angle averaging.

Lines are either built directly as DetectedLine values or drawn on small
synthetic binary images with cv2, so tests don't rely on external files.
"""

import math

import cv2
import numpy as np
import pytest
from pathlib import Path

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from sudoku_scanner.lines import (
    DetectedLine, LineFamily, assign_families, circular_mean, cluster_lines,
    detect_lines, sine_average, summarize_families,
)


def deg(value):
    return math.radians(value)


class TestAngleAveraging:
    """Test circular statistics on line angles."""

    def test_circular_mean_small_angles(self):
        """5 and -5 degrees average to 0."""
        assert circular_mean([deg(5), deg(-5)]) == pytest.approx(0.0, abs=1e-12)

    def test_circular_mean_wraparound(self):
        """179 and -179 degrees average to +-180, not 0."""
        mean = circular_mean([deg(179), deg(-179)])
        assert abs(mean) == pytest.approx(math.pi, abs=1e-9)

    def test_circular_mean_empty(self):
        with pytest.raises(ValueError):
            circular_mean([])

    def test_sine_average_small_angles(self):
        assert sine_average([deg(5), deg(-5)]) == pytest.approx(0.0, abs=1e-12)

    def test_sine_average_folds_near_pi(self):
        """Angles near pi fold onto the ones near 0 (same orientation)."""
        assert sine_average([deg(1), deg(179)]) == pytest.approx(deg(1))

    def test_sine_average_near_vertical(self):
        assert sine_average([deg(88), deg(90), deg(92)]) == pytest.approx(deg(88), abs=deg(0.5))


class TestAssignFamilies:
    """Test the single-pass orientation grouping."""

    def test_two_orientations(self):
        lines = [
            DetectedLine(10, 0.0),
            DetectedLine(50, deg(90)),
            DetectedLine(90, deg(2)),
            DetectedLine(130, deg(89)),
        ]
        groups = assign_families(lines, deg(10))

        assert list(groups) == [0.0, deg(90)]
        assert groups[0.0] == [lines[0], lines[2]]
        assert groups[deg(90)] == [lines[1], lines[3]]

    def test_angles_pi_apart_share_a_family(self):
        lines = [DetectedLine(10, deg(1)), DetectedLine(20, deg(179))]
        groups = assign_families(lines, deg(10))
        assert len(groups) == 1

    def test_every_line_in_exactly_one_family(self):
        lines = [DetectedLine(float(i), deg(i * 7 % 180)) for i in range(40)]
        groups = assign_families(lines, deg(10))
        assigned = [line for members in groups.values() for line in members]
        assert sorted(assigned) == sorted(lines)

    def test_outside_tolerance_starts_new_family(self):
        lines = [DetectedLine(10, 0.0), DetectedLine(10, deg(15))]
        assert len(assign_families(lines, deg(10))) == 2

    def test_summarize_replaces_keys_with_mean(self):
        groups = {0.0: [DetectedLine(10, deg(-2)), DetectedLine(20, deg(2))]}
        families = summarize_families(groups)

        assert len(families) == 1
        assert families[0].angle == pytest.approx(0.0, abs=1e-12)
        assert families[0].lines == groups[0.0]

    def test_family_distances_sorted_and_unique(self):
        family = LineFamily(0.0, [DetectedLine(30, 0.0), DetectedLine(10, 0.0), DetectedLine(30, 0.01)])
        assert family.distances() == [10, 30]
        assert family.angle_by_distance()[30] == 0.01


class TestDetectLines:
    """Test the Hough wrapper on synthetic binary images."""

    def test_blank_image_has_no_lines(self):
        binary = np.zeros((200, 200), dtype=np.uint8)
        assert detect_lines(binary) == []
        assert len(cluster_lines(detect_lines(binary))) <= 1

    def test_scattered_noise_never_gives_two_families(self):
        rng = np.random.default_rng(7)
        binary = (rng.random((200, 200)) < 0.01).astype(np.uint8)
        assert len(cluster_lines(detect_lines(binary))) <= 1

    def test_drawn_cross_gives_two_perpendicular_families(self):
        binary = np.zeros((200, 200), dtype=np.uint8)
        cv2.line(binary, (100, 0), (100, 199), 1, 1)
        cv2.line(binary, (0, 60), (199, 60), 1, 1)

        families = cluster_lines(detect_lines(binary))

        assert len(families) == 2
        angles = sorted(abs(math.sin(f.angle)) for f in families)
        assert angles[0] == pytest.approx(0.0, abs=0.02)
        assert angles[1] == pytest.approx(1.0, abs=0.02)

    def test_distances_are_non_negative(self):
        binary = np.zeros((200, 200), dtype=np.uint8)
        cv2.line(binary, (3, 0), (3, 199), 1, 1)
        for line in detect_lines(binary):
            assert line.distance >= 0

    def test_rejects_color_image(self):
        with pytest.raises(ValueError):
            detect_lines(np.zeros((50, 50, 3), dtype=np.uint8))


if __name__ == "__main__":
    # Run tests if executed directly
    pytest.main([__file__, "-v"])
