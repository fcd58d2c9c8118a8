"""
Grid line detection and orientation clustering.

This module handles:
- Detecting straight lines in a binary region (Hough transform)
- Grouping lines into orientation families
- Averaging line angles with circular statistics
"""

import logging
import math
from typing import Dict, Iterable, List, NamedTuple, Sequence

import cv2
import numpy as np

logger = logging.getLogger(__name__)


class DetectedLine(NamedTuple):
    """A line in polar form: distance from the origin and angle in radians."""

    distance: float
    angle: float


class LineFamily(NamedTuple):
    """Lines sharing one orientation, with their mean angle."""

    angle: float
    lines: List[DetectedLine]

    def distances(self) -> List[float]:
        """Sorted, de-duplicated line distances."""
        return sorted({line.distance for line in self.lines})

    def angle_by_distance(self) -> Dict[float, float]:
        """Angle of the line at each distance (the last line wins on duplicates)."""
        return {line.distance: line.angle for line in self.lines}


def detect_lines(binary: np.ndarray, vote_ratio: float = 0.6) -> List[DetectedLine]:
    """
    Detect straight lines with the standard Hough transform.

    Args:
        binary: Binary image (uint8, non-zero pixels are foreground)
        vote_ratio: Minimum accumulator votes as a fraction of the image height

    Returns:
        Detected lines (may be empty)
    """
    if binary is None or binary.ndim != 2:
        raise ValueError("Line detection needs a single-channel image")

    threshold = max(1, int(vote_ratio * binary.shape[0]))
    logger.debug("Minimum votes for a grid line: %d", threshold)

    hough = cv2.HoughLines(binary.astype(np.uint8), 1, np.pi / 180, threshold)
    if hough is None:
        return []

    lines = []
    for rho, theta in hough.reshape(-1, 2):
        # (-rho, theta) and (rho, theta - pi) are the same line; keep distances non-negative
        if rho < 0:
            rho, theta = -rho, theta - np.pi
        lines.append(DetectedLine(float(rho), float(theta)))

    logger.debug("Detected %d lines", len(lines))
    return lines


def circular_mean(angles: Sequence[float]) -> float:
    """
    Directional mean of angles in radians, in (-pi, pi].

    Averages unit vectors instead of raw values, so {179°, -179°} gives 180°
    rather than 0°.
    """
    if not angles:
        raise ValueError("Cannot average an empty set of angles")
    return math.atan2(sum(math.sin(a) for a in angles), sum(math.cos(a) for a in angles))


def sine_average(angles: Sequence[float]) -> float:
    """
    Mean angle by averaging sines: asin(mean(sin a)).

    Result lies in [-pi/2, pi/2]. Angles a and pi - a have the same sine, which
    folds Hough angles near pi onto the ones near 0.
    """
    if not angles:
        raise ValueError("Cannot average an empty set of angles")
    mean_sine = sum(math.sin(a) for a in angles) / len(angles)
    # guard against rounding just outside asin's domain
    return math.asin(max(-1.0, min(1.0, mean_sine)))


def _same_orientation(a: float, b: float, tolerance: float) -> bool:
    difference = abs(a - b)
    return difference <= tolerance or abs(math.pi - difference) <= tolerance


def assign_families(lines: Iterable[DetectedLine], tolerance: float = math.radians(10)) -> Dict[float, List[DetectedLine]]:
    """
    Single-pass grouping of lines by orientation.

    Each line joins the first existing group whose key angle is within
    tolerance (a and a + pi count as the same orientation), or starts a new
    group keyed by its own angle. Keys are provisional; see summarize_families.

    Args:
        lines: Detected lines
        tolerance: Maximum angle difference in radians

    Returns:
        Mapping of key angle to the lines assigned to it, in insertion order
    """
    groups: Dict[float, List[DetectedLine]] = {}
    for line in lines:
        key = next((k for k in groups if _same_orientation(k, line.angle, tolerance)), line.angle)
        groups.setdefault(key, []).append(line)
    return groups


def summarize_families(groups: Dict[float, List[DetectedLine]]) -> List[LineFamily]:
    """Replace provisional group keys with the sine-average of member angles."""
    families = []
    for key, members in groups.items():
        mean_angle = sine_average([line.angle for line in members])
        logger.debug("Family key %.4f -> mean angle %.4f (%d lines)", key, mean_angle, len(members))
        families.append(LineFamily(mean_angle, list(members)))
    return families


def cluster_lines(lines: Iterable[DetectedLine], tolerance: float = math.radians(10)) -> List[LineFamily]:
    """Group lines into orientation families with averaged angles."""
    return summarize_families(assign_families(lines, tolerance))
