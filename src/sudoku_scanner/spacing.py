"""
Selection of equally spaced grid lines.

Given the sorted distances of one family of parallel lines, find the
consecutive pairs whose spacing agrees with a reference spacing. A Sudoku
axis has ten boundary lines and therefore nine such pairs.
"""

import logging
from typing import Dict, List, Sequence, Tuple

logger = logging.getLogger(__name__)

LinePair = Tuple[float, float]


def select_equidistant(distances: Sequence[float], count: int = 9, tolerance: float = 0.2) -> List[LinePair]:
    """
    Find `count` consecutive line pairs with approximately equal spacing.

    Each start index i sets the reference spacing from the pair (i, i + 1).
    The whole list is then swept pair by pair:
    - spacing within tolerance * reference of the reference: pair recorded
    - spacing larger than tolerance * reference otherwise: recorded pairs dropped
    - smaller spacing (a near-duplicate line): ignored
    The sweep stops early once the remaining pairs cannot reach `count`.
    The first reference ending with exactly `count` pairs wins; there is no
    search for a better run after that.

    Args:
        distances: Line distances sorted in ascending order
        count: Number of pairs required (default: 9)
        tolerance: Relative spacing tolerance (default: 0.2)

    Returns:
        List of (from, to) distance pairs ordered by `from`, or an empty list
    """
    n = len(distances)
    logger.debug("Distances: %s", list(distances))

    pairs: Dict[float, float] = {}
    for i in range(n - count):
        reference = abs(distances[i + 1] - distances[i])
        allowed = tolerance * reference

        for j in range(1, n):
            spacing = abs(distances[j] - distances[j - 1])
            if abs(reference - spacing) <= allowed:
                pairs[distances[j - 1]] = distances[j]
            elif spacing > allowed:
                pairs.clear()

            if n - j + len(pairs) < count:
                break

        if len(pairs) == count:
            logger.debug("Reference spacing %.2f gave %d equidistant pairs", reference, count)
            return sorted(pairs.items())
        pairs.clear()

    return []
