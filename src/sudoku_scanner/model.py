"""
Puzzle model with per-cell classification confidence.

A Puzzle holds two maps keyed by the flattened position 9*row + col:
- fixed values read from the image (LikelyValue, never overwritten)
- values filled in later by the solver or by hand (plain ints)
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from .config import DEFAULT_CONFIG, ScannerConfig

NO_VALUE = -1


@dataclass(frozen=True)
class LikelyValue:
    """
    Classifier output for one cell.

    Attributes:
        value: Digit 1-9, or -1 when the cell could not be classified
        confidence: Score of the chosen digit (0.0 to 1.0)
        confidence_margin: Gap between the chosen digit's score and the next best
    """

    value: int
    confidence: float = 1.0
    confidence_margin: float = 1.0

    def __post_init__(self):
        if self.value != NO_VALUE and not 1 <= self.value <= 9:
            raise ValueError(f"Digit must be 1-9 or {NO_VALUE}, got {self.value}")
        for name in ('confidence', 'confidence_margin'):
            score = getattr(self, name)
            if not 0.0 <= score <= 1.0:
                raise ValueError(f"{name} must be within [0, 1], got {score}")


class Puzzle:
    """9x9 Sudoku grid read from an image."""

    SIZE = 9
    CELLS = SIZE * SIZE

    def __init__(self, image_path: Optional[Path] = None, config: ScannerConfig = DEFAULT_CONFIG):
        self.image_path = image_path
        self._config = config
        self._fixed: Dict[int, LikelyValue] = {}
        self._values: Dict[int, int] = {}

    def _check_position(self, position: int) -> None:
        if not 0 <= position < self.CELLS:
            raise IndexError(f"Position must be within 0-{self.CELLS - 1}, got {position}")

    def set_fixed_value_at(self, position: int, likely_value: LikelyValue) -> None:
        """Record a value read from the image. Only used while scanning."""
        self._check_position(position)
        self._fixed[position] = likely_value

    def set_value_at(self, position: int, value: int) -> None:
        """Set a solver/user value. Does nothing where a fixed value exists."""
        self._check_position(position)
        if position not in self._fixed:
            self._values[position] = value

    def get_value_at(self, position: int) -> int:
        """Fixed value if present, else the filled value, else -1."""
        self._check_position(position)
        if position in self._fixed:
            return self._fixed[position].value
        return self._values.get(position, NO_VALUE)

    def has_fixed_value_at(self, position: int) -> bool:
        self._check_position(position)
        return position in self._fixed

    def clear(self) -> None:
        """Drop every solver/user value; fixed values stay."""
        self._values.clear()

    def get_low_confidence_value(self, position: int) -> Optional[LikelyValue]:
        """
        Return the fixed value at position if the classifier was unsure of it.

        A value is low confidence when its confidence is below the configured
        cutoff or its confidence margin is below the margin cutoff.

        Returns:
            The LikelyValue, or None for empty positions and confident values
        """
        self._check_position(position)
        likely_value = self._fixed.get(position)
        if likely_value is None:
            return None
        if (likely_value.confidence < self._config.low_confidence_cutoff
                or likely_value.confidence_margin < self._config.low_margin_cutoff):
            return likely_value
        return None

    def is_low_confidence_position(self, position: int) -> bool:
        return self.get_low_confidence_value(position) is not None

    def fixed_positions(self) -> List[int]:
        return sorted(self._fixed)

    def to_grid(self) -> List[List[int]]:
        """9x9 list of lists of get_value_at values, row-major."""
        return [
            [self.get_value_at(row * self.SIZE + col) for col in range(self.SIZE)]
            for row in range(self.SIZE)
        ]

    def __repr__(self) -> str:
        return f"Puzzle(fixed={len(self._fixed)}, filled={len(self._values)})"
