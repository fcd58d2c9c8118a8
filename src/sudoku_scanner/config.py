"""
Tunable constants for the Sudoku scanner.

All thresholds used by grid detection, cell normalization and the puzzle
model live on ScannerConfig so callers can override them without touching
the algorithms. Overrides can also be read from a JSON file.
"""

import json
import logging
import math
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScannerConfig:
    """Immutable bag of scanner settings."""

    # images (and candidate regions) smaller than this on either side are refused
    min_image_side: int = 80
    # minimum contour area for a region to be searched for a grid
    min_grid_area: int = 80 * 80
    # side of the normalized square cell handed to the classifier
    cell_size: int = 32
    # bounding box area of non-zero pixels below which a cell is blank
    min_digit_area: int = 16
    # fraction of the cell side zeroed on every edge
    border_ratio: float = 0.1
    # lines within this angle (radians) are parallel
    angle_tolerance: float = math.radians(10)
    # relative tolerance between consecutive line spacings
    spacing_tolerance: float = 0.2
    # |sin| of the angle between the two families must reach this
    perpendicular_threshold: float = 0.98
    # a family whose mean angle has |sin| at or below this bounds columns
    horizontal_sine_limit: float = 0.7
    # Hough accumulator threshold as a fraction of the region height
    line_vote_ratio: float = 0.6
    # cells per side of the grid
    grid_lines: int = 9
    low_confidence_cutoff: float = 0.8
    low_margin_cutoff: float = 0.7

    @property
    def cell_count(self) -> int:
        return self.grid_lines * self.grid_lines


DEFAULT_CONFIG = ScannerConfig()


def config_from_dict(overrides: Dict[str, Any], base: Optional[ScannerConfig] = None) -> ScannerConfig:
    """
    Build a config from a dict of field overrides.

    Args:
        overrides: Mapping of ScannerConfig field names to values
        base: Config to start from (default: DEFAULT_CONFIG)

    Returns:
        New ScannerConfig with the overrides applied

    Raises:
        ValueError: If a key is not a ScannerConfig field
    """
    base = base or DEFAULT_CONFIG
    known = {f.name: f.type for f in fields(ScannerConfig)}
    unknown = sorted(set(overrides) - set(known))
    if unknown:
        raise ValueError(f"Unknown config keys: {', '.join(unknown)}")

    coerced = {}
    for key, value in overrides.items():
        current = getattr(base, key)
        try:
            coerced[key] = type(current)(value)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid value for {key}: {value!r}") from e

    return replace(base, **coerced)


def load_config(path: Optional[Union[str, Path]] = None) -> ScannerConfig:
    """
    Load scanner settings from a JSON file.

    A missing path or file gives the defaults. The file must hold a single
    JSON object whose keys are ScannerConfig field names.

    Raises:
        ValueError: If the file is not a JSON object or has unknown keys
    """
    if path is None:
        return DEFAULT_CONFIG

    config_path = Path(path)
    if not config_path.exists():
        logger.debug("Config file %s not found, using defaults", config_path)
        return DEFAULT_CONFIG

    with open(config_path, 'r', encoding='utf-8') as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Config file {config_path} is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Config file {config_path} must contain a JSON object")

    config = config_from_dict(data)
    logger.debug("Config loaded from %s: %s", config_path, config)
    return config
