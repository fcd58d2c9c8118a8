"""
Sudoku Scanner - A tool for reading Sudoku puzzles from images.

This package provides functionality for:
- Image binarization and candidate region search
- Grid line detection, orientation clustering and equidistant line selection
- Cell extraction and normalization for digit classification
- A confidence-scored puzzle model and a solver adapter
"""

__version__ = "0.1.0"

from .config import ScannerConfig, DEFAULT_CONFIG, load_config
from .preprocess import load_grayscale, to_binary_inv, candidate_regions
from .lines import DetectedLine, LineFamily, detect_lines, circular_mean, sine_average, assign_families, summarize_families, cluster_lines
from .spacing import select_equidistant
from .grid import GridNotFoundError, CellRectangle, GridDetection, orient_families, resolve_grid, find_grid, create_grid_overlay
from .cells import normalize_cell, extract_cells
from .model import LikelyValue, Puzzle
from .classifier import ResourceLoadingError, DigitClassifier, TemplateClassifier, open_classifier, windowed_count, likely_value_for_max
from .scanner import ScanResult, scan_binary, scan_image, submit_scan
from .solver import backtrack, solve

__all__ = [
    # Configuration
    "ScannerConfig",
    "DEFAULT_CONFIG",
    "load_config",
    # Preprocessing
    "load_grayscale",
    "to_binary_inv",
    "candidate_regions",
    # Grid detection
    "DetectedLine",
    "LineFamily",
    "detect_lines",
    "circular_mean",
    "sine_average",
    "assign_families",
    "summarize_families",
    "cluster_lines",
    "select_equidistant",
    "CellRectangle",
    "GridDetection",
    "orient_families",
    "resolve_grid",
    "find_grid",
    "create_grid_overlay",
    # Cells
    "normalize_cell",
    "extract_cells",
    # Puzzle model and classification
    "LikelyValue",
    "Puzzle",
    "DigitClassifier",
    "TemplateClassifier",
    "open_classifier",
    "windowed_count",
    "likely_value_for_max",
    # Pipeline
    "ScanResult",
    "scan_binary",
    "scan_image",
    "submit_scan",
    "backtrack",
    "solve",
    # Exceptions
    "GridNotFoundError",
    "ResourceLoadingError",
]
