"""
Digit classification for normalized Sudoku cells.

This module provides the classifier interface the scanner talks to, the
windowed pixel-count features, and a nearest-template classifier that can be
saved to and loaded from an .npz model file. Classifiers are opened with
open_classifier() and released when the with-block ends.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Sequence, Union

import cv2
import numpy as np

from .cells import normalize_cell
from .config import DEFAULT_CONFIG, ScannerConfig
from .model import NO_VALUE, LikelyValue

logger = logging.getLogger(__name__)

DIGITS = tuple(range(1, 10))


class ResourceLoadingError(Exception):
    """Raised when a model or other runtime resource cannot be loaded."""
    pass


def windowed_count(cell: np.ndarray, window: int = 2) -> np.ndarray:
    """
    Fraction of foreground pixels in each non-overlapping window.

    Args:
        cell: Binary cell image (non-zero is foreground)
        window: Side of the square window in pixels

    Returns:
        1-D float array of (h // window) * (w // window) values in [0, 1],
        row-major
    """
    if window < 1:
        raise ValueError(f"Window size must be at least 1, got {window}")

    rows, cols = cell.shape[0] // window, cell.shape[1] // window
    trimmed = (cell[:rows * window, :cols * window] > 0).astype(np.float64)
    counts = trimmed.reshape(rows, window, cols, window).sum(axis=(1, 3))
    return (counts / (window * window)).ravel()


def likely_value_for_max(scores: Sequence[float]) -> LikelyValue:
    """
    Turn per-digit scores into a LikelyValue.

    scores[0] belongs to digit 1, scores[8] to digit 9. The confidence is the
    best score, the margin its lead over the next best. All-zero scores give
    an unclassifiable value.
    """
    values = np.clip(np.asarray(scores, dtype=np.float64), 0.0, 1.0)
    if values.size == 0 or values.max() <= 0.0:
        return LikelyValue(NO_VALUE, 0.0, 0.0)

    best = int(np.argmax(values))
    runner_up = np.max(np.delete(values, best)) if values.size > 1 else 0.0
    likely = LikelyValue(best + 1, float(values[best]), float(values[best] - runner_up))
    logger.debug("Digit: %d Confidence: %.3f Margin: %.3f",
                 likely.value, likely.confidence, likely.confidence_margin)
    return likely


class DigitClassifier(ABC):
    """Maps a normalized cell to a LikelyValue."""

    @abstractmethod
    def scores(self, cell: np.ndarray) -> np.ndarray:
        """Return one score in [0, 1] per digit 1-9."""

    def likely_value(self, cell: np.ndarray) -> LikelyValue:
        if cell is None or cell.size == 0:
            return LikelyValue(NO_VALUE)
        return likely_value_for_max(self.scores(cell))

    def close(self) -> None:
        """Release whatever the classifier holds. Default: nothing."""


class TemplateClassifier(DigitClassifier):
    """
    Nearest-template digit classifier.

    Each digit has one template feature vector (windowed pixel counts). A
    cell's score for a digit is the cosine similarity of its features to
    that digit's template.
    """

    def __init__(self, templates: np.ndarray, window: int = 2):
        templates = np.asarray(templates, dtype=np.float64)
        if templates.ndim != 2 or templates.shape[0] != len(DIGITS):
            raise ValueError(f"Expected {len(DIGITS)} templates, got array of shape {templates.shape}")
        self.window = window
        self._templates = templates

    @classmethod
    def from_samples(cls, cells: Sequence[np.ndarray], labels: Sequence[int], window: int = 2) -> 'TemplateClassifier':
        """
        Build templates by averaging the features of labelled cells.

        Raises:
            ValueError: If a label is not a digit 1-9 or a digit has no sample
        """
        if len(cells) != len(labels):
            raise ValueError(f"Got {len(cells)} cells but {len(labels)} labels")

        features = {digit: [] for digit in DIGITS}
        for cell, label in zip(cells, labels):
            if label not in features:
                raise ValueError(f"Label must be a digit 1-9, got {label!r}")
            if cell.size == 0:
                continue
            features[label].append(windowed_count(cell, window))

        missing = [digit for digit, samples in features.items() if not samples]
        if missing:
            raise ValueError(f"No samples for digits: {missing}")

        templates = np.stack([np.mean(features[digit], axis=0) for digit in DIGITS])
        return cls(templates, window)

    @classmethod
    def from_rendered_digits(cls, config: ScannerConfig = DEFAULT_CONFIG, window: int = 2) -> 'TemplateClassifier':
        """Bootstrap templates from digits rendered with OpenCV's Hershey font."""
        cells = [normalize_cell(render_digit(digit), config) for digit in DIGITS]
        return cls.from_samples(cells, list(DIGITS), window)

    @classmethod
    def load(cls, path: Union[str, Path]) -> 'TemplateClassifier':
        """
        Load templates saved with save().

        Raises:
            ResourceLoadingError: If the file is missing or not a template model
        """
        model_path = Path(path)
        logger.info("Loading digit model: %s", model_path)
        if not model_path.exists():
            raise ResourceLoadingError(f"Error loading digit model file: {model_path.resolve()}")

        try:
            with np.load(model_path, allow_pickle=False) as data:
                templates = data['templates']
                window = int(data['window'])
            return cls(templates, window)
        except (OSError, KeyError, ValueError) as e:
            raise ResourceLoadingError(f"Invalid digit model file {model_path.resolve()}: {e}") from e

    def save(self, path: Union[str, Path]) -> None:
        model_path = Path(path)
        model_path.parent.mkdir(parents=True, exist_ok=True)
        with open(model_path, 'wb') as f:
            np.savez(f, templates=self._templates, window=np.int64(self.window))

    def scores(self, cell: np.ndarray) -> np.ndarray:
        if self._templates is None:
            raise RuntimeError("Classifier has been closed")

        features = windowed_count(cell, self.window)
        if features.shape[0] != self._templates.shape[1]:
            raise ValueError(
                f"Cell gives {features.shape[0]} features, templates expect {self._templates.shape[1]}"
            )

        norms = np.linalg.norm(self._templates, axis=1) * np.linalg.norm(features)
        with np.errstate(divide='ignore', invalid='ignore'):
            similarity = np.where(norms > 0, self._templates @ features / norms, 0.0)
        return np.clip(similarity, 0.0, 1.0)

    def close(self) -> None:
        self._templates = None


def render_digit(digit: int, size: int = 48, thickness: int = 2) -> np.ndarray:
    """Render a digit as a binary (0/1) square image, ink as 1."""
    canvas = np.zeros((size, size), dtype=np.uint8)
    font = cv2.FONT_HERSHEY_SIMPLEX
    scale = size / 40.0
    (text_w, text_h), _ = cv2.getTextSize(str(digit), font, scale, thickness)
    origin = ((size - text_w) // 2, (size + text_h) // 2)
    cv2.putText(canvas, str(digit), origin, font, scale, 1, thickness)
    return canvas


@contextmanager
def open_classifier(path: Optional[Union[str, Path]] = None,
                    config: ScannerConfig = DEFAULT_CONFIG) -> Iterator[DigitClassifier]:
    """
    Open a digit classifier for the duration of a with-block.

    Args:
        path: Template model file; None builds templates from rendered digits
        config: Scanner settings (used for rendered templates)

    Yields:
        Loaded classifier, closed again when the block exits

    Raises:
        ResourceLoadingError: If the model file cannot be loaded
    """
    if path is None:
        classifier = TemplateClassifier.from_rendered_digits(config)
    else:
        classifier = TemplateClassifier.load(path)

    try:
        yield classifier
    finally:
        classifier.close()
