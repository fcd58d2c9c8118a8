"""
Command-line interface for the Sudoku scanner.

This module provides the main entry point for processing Sudoku images
through the complete pipeline: binarization -> grid detection -> cell
extraction -> digit classification -> (optional) solving.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

import cv2

from .classifier import ResourceLoadingError, open_classifier
from .config import load_config
from .grid import GridNotFoundError, create_grid_overlay
from .scanner import scan_image
from .solver import solve


def print_grid(grid, puzzle=None) -> None:
    """
    Pretty-print a Sudoku grid to stdout.

    Values below 1 print as blanks. With a puzzle, low-confidence fixed
    values are marked with '?'.

    Args:
        grid: 9x9 grid as list of lists
        puzzle: Puzzle the grid came from (optional)
    """
    print("+-------+-------+-------+")

    for i, row in enumerate(grid):
        line = "|"
        for j, cell in enumerate(row):
            if cell < 1:
                line += "  "
            elif puzzle is not None and puzzle.is_low_confidence_position(9 * i + j):
                line += f"{cell}?"
            else:
                line += f" {cell}"

            if j in [2, 5]:  # Add vertical separators
                line += " |"

        line += " |"
        print(line)

        if i in [2, 5]:  # Add horizontal separators
            print("+-------+-------+-------+")

    print("+-------+-------+-------+")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Extract a Sudoku puzzle from an image",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m sudoku_scanner.cli --image data/raw/example.jpg --out out --save-cells
  python -m sudoku_scanner.cli --image data/raw/example.jpg --model models/digits.npz --solve
  python -m sudoku_scanner.cli --image data/raw/example.jpg --config scanner.json --debug
        """
    )

    parser.add_argument(
        "--image",
        required=True,
        help="Path to input Sudoku image"
    )

    parser.add_argument(
        "--out",
        default="out",
        help="Output directory for processed images (default: out)"
    )

    parser.add_argument(
        "--model",
        default=None,
        help="Digit template model (.npz); rendered templates are used when omitted"
    )

    parser.add_argument(
        "--config",
        default=None,
        help="JSON file with scanner setting overrides"
    )

    parser.add_argument(
        "--save-cells",
        action="store_true",
        help="Save all 81 normalized cells to <out>/cells/"
    )

    parser.add_argument(
        "--apply-clahe",
        action="store_true",
        help="Apply CLAHE contrast enhancement before thresholding"
    )

    parser.add_argument(
        "--solve",
        action="store_true",
        help="Solve the recognized puzzle"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Save the binary image and the grid overlay"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Log pipeline details (-v info, -vv debug)"
    )

    return parser


def main(argv=None):
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    # Validate input file
    input_path = Path(args.image)
    if not input_path.exists():
        print(f"Error: Input file '{input_path}' not found", file=sys.stderr)
        sys.exit(1)

    input_filename = input_path.stem

    try:
        config = load_config(args.config)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    output_dir = Path(args.out)
    output_dir.mkdir(parents=True, exist_ok=True)

    try:
        print(f"Loading image: {input_path}")
        with open_classifier(args.model, config) as classifier:
            print("[OK] Digit classifier loaded")
            print("Scanning grid and recognizing digits...")
            result = scan_image(input_path, classifier, config, apply_clahe=args.apply_clahe)
    except ResourceLoadingError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(3)
    except GridNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        print("Please ensure the image contains a clear, axis-aligned Sudoku grid", file=sys.stderr)
        sys.exit(2)
    except (OSError, ValueError) as e:
        print(f"Error during processing: {e}", file=sys.stderr)
        sys.exit(1)

    puzzle = result.puzzle
    print(f"[OK] Grid detected, {len(puzzle.fixed_positions())} digits recognized")

    low_confidence = [p for p in puzzle.fixed_positions() if puzzle.is_low_confidence_position(p)]
    if low_confidence:
        cells = ", ".join(f"r{p // 9}c{p % 9}" for p in low_confidence)
        print(f"Warning: please verify low-confidence cells: {cells}")

    print("\nRecognized Sudoku Grid:")
    print_grid(puzzle.to_grid(), puzzle)

    if args.save_cells:
        cells_dir = output_dir / "cells"
        cells_dir.mkdir(parents=True, exist_ok=True)
        for i, cell in enumerate(result.cells):
            if cell.size == 0:
                continue
            cv2.imwrite(str(cells_dir / f"{input_filename}_r{i // 9}_c{i % 9}.png"), cell * 255)
        print(f"  Saved non-blank cells to: {cells_dir}")

    if args.debug:
        cv2.imwrite(str(output_dir / f"{input_filename}_binary.png"), result.binary * 255)
        overlay = create_grid_overlay(cv2.imread(str(input_path)), result.detection)
        cv2.imwrite(str(output_dir / f"{input_filename}_grid_overlay.png"), overlay)
        print(f"  Saved debug images to: {output_dir}")

    # Save puzzle as JSON (9x9 list of lists, 0 for blanks)
    grid = [[max(v, 0) for v in row] for row in puzzle.to_grid()]
    puzzle_json = output_dir / f"{input_filename}_puzzle.json"
    with open(puzzle_json, "w") as f:
        json.dump(grid, f)
    print(f"  Saved: {puzzle_json}")

    if args.solve:
        print("Solving...")
        if solve(puzzle):
            print("\nSolved Sudoku Grid:")
            print_grid(puzzle.to_grid())
            solution_json = output_dir / f"{input_filename}_solution.json"
            with open(solution_json, "w") as f:
                json.dump(puzzle.to_grid(), f)
            print(f"  Saved: {solution_json}")
        else:
            print("No solution found for the recognized digits", file=sys.stderr)

    print(f"\n[OK] Processing complete! Check output directory: {output_dir}")
    sys.exit(0)


if __name__ == "__main__":
    main()
