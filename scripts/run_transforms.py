#!/usr/bin/env python3
"""
Transform Pipeline

This script composes the chain of transforms described in a YAML
configuration file into a single 4x4 matrix and applies it to a list of
3D points, reporting the composed matrix, its determinant and its inverse.
"""

from __future__ import annotations

import argparse
import logging
import math
import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import yaml

# Add parent directory to path
sys.path.append(str(Path(__file__).resolve().parent.parent))

from transform_math import Matrix, SingularMatrixError, Vector


# Set up logging
logging.basicConfig(
    level=logging.INFO,
    format="[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
    handlers=[
        logging.StreamHandler(),
    ],
)
logger = logging.getLogger("transforms")

PER_AXIS_STEPS = (
    "scale_x", "scale_y", "scale_z",
    "translation_x", "translation_y", "translation_z",
)
AXIS_ROTATION_STEPS = ("rotation_x", "rotation_y", "rotation_z")


def load_config(config_path: Optional[str] = None) -> Dict:
    """Load configuration from YAML file.

    Args:
        config_path: Path to configuration file

    Returns:
        Configuration dictionary
    """
    # Default config path
    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"

    with open(config_path, "r") as f:
        config = yaml.safe_load(f)

    return config or {}


def _angle(step: Dict) -> float:
    angle = float(step["angle"])
    if step.get("degrees", False):
        angle = math.radians(angle)
    return angle


def build_step(step: Dict) -> Matrix:
    """Build the matrix for a single transform step.

    Args:
        step: Mapping with a ``type`` key and the parameters of that type

    Returns:
        Transform matrix for the step
    """
    kind = step.get("type")
    try:
        if kind == "identity":
            return Matrix.identity(4)
        if kind == "scale":
            return Matrix.scale(float(step["value"]))
        if kind in PER_AXIS_STEPS:
            return getattr(Matrix, kind)(float(step["value"]))
        if kind == "translation":
            return Matrix.translation(
                float(step.get("x", 0.0)), float(step.get("y", 0.0)), float(step.get("z", 0.0))
            )
        if kind in AXIS_ROTATION_STEPS:
            return getattr(Matrix, kind)(_angle(step))
        if kind == "rotation":
            axis = Vector([float(value) for value in step["axis"]])
            # Matrix.rotation expects a unit axis
            if step.get("normalize", False):
                axis = axis.normalize()
            return Matrix.rotation(axis, _angle(step))
        if kind == "matrix":
            return Matrix.from_array(step["rows"])
    except KeyError as e:
        raise ValueError(f"Transform step '{kind}' is missing key {e}") from e

    raise ValueError(f"Unknown transform step type: {kind}")


def build_transform(steps: Sequence[Dict]) -> Matrix:
    """Compose transform steps left to right into one matrix.

    With row vectors, ``point . (A . B)`` applies ``A`` first, so the
    steps are applied to points in the order they are listed.

    Args:
        steps: List of step mappings (see ``build_step``)

    Returns:
        Composed 4x4 transform
    """
    transform = Matrix.identity(4)
    for i, step in enumerate(steps):
        transform = transform.dot(build_step(step))
        logger.debug(f"Step {i} ({step.get('type')}) composed")
    return transform


def transform_points(points: Sequence[Sequence[float]], transform: Matrix) -> List[List[float]]:
    """Apply a 4x4 transform to 3D points.

    Args:
        points: List of [x, y, z] points
        transform: 4x4 transform matrix

    Returns:
        List of transformed [x, y, z] points
    """
    transformed = []
    for point in points:
        if len(point) != 3:
            raise ValueError(f"Expected 3D points, got {len(point)} coordinates")
        homogeneous = Vector([float(point[0]), float(point[1]), float(point[2]), 1.0])
        transformed.append(homogeneous.multiply_by_matrix(transform).to_array()[:3])
    return transformed


def run_transforms(config: Dict) -> Dict:
    """Run the configured transform chain.

    Args:
        config: Configuration dictionary (see ``config.yaml``)

    Returns:
        Dictionary with the composed matrix, its determinant, its inverse
        (None when singular) and the transformed points
    """
    steps = config.get("transforms") or []
    points = config.get("points") or []
    precision = (config.get("output") or {}).get("precision", 4)

    transform = build_transform(steps)
    logger.info(f"Composed {len(steps)} transform steps:\n{transform.to_pretty_string()}")

    determinant = transform.determinant()
    logger.info(f"Determinant: {determinant:.{precision}f}")

    try:
        inverse = transform.inverse().to_array()
    except SingularMatrixError:
        logger.warning("Composed transform is singular, no inverse available")
        inverse = None

    transformed = transform_points(points, transform)
    for source, target in zip(points, transformed):
        formatted = ", ".join(f"{value:.{precision}f}" for value in target)
        logger.info(f"{list(source)} -> [{formatted}]")

    return {
        "matrix": transform.to_array(),
        "determinant": determinant,
        "inverse": inverse,
        "points": transformed,
    }


def main():
    """Main function to parse arguments and run the transform chain."""
    parser = argparse.ArgumentParser(description="Compose and apply 3D transforms")
    parser.add_argument(
        "--config", "-c", dest="config_path", default=None,
        help="Path to configuration file"
    )
    parser.add_argument(
        "--verbose", "-v", dest="verbose", action="store_true",
        help="Enable debug logging"
    )

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        run_transforms(load_config(args.config_path))
    except Exception as e:
        logger.exception(f"Error running transforms: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
