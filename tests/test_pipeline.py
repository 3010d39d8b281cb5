"""Tests for the transform pipeline script.

This module tests loading the YAML configuration, building and composing
transform steps, and running the whole chain from the command line.
"""

import math
import os
import shutil
import sys
import tempfile
import unittest
from pathlib import Path
from unittest import mock

import numpy as np
import pytest
import yaml

# Add parent directory to path
sys.path.append(str(Path(__file__).resolve().parent.parent))

from transform_math.matrix import Matrix
from scripts import run_transforms


class TestPipeline(unittest.TestCase):
    """Test the transform pipeline."""

    @classmethod
    def setUpClass(cls):
        """Write a configuration file to a temporary directory."""
        cls.test_output_dir = tempfile.mkdtemp()
        cls.config = {
            "transforms": [
                {"type": "scale", "value": 2.0},
                {"type": "rotation_z", "angle": 90, "degrees": True},
                {"type": "translation", "x": 1.0, "y": 2.0, "z": 3.0},
            ],
            "points": [[1.0, 0.0, 0.0], [0.0, 0.0, 1.0]],
            "output": {"precision": 3},
        }
        cls.config_path = os.path.join(cls.test_output_dir, "config.yaml")
        with open(cls.config_path, "w") as f:
            yaml.safe_dump(cls.config, f)

    @classmethod
    def tearDownClass(cls):
        """Clean up test fixtures."""
        if hasattr(cls, "test_output_dir") and os.path.exists(cls.test_output_dir):
            shutil.rmtree(cls.test_output_dir)

    def test_load_config(self):
        config = run_transforms.load_config(self.config_path)
        self.assertEqual(config, self.config)

    def test_default_config_is_valid(self):
        config = run_transforms.load_config()
        self.assertIn("transforms", config)
        results = run_transforms.run_transforms(config)
        self.assertEqual(len(results["points"]), len(config["points"]))

    def test_build_step_types(self):
        build = run_transforms.build_step
        self.assertEqual(build({"type": "identity"}), Matrix.identity(4))
        self.assertEqual(build({"type": "scale", "value": 3}), Matrix.scale(3))
        self.assertEqual(build({"type": "scale_y", "value": 3}), Matrix.scale_y(3))
        self.assertEqual(build({"type": "translation", "x": 1, "z": 2}), Matrix.translation(1, 0, 2))
        self.assertEqual(build({"type": "translation_z", "value": 4}), Matrix.translation_z(4))
        self.assertEqual(build({"type": "rotation_x", "angle": 0.3}), Matrix.rotation_x(0.3))
        self.assertEqual(
            build({"type": "matrix", "rows": [[1, 2], [3, 4]]}),
            Matrix.from_array([[1, 2], [3, 4]]),
        )

    def test_angles_in_degrees(self):
        step = run_transforms.build_step({"type": "rotation_z", "angle": 90, "degrees": True})
        self.assertTrue(step.allclose(Matrix.rotation_z(math.pi / 2)))

    def test_rotation_axis_can_be_normalized(self):
        step = run_transforms.build_step(
            {"type": "rotation", "axis": [0, 0, 2], "angle": 0.5, "normalize": True}
        )
        self.assertTrue(step.allclose(Matrix.rotation_z(0.5)))

    def test_unknown_step_type(self):
        with pytest.raises(ValueError, match="Unknown"):
            run_transforms.build_step({"type": "shear"})

    def test_missing_step_parameter(self):
        with pytest.raises(ValueError, match="missing"):
            run_transforms.build_step({"type": "rotation_y"})

    def test_steps_apply_in_listed_order(self):
        move_then_scale = run_transforms.build_transform([
            {"type": "translation_x", "value": 1},
            {"type": "scale", "value": 2},
        ])
        scale_then_move = run_transforms.build_transform([
            {"type": "scale", "value": 2},
            {"type": "translation_x", "value": 1},
        ])
        origin = [[0.0, 0.0, 0.0]]
        self.assertEqual(run_transforms.transform_points(origin, move_then_scale), [[2, 0, 0]])
        self.assertEqual(run_transforms.transform_points(origin, scale_then_move), [[1, 0, 0]])

    def test_empty_chain_is_identity(self):
        self.assertEqual(run_transforms.build_transform([]), Matrix.identity(4))

    def test_transform_points_rejects_2d_points(self):
        with pytest.raises(ValueError):
            run_transforms.transform_points([[1.0, 2.0]], Matrix.identity(4))

    def test_run_transforms(self):
        results = run_transforms.run_transforms(self.config)

        expected = Matrix.scale(2).dot(Matrix.rotation_z(math.pi / 2)).dot(Matrix.translation(1, 2, 3))
        np.testing.assert_allclose(results["matrix"], expected.to_array(), atol=1e-12)
        self.assertAlmostEqual(results["determinant"], 8.0, delta=1e-12)
        np.testing.assert_allclose(
            np.array(results["inverse"]) @ np.array(results["matrix"]), np.eye(4), atol=1e-12
        )
        # (1, 0, 0) -> scaled to (2, 0, 0) -> rotated to (0, 2, 0) -> moved to (1, 4, 3)
        np.testing.assert_allclose(results["points"], [[1, 4, 3], [1, 2, 5]], atol=1e-12)

    def test_singular_chain_has_no_inverse(self):
        config = {"transforms": [{"type": "scale_z", "value": 0.0}], "points": []}
        with self.assertLogs("transforms", level="WARNING"):
            results = run_transforms.run_transforms(config)
        self.assertIsNone(results["inverse"])
        self.assertEqual(results["determinant"], 0.0)

    def test_main(self):
        with mock.patch.object(sys, "argv", ["run_transforms.py", "--config", self.config_path]):
            run_transforms.main()

    def test_main_exits_on_error(self):
        missing = os.path.join(self.test_output_dir, "missing.yaml")
        with mock.patch.object(sys, "argv", ["run_transforms.py", "-c", missing]):
            with self.assertRaises(SystemExit) as ctx:
                run_transforms.main()
        self.assertEqual(ctx.exception.code, 1)


if __name__ == "__main__":
    unittest.main()
