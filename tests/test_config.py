"""Tests for loading analysis limits."""

import os
import tempfile
import unittest

from rtakit.config import AnalysisConfig, config_from_dict, load_config
from rtakit.time import InvalidInputError


class TestAnalysisConfig(unittest.TestCase):

    def test_defaults(self):
        config = AnalysisConfig()
        self.assertEqual(config.ceiling, 10**6)
        self.assertEqual(config.max_iterations, 10**5)
        self.assertEqual(config.horizon, 10**6)

    def test_with_overrides(self):
        config = AnalysisConfig().with_overrides(ceiling=500, horizon=None)
        self.assertEqual(config.ceiling, 500)
        self.assertEqual(config.horizon, 10**6)

    def test_invalid_values(self):
        with self.assertRaises(InvalidInputError):
            AnalysisConfig(ceiling=-1)
        with self.assertRaises(InvalidInputError):
            AnalysisConfig(max_iterations=0)
        with self.assertRaises(InvalidInputError):
            AnalysisConfig(horizon=1.5)


class TestConfigFromDict(unittest.TestCase):

    def test_nested_mapping(self):
        config = config_from_dict({"analysis": {"ceiling": 100, "max_iterations": 10}})
        self.assertEqual(config, AnalysisConfig(ceiling=100, max_iterations=10))

    def test_bare_mapping(self):
        self.assertEqual(config_from_dict({"horizon": 42}).horizon, 42)

    def test_empty(self):
        self.assertEqual(config_from_dict(None), AnalysisConfig())
        self.assertEqual(config_from_dict({"analysis": None}), AnalysisConfig())

    def test_unknown_keys(self):
        with self.assertRaises(InvalidInputError):
            config_from_dict({"analysis": {"ceiling": 100, "timeout": 5}})


class TestLoadConfig(unittest.TestCase):

    def test_load_yaml(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "analysis.yaml")
            with open(path, "w", encoding="utf-8") as f:
                f.write("analysis:\n  ceiling: 5000\n  horizon: 20000\n")
            config = load_config(path)
        self.assertEqual(config.ceiling, 5000)
        self.assertEqual(config.horizon, 20000)
        self.assertEqual(config.max_iterations, 10**5)

    def test_repository_config(self):
        path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "analysis.yaml")
        self.assertEqual(load_config(path), AnalysisConfig())


if __name__ == "__main__":
    unittest.main()
