import json
import os
import tempfile
import unittest

from exposure_enhancer.config import (
    DEFAULT_CONFIG, default_config, load_config, merge_config, validate_config,
)
from exposure_enhancer.exceptions import InvalidConfigurationError


class TestConfig(unittest.TestCase):

    def test_defaults(self):
        cfg = default_config()
        validate_config(cfg)
        self.assertEqual(cfg['synthesis']['regions'], 7)
        self.assertEqual(cfg['fusion']['radius'], 12)
        self.assertEqual(cfg['fusion']['eps'], 0.25)
        self.assertEqual(cfg['fusion']['alpha'], 1.1)
        self.assertEqual(cfg['synthesis']['target_gray'], 0.18)

    def test_default_config_is_a_copy(self):
        cfg = default_config()
        cfg['synthesis']['regions'] = 2
        self.assertEqual(DEFAULT_CONFIG['synthesis']['regions'], 7)

    def test_merge_is_recursive(self):
        merged = merge_config(default_config(), {'fusion': {'alpha': 1.0}})
        self.assertEqual(merged['fusion']['alpha'], 1.0)
        self.assertEqual(merged['fusion']['sigma_d'], 0.12)

    def test_load_config_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "cfg.json")
            with open(path, "w") as f:
                json.dump({'synthesis': {'regions': 3}, 'fusion': {'backend': 'mertens'}}, f)
            cfg = load_config(path)
        self.assertEqual(cfg['synthesis']['regions'], 3)
        self.assertEqual(cfg['synthesis']['gamma'], 2.2)
        self.assertEqual(cfg['fusion']['backend'], 'mertens')

    def test_load_defaults_without_path(self):
        self.assertEqual(load_config(), default_config())

    def test_load_errors(self):
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(FileNotFoundError):
                load_config(os.path.join(tmp, "missing.json"))
            path = os.path.join(tmp, "bad.json")
            with open(path, "w") as f:
                f.write("{not json")
            with self.assertRaises(InvalidConfigurationError):
                load_config(path)
            with open(path, "w") as f:
                json.dump([1, 2], f)
            with self.assertRaises(InvalidConfigurationError):
                load_config(path)

    def test_invalid_values(self):
        invalid = [
            {'synthesis': {'regions': 0}},
            {'synthesis': {'regions': 2.5}},
            {'synthesis': {'gamma': 0}},
            {'synthesis': {'gamma': -2.2}},
            {'synthesis': {'downsample_scale': 2}},
            {'fusion': {'backend': 'average'}},
            {'fusion': {'sigma_l': 0}},
            {'fusion': {'radius': -1}},
            {'pipeline': {'final_merge': 'yes'}},
            {'pipeline': {'final_backend': 'debevec'}},
            {'brightness': {'dark_threshold': 0}},
        ]
        for overrides in invalid:
            with self.assertRaises(InvalidConfigurationError, msg=str(overrides)):
                validate_config(merge_config(default_config(), overrides))

    def test_invalid_configuration_is_a_value_error(self):
        self.assertTrue(issubclass(InvalidConfigurationError, ValueError))


if __name__ == "__main__":
    unittest.main()
