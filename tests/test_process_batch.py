import json
import os
import tempfile
import unittest

import numpy as np

import process_batch
from exposure_enhancer.io import save_image


class TestProcessBatch(unittest.TestCase):

    def test_main_writes_outputs_and_report(self):
        with tempfile.TemporaryDirectory() as tmp:
            input_dir = os.path.join(tmp, "in")
            output_dir = os.path.join(tmp, "out")
            rng = np.random.default_rng(5)
            for name, level in (("dim.png", 35), ("day.png", 160)):
                img = np.clip(level + rng.integers(-15, 16, size=(48, 64, 3)), 0, 255)
                save_image(img.astype(np.uint8), os.path.join(input_dir, name))

            status = process_batch.main([input_dir, "--output", output_dir, "--max-size", "32"])

            self.assertEqual(status, 0)
            self.assertTrue(os.path.exists(os.path.join(output_dir, "dim_enhanced.jpg")))
            self.assertTrue(os.path.exists(os.path.join(output_dir, "day_enhanced.jpg")))
            self.assertTrue(os.path.exists(os.path.join(output_dir, "evaluation_charts.png")))
            with open(os.path.join(output_dir, "evaluation_report.json")) as f:
                report = json.load(f)
            self.assertEqual(report['evaluation_info']['total_images'], 2)
            self.assertEqual(report['lighting_analysis']['dark_images'], 1)

    def test_main_reports_errors(self):
        with tempfile.TemporaryDirectory() as tmp:
            self.assertEqual(process_batch.main([os.path.join(tmp, "missing"), "--output", os.path.join(tmp, "out")]), 1)
            empty = os.path.join(tmp, "empty")
            os.makedirs(empty)
            self.assertEqual(process_batch.main([empty, "--output", os.path.join(tmp, "out")]), 1)


if __name__ == "__main__":
    unittest.main()
