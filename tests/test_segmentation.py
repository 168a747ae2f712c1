import unittest

import numpy as np

from exposure_enhancer.exceptions import InvalidConfigurationError
from exposure_enhancer.segmentation import band_boundaries, band_to_label, segment_luminance


class TestBandBoundaries(unittest.TestCase):

    def test_equal_width_bands(self):
        lum = np.array([[0, 255]], dtype=np.uint8)
        np.testing.assert_allclose(band_boundaries(lum, 4), [0, 63.75, 127.5, 191.25, 255])

    def test_flat_image_has_coincident_boundaries(self):
        lum = np.full((3, 3), 56, dtype=np.uint8)
        np.testing.assert_allclose(band_boundaries(lum, 7), np.full(8, 56.0))


class TestSegmentLuminance(unittest.TestCase):

    def test_label_zero_is_brightest_band(self):
        np.testing.assert_array_equal(band_to_label(4), [3, 2, 1, 0])
        lum = np.array([[0, 63, 64, 127, 128, 191, 200, 255]], dtype=np.uint8)
        labels = segment_luminance(lum, 4)
        np.testing.assert_array_equal(labels, [[3, 3, 2, 2, 1, 1, 0, 0]])

    def test_labels_cover_range(self):
        rng = np.random.default_rng(0)
        lum = rng.integers(0, 256, size=(40, 30)).astype(np.uint8)
        labels = segment_luminance(lum, 7)
        self.assertEqual(labels.shape, lum.shape)
        self.assertTrue(np.all((labels >= 0) & (labels < 7)))
        self.assertTrue(np.all(labels[lum == lum.max()] == 0))
        self.assertTrue(np.all(labels[lum == lum.min()] == 6))

    def test_flat_image_collapses_to_band_zero(self):
        labels = segment_luminance(np.full((5, 5), 56, dtype=np.uint8), 7)
        self.assertTrue(np.all(labels == 0))

    def test_bimodal_halves_get_different_bands(self):
        lum = np.full((10, 10), 30, dtype=np.uint8)
        lum[:, 5:] = 220
        labels = segment_luminance(lum, 2)
        self.assertTrue(np.all(labels[:, :5] == 1))
        self.assertTrue(np.all(labels[:, 5:] == 0))

    def test_float_luminance(self):
        lum = np.array([[0.0, 0.2, 0.6, 1.0]], dtype=np.float32)
        np.testing.assert_array_equal(segment_luminance(lum, 2), [[1, 1, 0, 0]])

    def test_single_region(self):
        lum = np.arange(16, dtype=np.uint8).reshape(4, 4)
        self.assertTrue(np.all(segment_luminance(lum, 1) == 0))

    def test_empty_image(self):
        labels = segment_luminance(np.zeros((0, 0), dtype=np.uint8), 3)
        self.assertEqual(labels.shape, (0, 0))

    def test_rejects_invalid_region_count(self):
        lum = np.zeros((2, 2), dtype=np.uint8)
        for regions in (0, -3, 2.5, True):
            with self.assertRaises(InvalidConfigurationError):
                segment_luminance(lum, regions)


if __name__ == "__main__":
    unittest.main()
