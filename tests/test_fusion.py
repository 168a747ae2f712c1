import unittest

import numpy as np

from exposure_enhancer.exceptions import InvalidConfigurationError
from exposure_enhancer.fusion import (
    base_weight, compute_layers, detail_weight, fuse_exposures, fuse_stack,
    merge_mertens, normalize_weights, validate_stack,
)


def identity_smooth(guide, src, radius, eps):
    return src.copy()


def random_stack(count=3, height=24, width=32, seed=0):
    rng = np.random.default_rng(seed)
    return [rng.integers(0, 256, size=(height, width, 3)).astype(np.uint8) for _ in range(count)]


def gray_float(value, height=16, width=16):
    return np.full((height, width, 3), value, dtype=np.float32)


class TestWeights(unittest.TestCase):

    def test_base_weight_penalizes_extremes(self):
        lum = np.full((4, 4), 1.0, dtype=np.float32)
        weight = base_weight(lum, lum, sigma_l=0.5)
        np.testing.assert_allclose(weight, np.exp(-0.5) * np.exp(-0.5), rtol=1e-5)
        mid = np.full((4, 4), 0.5, dtype=np.float32)
        np.testing.assert_allclose(base_weight(mid, mid), 1.0, rtol=1e-5)

    def test_detail_weight_uses_local_mean(self):
        lum = np.full((9, 9), 0.5, dtype=np.float32)
        np.testing.assert_allclose(detail_weight(lum), 1.0, rtol=1e-5)
        dark = np.zeros((9, 9), dtype=np.float32)
        np.testing.assert_allclose(detail_weight(dark, sigma_d=0.12), np.exp(-0.25 / (2 * 0.0144)), rtol=1e-4)

    def test_weights_are_positive(self):
        far = np.zeros((3, 3), dtype=np.float32)
        self.assertTrue(np.all(detail_weight(far, sigma_d=0.001) > 0))
        self.assertTrue(np.all(base_weight(far, far, sigma_l=0.001) > 0))

    def test_normalized_weights_sum_to_one(self):
        base_weights, detail_weights = [], []
        for img in random_stack(4):
            lum, base, _ = compute_layers(img, 12, 0.25)
            base_weights.append(base_weight(base, lum))
            detail_weights.append(detail_weight(lum))
        for weights in (normalize_weights(base_weights), normalize_weights(detail_weights)):
            np.testing.assert_allclose(np.sum(weights, axis=0), 1.0, atol=1e-5)
            self.assertTrue(all(np.all(w >= 0) for w in weights))


class TestFuseExposures(unittest.TestCase):

    def test_single_image_reconstructs_base_plus_detail(self):
        img = random_stack(1)[0]
        fused = fuse_exposures([img], {'alpha': 1.0})
        np.testing.assert_allclose(fused, img.astype(np.float32) / 255.0, atol=1e-5)

    def test_single_image_amplifies_detail(self):
        img = random_stack(1)[0]
        _, base, detail = compute_layers(img, 12, 0.25)
        fused = fuse_exposures([img], {'alpha': 1.1})
        np.testing.assert_allclose(fused, base[:, :, np.newaxis] + 1.1 * detail, atol=1e-5)

    def test_symmetric_exposures_meet_at_mid_gray(self):
        fused = fuse_exposures([gray_float(0.3), gray_float(0.7)], smooth=identity_smooth)
        np.testing.assert_allclose(fused, 0.5, atol=1e-4)

    def test_well_exposed_image_dominates(self):
        stack = [gray_float(0.05), gray_float(0.5), gray_float(0.95)]
        fused = fuse_exposures(stack, smooth=identity_smooth)
        self.assertTrue(np.all(np.abs(fused - 0.5) < 0.1))

    def test_stack_order_does_not_matter(self):
        stack = random_stack(3)
        forward = fuse_exposures(stack)
        backward = fuse_exposures(stack[::-1])
        np.testing.assert_allclose(forward, backward, atol=1e-5)

    def test_custom_smoother_is_used(self):
        calls = []

        def recording_smooth(guide, src, radius, eps):
            calls.append((radius, eps))
            return src.copy()

        fuse_exposures(random_stack(2), {'radius': 5, 'eps': 0.1}, smooth=recording_smooth)
        self.assertEqual(calls, [(5, 0.1), (5, 0.1)])


class TestValidateStack(unittest.TestCase):

    def test_rejects_empty_stack(self):
        with self.assertRaises(InvalidConfigurationError):
            validate_stack([])

    def test_rejects_mismatched_sizes(self):
        with self.assertRaises(InvalidConfigurationError):
            fuse_exposures([np.zeros((4, 4, 3), np.uint8), np.zeros((4, 5, 3), np.uint8)])

    def test_rejects_grayscale(self):
        with self.assertRaises(InvalidConfigurationError):
            validate_stack([np.zeros((4, 4), np.uint8)])


class TestFuseStack(unittest.TestCase):

    def test_exposedness_backend(self):
        stack = random_stack(3)
        fused = fuse_stack(stack)
        self.assertEqual(fused.shape, stack[0].shape)
        self.assertEqual(fused.dtype, np.uint8)

    def test_mertens_backend(self):
        stack = random_stack(3)
        fused = fuse_stack(stack, {'backend': 'mertens'})
        self.assertEqual(fused.shape, stack[0].shape)
        self.assertEqual(fused.dtype, np.uint8)
        self.assertEqual(merge_mertens(stack).dtype, np.float32)

    def test_unknown_backend(self):
        with self.assertRaises(InvalidConfigurationError):
            fuse_stack(random_stack(2), {'backend': 'average'})


if __name__ == "__main__":
    unittest.main()
