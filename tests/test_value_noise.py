# ==============================================================================
# Файл: tests/test_value_noise.py
# Назначение: Юнит-тесты для ядра шума (хэш, value noise, фрактальный шум).
# ==============================================================================
import unittest
import math
import numpy as np

import sys
from pathlib import Path

sys.path.append(str(Path(__file__).parent.parent))

from terrain_graph.numerics.noise_helpers import hash01, node_seed
from terrain_graph.numerics.value_noise import (
    value_noise,
    fractal_noise,
    fractal_noise_grid,
    fractal_noise_rows,
    grid_coord,
)


class TestHash(unittest.TestCase):

    def test_hash_is_deterministic_and_in_unit_range(self):
        for x, y in [(0, 0), (1, 0), (-7, 3), (123456, -98765)]:
            a = hash01(x, y, 1337)
            b = hash01(x, y, 1337)
            self.assertEqual(a, b)
            self.assertGreaterEqual(a, 0.0)
            self.assertLess(a, 1.0)

    def test_seed_changes_hash(self):
        same = sum(hash01(x, y, 1) == hash01(x, y, 2) for x in range(16) for y in range(16))
        self.assertEqual(same, 0)

    def test_hash_is_roughly_uniform(self):
        vals = np.array([hash01(x, y, 42) for x in range(64) for y in range(64)])
        self.assertAlmostEqual(float(vals.mean()), 0.5, delta=0.03)
        hist, _ = np.histogram(vals, bins=4, range=(0.0, 1.0))
        for count in hist:
            self.assertGreater(count, len(vals) * 0.2)


class TestNodeSeed(unittest.TestCase):

    def test_node_seed_depends_on_id(self):
        self.assertEqual(node_seed(1337, "n1"), node_seed(1337, "n1"))
        self.assertNotEqual(node_seed(1337, "n1"), node_seed(1337, "n2"))

    def test_node_seed_fits_u32(self):
        s = node_seed(2 ** 40 + 5, "some-node")
        self.assertGreaterEqual(s, 0)
        self.assertLessEqual(s, 0xFFFFFFFF)


class TestValueNoise(unittest.TestCase):

    def test_lattice_points_return_hash(self):
        for x, y in [(0, 0), (3, -2), (-5, 7)]:
            self.assertAlmostEqual(value_noise(float(x), float(y), 9), hash01(x, y, 9), places=12)

    def test_noise_is_continuous(self):
        # около узла решётки значение почти не меняется (нулевой градиент)
        base = value_noise(2.0, 3.0, 5)
        near = value_noise(2.0 + 1e-4, 3.0 - 1e-4, 5)
        self.assertLess(abs(base - near), 1e-6)

    def test_noise_stays_in_hash_range(self):
        xs = np.linspace(-4.0, 4.0, 37)
        for x in xs:
            for y in xs:
                v = value_noise(float(x), float(y), 77)
                self.assertGreaterEqual(v, 0.0)
                self.assertLess(v, 1.0)


class TestFractalNoise(unittest.TestCase):

    def test_amplitude_scales_output(self):
        a = fractal_noise(0.37, -1.2, 11, 2.0, 1.0)
        b = fractal_noise(0.37, -1.2, 11, 2.0, 2.0)
        self.assertAlmostEqual(b, 2.0 * a, places=12)

    def test_matches_octave_sum(self):
        x, y, seed, scale, amp = 1.3, -0.4, 100, 2.5, 0.8
        freq, a, total = 1.0 / scale, amp, 0.0
        for o in range(4):
            total += value_noise(x * freq, y * freq, seed + o * 19) * a
            freq *= 2.0
            a *= 0.5
        self.assertAlmostEqual(fractal_noise(x, y, seed, scale, amp), total / 1.875, places=12)

    def test_non_positive_scale_is_clamped(self):
        ref = fractal_noise(0.5, 0.5, 3, 1e-4, 1.0)
        for scale in (0.0, -3.0):
            v = fractal_noise(0.5, 0.5, 3, scale, 1.0)
            self.assertTrue(math.isfinite(v))
            self.assertEqual(v, ref)

    def test_unit_amplitude_range(self):
        g = fractal_noise_grid(32, 32, 1337, 2.0, 1.0)
        self.assertGreaterEqual(float(g.min()), 0.0)
        self.assertLess(float(g.max()), 1.0)


class TestGridKernel(unittest.TestCase):

    def test_grid_matches_scalar_samples(self):
        w, h, seed = 6, 4, 2024
        g = fractal_noise_grid(w, h, seed, 1.5, 1.0)
        self.assertEqual(g.shape, (h, w))
        self.assertEqual(g.dtype, np.float32)
        for y in range(h):
            for x in range(w):
                expected = np.float32(fractal_noise(grid_coord(x, w), grid_coord(y, h), seed, 1.5, 1.0))
                self.assertAlmostEqual(float(g[y, x]), float(expected), places=6)

    def test_row_batches_fill_same_grid(self):
        full = fractal_noise_grid(8, 9, 7, 2.0, 1.0)
        out = np.zeros((9, 8), dtype=np.float32)
        for r0 in range(0, 9, 2):
            fractal_noise_rows(out, r0, min(9, r0 + 2), 7, 2.0, 1.0)
        np.testing.assert_array_equal(out, full)

    def test_coordinates_are_centered(self):
        self.assertEqual(grid_coord(0, 4), -5.0)
        self.assertEqual(grid_coord(2, 4), 0.0)
        self.assertEqual(grid_coord(3, 4), 2.5)


if __name__ == '__main__':
    unittest.main()
