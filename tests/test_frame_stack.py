"""
Tests for multi-frame averaging.
"""

import itertools
import unittest
import numpy as np

from portrait_camera.core.contracts import PixelBuffer
from portrait_camera.core.errors import DimensionMismatch, EmptyInput
from portrait_camera.enhancement.frame_stack import FrameStackAccumulator
from tests.fakes import random_image, solid


class TestFrameStackAccumulator(unittest.TestCase):
    def setUp(self):
        self.accumulator = FrameStackAccumulator()

    def test_three_red_frames_stay_red(self):
        frames = [solid(4, 4, (255, 0, 0, 255)) for _ in range(3)]
        out = self.accumulator.accumulate(frames)
        self.assertEqual(out.size, (4, 4))
        self.assertTrue(np.all(out.pixels == np.array([255, 0, 0, 255], dtype=np.uint8)))

    def test_identical_frames_are_idempotent(self):
        frame = random_image(6, 5, seed=1)
        for n in (1, 2, 5):
            out = self.accumulator.accumulate([frame.copy() for _ in range(n)])
            np.testing.assert_array_equal(out.pixels, frame.pixels)

    def test_order_independent(self):
        frames = [random_image(5, 4, seed=s) for s in range(3)]
        expected = self.accumulator.accumulate(frames).pixels
        for perm in itertools.permutations(frames):
            np.testing.assert_array_equal(self.accumulator.accumulate(list(perm)).pixels, expected)

    def test_mean_rounds_half_up(self):
        def frame(value):
            return solid(1, 1, (value, value, value, 255))

        self.assertEqual(self.accumulator.accumulate([frame(0), frame(1)]).pixels[0, 0, 0], 1)
        self.assertEqual(self.accumulator.accumulate([frame(0), frame(0), frame(1)]).pixels[0, 0, 0], 0)
        self.assertEqual(self.accumulator.accumulate([frame(0), frame(1), frame(1)]).pixels[0, 0, 0], 1)

    def test_no_overflow_with_many_bright_frames(self):
        frames = [solid(2, 2, (255, 255, 255, 255)) for _ in range(10)]
        out = self.accumulator.accumulate(frames)
        self.assertTrue(np.all(out.pixels == 255))

    def test_alpha_forced_opaque(self):
        out = self.accumulator.accumulate([solid(2, 2, (10, 20, 30, 0))])
        self.assertTrue(np.all(out.pixels[:, :, 3] == 255))
        self.assertEqual(tuple(out.pixels[0, 0, :3]), (10, 20, 30))

    def test_size_mismatch_raises(self):
        with self.assertRaises(DimensionMismatch):
            self.accumulator.accumulate([solid(4, 4), solid(4, 3)])

    def test_empty_input_raises(self):
        with self.assertRaises(EmptyInput):
            self.accumulator.accumulate([])

    def test_returns_new_buffer(self):
        frame = solid(2, 2)
        out = self.accumulator.accumulate([frame])
        self.assertIsNot(out.pixels, frame.pixels)
        self.assertIsInstance(out, PixelBuffer)


if __name__ == '__main__':
    unittest.main()
