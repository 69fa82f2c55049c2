"""
Tests for mask resampling and foreground selection.
"""

import unittest
import numpy as np

from portrait_camera.core.contracts import SegmentationMask
from portrait_camera.core.errors import DimensionMismatch
from portrait_camera.segmentation.mask_processor import MaskProcessor


class TestMaskProcessor(unittest.TestCase):
    def setUp(self):
        self.processor = MaskProcessor(interpolation="nearest")

    def test_same_size_returns_copy(self):
        mask = SegmentationMask.filled(3, 2, 200)
        scores = self.processor.resample(mask, 3, 2)
        np.testing.assert_array_equal(scores, mask.values)
        self.assertIsNot(scores, mask.values)

    def test_nearest_upscale_repeats_cells(self):
        mask = SegmentationMask(np.array([[255, 0], [0, 255]], dtype=np.uint8))
        scores = self.processor.resample(mask, 4, 4)
        self.assertEqual(scores.shape, (4, 4))
        self.assertEqual(scores[0].tolist(), [255, 255, 0, 0])
        self.assertEqual(scores[3].tolist(), [0, 0, 255, 255])

    def test_bilinear_keeps_uniform_mask(self):
        processor = MaskProcessor(interpolation="bilinear")
        scores = processor.resample(SegmentationMask.filled(4, 3, 90), 16, 12)
        self.assertTrue(np.all(scores == 90))

    def test_empty_mask_raises(self):
        with self.assertRaises(DimensionMismatch):
            self.processor.resample(SegmentationMask(np.zeros((0, 4), dtype=np.uint8)), 4, 4)

    def test_threshold_is_strict(self):
        scores = np.array([[127, 128, 129]], dtype=np.uint8)
        self.assertEqual(self.processor.foreground(scores).tolist(), [[False, False, True]])

    def test_coverage_and_bbox(self):
        scores = np.zeros((4, 4), dtype=np.uint8)
        scores[1:3, 2] = 255
        self.assertAlmostEqual(self.processor.coverage(scores), 2 / 16)
        self.assertEqual(self.processor.mask_to_bbox(scores), (2, 1, 2, 2))
        self.assertIsNone(self.processor.mask_to_bbox(np.zeros((2, 2), dtype=np.uint8)))

    def test_unknown_interpolation(self):
        with self.assertRaises(ValueError):
            MaskProcessor(interpolation="cubic")


if __name__ == '__main__':
    unittest.main()
