"""
Tests for the core data contracts.
"""

import unittest
import numpy as np

from portrait_camera.core.contracts import PixelBuffer, SegmentationMask, CaptureSession
from portrait_camera.core.errors import DimensionMismatch, InvalidZoom, PipelineError


class TestPixelBuffer(unittest.TestCase):
    def test_from_flat_builds_row_major_buffer(self):
        flat = [(i, 0, 0, 255) for i in range(6)]
        buf = PixelBuffer.from_flat(3, 2, flat)
        self.assertEqual(buf.size, (3, 2))
        self.assertEqual(buf.pixels[1, 0, 0], 3)

    def test_from_flat_rejects_wrong_pixel_count(self):
        with self.assertRaises(DimensionMismatch):
            PixelBuffer.from_flat(3, 2, [(0, 0, 0, 255)] * 5)

    def test_rejects_non_rgba_shape(self):
        with self.assertRaises(DimensionMismatch):
            PixelBuffer(np.zeros((2, 2, 3), dtype=np.uint8))

    def test_bgr_round_trip_keeps_channel_order(self):
        bgr = np.zeros((1, 1, 3), dtype=np.uint8)
        bgr[0, 0] = (10, 20, 30)
        buf = PixelBuffer.from_bgr(bgr)
        self.assertEqual(tuple(buf.pixels[0, 0]), (30, 20, 10, 255))
        self.assertEqual(tuple(buf.to_bgr()[0, 0]), (10, 20, 30))

    def test_copy_does_not_alias(self):
        buf = PixelBuffer.blank(2, 2, (1, 2, 3, 255))
        clone = buf.copy()
        clone.pixels[0, 0, 0] = 99
        self.assertEqual(buf.pixels[0, 0, 0], 1)

    def test_errors_share_base_class(self):
        self.assertTrue(issubclass(DimensionMismatch, PipelineError))
        self.assertTrue(issubclass(DimensionMismatch, ValueError))


class TestSegmentationMask(unittest.TestCase):
    def test_from_probabilities_scales_to_bytes(self):
        mask = SegmentationMask.from_probabilities(np.array([[0.0, 0.5, 1.0, 2.0]], dtype=np.float32))
        self.assertEqual(mask.values.tolist(), [[0, 128, 255, 255]])
        self.assertEqual(mask.size, (4, 1))

    def test_rejects_multichannel_values(self):
        with self.assertRaises(DimensionMismatch):
            SegmentationMask(np.zeros((2, 2, 1), dtype=np.uint8))


class TestCaptureSession(unittest.TestCase):
    def test_zoom_below_one_is_rejected(self):
        with self.assertRaises(InvalidZoom):
            CaptureSession(zoom_ratio=0.5)
        with self.assertRaises(ValueError):
            CaptureSession(zoom_ratio=0.9)

    def test_refuses_frames_beyond_expected(self):
        session = CaptureSession(zoom_ratio=2.0, expected_frames=2)
        session.add_frame(PixelBuffer.blank(1, 1))
        session.add_frame(PixelBuffer.blank(1, 1))
        self.assertTrue(session.is_complete)
        with self.assertRaises(ValueError):
            session.add_frame(PixelBuffer.blank(1, 1))

    def test_discard_drops_frames(self):
        session = CaptureSession(zoom_ratio=1.0)
        session.add_frame(PixelBuffer.blank(1, 1))
        session.discard()
        self.assertEqual(session.frames, [])


if __name__ == '__main__':
    unittest.main()
