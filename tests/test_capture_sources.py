"""
Tests for the camera helpers and the image-file capture source.
"""

import tempfile
import unittest
from pathlib import Path
from unittest import mock
import cv2
import numpy as np

from portrait_camera.capture import ImageFileSource, get_source, list_sources
from portrait_camera.capture.camera_source import CameraSource, digital_zoom
from portrait_camera.core.errors import CaptureUnavailable


class TestDigitalZoom(unittest.TestCase):
    def test_no_zoom_returns_frame(self):
        frame = np.zeros((4, 6, 3), dtype=np.uint8)
        self.assertIs(digital_zoom(frame, 1.0), frame)

    def test_zoom_keeps_shape_and_crops_centre(self):
        frame = np.zeros((8, 8, 3), dtype=np.uint8)
        frame[2:6, 2:6] = 255
        zoomed = digital_zoom(frame, 2.0)
        self.assertEqual(zoomed.shape, frame.shape)
        self.assertTrue(np.all(zoomed == 255))


class TestCameraSource(unittest.TestCase):
    def test_request_before_start_is_unavailable(self):
        with self.assertRaises(CaptureUnavailable):
            CameraSource().request_frame()

    def test_zoom_is_clamped(self):
        camera = CameraSource()
        camera.set_zoom_ratio(10.0)
        self.assertEqual(camera.zoom_ratio, 3.0)
        camera.set_zoom_ratio(0.2)
        self.assertEqual(camera.zoom_ratio, 1.0)

    def test_slider_mapping(self):
        camera = CameraSource()
        camera.set_zoom_from_slider(50)
        self.assertEqual(camera.zoom_ratio, 2.0)
        camera.set_zoom_from_slider(100)
        self.assertEqual(camera.zoom_ratio, 3.0)

    def test_failed_open_is_released_on_stop(self):
        with mock.patch("portrait_camera.capture.camera_source.cv2.VideoCapture") as video_capture:
            video_capture.return_value.isOpened.return_value = False
            camera = CameraSource(device_index=7)

            self.assertFalse(camera.start())
            camera.stop()

        video_capture.return_value.release.assert_called_once()


class TestImageFileSource(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self._tmp.name)
        self.image_path = self.dir / "frame.png"
        bgr = np.zeros((3, 5, 3), dtype=np.uint8)
        bgr[:, :] = (10, 20, 30)
        cv2.imwrite(str(self.image_path), bgr)

    def tearDown(self):
        self._tmp.cleanup()

    def test_frames_are_rgba_and_cycle(self):
        source = ImageFileSource([self.image_path], zoom_ratio=2.5)
        self.assertTrue(source.start())

        frames = [source.request_frame() for _ in range(3)]

        self.assertEqual(source.zoom_ratio, 2.5)
        self.assertEqual(source.resolution, (5, 3))
        for frame in frames:
            self.assertEqual(frame.size, (5, 3))
            self.assertEqual(tuple(frame.pixels[0, 0]), (30, 20, 10, 255))

    def test_missing_file_fails_to_start(self):
        self.assertFalse(ImageFileSource([self.dir / "nope.png"]).start())

    def test_request_before_start(self):
        with self.assertRaises(CaptureUnavailable):
            ImageFileSource([self.image_path]).request_frame()

    def test_undecodable_file(self):
        bad = self.dir / "bad.png"
        bad.write_text("not an image")
        source = ImageFileSource([bad])
        self.assertTrue(source.start())
        with self.assertRaises(CaptureUnavailable):
            source.request_frame()

    def test_registry(self):
        self.assertEqual(list_sources(), ["camera", "files"])
        self.assertIsInstance(get_source("files", paths=[self.image_path]), ImageFileSource)
        with self.assertRaises(ValueError):
            get_source("scanner")


if __name__ == '__main__':
    unittest.main()
