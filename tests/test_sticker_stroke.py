import unittest

import numpy as np

from chroma_sticker.composite import draw_image, new_surface, surface_to_buffer
from chroma_sticker.contracts import PixelBuffer, parse_color
from chroma_sticker.errors import RenderSurfaceUnavailable
from chroma_sticker.pipeline import add_sticker_stroke
from chroma_sticker.silhouette import extract_silhouette
from chroma_sticker.stroke import dilate_stroke, padding_for, stamp_offsets


def _subject_with_square(size: int = 100, lo: int = 30, hi: int = 70) -> PixelBuffer:
    img = np.zeros((size, size, 4), dtype=np.uint8)
    img[lo:hi, lo:hi] = (200, 0, 0, 255)
    return PixelBuffer.from_rgba(img)


class TestSilhouette(unittest.TestCase):
    def test_recolors_visible_pixels_and_keeps_alpha(self):
        img = np.zeros((2, 2, 4), dtype=np.uint8)
        img[0, 0] = (200, 0, 0, 255)
        img[0, 1] = (10, 20, 30, 128)
        img[1, 0] = (40, 50, 60, 0)
        src = PixelBuffer.from_rgba(img)

        sil = extract_silhouette(src, "#FFFFFF")

        self.assertEqual(sil.pixel(0, 0), (255, 255, 255, 255))
        self.assertEqual(sil.pixel(1, 0), (255, 255, 255, 128))
        self.assertEqual(sil.pixel(0, 1), (40, 50, 60, 0))
        # input untouched
        self.assertEqual(src.pixel(0, 0), (200, 0, 0, 255))

    def test_parse_color_forms(self):
        self.assertEqual(parse_color("white"), (255, 255, 255))
        self.assertEqual(parse_color("#00ff00"), (0, 255, 0))
        self.assertEqual(parse_color((1, 2, 3)), (1, 2, 3))
        with self.assertRaises(ValueError):
            parse_color((0, 300, 0))


class TestStrokeDilator(unittest.TestCase):
    def test_output_size_and_transparent_corners(self):
        subject = _subject_with_square()
        out = dilate_stroke(extract_silhouette(subject, "white"), subject, thickness=8)

        self.assertEqual(padding_for(8), 26)
        self.assertEqual((out.width, out.height), (152, 152))
        for x, y in ((0, 0), (151, 0), (0, 151), (151, 151)):
            self.assertEqual(out.pixel(x, y)[3], 0)

    def test_outline_ring_and_subject_on_top(self):
        subject = _subject_with_square()
        out = add_sticker_stroke(subject, thickness=8, color="#FFFFFF")
        pad = 26

        # subject interior is the original pixel
        self.assertEqual(out.pixel(pad + 50, pad + 50), (200, 0, 0, 255))
        # 5px outside the left edge of the square is solid outline
        self.assertEqual(out.pixel(pad + 30 - 5, pad + 50), (255, 255, 255, 255))
        # beyond the stroke radius stays transparent
        self.assertEqual(out.pixel(pad + 30 - 12, pad + 50)[3], 0)

    def test_empty_subject_stays_transparent(self):
        subject = PixelBuffer.blank(10, 6)
        out = add_sticker_stroke(subject, thickness=2)
        self.assertEqual((out.width, out.height), (10 + 2 * 14, 6 + 2 * 14))
        self.assertTrue((out.alpha == 0).all())

    def test_stamp_offsets_ring(self):
        offsets = list(stamp_offsets(8, 36))
        self.assertEqual(len(offsets), 36)
        for dx, dy in offsets:
            self.assertAlmostEqual(dx * dx + dy * dy, 64.0, places=6)

    def test_mismatched_sizes_rejected(self):
        with self.assertRaises(ValueError):
            dilate_stroke(PixelBuffer.blank(4, 4), PixelBuffer.blank(5, 4))


class TestComposite(unittest.TestCase):
    def test_integer_draw_is_exact(self):
        img = np.zeros((3, 3, 4), dtype=np.uint8)
        img[1, 1] = (12, 34, 56, 255)
        surface = new_surface(7, 7)
        draw_image(surface, PixelBuffer.from_rgba(img), 2, 3)
        out = surface_to_buffer(surface)
        self.assertEqual(out.pixel(3, 4), (12, 34, 56, 255))
        self.assertEqual(int((out.alpha > 0).sum()), 1)

    def test_source_over_keeps_top_layer(self):
        bottom = PixelBuffer.from_rgba(np.full((2, 2, 4), (255, 255, 255, 255), dtype=np.uint8))
        top = PixelBuffer.from_rgba(np.full((2, 2, 4), (0, 0, 255, 255), dtype=np.uint8))
        surface = new_surface(2, 2)
        draw_image(surface, bottom, 0, 0)
        draw_image(surface, top, 0, 0)
        self.assertEqual(surface_to_buffer(surface).pixel(1, 1), (0, 0, 255, 255))

    def test_invalid_surface(self):
        with self.assertRaises(RenderSurfaceUnavailable):
            new_surface(0, 10)


if __name__ == "__main__":
    unittest.main()
