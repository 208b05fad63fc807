"""
Tests for image decoding and input validation
"""
import io

import pytest
import numpy as np
from PIL import Image


def png_bytes(width: int, height: int, mode: str = "RGB", color=0) -> bytes:
    buffer = io.BytesIO()
    Image.new(mode, (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


class TestFitWithin:
    """Test downscale dimension math"""

    def test_small_image_untouched(self):
        from src.ingestion.loader import fit_within

        assert fit_within(640, 480, 2000) == (640, 480, 1.0)
        assert fit_within(2000, 2000, 2000) == (2000, 2000, 1.0)

    def test_wide_image(self):
        from src.ingestion.loader import fit_within

        width, height, ratio = fit_within(3000, 1, 2000)

        assert (width, height) == (2000, 1)
        assert ratio == pytest.approx(2000 / 3000)

    def test_aspect_ratio_kept(self):
        from src.ingestion.loader import fit_within

        assert fit_within(4000, 3000, 2000)[:2] == (2000, 1500)
        assert fit_within(1000, 5000, 2000)[:2] == (400, 2000)


class TestImageLoader:
    """Test the decoder collaborator"""

    def test_supported_formats(self):
        from src.ingestion import ImageLoader

        assert ".png" in ImageLoader.SUPPORTED_EXTENSIONS
        assert ".jpg" in ImageLoader.SUPPORTED_EXTENSIONS
        assert ".pdf" not in ImageLoader.SUPPORTED_EXTENSIONS

    def test_file_not_found(self):
        from src.ingestion import ImageLoader

        with pytest.raises(FileNotFoundError):
            ImageLoader().load("nonexistent.png")

    def test_unsupported_extension(self, tmp_path):
        from src.exceptions import InvalidInputError
        from src.ingestion import ImageLoader

        path = tmp_path / "notes.txt"
        path.write_text("hello")

        with pytest.raises(InvalidInputError):
            ImageLoader().load(path)

    def test_decodes_to_rgba(self):
        from src.ingestion import ImageLoader

        loaded = ImageLoader().load_bytes(png_bytes(7, 5, "RGB", (10, 20, 30)), "image/png")

        assert loaded.buffer.size == (7, 5)
        assert loaded.buffer.channels == 4
        assert tuple(loaded.buffer.data[0, 0]) == (10, 20, 30, 255)
        assert loaded.was_scaled is False

    def test_grayscale_converted(self):
        from src.ingestion import ImageLoader

        loaded = ImageLoader().load_bytes(png_bytes(4, 4, "L", 200))

        assert tuple(loaded.buffer.data[1, 1]) == (200, 200, 200, 255)

    def test_oversized_image_scaled(self):
        from src.ingestion import ImageLoader

        loaded = ImageLoader().load_bytes(png_bytes(3000, 1))

        assert loaded.original_size == (3000, 1)
        assert loaded.buffer.size == (2000, 1)
        assert loaded.was_scaled is True

    def test_custom_max_dimension(self):
        from src.ingestion import ImageLoader

        loaded = ImageLoader(max_dimension=50).load_bytes(png_bytes(200, 100))

        assert loaded.buffer.size == (50, 25)

    def test_empty_payload(self):
        from src.exceptions import InvalidInputError
        from src.ingestion import ImageLoader

        with pytest.raises(InvalidInputError):
            ImageLoader().load_bytes(b"")

    def test_non_image_content_type(self):
        from src.exceptions import InvalidInputError
        from src.ingestion import ImageLoader

        with pytest.raises(InvalidInputError):
            ImageLoader().load_bytes(png_bytes(4, 4), "text/plain")

    def test_payload_too_large(self):
        from src.exceptions import InvalidInputError
        from src.ingestion import ImageLoader

        with pytest.raises(InvalidInputError):
            ImageLoader(max_bytes=16).load_bytes(png_bytes(4, 4))

    def test_undecodable_bytes(self):
        from src.exceptions import DecodeError
        from src.ingestion import ImageLoader

        with pytest.raises(DecodeError):
            ImageLoader().load_bytes(b"definitely not an image", "image/png")


class TestPixelBuffer:
    """Test buffer invariants"""

    def test_length_invariant(self):
        from src.vectorization import PixelBuffer

        raw = bytes(range(24))
        buffer = PixelBuffer.from_bytes(raw, width=3, height=2, channels=4)

        assert len(buffer.tobytes()) == 3 * 2 * 4
        assert buffer.tobytes() == raw
        assert buffer.pixel(1, 0) == (4, 5, 6)

    def test_wrong_length_rejected(self):
        from src.vectorization import PixelBuffer

        with pytest.raises(ValueError):
            PixelBuffer.from_bytes(bytes(10), width=3, height=2)

    def test_read_only(self, solid_image):
        with pytest.raises(ValueError):
            solid_image.data[0, 0, 0] = 1

    def test_from_array_copies(self):
        from src.vectorization import PixelBuffer

        array = np.zeros((2, 2, 4), dtype=np.uint8)
        buffer = PixelBuffer.from_array(array)
        array[0, 0, 0] = 99

        assert buffer.data[0, 0, 0] == 0
