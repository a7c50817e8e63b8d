import numpy as np
import pytest
from PIL import Image

from glyphgen.image import DecodedImage, is_supported_format, open_image


def test_pixels_are_read_only(white_4x4):
    with pytest.raises(ValueError):
        white_4x4.pixels[0, 0, 0] = 1


def test_alpha_is_dropped():
    rgba = np.zeros((2, 3, 4), dtype=np.uint8)
    rgba[..., 3] = 255
    img = DecodedImage(rgba)
    assert img.pixels.shape == (2, 3, 3)
    assert img.size == (3, 2)


def test_grayscale_array_is_expanded():
    img = DecodedImage.from_array(np.full((2, 2), 200))
    assert img.pixels.shape == (2, 2, 3)
    assert int(img.pixels[0, 0, 1]) == 200


def test_from_buffer():
    img = DecodedImage.from_buffer(2, 1, bytes([1, 2, 3, 4, 5, 6]))
    assert img.pixels[0, 1].tolist() == [4, 5, 6]
    with pytest.raises(ValueError):
        DecodedImage.from_buffer(2, 2, bytes(3))
    with pytest.raises(ValueError):
        DecodedImage.from_buffer(1, 1, bytes(2), channels=2)


def test_empty_image(empty_image):
    assert empty_image.is_empty
    assert not DecodedImage.solid(1, 1, (0, 0, 0)).is_empty


def test_bad_shape():
    with pytest.raises(ValueError):
        DecodedImage(np.zeros((2, 2, 2), dtype=np.uint8))


def test_open_image(tmp_path):
    path = tmp_path / "p.png"
    Image.new("RGBA", (5, 3), (10, 20, 30, 128)).save(path)
    img = open_image(path)
    assert img.size == (5, 3)
    assert img.pixels[1, 1].tolist() == [10, 20, 30]


def test_open_image_rejects_garbage(tmp_path):
    path = tmp_path / "bad.png"
    path.write_bytes(b"not an image")
    with pytest.raises(OSError):
        open_image(path)


def test_supported_formats():
    assert is_supported_format("photo.JPG")
    assert is_supported_format("a/b/c.webp")
    assert not is_supported_format("notes.txt")
