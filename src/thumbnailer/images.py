from __future__ import annotations

import io
from typing import Final

import numpy as np
from PIL import Image

from .exceptions import ImageProcessingError
from .formats import SupportedFormat

DEFAULT_MAX_DIMENSION: Final[int] = 100

_BACKGROUND: Final[tuple[int, int, int]] = (255, 255, 255)

# Pillow opens 16-bit PNGs in these modes; converting them straight to RGBA
# clips every sample at 255.
_WIDE_MODES: Final[frozenset[str]] = frozenset({"I", "I;16", "I;16B", "I;16L", "F"})


def _to_rgba(image: Image.Image) -> Image.Image:
    if image.mode == "RGBA":
        return image
    if image.mode in _WIDE_MODES:
        image = image.convert("I").point(lambda value: value * (1 / 256))
        image = image.convert("L")
    return image.convert("RGBA")


def compute_target_size(
    width: int, height: int, max_dimension: int = DEFAULT_MAX_DIMENSION
) -> tuple[int, int]:
    """Scale ``width`` x ``height`` uniformly so the larger side fits ``max_dimension``.

    Sources smaller than the box are enlarged. The arithmetic runs in single
    precision and target sides are truncated, not rounded.
    """

    if width <= 0 or height <= 0:
        raise ImageProcessingError(f"Invalid source dimensions {width}x{height}")

    box = np.float32(max_dimension)
    src_w, src_h = np.float32(width), np.float32(height)
    scale = min(box / src_w, box / src_h)
    target = (int(scale * src_w), int(scale * src_h))
    if target[0] < 1 or target[1] < 1:
        raise ImageProcessingError(
            f"Source {width}x{height} collapses to an empty thumbnail"
        )
    return target


def decode_image(data: bytes) -> Image.Image:
    try:
        with Image.open(io.BytesIO(data)) as original:
            original.load()
            return original.copy()
    except Exception as exc:
        raise ImageProcessingError("Unable to decode image") from exc


def resize_image(
    image: Image.Image, max_dimension: int = DEFAULT_MAX_DIMENSION
) -> Image.Image:
    """Return an opaque RGB copy of ``image`` fitted into the bounding box.

    The source is sampled with a four-tap bilinear filter and composited onto
    a white canvas, so transparent regions come out white.
    """

    width, height = compute_target_size(image.width, image.height, max_dimension)

    try:
        source = _to_rgba(image)
        scaled = source.transform(
            (width, height),
            Image.Transform.AFFINE,
            (image.width / width, 0, 0, 0, image.height / height, 0),
            resample=Image.Resampling.BILINEAR,
        )
    except Exception as exc:
        raise ImageProcessingError("Unable to resize image") from exc

    canvas = Image.new("RGB", (width, height), _BACKGROUND)
    canvas.paste(scaled.convert("RGB"), (0, 0), scaled.getchannel("A"))
    return canvas


def encode_image(image: Image.Image, image_format: SupportedFormat) -> bytes:
    buffer = io.BytesIO()
    try:
        image.save(buffer, format=image_format.pil_format)
    except Exception as exc:
        raise ImageProcessingError(
            f"Unable to encode image as {image_format.pil_format}"
        ) from exc
    return buffer.getvalue()


def generate_thumbnail(
    image_bytes: bytes,
    image_format: SupportedFormat,
    *,
    max_dimension: int = DEFAULT_MAX_DIMENSION,
) -> bytes:
    """Generate a thumbnail for the provided image bytes in ``image_format``."""

    original = decode_image(image_bytes)
    return encode_image(resize_image(original, max_dimension), image_format)


__all__ = [
    "DEFAULT_MAX_DIMENSION",
    "ImageProcessingError",
    "compute_target_size",
    "decode_image",
    "encode_image",
    "generate_thumbnail",
    "resize_image",
]
