# Path: core/imaging.py
# Purpose: Decode, encode, and canonicalize images for feature extraction.
# Layer: core.
# Details: Thin wrappers over Pillow that translate codec failures into domain errors.

from __future__ import annotations

import io
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image

from core.errors import DecodeError, StructuralError
from core.models.domain import ImageInfo

SUPPORTED_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".bmp", ".tiff", ".tif"})
ENCODABLE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png"})
FALLBACK_ENCODE_EXTENSION = ".png"
JPEG_QUALITY = 90

_RESAMPLE = getattr(Image, "Resampling", Image).LANCZOS
_DECODE_ERRORS = (OSError, ValueError, Image.DecompressionBombError)


def is_supported_image(filename: Union[str, Path]) -> bool:
    """Return True when the file extension is one the decoder accepts (case-insensitive)."""

    return Path(filename).suffix.lower() in SUPPORTED_EXTENSIONS


def to_rgb(image: Image.Image) -> Image.Image:
    """Convert ``image`` to 8-bit RGB.

    Integer modes (``I``, ``I;16`` and friends) hold 16-bit samples; they are
    shifted down to 8 bits instead of being clipped at 255.
    """

    if image.mode == "RGB":
        return image
    if image.mode.startswith("I"):
        samples = np.clip(np.asarray(image, dtype=np.int64), 0, 0xFFFF) >> 8
        return Image.fromarray(samples.astype(np.uint8)).convert("RGB")
    return image.convert("RGB")


def _decode(source: Union[Path, io.BytesIO], label: str, path: Path | None) -> Image.Image:
    try:
        with Image.open(source) as img:
            img.load()
            return to_rgb(img)
    except _DECODE_ERRORS as exc:
        raise DecodeError(f"Unable to decode image {label}: {exc}", path=path) from exc


def load_image(path: Union[str, Path]) -> Image.Image:
    """Open and fully decode an image file as RGB.

    Raises:
        DecodeError: the file is missing, unreadable, or not a decodable image.
    """

    image_path = Path(path)
    return _decode(image_path, str(image_path), image_path)


def load_image_bytes(data: bytes, label: str = "<upload>") -> Image.Image:
    """Decode an in-memory image payload as RGB."""

    return _decode(io.BytesIO(data), label, None)


def preprocess_image(image: Image.Image, size: int = 224, margin: int = 50) -> Image.Image:
    """Resize and center-crop ``image`` into a ``size`` x ``size`` RGB canonical image.

    The shorter side is scaled to ``size + margin`` with Lanczos resampling,
    keeping the aspect ratio, before cropping the center square.

    Raises:
        StructuralError: the image has zero area.
    """

    width, height = image.size
    if width <= 0 or height <= 0:
        raise StructuralError(f"Image has zero area ({width}x{height}).")

    rgb = to_rgb(image)
    short_side = size + margin
    if width <= height:
        new_width = short_side
        new_height = max(short_side, round(height * short_side / width))
    else:
        new_height = short_side
        new_width = max(short_side, round(width * short_side / height))

    resized = rgb.resize((new_width, new_height), resample=_RESAMPLE)
    left = (new_width - size) // 2
    top = (new_height - size) // 2
    return resized.crop((left, top, left + size, top + size))


def canonical_extension(source: Union[str, Path]) -> str:
    """Return the extension a canonical copy of ``source`` is encoded with."""

    suffix = Path(source).suffix.lower()
    return suffix if suffix in ENCODABLE_EXTENSIONS else FALLBACK_ENCODE_EXTENSION


def save_image(image: Image.Image, path: Union[str, Path]) -> Path:
    """Encode ``image`` according to the target extension (JPEG quality 90 or PNG)."""

    target = Path(path)
    suffix = target.suffix.lower()
    if suffix not in ENCODABLE_EXTENSIONS:
        raise ValueError(f"Unsupported encode format: {suffix or '<none>'}")

    target.parent.mkdir(parents=True, exist_ok=True)
    if suffix in (".jpg", ".jpeg"):
        rgb = image if image.mode in ("RGB", "L") else image.convert("RGB")
        rgb.save(target, format="JPEG", quality=JPEG_QUALITY)
    else:
        image.save(target, format="PNG")
    return target


def image_info(path: Union[str, Path]) -> ImageInfo:
    """Read size and header metadata without decoding the pixel data."""

    image_path = Path(path)
    try:
        size_bytes = image_path.stat().st_size
        with Image.open(image_path) as img:
            width, height = img.size
            fmt = img.format
    except _DECODE_ERRORS as exc:
        raise DecodeError(f"Unable to read image header {image_path}: {exc}", path=image_path) from exc

    return ImageInfo(
        filename=image_path.name,
        size=size_bytes,
        width=width,
        height=height,
        format=fmt,
        path=image_path,
    )


__all__ = [
    "SUPPORTED_EXTENSIONS",
    "ENCODABLE_EXTENSIONS",
    "canonical_extension",
    "image_info",
    "is_supported_image",
    "load_image",
    "load_image_bytes",
    "preprocess_image",
    "save_image",
    "to_rgb",
]
