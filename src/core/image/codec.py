"""
Image codec boundary.

Converts between encoded files and Rasters:
- Input type validation (image and PDF tools)
- Decoding with OpenCV (GIF through Pillow)
- Encoding with per-format quality handling
- Compression with keep-original fallback
- File size formatting and output file names
- Base64 thumbnails for previews
"""

import base64
import io
import logging
import math
import mimetypes
import re
from typing import Optional, Tuple, Union

import cv2
import numpy as np
from PIL import Image, UnidentifiedImageError

from common.constants import ImageConstants, PdfConstants
from common.enums import ImageFormat
from core.errors import DecodeFailureError, EncodeFailureError, InvalidInputTypeError
from core.raster import Raster

logger = logging.getLogger(__name__)

_EXTENSION_RE = re.compile(r"\.[^/.]+$")


def normalize_mime_type(mime_type: Optional[str]) -> str:
    """Lower-case a MIME type and map image/jpg to image/jpeg."""
    value = (mime_type or "").split(";")[0].strip().lower()
    return "image/jpeg" if value == "image/jpg" else value


def resolve_mime_type(content_type: Optional[str], filename: Optional[str] = None) -> str:
    """
    Determine the MIME type of an upload.

    Uses the declared content type unless it is missing or generic, in
    which case the filename extension is consulted.
    """
    declared = normalize_mime_type(content_type)
    if declared and declared != "application/octet-stream":
        return declared
    if filename:
        guessed, _ = mimetypes.guess_type(filename)
        if guessed:
            return normalize_mime_type(guessed)
    return declared


def validate_image_type(mime_type: Optional[str]) -> ImageFormat:
    """
    Check that an image tool accepts this MIME type.

    Returns:
        The matching ImageFormat

    Raises:
        InvalidInputTypeError: For anything that is not a supported image
    """
    normalized = normalize_mime_type(mime_type)
    if normalized not in ImageConstants.SUPPORTED_INPUT_TYPES:
        raise InvalidInputTypeError(normalized, ImageConstants.SUPPORTED_INPUT_TYPES)
    return ImageFormat.from_mime(normalized)


def validate_pdf_type(mime_type: Optional[str]) -> str:
    """
    Check that a PDF tool accepts this MIME type.

    Raises:
        InvalidInputTypeError: For anything that is not application/pdf
    """
    normalized = normalize_mime_type(mime_type)
    if normalized != PdfConstants.MIME_TYPE:
        raise InvalidInputTypeError(normalized, [PdfConstants.MIME_TYPE])
    return normalized


def _decode_with_pillow(data: bytes) -> Raster:
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.seek(0)
            return Raster.from_array(np.asarray(img.convert("RGBA")))
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise DecodeFailureError(f"Failed to decode image: {e}") from e


def decode_image(data: bytes, mime_type: Optional[str] = None) -> Raster:
    """
    Decode image bytes into an RGBA raster.

    Args:
        data: Encoded file contents
        mime_type: Declared MIME type; GIF input uses its first frame

    Raises:
        DecodeFailureError: If the bytes are empty or not a readable image
    """
    if not data:
        raise DecodeFailureError("Empty image data")

    if normalize_mime_type(mime_type) == "image/gif" or data[:4] == b"GIF8":
        return _decode_with_pillow(data)

    image = cv2.imdecode(np.frombuffer(data, np.uint8), cv2.IMREAD_UNCHANGED)
    if image is None:
        raise DecodeFailureError("Failed to decode image")

    if image.dtype == np.uint16:
        image = (image // 257).astype(np.uint8)

    if image.ndim == 2:
        rgba = cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA)
    elif image.shape[2] == 4:
        rgba = cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA)
    else:
        rgba = cv2.cvtColor(image, cv2.COLOR_BGR2RGBA)

    logger.debug(f"Decoded {len(data)} bytes -> {rgba.shape[1]}x{rgba.shape[0]}")
    return Raster(rgba)


def _flatten_on_black(raster: Raster) -> np.ndarray:
    """BGR pixels with transparency composited onto black."""
    pixels = raster.pixels.astype(np.float32)
    alpha = pixels[:, :, 3:4] / 255.0
    rgb = np.clip(np.rint(pixels[:, :, :3] * alpha), 0, 255).astype(np.uint8)
    return cv2.cvtColor(rgb, cv2.COLOR_RGB2BGR)


def _quality_percent(quality: Optional[float]) -> int:
    if quality is None:
        quality = ImageConstants.DEFAULT_QUALITY
    quality = min(max(float(quality), ImageConstants.MIN_QUALITY), ImageConstants.MAX_QUALITY)
    return int(round(quality * 100))


def encode_image(
    raster: Raster, image_format: Union[ImageFormat, str], quality: Optional[float] = None
) -> bytes:
    """
    Encode a raster.

    Args:
        raster: Image to encode
        image_format: ImageFormat or MIME type
        quality: 0.0 - 1.0, used by JPEG and WebP only

    Returns:
        Encoded bytes

    Raises:
        EncodeFailureError: If the encoder produced no output
    """
    if not isinstance(image_format, ImageFormat):
        image_format = ImageFormat.from_mime(normalize_mime_type(image_format))

    try:
        if image_format is ImageFormat.GIF:
            buffer = io.BytesIO()
            Image.fromarray(raster.pixels, "RGBA").save(buffer, format="GIF")
            encoded = buffer.getvalue()
        else:
            if image_format is ImageFormat.JPEG:
                pixels = _flatten_on_black(raster)
                params = [cv2.IMWRITE_JPEG_QUALITY, _quality_percent(quality)]
            elif image_format is ImageFormat.WEBP:
                pixels = cv2.cvtColor(raster.pixels, cv2.COLOR_RGBA2BGRA)
                params = [cv2.IMWRITE_WEBP_QUALITY, max(1, _quality_percent(quality))]
            elif image_format is ImageFormat.BMP:
                pixels = _flatten_on_black(raster)
                params = []
            else:
                pixels = cv2.cvtColor(raster.pixels, cv2.COLOR_RGBA2BGRA)
                params = [cv2.IMWRITE_PNG_COMPRESSION, 6]

            success, buffer = cv2.imencode(image_format.extension, pixels, params)
            encoded = buffer.tobytes() if success else b""
    except (cv2.error, OSError, ValueError) as e:
        raise EncodeFailureError(f"Failed to encode {image_format.value}: {e}") from e

    if not encoded:
        raise EncodeFailureError(f"Encoder produced no output for {image_format.value}")

    logger.debug(
        f"Encoded {raster.width}x{raster.height} as {image_format.value} ({len(encoded)} bytes)"
    )
    return encoded


def compress_image(
    data: bytes,
    mime_type: str,
    quality: float = ImageConstants.DEFAULT_COMPRESS_QUALITY,
    output_format: Optional[ImageFormat] = None,
) -> Tuple[bytes, str]:
    """
    Re-encode an image at a lower quality.

    When the output format matches the input and the re-encoded file is
    not smaller, the original bytes are returned unchanged.

    Returns:
        (bytes, mime_type)
    """
    source_format = validate_image_type(mime_type)
    target_format = output_format or source_format

    encoded = encode_image(decode_image(data, mime_type), target_format, quality)

    if target_format is source_format and len(encoded) >= len(data):
        logger.debug(
            f"Compressed size {len(encoded)} >= original {len(data)}, keeping original"
        )
        return data, source_format.mime_type

    return encoded, target_format.mime_type


def format_file_size(num_bytes: int) -> str:
    """
    Human readable file size.

    Examples:
        0 -> "0 Bytes", 1536 -> "1.5 KB", 1048576 -> "1 MB"
    """
    if num_bytes <= 0:
        return "0 Bytes"

    units = ImageConstants.FILE_SIZE_UNITS
    i = 0
    while i < len(units) - 1 and num_bytes >= 1024 ** (i + 1):
        i += 1

    value = float(f"{num_bytes / 1024 ** i:.2f}")
    return f"{value:g} {units[i]}"


def savings_percent(original_size: int, compressed_size: int) -> int:
    """Whole percent saved by compression, e.g. 1000 -> 640 bytes gives 36."""
    if original_size <= 0:
        return 0
    return int(math.floor((1 - compressed_size / original_size) * 100 + 0.5))


def strip_extension(filename: str) -> str:
    return _EXTENSION_RE.sub("", filename)


def derive_output_name(filename: Optional[str], suffix: str, extension: str) -> str:
    """
    Build a result file name from the source name.

    Example:
        derive_output_name("photo.png", "_rotated", ".jpg") -> "photo_rotated.jpg"
    """
    return f"{strip_extension(filename or 'image')}{suffix}{extension}"


def prefixed_output_name(prefix: str, filename: Optional[str], default: str = "image") -> str:
    """Example: prefixed_output_name("resized_", "cat.png") -> "resized_cat.png"."""
    return f"{prefix}{filename or default}"


def to_base64(data: bytes, mime_type: str) -> str:
    """Encode bytes as a data URI."""
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('utf-8')}"


def create_thumbnail(raster: Raster, width: int = ImageConstants.DEFAULT_THUMBNAIL_WIDTH) -> str:
    """
    Create a preview thumbnail as a data URI.

    Opaque images become JPEG, images with transparency stay PNG.
    Images narrower than width are not enlarged.
    """
    width = min(int(width), raster.width)
    height = max(1, int(raster.height * width / raster.width))

    thumbnail = Raster(
        cv2.resize(raster.pixels, (width, height), interpolation=cv2.INTER_AREA)
    )

    if bool(np.all(thumbnail.pixels[:, :, 3] == 255)):
        image_format, quality = ImageFormat.JPEG, ImageConstants.THUMBNAIL_JPEG_QUALITY / 100
    else:
        image_format, quality = ImageFormat.PNG, None

    return to_base64(encode_image(thumbnail, image_format, quality), image_format.mime_type)
