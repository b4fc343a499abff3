# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Turns camera frames and uploaded files into portraits."""

import base64
import binascii
import io
import logging

from PIL import Image, UnidentifiedImageError

from common.error_handling import CaptureError
from config.default import Default
from models.portrait import PortraitImage

logger = logging.getLogger(__name__)

cfg = Default()

ACCEPTED_UPLOAD_TYPES = ["image/jpeg", "image/png", "image/webp"]


def strip_data_url_prefix(payload: str) -> tuple[str | None, str]:
    """Splits a data URL into its MIME type and base64 body.

    A bare base64 string is returned unchanged with no MIME type.
    """
    if not payload.startswith("data:"):
        return None, payload
    try:
        header, encoded = payload.split(",", 1)
    except ValueError as e:
        raise CaptureError("Malformed data URL: missing payload.") from e
    mime_type = header[len("data:"):].split(";")[0] or None
    return mime_type, encoded


def _decode_payload(payload: bytes | str) -> tuple[str | None, bytes]:
    if isinstance(payload, bytes):
        return None, payload
    mime_type, encoded = strip_data_url_prefix(payload.strip())
    try:
        return mime_type, base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise CaptureError("Image payload is not valid base64.") from e


def _open_image(data: bytes) -> Image.Image:
    if not data:
        raise CaptureError("No image data was captured.")
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
        return img
    except (UnidentifiedImageError, OSError) as e:
        raise CaptureError(f"Could not read image: {e}") from e


def center_square_box(width: int, height: int) -> tuple[int, int, int, int]:
    """Returns the (left, upper, right, lower) box of the largest centered square."""
    if width <= 0 or height <= 0:
        raise CaptureError(f"Invalid frame dimensions: {width}x{height}")
    size = min(width, height)
    left = (width - size) // 2
    top = (height - size) // 2
    return left, top, left + size, top + size


def capture_from_frame(
    frame: bytes | str,
    size: int | None = None,
    quality: int | None = None,
) -> PortraitImage:
    """Crops a live camera frame to a centered square and encodes it as JPEG.

    Args:
        frame: The full frame, as encoded bytes or a data URL from the camera component.
        size: Edge length of the square output. Defaults to CAPTURE_SIZE.
        quality: JPEG quality factor. Defaults to CAPTURE_JPEG_QUALITY.

    Returns:
        A PortraitImage holding raw JPEG bytes.
    """
    size = size or cfg.CAPTURE_SIZE
    quality = quality or cfg.CAPTURE_JPEG_QUALITY

    _, data = _decode_payload(frame)
    with _open_image(data) as img:
        box = center_square_box(img.width, img.height)
        square = img.convert("RGB").resize((size, size), Image.LANCZOS, box=box)

    output = io.BytesIO()
    square.save(output, format="JPEG", quality=quality)
    logger.info(f"Captured frame {box} -> {size}x{size} JPEG (q={quality})")
    return PortraitImage(data=output.getvalue(), mime_type="image/jpeg")


def capture_from_file(contents: bytes | str, mime_type: str | None = None) -> PortraitImage:
    """Reads an uploaded image as-is, without cropping or resizing.

    Args:
        contents: The file bytes, or a data URL produced by a file reader.
        mime_type: The MIME type reported by the picker. Falls back to the
            data URL header when omitted.
    """
    header_mime, data = _decode_payload(contents)
    mime_type = (mime_type or header_mime or "").lower()
    if not mime_type.startswith("image/"):
        raise CaptureError(f"Unsupported file type: {mime_type or 'unknown'}")

    # Only checks that the payload decodes; the original bytes are kept.
    _open_image(data).close()
    return PortraitImage(data=data, mime_type=mime_type)
