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

import base64
import io

import pytest
from PIL import Image

from conftest import make_image_bytes
from common.error_handling import CaptureError
from models.capture import (
    capture_from_file,
    capture_from_frame,
    center_square_box,
    strip_data_url_prefix,
)


def _open(data: bytes) -> Image.Image:
    return Image.open(io.BytesIO(data))


def test_frame_is_cropped_to_a_square_jpeg():
    image = capture_from_frame(make_image_bytes(640, 480))

    assert image.mime_type == "image/jpeg"
    with _open(image.data) as img:
        assert img.format == "JPEG"
        assert img.size == (1024, 1024)


def test_frame_accepts_a_data_url():
    frame = "data:image/png;base64," + base64.b64encode(make_image_bytes(300, 500)).decode()
    image = capture_from_frame(frame, size=256)

    # Raw bytes, never a data URL.
    assert not image.data.startswith(b"data:")
    with _open(image.data) as img:
        assert img.size == (256, 256)


def test_frame_crop_keeps_the_center():
    # Red left and right thirds, green center third.
    img = Image.new("RGB", (300, 100), (255, 0, 0))
    img.paste((0, 255, 0), (100, 0, 200, 100))
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")

    image = capture_from_frame(buffer.getvalue(), size=64)
    with _open(image.data) as out:
        r, g, _ = out.convert("RGB").getpixel((32, 32))
    assert g > 200 and r < 60


@pytest.mark.parametrize(
    "width, height, expected",
    [
        (640, 480, (80, 0, 560, 480)),
        (480, 640, (0, 80, 480, 560)),
        (500, 500, (0, 0, 500, 500)),
    ],
)
def test_center_square_box(width, height, expected):
    assert center_square_box(width, height) == expected


def test_center_square_box_rejects_empty_frame():
    with pytest.raises(CaptureError):
        center_square_box(0, 480)


def test_strip_data_url_prefix():
    assert strip_data_url_prefix("data:image/png;base64,QUJD") == ("image/png", "QUJD")
    assert strip_data_url_prefix("QUJD") == (None, "QUJD")
    with pytest.raises(CaptureError):
        strip_data_url_prefix("data:image/png;base64")


def test_frame_with_invalid_base64_is_a_capture_error():
    with pytest.raises(CaptureError):
        capture_from_frame("data:image/png;base64,!!!not-base64!!!")


def test_frame_with_no_data_is_a_capture_error():
    with pytest.raises(CaptureError):
        capture_from_frame(b"")


def test_uploaded_file_is_used_unchanged():
    data = make_image_bytes(640, 480, "PNG")
    image = capture_from_file(data, "image/png")

    assert image.data == data
    assert image.mime_type == "image/png"
    with _open(image.data) as img:
        assert img.size == (640, 480)


def test_uploaded_file_mime_type_from_data_url():
    data = make_image_bytes(40, 20, "JPEG")
    image = capture_from_file("data:image/jpeg;base64," + base64.b64encode(data).decode())
    assert image.data == data
    assert image.mime_type == "image/jpeg"
    assert image.extension == "jpg"


def test_uploaded_non_image_is_rejected():
    with pytest.raises(CaptureError):
        capture_from_file(b"%PDF-1.4", "application/pdf")


def test_uploaded_undecodable_image_is_rejected():
    with pytest.raises(CaptureError):
        capture_from_file(b"definitely not a png", "image/png")
