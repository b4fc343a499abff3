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

from __future__ import annotations

import io

from absl import logging
from PIL import Image

from models.portrait import PortraitImage


def get_image_dimensions(image: PortraitImage | None) -> tuple[int, int] | None:
    """Retrieves the width and height of a portrait.

    Args:
        image: The portrait to inspect.

    Returns:
        A tuple (width, height) if successful, or None if an error occurs.
    """
    if image is None:
        return None
    try:
        with Image.open(io.BytesIO(image.data)) as img:
            return img.size
    except Exception as e:
        logging.info(f"App: Error getting image dimensions: {e}")
        return None


def describe_image(image: PortraitImage | None) -> str:
    """Short caption such as '1024x1024 JPG' for display under an image."""
    dimensions = get_image_dimensions(image)
    if image is None or dimensions is None:
        return ""
    width, height = dimensions
    return f"{width}x{height} {image.extension.upper()}"
