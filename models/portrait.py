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
"""Portrait data types shared by capture, generation and the workflow."""

import base64
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field

_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
}


def extension_for_mime_type(mime_type: str | None) -> str:
    """Returns a file extension for an image MIME type, defaulting to png."""
    if not mime_type:
        return "png"
    return _EXTENSIONS.get(mime_type.lower(), mime_type.split("/")[-1] or "png")


@dataclass(frozen=True)
class PortraitImage:
    """An encoded raster image. `data` is the raw payload, never base64."""

    data: bytes
    mime_type: str = "image/jpeg"

    def __post_init__(self):
        if not self.data:
            raise ValueError("PortraitImage requires a non-empty payload.")

    @property
    def extension(self) -> str:
        return extension_for_mime_type(self.mime_type)

    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    def to_data_url(self) -> str:
        """Renders the image as a data URL for display in the browser."""
        return f"data:{self.mime_type};base64,{self.to_base64()}"

    def __repr__(self) -> str:
        return f"PortraitImage(mime_type={self.mime_type!r}, size={len(self.data)})"


class PortraitAnalysis(BaseModel):
    """Structured description of a captured portrait.

    Field aliases match the JSON the model is asked to return.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, strict=True, extra="ignore")

    description: str
    suggested_era: str = Field(alias="suggestedEra")
    visual_traits: list[str] = Field(alias="visualTraits")
