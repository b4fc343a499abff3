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
"""Application configuration, read from the environment."""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv(override=True)


def _as_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Default:
    """Defaults for the Temporal Portrait app."""

    # pylint: disable=invalid-name

    # Gemini access: an API key, or a Vertex AI project/location.
    PROJECT_ID: str = os.environ.get("PROJECT_ID", "")
    LOCATION: str = os.environ.get("LOCATION", "us-central1")
    GEMINI_API_KEY: str = os.environ.get("GEMINI_API_KEY", "")
    USE_VERTEXAI: bool = _as_bool(os.environ.get("USE_VERTEXAI"))

    # Models
    ANALYSIS_MODEL_ID: str = os.environ.get("ANALYSIS_MODEL_ID", "gemini-3-pro-preview")
    IMAGE_MODEL_ID: str = os.environ.get("IMAGE_MODEL_ID", "gemini-2.5-flash-image")

    # Capture
    CAPTURE_SIZE: int = int(os.environ.get("CAPTURE_SIZE", "1024"))
    CAPTURE_JPEG_QUALITY: int = int(os.environ.get("CAPTURE_JPEG_QUALITY", "85"))

    # Remote calls. A value <= 0 disables the bound.
    REMOTE_CALL_TIMEOUT_SECONDS: float = float(
        os.environ.get("REMOTE_CALL_TIMEOUT_SECONDS", "120")
    )

    DOWNLOAD_PREFIX: str = os.environ.get("DOWNLOAD_PREFIX", "temporal-portrait")
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")
