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

import asyncio
import io
import os
import sys

import pytest
from PIL import Image

# Add the project root to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from models.portrait import PortraitAnalysis, PortraitImage  # noqa: E402


def make_image_bytes(width: int, height: int, fmt: str = "PNG", color=(200, 120, 40)) -> bytes:
    """Encodes a solid-color test image."""
    output = io.BytesIO()
    Image.new("RGB", (width, height), color).save(output, format=fmt)
    return output.getvalue()


class FakeGenerationClient:
    """Stands in for GeminiGenerationClient.

    Each operation pops its next outcome from a queue: a value is returned,
    an exception is raised. When `gate` is set, calls wait on it first so a
    test can observe the in-flight state.
    """

    def __init__(self):
        self.calls = []
        self.analysis_outcomes = []
        self.transport_outcomes = []
        self.edit_outcomes = []
        self.gate: asyncio.Event | None = None
        # Calls currently waiting to settle, and the most seen at once.
        self.outstanding = 0
        self.max_outstanding = 0

    async def _settle(self, outcomes, default):
        self.outstanding += 1
        self.max_outstanding = max(self.max_outstanding, self.outstanding)
        try:
            if self.gate is not None:
                await self.gate.wait()
        finally:
            self.outstanding -= 1
        outcome = outcomes.pop(0) if outcomes else default
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    async def analyze_portrait(self, image):
        self.calls.append(("analyze", image))
        return await self._settle(self.analysis_outcomes, sample_analysis())

    async def transport_to_era(self, image, era):
        self.calls.append(("transport", image, era))
        return await self._settle(
            self.transport_outcomes, PortraitImage(data=f"era:{era.id}".encode(), mime_type="image/png")
        )

    async def edit_portrait(self, image, edit_prompt):
        self.calls.append(("edit", image, edit_prompt))
        return await self._settle(
            self.edit_outcomes, PortraitImage(data=f"edit:{edit_prompt}".encode(), mime_type="image/png")
        )

    def count(self, operation: str) -> int:
        return sum(1 for call in self.calls if call[0] == operation)


def sample_analysis(suggested_era: str = "Viking Age") -> PortraitAnalysis:
    return PortraitAnalysis.model_validate(
        {
            "description": "A calm, determined face with a strong jawline.",
            "suggestedEra": suggested_era,
            "visualTraits": ["beard", "sharp eyes"],
        }
    )


@pytest.fixture
def fake_client():
    return FakeGenerationClient()


@pytest.fixture
def portrait():
    return PortraitImage(data=make_image_bytes(64, 64, "JPEG"), mime_type="image/jpeg")
