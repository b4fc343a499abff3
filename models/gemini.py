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
"""Gemini calls behind the Temporal Portrait workflow: analyze, transport, edit."""

from google import genai
from google.genai import types
from pydantic import ValidationError

from common.analytics import get_logger, track_model_call
from common.error_handling import AnalysisParseError, NoImageProducedError
from config.default import Default
from config.historical_eras import HistoricalEra
from models.portrait import PortraitAnalysis, PortraitImage

logger = get_logger(__name__)

ANALYSIS_INSTRUCTION = (
    "Analyze this person's portrait. Describe their prominent facial features, "
    "expression, and overall vibe. Then, suggest which historical era from this list "
    "they would fit best into: Ancient Egypt, Renaissance, Viking Age, 1920s, or 1960s. "
    "Return the result in a strict JSON format with fields: 'description', "
    "'suggestedEra', and 'visualTraits' (an array of strings)."
)


def init_client(cfg: Default | None = None) -> genai.Client:
    """Initializes the GenAI client from an API key or a Vertex AI project."""
    cfg = cfg or Default()
    if cfg.GEMINI_API_KEY and not cfg.USE_VERTEXAI:
        return genai.Client(api_key=cfg.GEMINI_API_KEY)
    return genai.Client(vertexai=True, project=cfg.PROJECT_ID, location=cfg.LOCATION)


def _image_part(image: PortraitImage) -> types.Part:
    return types.Part.from_bytes(data=image.data, mime_type=image.mime_type)


def extract_inline_image(response: types.GenerateContentResponse) -> PortraitImage | None:
    """Returns the first inline image of the first candidate, if there is one."""
    if not response.candidates:
        return None
    content = response.candidates[0].content
    for part in (content.parts if content and content.parts else []):
        if part.inline_data and part.inline_data.data:
            return PortraitImage(
                data=part.inline_data.data,
                mime_type=part.inline_data.mime_type or "image/png",
            )
    return None


class GeminiGenerationClient:
    """Stateless request/response calls against Gemini.

    No call is retried here; every failure reaches the caller as a single
    exception.
    """

    def __init__(self, client: genai.Client | None = None, cfg: Default | None = None):
        self._cfg = cfg or Default()
        self._client = client

    @property
    def client(self) -> genai.Client:
        # Created on first use so the app can start without credentials.
        if self._client is None:
            self._client = init_client(self._cfg)
        return self._client

    async def analyze_portrait(self, image: PortraitImage) -> PortraitAnalysis:
        """Describes the portrait and suggests an era.

        Raises:
            AnalysisParseError: The response did not match the analysis schema.
        """
        model_id = self._cfg.ANALYSIS_MODEL_ID
        logger.info(f"Analyzing portrait with model: {model_id}")

        with track_model_call(model_id, operation="analyze"):
            response = await self.client.aio.models.generate_content(
                model=model_id,
                contents=[_image_part(image), ANALYSIS_INSTRUCTION],
                config=types.GenerateContentConfig(
                    response_mime_type="application/json",
                    response_schema=PortraitAnalysis.model_json_schema(),
                ),
            )
            text = response.text
            if not text:
                raise AnalysisParseError("Portrait analysis returned no content.")
            try:
                return PortraitAnalysis.model_validate_json(text)
            except ValidationError as e:
                logger.error(f"Unparseable analysis response: {text!r}")
                raise AnalysisParseError(f"Portrait analysis was malformed: {e}") from e

    async def _generate_image(
        self, image: PortraitImage, instruction: str, operation: str, failure_message: str
    ) -> PortraitImage:
        model_id = self._cfg.IMAGE_MODEL_ID
        with track_model_call(model_id, operation=operation):
            response = await self.client.aio.models.generate_content(
                model=model_id,
                contents=[_image_part(image), instruction],
                config=types.GenerateContentConfig(
                    response_modalities=["TEXT", "IMAGE"],
                ),
            )
            generated = extract_inline_image(response)
            if generated is None:
                raise NoImageProducedError(failure_message)
            return generated

    async def transport_to_era(self, image: PortraitImage, era: HistoricalEra) -> PortraitImage:
        """Renders the portrait into the given era."""
        logger.info(f"Transporting portrait to era: {era.id}")
        return await self._generate_image(
            image, era.prompt, "transport", "Failed to generate temporal portrait."
        )

    async def edit_portrait(self, image: PortraitImage, edit_prompt: str) -> PortraitImage:
        """Applies a free-text edit to a previously generated portrait."""
        logger.info(f"Editing portrait: {edit_prompt!r}")
        return await self._generate_image(image, edit_prompt, "refine", "Temporal edit failed.")
