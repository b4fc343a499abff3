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
"""Orchestration for the Temporal Portrait photo booth.

A `TemporalPortraitSession` owns the current step, the single in-flight
remote operation, and everything produced so far (portrait, analysis,
generated result). The page only calls intent methods and reads
properties; it never assigns session fields directly.
"""

import asyncio
import itertools
import logging
from collections import OrderedDict
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Optional

from common.analytics import log_step_transition
from common.error_handling import (
    CaptureError,
    EmptyEditPromptError,
    InvalidIntentError,
    InvalidTransitionError,
    OperationInProgressError,
    RemoteCallTimeoutError,
)
from config.default import Default
from config.historical_eras import (
    HISTORICAL_ERAS,
    HistoricalEra,
    get_historical_era,
    match_suggested_era,
)
from models.capture import capture_from_file, capture_from_frame
from models.gemini import GeminiGenerationClient
from models.portrait import PortraitAnalysis, PortraitImage

# Set up logging
logger = logging.getLogger(__name__)

ANALYSIS_FAILED_NOTICE = "Portrait analysis failed. Please try again or retake your photo."
TRANSPORT_FAILED_NOTICE = "Temporal drift detected. Please try again."
EDIT_FAILED_NOTICE = "Unable to modify timeline."

EDIT_SUGGESTIONS = (
    "Add a retro filter",
    "Make it cinematic",
    "Increase lighting",
    "Add more gold",
    "Add film grain",
)


class Step(str, Enum):
    LANDING = "landing"
    CAPTURING = "capturing"
    ANALYZING = "analyzing"
    ERA_SELECTION = "era_selection"
    GENERATING = "generating"
    RESULT = "result"


@dataclass(frozen=True)
class InFlightOperation:
    label: str
    token: int


@dataclass
class GenerationResult:
    image: PortraitImage
    era: HistoricalEra
    original_image: PortraitImage
    applied_edits: list[str] = field(default_factory=list)


class TemporalPortraitSession:
    """Linear state machine: landing, capture, analysis, era selection, generation, result."""

    def __init__(
        self,
        generation_client: GeminiGenerationClient | None = None,
        timeout_seconds: float | None = None,
        download_prefix: str | None = None,
    ):
        cfg = Default()
        self._client = generation_client or GeminiGenerationClient(cfg=cfg)
        self._timeout = (
            cfg.REMOTE_CALL_TIMEOUT_SECONDS if timeout_seconds is None else timeout_seconds
        )
        self._download_prefix = download_prefix or cfg.DOWNLOAD_PREFIX

        self._tokens = itertools.count(1)
        self._epoch = 0
        self._in_flight: Optional[InFlightOperation] = None
        self._remote_task: Optional[asyncio.Task] = None
        self._clear()

    def _clear(self):
        self._step = Step.LANDING
        self._portrait: Optional[PortraitImage] = None
        self._analysis: Optional[PortraitAnalysis] = None
        self._result: Optional[GenerationResult] = None
        self._edit_prompt = ""
        self._notice: Optional[str] = None
        self._capture_error: Optional[str] = None

    # --- Read-only view ---

    @property
    def step(self) -> Step:
        return self._step

    @property
    def portrait(self) -> Optional[PortraitImage]:
        return self._portrait

    @property
    def analysis(self) -> Optional[PortraitAnalysis]:
        return self._analysis

    @property
    def result(self) -> Optional[GenerationResult]:
        return self._result

    @property
    def in_flight(self) -> Optional[InFlightOperation]:
        return self._in_flight

    @property
    def is_busy(self) -> bool:
        return self._in_flight is not None

    @property
    def edit_prompt(self) -> str:
        return self._edit_prompt

    @property
    def notice(self) -> Optional[str]:
        return self._notice

    @property
    def capture_error(self) -> Optional[str]:
        return self._capture_error

    @property
    def eras(self) -> tuple[HistoricalEra, ...]:
        return HISTORICAL_ERAS

    @property
    def suggested_era(self) -> Optional[HistoricalEra]:
        """The catalog era matching the analysis suggestion, if any."""
        if self._analysis is None:
            return None
        return match_suggested_era(self._analysis.suggested_era)

    @property
    def can_submit_edit(self) -> bool:
        return (
            self._step == Step.RESULT
            and self._result is not None
            and not self.is_busy
            and bool(self._edit_prompt.strip())
        )

    def download_filename(self) -> str:
        """Deterministic filename for the current result, e.g. temporal-portrait-vikings.png."""
        if self._result is None:
            raise InvalidTransitionError("There is no generated portrait to download.")
        return f"{self._download_prefix}-{self._result.era.id}.{self._result.image.extension}"

    def _set_step(self, step: Step, intent: str):
        if step != self._step:
            log_step_transition(self._step.value, step.value, intent)
        self._step = step

    # --- Guards ---

    def _require_step(self, intent: str, *steps: Step):
        if self._step not in steps:
            raise InvalidTransitionError(
                f"Cannot {intent} while in step '{self._step.value}'."
            )

    def _require_idle(self, intent: str):
        if self._in_flight is not None:
            raise OperationInProgressError(
                f"Cannot {intent} while '{self._in_flight.label}' is in progress."
            )

    @asynccontextmanager
    async def _single_flight(self, label: str):
        # No await between the check and the assignment.
        self._require_idle(label)
        operation = InFlightOperation(label=label, token=next(self._tokens))
        self._in_flight = operation
        try:
            yield operation
        finally:
            # A reset (or a newer operation) may already own the slot.
            if self._in_flight is operation:
                self._in_flight = None

    async def _bounded(self, awaitable: Awaitable):
        if not self._timeout or self._timeout <= 0:
            return await awaitable
        try:
            return await asyncio.wait_for(awaitable, timeout=self._timeout)
        except asyncio.TimeoutError as e:
            raise RemoteCallTimeoutError(
                f"Remote call did not finish within {self._timeout} seconds."
            ) from e

    async def _run_remote(
        self,
        label: str,
        call: Callable[[], Awaitable],
        on_success: Callable[[object], None],
        on_failure: Callable[[], None],
    ) -> bool:
        """Runs one remote call under the single-flight guard and settles it.

        Returns True when the call succeeded and its result was committed.
        The call runs as its own task so `reset()` can cancel it.
        """
        epoch = self._epoch

        async def invoke():
            return await self._bounded(call())

        async with self._single_flight(label):
            task = asyncio.create_task(invoke())
            self._remote_task = task
            try:
                value = await task
            except asyncio.CancelledError:
                if epoch == self._epoch:
                    raise
                logger.info(f"'{label}' cancelled by reset.")
                return False
            except Exception:
                if epoch != self._epoch:
                    logger.info(f"Ignoring failure of '{label}' after reset.")
                    return False
                logger.exception(f"'{label}' failed")
                on_failure()
                return False
            finally:
                if self._remote_task is task:
                    self._remote_task = None

            if epoch != self._epoch:
                logger.info(f"Discarding result of '{label}' after reset.")
                return False
            on_success(value)
            return True

    # --- Intents ---

    def begin_capture(self):
        self._require_step("begin capture", Step.LANDING)
        self._capture_error = None
        self._notice = None
        self._set_step(Step.CAPTURING, "begin_capture")

    def cancel_capture(self):
        self._require_step("cancel capture", Step.CAPTURING)
        self._require_idle("cancel capture")
        self._capture_error = None
        self._set_step(Step.LANDING, "cancel_capture")

    def report_capture_error(self, message: str):
        """Records a camera acquisition failure. The upload path stays available."""
        self._require_step("report a capture error", Step.CAPTURING)
        logger.warning(f"Camera acquisition failed: {message}")
        self._capture_error = message or "Unable to access camera. Please check permissions."

    async def submit_frame(self, frame: bytes | str) -> bool:
        """Crops and encodes a live camera frame, then analyzes it."""
        return await self._submit_captured(lambda: capture_from_frame(frame))

    async def submit_upload(self, contents: bytes | str, mime_type: str | None = None) -> bool:
        """Uses an uploaded file as the portrait, then analyzes it."""
        return await self._submit_captured(lambda: capture_from_file(contents, mime_type))

    async def _submit_captured(self, capture: Callable[[], PortraitImage]) -> bool:
        self._require_step("capture", Step.CAPTURING)
        self._require_idle("capture")
        epoch = self._epoch
        try:
            # Decoding and resizing are CPU bound; keep them off the event loop.
            image = await asyncio.to_thread(capture)
        except CaptureError as e:
            if epoch != self._epoch:
                return False
            logger.warning(f"Capture failed: {e.message}")
            self._capture_error = e.message
            return False
        if epoch != self._epoch:
            logger.info("Discarding capture after reset.")
            return False
        return await self.submit_capture(image)

    async def submit_capture(self, image: PortraitImage) -> bool:
        """Stores the captured portrait and runs the analysis."""
        self._require_step("submit a capture", Step.CAPTURING)
        self._require_idle("submit a capture")
        self._portrait = image
        self._analysis = None
        self._capture_error = None
        self._notice = None
        self._set_step(Step.ANALYZING, "submit_capture")
        return await self._analyze()

    async def retry_analysis(self) -> bool:
        """Re-runs the analysis on the stored portrait after a failure."""
        self._require_step("retry analysis", Step.ANALYZING)
        self._require_idle("retry analysis")
        if self._portrait is None or self._analysis is not None:
            raise InvalidTransitionError("Nothing to retry: analysis is not in a failed state.")
        self._notice = None
        return await self._analyze()

    async def _analyze(self) -> bool:
        portrait = self._portrait

        def on_success(analysis):
            self._analysis = analysis
            logger.info(f"Portrait analyzed; suggested era: {analysis.suggested_era!r}")

        def on_failure():
            self._notice = ANALYSIS_FAILED_NOTICE

        return await self._run_remote(
            "Analyzing Portrait Metadata...",
            lambda: self._client.analyze_portrait(portrait),
            on_success,
            on_failure,
        )

    def recapture(self):
        """Drops the current portrait and returns to the camera."""
        self._require_step("recapture", Step.ANALYZING)
        self._require_idle("recapture")
        self._portrait = None
        self._analysis = None
        self._notice = None
        self._set_step(Step.CAPTURING, "recapture")

    def confirm_analysis(self):
        self._require_step("confirm the analysis", Step.ANALYZING)
        self._require_idle("confirm the analysis")
        if self._analysis is None:
            raise InvalidTransitionError("Cannot continue before the portrait is analyzed.")
        self._set_step(Step.ERA_SELECTION, "confirm_analysis")

    async def select_era(self, era_id: str) -> bool:
        """Generates the portrait in the chosen era."""
        self._require_step("select an era", Step.ERA_SELECTION)
        self._require_idle("select an era")
        era = get_historical_era(era_id)
        if era is None:
            raise InvalidIntentError(f"Unknown era: {era_id}")
        if self._portrait is None:
            raise InvalidTransitionError("Cannot select an era without a portrait.")

        portrait = self._portrait
        self._notice = None
        self._set_step(Step.GENERATING, "select_era")

        def on_success(image):
            self._result = GenerationResult(image=image, era=era, original_image=portrait)
            self._edit_prompt = ""
            self._set_step(Step.RESULT, "select_era")

        def on_failure():
            self._notice = TRANSPORT_FAILED_NOTICE
            self._set_step(Step.ERA_SELECTION, "select_era")

        return await self._run_remote(
            f"Calibrating Chronometers for {era.name}...",
            lambda: self._client.transport_to_era(portrait, era),
            on_success,
            on_failure,
        )

    def set_edit_prompt(self, text: str):
        self._require_step("edit the prompt", Step.RESULT)
        self._edit_prompt = text or ""

    def apply_edit_suggestion(self, suggestion: str):
        self.set_edit_prompt(suggestion)

    async def submit_edit(self) -> bool:
        """Refines the current result with the buffered edit prompt."""
        self._require_step("submit an edit", Step.RESULT)
        self._require_idle("submit an edit")
        submitted = self._edit_prompt
        instruction = submitted.strip()
        if not instruction:
            raise EmptyEditPromptError("Enter an edit instruction first.")
        result = self._result
        if result is None:
            raise InvalidTransitionError("There is no generated portrait to refine.")

        current = result.image
        self._notice = None

        def on_success(image):
            result.image = image
            result.applied_edits.append(instruction)
            # Keep anything typed while the edit was running.
            if self._edit_prompt == submitted:
                self._edit_prompt = ""

        def on_failure():
            self._notice = EDIT_FAILED_NOTICE

        return await self._run_remote(
            "Applying Temporal Corrections...",
            lambda: self._client.edit_portrait(current, instruction),
            on_success,
            on_failure,
        )

    def change_destination(self):
        """Discards the current result (and its edits) and returns to era selection."""
        self._require_step("change destination", Step.RESULT)
        self._require_idle("change destination")
        self._result = None
        self._edit_prompt = ""
        self._notice = None
        self._set_step(Step.ERA_SELECTION, "change_destination")

    def dismiss_notice(self):
        self._notice = None

    def reset(self):
        """Returns to the landing step and forgets everything. Always succeeds."""
        if self._step != Step.LANDING:
            log_step_transition(self._step.value, Step.LANDING.value, "reset")
        self._epoch += 1
        # Stop the outstanding call so a new flow never overlaps it.
        if self._remote_task is not None:
            self._remote_task.cancel()
            self._remote_task = None
        self._in_flight = None
        self._clear()


# In-memory registry of live sessions, keyed by the page's session key.
# Sessions hold bytes and an SDK client, so they stay out of Mesop state.
MAX_SESSIONS = 256
_sessions: "OrderedDict[str, TemporalPortraitSession]" = OrderedDict()


def get_session(session_key: str) -> TemporalPortraitSession:
    """Returns the session for a key, creating it on first use."""
    session = _sessions.get(session_key)
    if session is None:
        session = TemporalPortraitSession()
        _sessions[session_key] = session
        logger.debug(f"Created session {session_key} ({len(_sessions)} active)")
        while len(_sessions) > MAX_SESSIONS:
            evicted, _ = _sessions.popitem(last=False)
            logger.info(f"Evicted idle session {evicted}")
    else:
        _sessions.move_to_end(session_key)
    return session


def discard_session(session_key: str):
    _sessions.pop(session_key, None)
