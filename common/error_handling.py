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

import logging

# Dedicated logger for tracking the suppressed error
race_condition_logger = logging.getLogger("temporal_portrait.race_condition_tracker")


class CaptureError(Exception):
    """Raised when a portrait cannot be acquired from the camera or a file."""

    def __init__(self, message):
        self.message = message
        super().__init__(self.message)


class GenerationError(Exception):
    """Custom exception for remote analysis and image generation errors."""

    def __init__(self, message):
        self.message = message
        super().__init__(self.message)


class AnalysisParseError(GenerationError):
    """The analysis response was missing, malformed, or incomplete."""
    pass


class NoImageProducedError(GenerationError):
    """The model answered without an inline image payload."""
    pass


class RemoteCallTimeoutError(GenerationError):
    """A remote call did not settle within the configured bound."""
    pass


class InvalidIntentError(Exception):
    """An intent was rejected before any remote call was made."""

    def __init__(self, message):
        self.message = message
        super().__init__(self.message)


class InvalidTransitionError(InvalidIntentError):
    """The intent is not valid for the current step."""
    pass


class OperationInProgressError(InvalidIntentError):
    """Another remote operation is still outstanding."""
    pass


class EmptyEditPromptError(InvalidIntentError):
    """An edit was submitted without instructions."""
    pass


class UnknownHandlerIdFilter(logging.Filter):
    """A logging filter to suppress 'Unknown handler id' errors."""
    def filter(self, record):
        # Suppress the specific benign error message from Mesop
        if "Unknown handler id" in record.getMessage():
            # Log to a separate, non-disruptive logger for tracking purposes
            race_condition_logger.info("Suppressed 'Unknown handler id' error", extra={"original_record": record.getMessage()})
            return False # Prevent the original logger from processing it
        return True
