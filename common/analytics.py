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
"""Structured analytics events for page views, clicks, model calls and steps."""

import json
import logging
import os
import time
from contextlib import contextmanager

import mesop as me
from google.cloud import logging as cloud_logging

from state.state import AppState


class JsonFormatter(logging.Formatter):
    """Formats log records as one JSON object per line."""

    def format(self, record):
        log_object = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "message": record.getMessage(),
            "name": record.name,
        }
        if hasattr(record, "extra_data"):
            log_object.update(record.extra_data)
        if record.exc_info:
            log_object["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_object, default=str)


def get_logger(name: str) -> logging.Logger:
    """Returns a logger that writes structured records.

    On Cloud Run (K_SERVICE is set) records go to Cloud Logging, which parses
    the JSON fields. Locally they go to stderr through JsonFormatter.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    logger.setLevel(logging.INFO)
    if os.environ.get("K_SERVICE"):
        handler = cloud_logging.Client().get_default_handler()
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)
    return logger


analytics_logger = get_logger("temporal_portrait.analytics")


def _request_context() -> tuple[str, str]:
    """(page, session id) of the current Mesop request, or ("unknown", "unknown")."""
    try:
        state = me.state(AppState)
    except Exception:
        # No request context, e.g. in tests or a background task.
        return "unknown", "unknown"
    return state.current_page or "unknown", state.session_id or "unknown"


def _emit(event_type: str, message: str, **fields):
    analytics_logger.info(message, extra={"extra_data": {"event_type": event_type, **fields}})


def log_page_view(page_name: str, session_id: str | None = None):
    _emit("page_view", f"Page view: {page_name}", page_name=page_name, session_id=session_id)


def log_ui_click(element_id: str, page_name: str, session_id: str | None = None, extras: dict | None = None):
    _emit(
        "ui_click",
        f"UI Click: {element_id} on {page_name}",
        element_id=element_id,
        page_name=page_name,
        session_id=session_id,
        **(extras or {}),
    )


def log_step_transition(from_step: str, to_step: str, intent: str):
    """Records a workflow step change, e.g. era_selection -> generating."""
    page_name, session_id = _request_context()
    _emit(
        "step_transition",
        f"Step: {from_step} -> {to_step} ({intent})",
        from_step=from_step,
        to_step=to_step,
        intent=intent,
        page_name=page_name,
        session_id=session_id,
    )


def log_model_call(model_name: str, status: str, duration_ms: float = 0, details: dict | None = None):
    page_name, session_id = _request_context()
    _emit(
        "model_call",
        f"Model Call: {model_name} ({status})",
        model_name=model_name,
        status=status,
        duration_ms=round(duration_ms, 2),
        page_name=page_name,
        session_id=session_id,
        details=details or {},
    )


@contextmanager
def track_model_call(model_name: str, **details):
    """Logs the duration and outcome of the model call made inside the block.

    Exceptions are logged as failures and re-raised unchanged.
    """
    start = time.monotonic()
    try:
        yield
    except Exception as e:
        elapsed_ms = (time.monotonic() - start) * 1000
        log_model_call(model_name, "failure", elapsed_ms, {"error": str(e), **details})
        raise
    log_model_call(model_name, "success", (time.monotonic() - start) * 1000, details)
