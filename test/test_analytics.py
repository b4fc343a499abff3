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
import json
import logging

import pytest

from common.analytics import JsonFormatter, track_model_call
from workflows.temporal_portrait.backend import TemporalPortraitSession


def _events(caplog, event_type):
    return [
        r.extra_data for r in caplog.records
        if getattr(r, "extra_data", {}).get("event_type") == event_type
    ]


def test_track_model_call_logs_success(caplog):
    caplog.set_level(logging.INFO, logger="temporal_portrait.analytics")
    with track_model_call("gemini-2.5-flash-image", operation="transport"):
        pass

    (event,) = _events(caplog, "model_call")
    assert event["status"] == "success"
    assert event["details"] == {"operation": "transport"}
    assert event["session_id"] == "unknown"


def test_track_model_call_logs_and_reraises_failure(caplog):
    caplog.set_level(logging.INFO, logger="temporal_portrait.analytics")
    with pytest.raises(RuntimeError):
        with track_model_call("gemini-3-pro-preview", operation="analyze"):
            raise RuntimeError("quota exceeded")

    (event,) = _events(caplog, "model_call")
    assert event["status"] == "failure"
    assert event["details"]["error"] == "quota exceeded"


def test_json_formatter_merges_extra_data():
    record = logging.LogRecord("x", logging.INFO, __file__, 1, "hello", None, None)
    record.extra_data = {"event_type": "ui_click", "element_id": "reset"}
    payload = json.loads(JsonFormatter().format(record))
    assert payload["message"] == "hello"
    assert payload["element_id"] == "reset"


def test_session_logs_step_transitions(caplog, fake_client, portrait):
    caplog.set_level(logging.INFO, logger="temporal_portrait.analytics")
    session = TemporalPortraitSession(generation_client=fake_client, timeout_seconds=0)

    session.begin_capture()
    asyncio.run(session.submit_capture(portrait))
    session.reset()
    session.reset()

    steps = [(e["from_step"], e["to_step"], e["intent"]) for e in _events(caplog, "step_transition")]
    assert steps == [
        ("landing", "capturing", "begin_capture"),
        ("capturing", "analyzing", "submit_capture"),
        ("analyzing", "landing", "reset"),
    ]
