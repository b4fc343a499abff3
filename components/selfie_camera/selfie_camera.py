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

import typing

import mesop as me


@me.web_component(path="./selfie_camera.js")
def selfie_camera(
    *,
    on_capture: typing.Callable[[me.WebEvent], None] | None = None,
    on_camera_error: typing.Callable[[me.WebEvent], None] | None = None,
    key: str | None = None,
):
    """Live front-camera preview with a capture button.

    Emits `capture` with `{"value": <full-frame data URL>}` and `cameraError`
    with `{"message": ...}` when the camera cannot be opened. The stream is
    stopped whenever the component leaves the page.
    """
    return me.insert_web_component(
        key=key,
        name="selfie-camera",
        events={
            "capture": on_capture,
            "cameraError": on_camera_error,
        },
    )
