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

import mesop as me


@me.component
def temporal_loader(message: str):
    """Full-width busy indicator shown while a remote call is in flight."""
    with me.box(
        style=me.Style(
            display="flex",
            flex_direction="column",
            align_items="center",
            justify_content="center",
            gap=24,
            padding=me.Padding.all(48),
        )
    ):
        me.progress_spinner(diameter=64)
        me.text(message, type="headline-6", style=me.Style(text_align="center"))
        me.text(
            "Stabilizing the temporal rift. This can take up to a minute.",
            style=me.Style(color=me.theme_var("on-surface-variant"), font_size=14),
        )
