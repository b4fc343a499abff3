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


@me.stateclass
class PageState:
    """Temporal Portrait Page State"""

    # Key into the process-level session registry. The session object itself
    # is not serializable, so it never lives in Mesop state.
    session_key: str = ""

    # Bumped to force the edit textarea to re-render with the session's buffer
    edit_prompt_textarea_key: int = 0

    # Bumped after every capture so the uploader accepts the same file again
    uploader_key: int = 0
