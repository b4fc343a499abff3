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
"""Temporal Portrait entry point. Run with: mesop main.py"""

import logging

from common.error_handling import UnknownHandlerIdFilter
from config.default import Default

cfg = Default()

logging.basicConfig(
    level=getattr(logging, cfg.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logging.getLogger().addFilter(UnknownHandlerIdFilter())
for handler in logging.getLogger().handlers:
    handler.addFilter(UnknownHandlerIdFilter())

# Registers the page routes.
import workflows.temporal_portrait.page  # noqa: E402,F401
