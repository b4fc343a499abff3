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

from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass(frozen=True)
class HistoricalEra:
    """A destination era and the prompt used to render a portrait into it."""

    id: str  # Stable key, also used in download filenames (e.g., "vikings")
    name: str  # Human-readable name (e.g., "Viking Age")
    description: str
    prompt: str  # Generation instruction sent alongside the portrait
    thumbnail: str

    # Lowercase aliases used to match free-text era suggestions
    keywords: Tuple[str, ...] = field(default_factory=tuple)


# Single source of truth
HISTORICAL_ERAS: Tuple[HistoricalEra, ...] = (
    HistoricalEra(
        id="egypt",
        name="Ancient Egypt",
        description="The era of Pharaohs and grand pyramids.",
        prompt=(
            "A majestic portrait of this person as a powerful Pharaoh in ancient Egypt, "
            "wearing a Nemes headdress and golden jewelry, standing before the Great Sphinx "
            "at sunset, high detail, photorealistic cinematic lighting."
        ),
        thumbnail="https://picsum.photos/seed/egypt/400/400",
        keywords=("egypt", "egyptian", "pharaoh"),
    ),
    HistoricalEra(
        id="renaissance",
        name="Renaissance Italy",
        description="A time of artistic awakening and noble elegance.",
        prompt=(
            "A portrait of this person as a Renaissance noble, painted in the style of "
            "Leonardo da Vinci, wearing rich velvet robes and intricate lace, soft sfumato "
            "lighting, oil on canvas texture."
        ),
        thumbnail="https://picsum.photos/seed/renaissance/400/400",
        keywords=("renaissance", "italy"),
    ),
    HistoricalEra(
        id="vikings",
        name="Viking Age",
        description="Fearless explorers of the northern seas.",
        prompt=(
            "A rugged portrait of this person as a Viking warrior, wearing fur-lined leather "
            "armor and war paint, standing on a misty fjord with a longship in the background, "
            "epic cinematic atmosphere."
        ),
        thumbnail="https://picsum.photos/seed/vikings/400/400",
        keywords=("viking", "vikings", "norse"),
    ),
    HistoricalEra(
        id="jazz-age",
        name="The Roaring 20s",
        description="The golden age of jazz and deco glamour.",
        prompt=(
            "A glamorous 1920s portrait of this person in a smoky jazz club, wearing art deco "
            "fashion, a tuxedo or a beaded flapper dress, vintage sepia tones, film grain, "
            "elegant bokeh."
        ),
        thumbnail="https://picsum.photos/seed/jazz/400/400",
        keywords=("1920s", "roaring 20s", "roaring twenties", "jazz age", "jazz"),
    ),
    HistoricalEra(
        id="moon-landing",
        name="1969 Moon Landing",
        description="A giant leap for mankind.",
        prompt=(
            "A historic photo of this person as an Apollo 11 astronaut on the lunar surface, "
            "wearing a NASA space suit, the Earth visible in the black sky, 60s film "
            "photography style, slight lens flare."
        ),
        thumbnail="https://picsum.photos/seed/moon/400/400",
        keywords=("1960s", "1969", "moon landing", "apollo", "moon"),
    ),
    HistoricalEra(
        id="cyberpunk",
        name="Neo-Tokyo 2077",
        description="A glimpse into the high-tech future.",
        prompt=(
            "A futuristic portrait of this person in a neon-drenched cyberpunk city, with "
            "glowing neural implants and techwear, rain reflecting pink and blue neon lights, "
            "high-octane scifi aesthetic."
        ),
        thumbnail="https://picsum.photos/seed/cyber/400/400",
        keywords=("cyberpunk", "2077", "neo-tokyo", "future"),
    ),
)


def get_historical_era(era_id_or_name: str) -> Optional[HistoricalEra]:
    """Finds an era by either its id or its display name."""
    for era in HISTORICAL_ERAS:
        if era.id == era_id_or_name or era.name == era_id_or_name:
            return era
    return None


def match_suggested_era(suggestion: str | None) -> Optional[HistoricalEra]:
    """Maps a free-text era suggestion (e.g. "Viking Age", "1920s") to a catalog entry.

    Exact id/name matches win, then names contained in the suggestion, then
    keywords. Returns None when nothing in the catalog fits.
    """
    if not suggestion:
        return None
    text = suggestion.strip().lower()
    if not text:
        return None

    for era in HISTORICAL_ERAS:
        if text in (era.id, era.name.lower()):
            return era
    for era in HISTORICAL_ERAS:
        if era.name.lower() in text:
            return era
    for era in HISTORICAL_ERAS:
        if any(keyword in text for keyword in era.keywords):
            return era
    return None
