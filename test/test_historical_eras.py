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

import pytest

from config.historical_eras import (
    HISTORICAL_ERAS,
    get_historical_era,
    match_suggested_era,
)


def test_catalog_has_six_eras_in_display_order():
    assert [era.id for era in HISTORICAL_ERAS] == [
        "egypt",
        "renaissance",
        "vikings",
        "jazz-age",
        "moon-landing",
        "cyberpunk",
    ]


def test_era_ids_are_unique_and_entries_complete():
    assert len({era.id for era in HISTORICAL_ERAS}) == len(HISTORICAL_ERAS)
    for era in HISTORICAL_ERAS:
        assert era.name
        assert era.description
        assert era.prompt
        assert era.thumbnail.startswith("https://")


def test_lookup_by_id_and_name():
    assert get_historical_era("vikings").name == "Viking Age"
    assert get_historical_era("Neo-Tokyo 2077").id == "cyberpunk"
    assert get_historical_era("atlantis") is None


@pytest.mark.parametrize(
    "suggestion, expected",
    [
        ("Viking Age", "vikings"),
        ("vikings", "vikings"),
        ("1920s", "jazz-age"),
        ("The Roaring 20s", "jazz-age"),
        ("Renaissance", "renaissance"),
        ("Ancient Egypt", "egypt"),
        ("1960s", "moon-landing"),
        ("  viking age  ", "vikings"),
    ],
)
def test_suggestion_matches_catalog(suggestion, expected):
    assert match_suggested_era(suggestion).id == expected


@pytest.mark.parametrize("suggestion", [None, "", "   ", "Bronze Age", "a"])
def test_unmatched_suggestion_highlights_nothing(suggestion):
    assert match_suggested_era(suggestion) is None
