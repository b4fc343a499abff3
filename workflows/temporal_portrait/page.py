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
"""Temporal Portrait page: renders the session and forwards user intents."""

import asyncio
import logging
import uuid

import mesop as me

from common.analytics import log_page_view, log_ui_click
from common.error_handling import InvalidIntentError
from common.utils import describe_image
from components.download_button.download_button import download_button
from components.selfie_camera.selfie_camera import selfie_camera
from components.temporal_loader.temporal_loader import temporal_loader
from models.capture import ACCEPTED_UPLOAD_TYPES
from state.state import AppState
from state.temporal_portrait_state import PageState
from workflows.temporal_portrait.backend import (
    EDIT_SUGGESTIONS,
    Step,
    TemporalPortraitSession,
    get_session,
)

logger = logging.getLogger(__name__)

PAGE_NAME = "temporal_portrait"

_CARD_STYLE = me.Style(
    background=me.theme_var("surface-container"),
    border_radius=16,
    padding=me.Padding.all(24),
)


def on_load(e: me.LoadEvent):
    state = me.state(PageState)
    app_state = me.state(AppState)
    if not state.session_key:
        state.session_key = str(uuid.uuid4())
    if not app_state.session_id:
        app_state.session_id = state.session_key
    app_state.current_page = PAGE_NAME
    log_page_view(PAGE_NAME, session_id=app_state.session_id)
    yield


def _session() -> TemporalPortraitSession:
    state = me.state(PageState)
    if not state.session_key:
        # Assigned by on_load; render must not write state.
        raise RuntimeError("Temporal Portrait session key is missing; on_load has not run.")
    return get_session(state.session_key)


def _click(element_id: str, **extras):
    app_state = me.state(AppState)
    log_ui_click(
        element_id=element_id,
        page_name=PAGE_NAME,
        session_id=app_state.session_id,
        extras=extras or None,
    )


def _apply(intent, *args):
    """Runs a synchronous intent, ignoring ones the current step does not allow."""
    try:
        intent(*args)
    except InvalidIntentError as ex:
        logger.info(f"Ignored intent: {ex.message}")


async def _run_remote_intent(call):
    """Starts a remote intent, renders the loader, then renders the outcome."""
    task = asyncio.create_task(call)
    # Let the task claim the in-flight slot before the loader renders.
    await asyncio.sleep(0)
    yield
    try:
        await task
    except InvalidIntentError as ex:
        logger.info(f"Ignored intent: {ex.message}")
    yield


@me.page(path="/", title="Temporal Portrait", on_load=on_load)
def page():
    """Define the Mesop page route for Temporal Portrait."""
    session = _session()

    with me.box(
        style=me.Style(
            min_height="100vh",
            display="flex",
            flex_direction="column",
            background=me.theme_var("surface"),
        )
    ):
        _header(session)
        with me.box(
            style=me.Style(
                width="100%",
                max_width=1100,
                margin=me.Margin.symmetric(horizontal="auto"),
                padding=me.Padding.all(24),
                display="flex",
                flex_direction="column",
                gap=24,
            )
        ):
            if session.notice:
                _notice_banner(session.notice)

            if session.in_flight:
                temporal_loader(message=session.in_flight.label)
            elif session.step == Step.LANDING:
                _landing()
            elif session.step == Step.CAPTURING:
                _capture_view(session)
            elif session.step == Step.ANALYZING:
                _analysis_view(session)
            elif session.step == Step.ERA_SELECTION:
                _era_selection_view(session)
            elif session.step == Step.RESULT:
                _result_view(session)


def _header(session: TemporalPortraitSession):
    with me.box(
        style=me.Style(
            display="flex",
            justify_content="space-between",
            align_items="center",
            padding=me.Padding.symmetric(vertical=16, horizontal=24),
            border=me.Border(bottom=me.BorderSide(width=1, style="solid", color=me.theme_var("outline-variant"))),
        )
    ):
        with me.box(style=me.Style(display="flex", align_items="center", gap=12)):
            me.icon("schedule")
            me.text("Temporal Portrait", type="headline-5")
        if session.step != Step.LANDING:
            me.button("Reset Timeline", on_click=on_click_reset, type="stroked")


def _notice_banner(message: str):
    with me.box(
        style=me.Style(
            display="flex",
            justify_content="space-between",
            align_items="center",
            padding=me.Padding.all(16),
            border_radius=12,
            background=me.theme_var("error-container"),
        )
    ):
        me.text(message, style=me.Style(color=me.theme_var("on-error-container")))
        me.button("Dismiss", on_click=on_click_dismiss_notice)


def _landing():
    with me.box(
        style=me.Style(
            display="flex",
            flex_direction="column",
            align_items="center",
            gap=24,
            padding=me.Padding.symmetric(vertical=64),
            text_align="center",
        )
    ):
        me.text("Your face is a map of history.", type="headline-3")
        me.text(
            "Step into the photo booth to transcend time. Gemini will analyze your "
            "features and transport your likeness to meticulously recreated historical eras."
        )
        me.button("Enter the Rift", on_click=on_click_begin_capture, type="flat")


def _capture_view(session: TemporalPortraitSession):
    state = me.state(PageState)
    with me.box(style=me.Style(display="flex", flex_direction="column", align_items="center", gap=16)):
        if session.capture_error:
            with me.box(style=_CARD_STYLE):
                me.text(session.capture_error, style=me.Style(color=me.theme_var("error")))
                me.text("You can still upload a portrait instead.")
        else:
            selfie_camera(
                on_capture=on_camera_capture,
                on_camera_error=on_camera_error,
                key="temporal-portrait-camera",
            )

        with me.box(style=me.Style(display="flex", gap=16, align_items="center")):
            me.uploader(
                label="Upload Artifact",
                on_upload=on_upload_portrait,
                accepted_file_types=ACCEPTED_UPLOAD_TYPES,
                type="stroked",
                key=f"portrait-uploader-{state.uploader_key}",
            )
            me.button("Abort Mission", on_click=on_click_cancel_capture, type="stroked")

        me.text(
            "Ensure your face is clearly visible and centered for optimal temporal synchronization.",
            style=me.Style(font_size=14, color=me.theme_var("on-surface-variant")),
        )


def _analysis_view(session: TemporalPortraitSession):
    with me.box(style=me.Style(display="flex", flex_direction="row", gap=32, flex_wrap="wrap")):
        if session.portrait:
            with me.box(style=me.Style(flex_basis="320px", display="flex", flex_direction="column", gap=8)):
                me.image(
                    src=session.portrait.to_data_url(),
                    style=me.Style(width="100%", border_radius=16),
                )
                me.text(describe_image(session.portrait), style=me.Style(font_size=12))

        with me.box(style=me.Style(flex_grow=1, flex_basis="360px", display="flex", flex_direction="column", gap=16)):
            me.text("Artifact Analysis", type="headline-4")
            analysis = session.analysis
            if analysis is None:
                me.text("We could not read your temporal profile.")
                with me.box(style=me.Style(display="flex", gap=12)):
                    me.button("Retry Analysis", on_click=on_click_retry_analysis, type="flat")
                    me.button("Retake Photo", on_click=on_click_recapture, type="stroked")
                return

            me.text(f"“{analysis.description}”", style=me.Style(font_style="italic"))
            with me.box(style=me.Style(display="flex", flex_wrap="wrap", gap=8)):
                for trait in analysis.visual_traits:
                    me.text(
                        trait,
                        style=me.Style(
                            padding=me.Padding.symmetric(vertical=4, horizontal=12),
                            border_radius=999,
                            background=me.theme_var("surface-container-high"),
                            font_size=14,
                        ),
                    )
            with me.box(style=_CARD_STYLE):
                me.text(
                    f"Gemini Suggestion: Based on your visual profile, you would thrive in {analysis.suggested_era}."
                )
            me.button("Confirm Sync & Choose Era", on_click=on_click_confirm_analysis, type="flat")


def _era_selection_view(session: TemporalPortraitSession):
    suggested = session.suggested_era
    me.text("Select Destination", type="headline-4", style=me.Style(text_align="center"))
    me.text("Where would you like to manifest?", style=me.Style(text_align="center"))
    with me.box(
        style=me.Style(
            display="grid",
            grid_template_columns="repeat(auto-fill, minmax(280px, 1fr))",
            gap=24,
        )
    ):
        for era in session.eras:
            is_suggested = suggested is not None and suggested.id == era.id
            with me.box(
                key=era.id,
                on_click=on_click_select_era,
                style=me.Style(
                    cursor="pointer",
                    border_radius=24,
                    overflow="hidden",
                    background=me.theme_var("surface-container"),
                    border=me.Border.all(
                        me.BorderSide(
                            width=2,
                            style="solid",
                            color=me.theme_var("primary") if is_suggested else "transparent",
                        )
                    ),
                ),
            ):
                me.image(src=era.thumbnail, style=me.Style(width="100%", height=200, object_fit="cover"))
                with me.box(style=me.Style(padding=me.Padding.all(16), display="flex", flex_direction="column", gap=4)):
                    me.text(era.name, type="headline-6")
                    me.text(era.description, style=me.Style(font_size=14))
                    if is_suggested:
                        me.text("Suggested for you", style=me.Style(font_size=12, color=me.theme_var("primary")))


def _result_view(session: TemporalPortraitSession):
    state = me.state(PageState)
    result = session.result
    if result is None:
        return

    with me.box(style=me.Style(display="flex", flex_direction="row", gap=48, flex_wrap="wrap")):
        with me.box(style=me.Style(flex_basis="420px", flex_grow=1, display="flex", flex_direction="column", gap=16)):
            me.image(src=result.image.to_data_url(), style=me.Style(width="100%", border_radius=24))
            with me.box(style=me.Style(display="flex", justify_content="space-between", align_items="center")):
                with me.box():
                    me.text("Current Timeline", style=me.Style(font_size=12))
                    me.text(result.era.name, type="headline-6")
                download_button(url=result.image.to_data_url(), filename=session.download_filename())
            with me.box(style=me.Style(display="flex", gap=16)):
                me.button("Change Destination", on_click=on_click_change_destination, type="stroked")
                me.button("New Portrait", on_click=on_click_reset, type="stroked")

        with me.box(style=me.Style(flex_basis="360px", flex_grow=1, display="flex", flex_direction="column", gap=16)):
            me.text("Timeline Editor", type="headline-4")
            me.text("Refine your manifestation. Tell Gemini to add filters, change lighting, or modify the artifacts around you.")
            with me.box(style=me.Style(display="flex", flex_wrap="wrap", gap=8)):
                for suggestion in EDIT_SUGGESTIONS:
                    me.button(suggestion, key=suggestion, on_click=on_click_edit_suggestion, type="stroked")
            me.textarea(
                label="Edit instruction",
                placeholder="e.g., 'Add a vintage 1950s polaroid effect'...",
                value=session.edit_prompt,
                on_input=on_input_edit_prompt,
                rows=4,
                key=f"edit-prompt-{state.edit_prompt_textarea_key}",
                style=me.Style(width="100%"),
            )
            me.button(
                "Apply Temporal Correction",
                on_click=on_click_submit_edit,
                type="flat",
                disabled=not session.can_submit_edit,
            )
            if result.applied_edits:
                me.text(
                    "Applied: " + " → ".join(result.applied_edits),
                    style=me.Style(font_size=12, color=me.theme_var("on-surface-variant")),
                )


# --- Event Handlers ---

def on_click_begin_capture(e: me.ClickEvent):
    _click("begin_capture")
    _apply(_session().begin_capture)
    yield


def on_click_cancel_capture(e: me.ClickEvent):
    _click("cancel_capture")
    _apply(_session().cancel_capture)
    yield


def on_camera_error(e: me.WebEvent):
    _apply(_session().report_capture_error, e.value.get("message", ""))
    yield


async def on_camera_capture(e: me.WebEvent):
    _click("camera_capture")
    session = _session()
    async for _ in _run_remote_intent(session.submit_frame(e.value["value"])):
        yield


async def on_upload_portrait(e: me.UploadEvent):
    state = me.state(PageState)
    _click("upload_portrait", mime_type=e.file.mime_type)
    session = _session()
    state.uploader_key += 1
    async for _ in _run_remote_intent(session.submit_upload(e.file.getvalue(), e.file.mime_type)):
        yield


async def on_click_retry_analysis(e: me.ClickEvent):
    _click("retry_analysis")
    session = _session()
    async for _ in _run_remote_intent(session.retry_analysis()):
        yield


def on_click_recapture(e: me.ClickEvent):
    _click("recapture")
    _apply(_session().recapture)
    yield


def on_click_confirm_analysis(e: me.ClickEvent):
    _click("confirm_analysis")
    _apply(_session().confirm_analysis)
    yield


async def on_click_select_era(e: me.ClickEvent):
    _click("select_era", era_id=e.key)
    session = _session()
    async for _ in _run_remote_intent(session.select_era(e.key)):
        yield


def on_click_edit_suggestion(e: me.ClickEvent):
    state = me.state(PageState)
    _apply(_session().apply_edit_suggestion, e.key)
    state.edit_prompt_textarea_key += 1
    yield


def on_input_edit_prompt(e: me.InputEvent):
    _apply(_session().set_edit_prompt, e.value)


async def on_click_submit_edit(e: me.ClickEvent):
    state = me.state(PageState)
    _click("submit_edit")
    session = _session()
    async for _ in _run_remote_intent(session.submit_edit()):
        yield
    state.edit_prompt_textarea_key += 1
    yield


def on_click_change_destination(e: me.ClickEvent):
    _click("change_destination")
    _apply(_session().change_destination)
    yield


def on_click_dismiss_notice(e: me.ClickEvent):
    _session().dismiss_notice()
    yield


def on_click_reset(e: me.ClickEvent):
    state = me.state(PageState)
    _click("reset")
    _session().reset()
    state.edit_prompt_textarea_key += 1
    yield
