"""Elemental Vibe — Streamlit shell around the elemental reading core."""

import asyncio
import html

import streamlit as st
from dotenv import load_dotenv
from streamlit_js_eval import streamlit_js_eval

load_dotenv()

from elementalvibe.assets import local_asset_files, resolve_assets  # noqa: E402
from elementalvibe.compute import run  # noqa: E402
from elementalvibe.config import load_settings  # noqa: E402
from elementalvibe.i18n import t  # noqa: E402
from elementalvibe.models import QueryInput  # noqa: E402
from elementalvibe.narrative import NarrativeError  # noqa: E402
from elementalvibe.orchestrator import NarrativeOrchestrator, SubmissionTracker  # noqa: E402
from elementalvibe.renderers.svg_2d import render_radar_svg  # noqa: E402

# --- Language detection (browser-first via streamlit-js-eval) ---
# On the first run the JS call returns None; the rerun triggered by
# streamlit_js_eval fills it in.
if "lang" not in st.session_state:
    _browser_lang: str | None = streamlit_js_eval(
        js_expressions="navigator.language", key="_lang_detect", height=0
    )
    if _browser_lang is not None:
        st.session_state.lang = "ko" if _browser_lang.lower().startswith("ko") else "en"

_lang: str = st.session_state.get("lang", "en")

st.set_page_config(
    page_title=t("page_title", _lang),
    page_icon="✦",
    layout="centered",
    initial_sidebar_state="collapsed",
)

# --- Session state initialization ---

if "reading" not in st.session_state:
    st.session_state.reading = None
if "narrative" not in st.session_state:
    st.session_state.narrative = None
if "error_msg" not in st.session_state:
    st.session_state.error_msg = None
if "tracker" not in st.session_state:
    st.session_state.tracker = SubmissionTracker()
if "form_key" not in st.session_state:
    st.session_state.form_key = 0


def _reset() -> None:
    st.session_state.reading = None
    st.session_state.narrative = None
    st.session_state.error_msg = None
    st.session_state.tracker.begin()  # Invalidate any in-flight submission
    st.session_state.form_key += 1


# --- Input form ---
if st.session_state.reading is None:
    with st.form(key=f"input_{st.session_state.form_key}"):
        birthdate = st.text_input(t("label_birthdate", _lang), placeholder="01/02/2000")
        name = st.text_input(t("label_name", _lang), max_chars=40)
        st.caption(t("privacy_body", _lang))
        submitted = st.form_submit_button(t("btn_reveal", _lang))

    if submitted:
        tracker: SubmissionTracker = st.session_state.tracker
        submission_id = tracker.begin()
        reading = run(QueryInput(birthdate=birthdate, name=name))

        with st.spinner(t("loading", _lang)):
            orchestrator = NarrativeOrchestrator(settings=load_settings(dotenv=False))
            try:
                narrative = asyncio.run(orchestrator.run(reading))
                error_msg = None
            except NarrativeError:
                narrative = None
                error_msg = t("narrative_error", _lang)

        if tracker.is_current(submission_id):
            st.session_state.reading = reading
            st.session_state.narrative = narrative
            st.session_state.error_msg = error_msg
        st.rerun()
    st.stop()

# --- Result ---
reading = st.session_state.reading
narrative = st.session_state.narrative
arch = reading.archetype

st.markdown(
    f"<p style='text-align:center;letter-spacing:4px;opacity:0.8'>"
    f"{html.escape(reading.query.name.upper())}</p>"
    f"<h2 style='text-align:center'>{html.escape(arch.name)}</h2>",
    unsafe_allow_html=True,
)

col_chart, col_text = st.columns([1, 1])
with col_chart:
    st.markdown(render_radar_svg(reading.profile, size=280), unsafe_allow_html=True)
    images = local_asset_files(resolve_assets(arch.name))
    if images:
        st.image([str(path) for path in images], width=120)

with col_text:
    if st.session_state.error_msg:
        st.error(st.session_state.error_msg)
    elif narrative is not None:
        st.markdown(f"*{html.escape(narrative.opening)}*")
        st.markdown(f"**{t('section_birth', _lang)}** — {html.escape(narrative.birth_imagery)}")
        st.markdown(f"**{t('section_city', _lang)}** — {html.escape(narrative.soul_city)}")
        st.markdown(
            f"**{t('section_souls', _lang)}** — {html.escape(narrative.complementary_souls)}"
        )
        charms = narrative.talismans
        st.markdown(
            f"**{t('section_talismans', _lang)}** — "
            f"{html.escape(charms.color)} · {html.escape(charms.item)} · {html.escape(charms.mantra)}"
        )
        st.caption(narrative.ps)
    st.caption(
        t("alignment", _lang).format(primary=arch.primary, secondary=arch.secondary)
    )

st.button(t("btn_restart", _lang), on_click=_reset, use_container_width=True)
