"""Workout Evolution — Streamlit collection dashboard.

Run with:
    streamlit run streamlit_app/app.py

Reads the same JSON data directory as the nightly scheduler
(``EVOLUTION_DATA_DIR``).
"""

from __future__ import annotations

import dataclasses
import os
from datetime import date, datetime
from pathlib import Path

import streamlit as st

from creature_client import CreatureDataClient
from evolution_engine import EvolutionEngineConfig, EvolutionSession
from evolution_engine.math.activity import classify_activity, current_streak

from helpers import (
    ACTIVITY_LABELS,
    format_creature_name,
    history_frame,
    progress_fraction,
    requirement_lines,
    type_color,
)

DATA_DIR = Path(os.environ.get("EVOLUTION_DATA_DIR", "~/.workout-evolution")).expanduser()
CREATURE_API_URL = os.environ.get("CREATURE_API_URL", "https://pokeapi.co/api/v2")

# ---------------------------------------------------------------------------
# Page config
# ---------------------------------------------------------------------------

st.set_page_config(
    page_title="Workout Evolution",
    page_icon="🏃",
    layout="wide",
)


# ---------------------------------------------------------------------------
# Cached session
# ---------------------------------------------------------------------------


@st.cache_resource
def get_session(data_dir: str, forced: bool) -> EvolutionSession:
    config = dataclasses.replace(EvolutionEngineConfig.from_env(), allow_forced_evolution=forced)
    client = CreatureDataClient(base_url=CREATURE_API_URL, timeout_s=config.http_timeout_s)
    return EvolutionSession.from_directory(data_dir, client, config=config)


# ---------------------------------------------------------------------------
# Rendering helpers
# ---------------------------------------------------------------------------


def _render_types(types) -> None:
    badges = " ".join(
        f'<span style="background:{type_color(t)};color:white;padding:2px 8px;'
        f'border-radius:8px;font-size:0.8em;">{t}</span>'
        for t in types
    )
    st.markdown(badges, unsafe_allow_html=True)


def _render_instance(session: EvolutionSession, instance, workouts) -> None:
    creature = instance.creature
    st.image(creature.static_sprite, width=96)
    st.markdown(f"**{format_creature_name(creature.name)}** #{creature.id}")
    _render_types(creature.types)

    data = instance.evolution_data
    if data is None or not data.next_evolutions:
        st.caption("Final form")
        return

    target = format_creature_name(data.next_evolutions[0].name)
    st.progress(progress_fraction(instance), text=f"Towards {target}")
    report = session.evaluator.explain(instance, workouts)
    for met, text in requirement_lines(report):
        st.markdown(f"{'✅' if met else '⬜'} {text}")
    progress = instance.evolution_progress
    if progress is not None and progress.special_conditions:
        with st.expander("Tips"):
            for note in progress.special_conditions:
                st.write(f"- {note}")

    if session.config.allow_forced_evolution:
        if st.button("Force evolve", key=f"force_{instance.instance_id}"):
            evolved = session.engine.evolve(instance, workouts=workouts)
            if evolved is None:
                st.warning(f"{format_creature_name(creature.name)} could not evolve")
            else:
                st.success(
                    f"{format_creature_name(creature.name)} evolved into "
                    f"{format_creature_name(evolved.name)}!"
                )


# ---------------------------------------------------------------------------
# Sidebar
# ---------------------------------------------------------------------------

st.sidebar.title("Workout Evolution")
data_dir = st.sidebar.text_input("Data directory", value=str(DATA_DIR))
forced = st.sidebar.checkbox(
    "Diagnostic mode",
    value=False,
    help="Skip eligibility checks and force evolutions. For testing only.",
)
session = get_session(data_dir, forced)

if st.sidebar.button("Clear caches"):
    session.clear_caches()
    st.sidebar.success("Caches cleared")

workouts = session.workout_store.get_completed_workouts()
streak = current_streak(workouts, date.today())
level = classify_activity(workouts, datetime.now())
st.sidebar.metric("Completed workouts", len(workouts))
st.sidebar.metric("Current streak", f"{streak} days")
st.sidebar.caption(ACTIVITY_LABELS[level])

# ---------------------------------------------------------------------------
# Tabs
# ---------------------------------------------------------------------------

tab_collection, tab_rewards, tab_history = st.tabs(["Collection", "Rewards", "History"])

with tab_collection:
    instances = session.owned_instances()
    if not instances:
        st.info("No creatures yet. Complete a workout to earn your first one.")
    else:
        if forced:
            candidates = [i for i in instances if session.engine.resolve_target(i) is not None]
            if not candidates:
                st.warning("Diagnostic mode: no creature has an evolution target.")
        cols = st.columns(4)
        for index, instance in enumerate(instances):
            with cols[index % 4]:
                _render_instance(session, instance, workouts)

with tab_rewards:
    stats = session.rewards.stats()
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Total rewards", stats.total_rewards)
    c2.metric("Unique creatures", stats.unique_creatures)
    c3.metric("This week", stats.this_week)
    c4.metric("Streak rewards", stats.streak_rewards)
    for reward in stats.recent:
        st.markdown(
            f"**{format_creature_name(reward.creature.name)}** — {reward.reason} "
            f"<small>({reward.timestamp:%Y-%m-%d})</small>",
            unsafe_allow_html=True,
        )

with tab_history:
    frame = history_frame(session.history())
    if frame.empty:
        st.info("No evolutions yet.")
    else:
        st.dataframe(frame, use_container_width=True, hide_index=True)
