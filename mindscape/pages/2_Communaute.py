# mindscape/pages/2_Communaute.py
# -*- coding: utf-8 -*-

# --- bootstrap import path (page streamlit dans mindscape/pages) ---
import os, sys
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
# -------------------------------------------------------------

import altair as alt
import pandas as pd
import streamlit as st

from mindscape.errors import MindscapeError, SynthesisError
from mindscape.persistence.db import init_db
from mindscape.persistence.models import Base
from mindscape.persistence.repositories.users_repo import UserRepository
from mindscape.services import catalog
from mindscape.services.community_service import CommunityService
from mindscape.services.library_service import LibraryService
from mindscape.ui_state import current_user, get_player, render_player

# Boot DB
init_db(Base, drop_and_recreate=False)
users = UserRepository()
library = LibraryService()
community = CommunityService()

st.set_page_config(page_title="Communauté — Mindscape", page_icon="🌍", layout="wide")
st.title("🌍 Communauté")

user = current_user(users)
player = get_player(library, user.id)


def to_frame(rows) -> pd.DataFrame:
    return pd.DataFrame([{
        "id": c.id,
        "titre": c.title,
        "type": c.type,
        "durée (min)": c.duration,
        "écoutes": c.play_count,
        "note": c.rating,
        "nb notes": c.rating_count,
        "publiée le": c.created_at,
    } for c in rows])


popular = community.list_popular()
recent = community.list_recent()

# --- Populaires ---
st.subheader("🔥 Les plus écoutées")
if not popular:
    st.info("Rien de partagé pour l'instant.")
else:
    df_pop = to_frame(popular)
    chart = (
        alt.Chart(df_pop)
        .mark_bar()
        .encode(
            x=alt.X("écoutes:Q", title="Écoutes"),
            y=alt.Y("titre:N", sort="-x", title=""),
            color=alt.Color(
                "type:N",
                scale=alt.Scale(
                    domain=[t.value for t in catalog.MeditationType],
                    range=[catalog.type_color(t.value) for t in catalog.MeditationType],
                ),
                title="Type",
            ),
            tooltip=["titre:N", "type:N", "écoutes:Q", alt.Tooltip("note:Q", format=".1f"), "nb notes:Q"],
        )
        .properties(height=280)
    )
    st.altair_chart(chart, use_container_width=True)

# --- Récentes ---
st.subheader("🆕 Récemment partagées")
for c in recent:
    with st.expander(f"{c.title} · {c.type} · {c.duration} min · ⭐ {c.rating:.1f} ({c.rating_count})"):
        col_img, col_body = st.columns([1, 3])
        with col_img:
            st.image(catalog.type_image(c.type), use_container_width=True)
        with col_body:
            st.write(c.description or "")
            mine = community.get_user_rating(c.id, user.id)
            rating = st.slider("Votre note", 1, 5, mine or 5, key=f"rate_{c.id}")
            b1, b2 = st.columns(2)
            try:
                if b1.button("⭐ Noter", key=f"rate_btn_{c.id}"):
                    community.rate(c.id, user.id, int(rating))
                    st.rerun()
                if b2.button("▶️ Écouter", key=f"play_{c.id}"):
                    original = community.get_original(c.id)
                    player.play(original, play_recorder=lambda _mid, cid=c.id: community.record_community_play(cid))
                    st.rerun()
            except SynthesisError as e:
                st.warning(f"Lecture impossible : {e.message}")
            except MindscapeError as e:
                st.error(e.message)

render_player(player)
