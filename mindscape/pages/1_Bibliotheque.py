# mindscape/pages/1_Bibliotheque.py
# -*- coding: utf-8 -*-

# --- bootstrap import path (page streamlit dans mindscape/pages) ---
import os, sys
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
# -------------------------------------------------------------

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

st.set_page_config(page_title="Bibliothèque — Mindscape", page_icon="📚", layout="wide")
st.title("📚 Ma bibliothèque")

user = current_user(users)
player = get_player(library, user.id)

# --- Filtres ---
st.sidebar.header("Filtres")
only_favorites = st.sidebar.toggle("Favoris uniquement", value=False)
types = st.sidebar.multiselect("Types", options=[t.value for t in catalog.MeditationType])

rows = library.list_for_user(user.id)
if only_favorites:
    rows = [m for m in rows if m.is_favorite]
if types:
    rows = [m for m in rows if m.type in types]

if not rows:
    st.info("Aucune méditation pour l'instant. Créez-en une depuis la page d'accueil.")
else:
    df = pd.DataFrame([{
        "titre": m.title,
        "type": m.type,
        "durée (min)": m.duration,
        "écoutes": m.play_count,
        "favori": "❤️" if m.is_favorite else "",
        "partagée": "🌍" if m.is_shared else "",
        "créée le": m.created_at,
    } for m in rows])

    # KPIs
    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Méditations", len(df))
    with col2:
        st.metric("Écoutes totales", int(df["écoutes"].sum()))
    with col3:
        st.metric("Minutes au total", int(df["durée (min)"].sum()))

    st.dataframe(df, use_container_width=True, hide_index=True)

    st.subheader("Actions")
    for m in rows:
        with st.expander(f"{m.title} · {m.type} · {m.duration} min"):
            st.markdown(f"<span style='color:{catalog.type_color(m.type)}'>●</span> {m.description or ''}",
                        unsafe_allow_html=True)
            c1, c2, c3, c4 = st.columns(4)
            try:
                if c1.button("▶️ Écouter", key=f"play_{m.id}"):
                    player.play(m)
                    st.rerun()
                if c2.button("💔 Retirer" if m.is_favorite else "❤️ Favori", key=f"fav_{m.id}"):
                    library.set_favorite(m.id, user.id, not m.is_favorite)
                    st.rerun()
                if c3.button("🌍 Partager", key=f"share_{m.id}"):
                    cm = community.share(m.id, user.id)
                    st.success(f"Partagée dans la communauté ({cm.id})")
                if c4.button("🗑️ Supprimer", key=f"del_{m.id}"):
                    if player.snapshot().meditation_id == m.id:
                        player.stop()
                    library.delete(m.id, user.id)
                    st.rerun()
            except SynthesisError as e:
                st.warning(f"Lecture impossible : {e.message}")
            except MindscapeError as e:
                st.error(e.message)

render_player(player)
