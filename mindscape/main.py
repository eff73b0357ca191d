# mindscape/main.py
# -*- coding: utf-8 -*-
# --- bootstrap import path (run as script via streamlit) ---
import os, sys
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
# -----------------------------------------------------------
import streamlit as st

# DB init (assure que les tables existent)
from mindscape.persistence.db import init_db
from mindscape.persistence.models import Base
from mindscape.persistence.repositories.users_repo import UserRepository

from mindscape.errors import GenerationError, InvalidArgument, SynthesisError
from mindscape.services import catalog
from mindscape.services.library_service import LibraryService
from mindscape.ui_state import current_user, get_player, render_player

# ---------------------------------------------------------------------
# Bootstrapping
# ---------------------------------------------------------------------
init_db(Base, drop_and_recreate=False)
users_repo = UserRepository()
library = LibraryService()

st.set_page_config(page_title="Mindscape", page_icon="🧘", layout="centered")

user = current_user(users_repo)
player = get_player(library, user.id)

# ---------------------------------------------------------------------
# Choix du type
# ---------------------------------------------------------------------
st.title("🧘 Mindscape — Créer une méditation")

type_values = [t.value for t in catalog.MeditationType]
mtype = st.radio(
    "Type de méditation",
    options=type_values,
    format_func=lambda v: catalog.TYPE_INFO[catalog.MeditationType(v)].name,
    horizontal=True,
)
info = catalog.TYPE_INFO[catalog.MeditationType(mtype)]
st.caption(f"{info.description} · {info.min_minutes}-{info.max_minutes} minutes")

# ---------------------------------------------------------------------
# Personnalisation
# ---------------------------------------------------------------------
prefs = user.preferences or {}

with st.form("generate_form", clear_on_submit=False):
    col1, col2 = st.columns(2)
    with col1:
        voice = st.radio("Voix", options=[v.value for v in catalog.Voice],
                         index=0 if prefs.get("voice") == "male" else 1, horizontal=True)
        duration = st.select_slider("Durée (minutes)", options=list(catalog.DURATION_CHOICES), value=10)
    with col2:
        bg_values = [b.value for b in catalog.BackgroundSound]
        bg_default = prefs.get("background") if prefs.get("background") in bg_values else "ocean_waves"
        background = st.selectbox("Ambiance sonore", options=bg_values,
                                  index=bg_values.index(bg_default),
                                  format_func=catalog.background_label)
        visual = st.selectbox("Décor", options=[v.value for v in catalog.VisualEnvironment])

    goals = st.text_area("Objectifs (facultatif)")
    timeline = st.text_input("Échéance (facultatif)")
    situation = st.text_input("Situation actuelle (facultatif)")
    submitted = st.form_submit_button("Générer la méditation")

if submitted:
    customization = {k: v for k, v in {
        "goals": goals.strip(), "timeline": timeline.strip(), "currentSituation": situation.strip(),
    }.items() if v}
    try:
        with st.spinner("Génération du script…"):
            m = library.generate(
                user, mtype, int(duration),
                customization=customization or None,
                settings={"voice": voice, "background": background, "visual": visual},
            )
        st.success(f"✅ « {m.title} » ajoutée à votre bibliothèque")
        with st.expander("Voir le script"):
            st.text(m.script)
        player.play(m)
    except (InvalidArgument, GenerationError) as e:
        st.error(f"Génération impossible : {e.message}")
    except SynthesisError as e:
        st.warning(f"Méditation enregistrée, mais lecture impossible : {e.message}")

render_player(player)
