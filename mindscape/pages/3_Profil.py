# mindscape/pages/3_Profil.py
# -*- coding: utf-8 -*-

# --- bootstrap import path (page streamlit dans mindscape/pages) ---
import os, sys
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
# -------------------------------------------------------------

import streamlit as st

from mindscape.persistence.db import init_db
from mindscape.persistence.models import Base
from mindscape.persistence.repositories.users_repo import UserRepository
from mindscape.services import catalog
from mindscape.ui_state import current_user

# Boot DB (no drop)
init_db(Base, drop_and_recreate=False)
users = UserRepository()

st.set_page_config(page_title="Profil — Mindscape", page_icon="👤", layout="centered")
st.title("👤 Profil")

u = current_user(users)

# --- Carte d'infos utilisateur ---
colA, colB = st.columns(2)
with colA:
    st.subheader("Informations")
    st.write(f"**Nom :** {u.name}")
    st.write(f"**Email :** {u.email}")
    st.write(f"**Connexion :** {u.auth_provider}")
    st.write(f"**Créé le :** {u.created_at.strftime('%Y-%m-%d %H:%M')}")
    st.metric("Méditations", u.meditation_count)

with colB:
    st.subheader("Préférences")
    prefs = dict(u.preferences or {})
    voices = [v.value for v in catalog.Voice]
    sounds = [b.value for b in catalog.BackgroundSound]
    voice = st.radio("Voix par défaut", voices,
                     index=voices.index(prefs["voice"]) if prefs.get("voice") in voices else 1)
    background = st.selectbox("Ambiance par défaut", sounds, format_func=catalog.background_label,
                              index=sounds.index(prefs["background"]) if prefs.get("background") in sounds else 0)
    if st.button("Enregistrer"):
        prefs.update({"voice": voice, "background": background})
        users.update_preferences(u.id, prefs)
        st.success("Préférences mises à jour")
        st.rerun()
