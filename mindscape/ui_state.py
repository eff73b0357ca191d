# mindscape/ui_state.py
# -*- coding: utf-8 -*-
"""État de session partagé par les pages Streamlit : utilisateur courant et lecteur."""

import os

import streamlit as st

from mindscape.services import catalog
from mindscape.services.playback import PlaybackController, PlaybackState


def current_user(users):
    """Utilisateur de la session, ou utilisateur de démo créé à la volée."""
    u = users.get(st.session_state["user_id"]) if "user_id" in st.session_state else None
    if u is None:
        # session neuve, ou utilisateur disparu (ex. base réinitialisée par le seed --wipe)
        st.session_state.pop("user_id", None)
        st.session_state.pop("user_email", None)
        default_email = os.getenv("MINDSCAPE_DEFAULT_EMAIL", "demo@example.com")
        u = users.get_or_create(default_email, auth_provider="local")
        st.session_state["user_id"] = u.id
        st.session_state["user_email"] = u.email
    st.caption(f"Connecté en tant que **{u.email}** ({u.meditation_count} méditation(s))")
    return u


def get_player(library, user_id: str) -> PlaybackController:
    """Un seul lecteur par session : c'est lui qui garantit une seule lecture active."""
    player = st.session_state.get("player")
    if player is None or st.session_state.get("player_owner") != user_id:
        if player is not None:
            player.close()
        player = PlaybackController(play_recorder=lambda mid: library.record_play(mid, user_id))
        st.session_state["player"] = player
        st.session_state["player_owner"] = user_id
    return player


def seek_upper_bound(duration: float) -> int:
    """Borne haute du curseur : st.slider exige max > min, même pour un flux de moins d'une seconde."""
    return max(1, int(duration))


def render_player(player: PlaybackController) -> None:
    snap = player.snapshot()
    if snap.state is PlaybackState.IDLE:
        return
    m = player.current_meditation
    st.divider()
    st.image(catalog.visual_image((m.settings or {}).get("visual")), use_container_width=True)
    st.subheader(f"{'▶️ En cours' if snap.state is PlaybackState.PLAYING else '⏸️ En pause'} — {m.title}")
    st.caption(f"{m.type} • {m.duration} minutes")
    st.audio(snap.source)
    if snap.background:
        bg_path = catalog.background_sound_path(snap.background)
        st.caption(f"🔊 Ambiance : {catalog.background_label(snap.background)}")
        if bg_path and os.path.exists(bg_path):
            st.audio(bg_path, loop=True)

    col1, col2, col3 = st.columns(3)
    with col1:
        if snap.state is PlaybackState.PLAYING and st.button("⏸️ Pause"):
            player.pause()
            st.rerun()
        if snap.state is PlaybackState.PAUSED and st.button("▶️ Reprendre"):
            player.resume()
            st.rerun()
    with col2:
        upper = seek_upper_bound(snap.duration)
        position = min(int(snap.elapsed), upper)
        target = st.slider("Position (s)", 0, upper, position)
        if target != position:
            player.seek_to(target)
    with col3:
        if st.button("⏹️ Stop"):
            player.stop()
            st.rerun()
