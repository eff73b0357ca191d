# scripts/seed_local_data.py
# -*- coding: utf-8 -*-
"""
Seed local pour Mindscape : crée des utilisateurs, des méditations, des partages et des notes.

Caractéristiques :
- Paramétrable via CLI : nb d'utilisateurs, nb de méditations par utilisateur, taux de partage
- Scripts générés via ScriptService (stub par défaut, OpenAI selon env)
- Notes croisées : chaque utilisateur note une partie des méditations partagées des autres
  (une note par couple, les re-notes mettent à jour)
- Option (--wipe) pour drop+recreate le schéma (utile en dev)

Utilise :
- mindscape/persistence/db.py                -> init_db()
- mindscape/persistence/models.py            -> Base
- mindscape/persistence/repositories/...     -> UserRepository
- mindscape/services/library_service.py      -> LibraryService
- mindscape/services/community_service.py    -> CommunityService

Exemples :
    # 3 users, 4 méditations chacun
    python scripts/seed_local_data.py

    # 5 users, 6 méditations, la moitié partagée, reproductible
    python scripts/seed_local_data.py --users 5 --per-user 6 --share-rate 0.5 --seed 42

    # Recommencer à zéro
    python scripts/seed_local_data.py --wipe
"""

from __future__ import annotations

import argparse
import random

# Persistance & modèles
from mindscape.persistence.db import init_db
from mindscape.persistence.models import Base
from mindscape.persistence.repositories.users_repo import UserRepository

# Services
from mindscape.services import catalog
from mindscape.services.community_service import CommunityService
from mindscape.services.library_service import LibraryService


# -------------------------------------------------------------------
# Utils
# -------------------------------------------------------------------

def clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


SAMPLE_GOALS = [
    "Trouver plus de calme au travail",
    "Mieux dormir",
    "Préparer un entretien important",
    "Lâcher prise sur une situation difficile",
    None,
]


def sample_settings() -> dict:
    return {
        "voice": random.choice([v.value for v in catalog.Voice]),
        "background": random.choice([b.value for b in catalog.BackgroundSound]),
        "visual": random.choice([v.value for v in catalog.VisualEnvironment]),
    }


# -------------------------------------------------------------------
# Seeding
# -------------------------------------------------------------------

def seed(*, users: int, per_user: int, email_prefix: str, domain: str, share_rate: float) -> None:
    user_repo = UserRepository()
    library = LibraryService()
    community = CommunityService()

    print(f"➡️  Seeding {users} user(s), {per_user} méditation(s) chacun | partage ~{int(share_rate*100)}%")

    seeded_users = []
    shared = []  # (community_id, owner_id)
    for i in range(1, users + 1):
        email = f"{email_prefix}{i}@{domain}".lower()
        u = user_repo.get_or_create(email, name=f"{email_prefix.title()} {i}", auth_provider="seed")
        seeded_users.append(u)
        print(f"   • User {u.id}  {u.email:<30}")

        for _ in range(per_user):
            goals = random.choice(SAMPLE_GOALS)
            m = library.generate(
                u,
                random.choice([t.value for t in catalog.MeditationType]),
                random.choice(catalog.DURATION_CHOICES),
                customization={"goals": goals} if goals else None,
                settings=sample_settings(),
            )
            for _ in range(random.randint(0, 5)):
                library.record_play(m.id, u.id)
            if random.random() < share_rate:
                cm = community.share(m.id, u.id)
                shared.append((cm.id, u.id))

    total_ratings = 0
    for cid, owner_id in shared:
        for _ in range(random.randint(0, 8)):
            community.record_community_play(cid)
        for u in seeded_users:
            if u.id == owner_id or random.random() < 0.4:
                continue
            community.rate(cid, u.id, random.randint(3, 5))
            total_ratings += 1

    print(f"✅ Terminé : {users} user(s), {len(shared)} partage(s), {total_ratings} note(s).")


# -------------------------------------------------------------------
# CLI
# -------------------------------------------------------------------

def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Seed local data for Mindscape")
    p.add_argument("--users", type=int, default=3, help="Nombre d'utilisateurs (défaut: 3)")
    p.add_argument("--per-user", type=int, default=4, help="Méditations par utilisateur (défaut: 4)")
    p.add_argument("--email-prefix", type=str, default="user", help="Préfixe email (défaut: 'user')")
    p.add_argument("--domain", type=str, default="example.com", help="Domaine email (défaut: example.com)")
    p.add_argument("--share-rate", type=float, default=0.5, help="Probabilité de partage (0..1, défaut: 0.5)")
    p.add_argument("--seed", type=int, default=None, help="Seed du générateur aléatoire pour reproductibilité")
    p.add_argument("--wipe", action="store_true", help="Drop + recreate la base avant seeding")
    return p.parse_args()


def main():
    args = parse_args()

    if args.seed is not None:
        random.seed(args.seed)

    if args.wipe:
        print("⚠️  Wipe : drop & recreate le schéma…")

    init_db(Base, drop_and_recreate=bool(args.wipe))

    seed(
        users=max(1, args.users),
        per_user=max(0, args.per_user),
        email_prefix=args.email_prefix,
        domain=args.domain,
        share_rate=clamp(args.share_rate, 0.0, 1.0),
    )


if __name__ == "__main__":
    main()
