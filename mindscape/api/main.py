import logging
import os
from typing import List, Optional

from fastapi import Depends, FastAPI, Header, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from mindscape.errors import MindscapeError
from mindscape.persistence.db import init_db
from mindscape.persistence.models import Base
from mindscape.persistence.repositories.users_repo import UserRepository
from mindscape.services.auth_service import AuthService
from mindscape.services.community_service import CommunityService
from mindscape.services.library_service import LibraryService
from mindscape.api.schemas import (
    CommunityMeditationOut,
    FavoriteRequest,
    GenerateRequest,
    MeditationOut,
    PreferencesRequest,
    RateRequest,
    ShareRequest,
    SuccessOut,
    UserOut,
)

logger = logging.getLogger(__name__)


def create_app(
    auth: Optional[AuthService] = None,
    library: Optional[LibraryService] = None,
    community: Optional[CommunityService] = None,
    users: Optional[UserRepository] = None,
    init_schema: bool = True,
) -> FastAPI:
    """Construit l'application ; les services sont injectables (tests)."""
    if init_schema:
        init_db(Base, drop_and_recreate=False)
    users = users or UserRepository()
    auth = auth or AuthService(users=users)
    library = library or LibraryService()
    community = community or CommunityService()

    app = FastAPI(title="Mindscape API")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(MindscapeError)
    async def handle_domain_error(request: Request, exc: MindscapeError):
        if exc.http_status >= 500:
            logger.error("%s %s -> %s: %s", request.method, request.url.path, type(exc).__name__, exc.message)
        return JSONResponse(status_code=exc.http_status, content={"error": exc.message})

    def current_user(authorization: Optional[str] = Header(default=None)):
        return auth.authenticate(authorization)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    # -----------------------------
    # Auth
    # -----------------------------

    @app.get("/api/auth/user", response_model=UserOut)
    def get_me(user=Depends(current_user)):
        return user

    @app.put("/api/auth/preferences", response_model=UserOut)
    def update_preferences(payload: PreferencesRequest, user=Depends(current_user)):
        return users.update_preferences(user.id, payload.preferences)

    # -----------------------------
    # Génération
    # -----------------------------

    @app.post("/api/meditation/generate", response_model=MeditationOut)
    def generate_meditation(payload: GenerateRequest, user=Depends(current_user)):
        customization = payload.customization.model_dump(by_alias=True, exclude_none=True) if payload.customization else None
        settings = payload.settings.model_dump(exclude_none=True) if payload.settings else None
        return library.generate(user, payload.type, payload.duration, customization=customization, settings=settings)

    # -----------------------------
    # Bibliothèque
    # -----------------------------

    @app.get("/api/library/meditations", response_model=List[MeditationOut])
    def list_meditations(user=Depends(current_user)):
        return library.list_for_user(user.id)

    @app.get("/api/library/meditation/{meditation_id}", response_model=MeditationOut)
    def get_meditation(meditation_id: str, user=Depends(current_user)):
        return library.get_owned(meditation_id, user.id)

    @app.post("/api/library/meditation/{meditation_id}/play", response_model=SuccessOut)
    def play_meditation(meditation_id: str, user=Depends(current_user)):
        library.record_play(meditation_id, user.id)
        return SuccessOut()

    @app.put("/api/library/meditation/{meditation_id}/favorite", response_model=MeditationOut)
    def toggle_favorite(meditation_id: str, payload: FavoriteRequest, user=Depends(current_user)):
        return library.set_favorite(meditation_id, user.id, payload.is_favorite)

    @app.delete("/api/library/meditation/{meditation_id}", response_model=SuccessOut)
    def delete_meditation(meditation_id: str, user=Depends(current_user)):
        library.delete(meditation_id, user.id)
        return SuccessOut()

    # -----------------------------
    # Communauté
    # -----------------------------

    @app.get("/api/community/meditations", response_model=List[CommunityMeditationOut])
    def community_recent():
        return community.list_recent(limit=20)

    @app.get("/api/community/popular", response_model=List[CommunityMeditationOut])
    def community_popular():
        return community.list_popular(limit=10)

    @app.post("/api/community/share/{meditation_id}", response_model=CommunityMeditationOut)
    def share_meditation(meditation_id: str, payload: Optional[ShareRequest] = None, user=Depends(current_user)):
        payload = payload or ShareRequest()
        return community.share(meditation_id, user.id, title=payload.title, description=payload.description)

    @app.post("/api/community/rate/{community_id}", response_model=SuccessOut)
    def rate_meditation(community_id: str, payload: RateRequest, user=Depends(current_user)):
        community.rate(community_id, user.id, payload.rating)
        return SuccessOut()

    @app.post("/api/community/meditation/{community_id}/play", response_model=SuccessOut)
    def play_community_meditation(community_id: str):
        community.record_community_play(community_id)
        return SuccessOut()

    return app


if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(create_app(), host="0.0.0.0", port=port)
