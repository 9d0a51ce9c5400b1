"""FastAPI entry point wiring the memberhub services together."""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI

from memberhub.core.config import Settings, get_settings
from memberhub.core.security import CredentialCipher, RSACredentialCipher, load_key_material
from memberhub.repositories.sql_repository import SQLRepository
from memberhub.routers import people as people_router
from memberhub.routers import session as session_router
from memberhub.services.activity_service import ActivityRecorder
from memberhub.services.credential_service import CredentialStore
from memberhub.services.feed_service import FeedComposer
from memberhub.services.person_service import PersonService
from memberhub.services.social_graph_service import SocialGraphQuery

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, cipher: Optional[CredentialCipher] = None) -> FastAPI:
    """Build the app. Key material is loaded once here and shared by every request."""
    settings = settings or get_settings()
    if cipher is None:
        cipher = RSACredentialCipher(load_key_material(settings))
    repository = SQLRepository()
    credentials = CredentialStore(cipher=cipher, repository=repository, settings=settings)
    activities = ActivityRecorder(repository=repository)

    app = FastAPI(title="memberhub")
    app.state.settings = settings
    app.state.repository = repository
    app.state.credentials = credentials
    app.state.activities = activities
    app.state.people = PersonService(credentials=credentials, repository=repository, activities=activities)
    app.state.feeds = FeedComposer(repository=repository, settings=settings)
    app.state.social_graph = SocialGraphQuery(repository=repository, settings=settings)

    app.include_router(session_router.router)
    app.include_router(people_router.router)
    logger.info("memberhub app created (env=%s)", settings.app_env)
    return app
