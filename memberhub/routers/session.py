from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Request, Response
from pydantic import BaseModel

from memberhub.core.security import KeyUnavailable
from memberhub.core.utils import utcnow
from memberhub.db.models import Person
from memberhub.services.credential_service import (
    AuthFailure,
    CredentialStore,
    PasswordChangeRejected,
)

router = APIRouter(prefix="/session", tags=["session"])
logger = logging.getLogger(__name__)


class LoginPayload(BaseModel):
    email: str = ""
    password: str = ""
    remember_me: bool = False


class PasswordPayload(BaseModel):
    current_password: str = ""
    new_password: str = ""
    password_confirmation: str = ""


def _credentials(request: Request) -> CredentialStore:
    svc = getattr(getattr(request.app, "state", None), "credentials", None)
    if not svc:
        raise RuntimeError("CredentialStore not configured")
    return svc


def _cookie_name(request: Request) -> str:
    return _credentials(request).settings.remember_cookie_name


def _person_json(person: Person) -> dict:
    return {"id": person.id, "email": person.email, "name": person.name, "admin": bool(person.admin)}


def current_person(request: Request) -> Optional[Person]:
    """Resolve the member from the remember-me cookie, if it is still valid."""
    token = request.cookies.get(_cookie_name(request))
    return _credentials(request).find_by_remember_token(token)


def _require_person(request: Request) -> Person:
    person = current_person(request)
    if person is None:
        raise HTTPException(401, "Not logged in")
    return person


@router.post("")
def login(payload: LoginPayload, request: Request, response: Response):
    store = _credentials(request)
    try:
        result = store.login(payload.email, payload.password, remember=payload.remember_me)
    except KeyUnavailable as exc:
        logger.error("login unavailable: %s", exc)
        raise HTTPException(503, "Login is temporarily unavailable")
    if isinstance(result, AuthFailure):
        raise HTTPException(401, "Invalid email/password combination")
    if result.remember_token and result.remember_token_expires_at:
        max_age = int((result.remember_token_expires_at - utcnow()).total_seconds())
        response.set_cookie(
            store.settings.remember_cookie_name,
            result.remember_token,
            httponly=True,
            secure=store.settings.app_env == "prod",
            samesite="lax",
            max_age=max(0, max_age),
            path="/",
        )
    return _person_json(result.person)


@router.get("")
def show(request: Request):
    return _person_json(_require_person(request))


@router.delete("")
def logout(request: Request, response: Response):
    person = current_person(request)
    if person is not None:
        _credentials(request).forget_token(person)
    response.delete_cookie(_cookie_name(request), path="/")
    return {"ok": True}


@router.post("/password")
def change_password(payload: PasswordPayload, request: Request):
    person = _require_person(request)
    try:
        result = _credentials(request).change_password(
            person,
            payload.current_password,
            payload.new_password,
            payload.password_confirmation,
        )
    except KeyUnavailable as exc:
        logger.error("password change unavailable: %s", exc)
        raise HTTPException(503, "Password change is temporarily unavailable")
    if isinstance(result, PasswordChangeRejected):
        raise HTTPException(400, result.message)
    return {"ok": True}
