from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request

from memberhub.db.models import Activity, Person
from memberhub.repositories.sql_repository import Page, SQLRepository
from memberhub.services.feed_service import FeedComposer
from memberhub.services.social_graph_service import SocialGraphQuery

router = APIRouter(prefix="/people", tags=["people"])


def _state(request: Request, name: str):
    svc = getattr(getattr(request.app, "state", None), name, None)
    if not svc:
        raise RuntimeError(f"{name} not configured")
    return svc


def _graph(request: Request) -> SocialGraphQuery:
    return _state(request, "social_graph")


def _feeds(request: Request) -> FeedComposer:
    return _state(request, "feeds")


def _find_person(request: Request, person_id: int) -> Person:
    repo: SQLRepository = _state(request, "repository")
    person = repo.get_person(person_id)
    if person is None:
        raise HTTPException(404, "Person not found")
    return person


def _person_json(person: Person) -> dict:
    return {"id": person.id, "name": person.name, "description": person.description or ""}


def _activity_json(activity: Activity) -> dict:
    return {
        "id": activity.id,
        "person_id": activity.person_id,
        "item_type": activity.item_type,
        "item_id": activity.item_id,
        "created_at": activity.created_at.isoformat() if activity.created_at else None,
    }


def _page_json(page: Page, items: list) -> dict:
    return {"page": page.page, "per_page": page.per_page, "total": page.total, "total_pages": page.total_pages, "items": items}


@router.get("/active")
def active(request: Request, page: int = 1):
    result = _graph(request).list_active(page)
    return _page_json(result, [_person_json(p) for p in result])


@router.get("/mostly-active")
def mostly_active(request: Request, page: int = 1):
    result = _graph(request).list_mostly_active(page)
    return _page_json(result, [_person_json(p) for p in result])


@router.get("/{person_id}/feed")
def feed(person_id: int, request: Request):
    person = _find_person(request, person_id)
    return {"items": [_activity_json(a) for a in _feeds(request).compose(person)]}


@router.get("/{person_id}/common/{other_id}")
def common_connections(person_id: int, other_id: int, request: Request, page: int = 1):
    person = _find_person(request, person_id)
    other = _find_person(request, other_id)
    result = _graph(request).mutual_connections(person, other, page)
    return _page_json(result, [{"contact_id": c.contact_id, "connection_id": c.id} for c in result])
