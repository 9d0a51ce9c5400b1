"""
Smoke tests for the SQLRepository against a temporary SQLite database.
"""
from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError

from memberhub.db import create_all, get_engine
from memberhub.db.models import ACCEPTED, PENDING, REQUESTED, Feed
from memberhub.repositories.sql_repository import Page, SQLRepository


def test_person_crud(db_env):
    repo = SQLRepository()
    ana = repo.create_person("ana@example.com", "Ana", "crypted")
    assert repo.get_person(ana.id).email == "ana@example.com"
    assert repo.get_person_by_email("ana@example.com").id == ana.id
    assert repo.get_person_by_email("nobody@example.com") is None
    assert ana.forum_posts_count == ana.blog_post_comments_count == ana.wall_comments_count == 0

    repo.update_person_fields(ana.id, name="Ana Maria")
    assert repo.get_person(ana.id).name == "Ana Maria"


def test_email_is_unique(db_env):
    repo = SQLRepository()
    repo.create_person("ana@example.com", "Ana", "crypted")
    with pytest.raises(IntegrityError):
        repo.create_person("ana@example.com", "Other", "crypted")


def test_connection_lifecycle(db_env):
    repo = SQLRepository()
    ana = repo.create_person("ana@example.com", "Ana", "x")
    bia = repo.create_person("bia@example.com", "Bia", "x")

    assert repo.request_connection(ana.id, bia.id)
    assert not repo.request_connection(ana.id, bia.id)
    assert not repo.request_connection(ana.id, ana.id)
    assert repo.get_connection(ana.id, bia.id).status == PENDING
    assert repo.get_connection(bia.id, ana.id).status == REQUESTED

    repo.accept_connection(bia.id, ana.id)
    assert repo.get_connection(ana.id, bia.id).status == ACCEPTED
    assert repo.get_connection(bia.id, ana.id).status == ACCEPTED
    assert repo.accepted_contact_ids(ana.id) == [bia.id]

    repo.break_connection(ana.id, bia.id)
    assert repo.get_connection(ana.id, bia.id) is None
    assert repo.get_connection(bia.id, ana.id) is None


def test_activity_fan_out(db_env):
    repo = SQLRepository()
    ana = repo.create_person("ana@example.com", "Ana", "x")
    bia = repo.create_person("bia@example.com", "Bia", "x")

    activity = repo.create_activity(ana.id, "Person", ana.id, feed_person_ids=[ana.id, bia.id, ana.id])

    assert [a.id for a in repo.feed_activities(ana.id, 10)] == [activity.id]
    assert [a.id for a in repo.feed_activities(bia.id, 10)] == [activity.id]
    assert [a.id for a in repo.global_feed(10)] == [activity.id]
    assert repo.global_feed(0) == []


def test_page_helpers():
    page = Page(items=[1, 2], page=1, per_page=2, total=5)
    assert page.total_pages == 3
    assert list(page) == [1, 2]
    assert len(page) == 2


def test_create_all_only_adds_missing_tables(db_env):
    assert create_all() == []

    Feed.__table__.drop(bind=get_engine())

    assert create_all() == ["feeds"]
    assert create_all() == []
