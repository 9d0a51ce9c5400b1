from __future__ import annotations

from dataclasses import replace
from datetime import timedelta

import pytest

from memberhub.core import config as core_config
from memberhub.db.models import ACCEPTED, Connection, Person
from memberhub.db.session import get_session
from memberhub.repositories.sql_repository import SQLRepository
from memberhub.services.social_graph_service import SocialGraphQuery

from conftest import BASE_TIME


def _settings(**overrides):
    return replace(core_config.get_settings(), **overrides)


@pytest.fixture()
def repo(db_env):
    return SQLRepository()


def _connect(repo, a, b):
    repo.request_connection(a.id, b.id)
    repo.accept_connection(b.id, a.id)


@pytest.fixture()
def graph(repo):
    people = {name: repo.create_person(f"{name}@example.com", name.title(), "x") for name in ("ana", "bia", "caio", "davi")}
    return people


# -------------------------- activity predicates --------------------------

@pytest.mark.parametrize("verified", [None, False, True])
@pytest.mark.parametrize("required", [False, True])
def test_deactivated_is_never_active(verified, required):
    query = SocialGraphQuery(settings=_settings(require_email_verification=required))
    assert not query.is_active(Person(deactivated=True, email_verified=verified))


@pytest.mark.parametrize("verified", [None, False, True])
def test_active_ignores_verification_when_not_required(verified):
    query = SocialGraphQuery(settings=_settings(require_email_verification=False))
    assert query.is_active(Person(deactivated=False, email_verified=verified))


@pytest.mark.parametrize("verified, expected", [(None, False), (False, False), (True, True)])
def test_active_requires_verified_email_when_required(verified, expected):
    query = SocialGraphQuery(settings=_settings(require_email_verification=True))
    assert query.is_active(Person(deactivated=False, email_verified=verified)) is expected


def test_mostly_active_requires_a_recent_login(clock):
    query = SocialGraphQuery(settings=_settings(require_email_verification=False), clock=clock)
    assert query.is_mostly_active(Person(deactivated=False, last_logged_in_at=BASE_TIME - timedelta(days=29)))
    assert query.is_mostly_active(Person(deactivated=False, last_logged_in_at=BASE_TIME - timedelta(days=30)))
    assert not query.is_mostly_active(Person(deactivated=False, last_logged_in_at=BASE_TIME - timedelta(days=31)))
    assert not query.is_mostly_active(Person(deactivated=False, last_logged_in_at=None))
    assert not query.is_mostly_active(Person(deactivated=True, last_logged_in_at=BASE_TIME))


# -------------------------- listings --------------------------

def test_list_active_is_paginated_and_skips_deactivated(repo, graph):
    repo.update_person_fields(graph["davi"].id, deactivated=True)
    extra = repo.create_person("eva@example.com", "Eva", "x")
    query = SocialGraphQuery(repository=repo, settings=_settings(raster_per_page=2))

    first = query.list_active(1)
    second = query.list_active(2)

    assert first.total == 4
    assert first.total_pages == 2
    assert [p.id for p in first] + [p.id for p in second] == [graph["ana"].id, graph["bia"].id, graph["caio"].id, extra.id]
    assert [p.id for p in query.all_active()] == [p.id for p in first] + [p.id for p in second]


def test_list_active_with_verification_required(repo, graph):
    repo.update_person_fields(graph["ana"].id, email_verified=True)
    repo.update_person_fields(graph["bia"].id, email_verified=False)
    query = SocialGraphQuery(repository=repo, settings=_settings(require_email_verification=True))

    assert [p.id for p in query.list_active()] == [graph["ana"].id]


def test_list_mostly_active(repo, graph, clock):
    repo.update_person_fields(graph["ana"].id, last_logged_in_at=BASE_TIME - timedelta(days=3))
    repo.update_person_fields(graph["bia"].id, last_logged_in_at=BASE_TIME - timedelta(days=45))
    repo.update_person_fields(graph["caio"].id, last_logged_in_at=BASE_TIME, deactivated=True)
    query = SocialGraphQuery(repository=repo, clock=clock)

    page = query.list_mostly_active()

    assert [p.id for p in page] == [graph["ana"].id]
    assert page.total == 1


# -------------------------- mutual connections --------------------------

def test_mutual_connections_is_an_intersection(repo, graph):
    ana, bia, caio, davi = graph["ana"], graph["bia"], graph["caio"], graph["davi"]
    _connect(repo, ana, caio)
    _connect(repo, bia, caio)
    _connect(repo, ana, davi)
    query = SocialGraphQuery(repository=repo)

    page = query.mutual_connections(ana, bia)

    assert [c.contact_id for c in page] == [caio.id]
    assert page.total == 1
    assert [c.contact_id for c in query.mutual_connections(bia, ana)] == [caio.id]


def test_mutual_connections_requires_accepted_edges(repo, graph):
    ana, bia, caio = graph["ana"], graph["bia"], graph["caio"]
    _connect(repo, ana, caio)
    repo.request_connection(bia.id, caio.id)

    assert list(SocialGraphQuery(repository=repo).mutual_connections(ana, bia)) == []


def test_mutual_connections_skip_inactive_contacts(repo, graph):
    ana, bia, caio, davi = graph["ana"], graph["bia"], graph["caio"], graph["davi"]
    for contact in (caio, davi):
        _connect(repo, ana, contact)
        _connect(repo, bia, contact)
    repo.update_person_fields(caio.id, deactivated=True)
    repo.update_person_fields(davi.id, email_verified=False)

    assert list(SocialGraphQuery(repository=repo).mutual_connections(ana, bia)) == []

    repo.update_person_fields(davi.id, email_verified=True)
    assert [c.contact_id for c in SocialGraphQuery(repository=repo).mutual_connections(ana, bia)] == [davi.id]


def test_mutual_connections_with_self_is_empty(repo, graph):
    ana, caio = graph["ana"], graph["caio"]
    _connect(repo, ana, caio)

    assert list(SocialGraphQuery(repository=repo).mutual_connections(ana, ana)) == []


def test_mutual_connections_return_the_first_persons_edge(repo, graph):
    ana, bia, caio = graph["ana"], graph["bia"], graph["caio"]
    _connect(repo, bia, caio)
    _connect(repo, ana, caio)
    query = SocialGraphQuery(repository=repo)

    assert [c.person_id for c in query.mutual_connections(ana, bia)] == [ana.id]
    assert [c.person_id for c in query.mutual_connections(bia, ana)] == [bia.id]


def _duplicate_accepted_edge(person, contact):
    with get_session() as session:
        session.add(Connection(person_id=person.id, contact_id=contact.id, status=ACCEPTED))
        session.commit()


def test_duplicate_edges_from_one_side_count_as_mutual(repo, graph):
    ana, bia, caio = graph["ana"], graph["bia"], graph["caio"]
    _connect(repo, ana, caio)
    _duplicate_accepted_edge(ana, caio)

    page = SocialGraphQuery(repository=repo).mutual_connections(ana, bia)

    assert [c.contact_id for c in page] == [caio.id]
    assert [c.person_id for c in page] == [ana.id]


def test_duplicate_edges_only_on_the_other_side_still_yield_a_row(repo, graph):
    ana, bia, caio = graph["ana"], graph["bia"], graph["caio"]
    _connect(repo, bia, caio)
    _duplicate_accepted_edge(bia, caio)

    page = SocialGraphQuery(repository=repo).mutual_connections(ana, bia)

    assert [(c.person_id, c.contact_id) for c in page] == [(bia.id, caio.id)]


def test_three_matching_edges_drop_the_contact(repo, graph):
    ana, bia, caio = graph["ana"], graph["bia"], graph["caio"]
    _connect(repo, ana, caio)
    _connect(repo, bia, caio)
    _duplicate_accepted_edge(ana, caio)

    assert list(SocialGraphQuery(repository=repo).mutual_connections(ana, bia)) == []


def test_mutual_connections_are_paginated(repo, graph):
    ana, bia = graph["ana"], graph["bia"]
    contacts = [repo.create_person(f"c{i}@example.com", f"C{i}", "x") for i in range(3)]
    for contact in contacts:
        _connect(repo, ana, contact)
        _connect(repo, bia, contact)
    query = SocialGraphQuery(repository=repo, settings=_settings(raster_per_page=2))

    first = query.mutual_connections(ana, bia, 1)
    second = query.mutual_connections(ana, bia, 2)

    assert first.total == 3
    assert [c.contact_id for c in first] + [c.contact_id for c in second] == [c.id for c in contacts]


def test_contacts_and_requests(repo, graph):
    ana, bia, caio = graph["ana"], graph["bia"], graph["caio"]
    _connect(repo, ana, bia)
    repo.request_connection(caio.id, ana.id)
    query = SocialGraphQuery(repository=repo)

    assert [p.id for p in query.contacts(ana)] == [bia.id]
    assert [p.id for p in query.requested_contacts(ana)] == [caio.id]

    repo.break_connection(ana.id, bia.id)
    assert list(query.contacts(ana)) == []
