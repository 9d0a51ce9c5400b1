"""Relationship queries: mutual connections and member activity status."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable

from memberhub.core.config import Settings, get_settings
from memberhub.core.utils import as_utc, utcnow
from memberhub.db.models import Connection, Person
from memberhub.repositories.sql_repository import Page, SQLRepository


@dataclass
class SocialGraphQuery:
    repository: SQLRepository = field(default_factory=SQLRepository)
    settings: Settings = field(default_factory=get_settings)
    clock: Callable[[], datetime] = utcnow

    def _per_page(self) -> int:
        return max(1, self.settings.raster_per_page)

    def _mostly_active_cutoff(self) -> datetime:
        return as_utc(self.clock()) - timedelta(days=self.settings.mostly_active_days)

    # -------------------------------------- predicates --------------------------------------
    def is_active(self, person: Person) -> bool:
        if person.deactivated:
            return False
        if self.settings.require_email_verification:
            return person.email_verified is True
        return True

    def is_mostly_active(self, person: Person) -> bool:
        last_login = as_utc(person.last_logged_in_at)
        return self.is_active(person) and last_login is not None and last_login >= self._mostly_active_cutoff()

    def _active_criteria(self) -> list:
        criteria = [Person.deactivated.is_(False)]
        if self.settings.require_email_verification:
            criteria.append(Person.email_verified.is_(True))
        return criteria

    def _mostly_active_criteria(self) -> list:
        return self._active_criteria() + [
            Person.last_logged_in_at.is_not(None),
            Person.last_logged_in_at >= self._mostly_active_cutoff(),
        ]

    # -------------------------------------- listings --------------------------------------
    def list_active(self, page: int = 1) -> Page[Person]:
        return self.repository.paginate_people(*self._active_criteria(), page=page, per_page=self._per_page())

    def list_mostly_active(self, page: int = 1) -> Page[Person]:
        return self.repository.paginate_people(*self._mostly_active_criteria(), page=page, per_page=self._per_page())

    def all_active(self) -> list[Person]:
        return self.repository.list_people(*self._active_criteria())

    # -------------------------------------- connections --------------------------------------
    def mutual_connections(self, person: Person, other: Person, page: int = 1) -> Page[Connection]:
        """Connections to contacts that both people have accepted."""
        return self.repository.mutual_connections(person.id, other.id, page=page, per_page=self._per_page())

    def contacts(self, person: Person, page: int = 1) -> Page[Person]:
        return self.repository.contacts(person.id, page=page, per_page=self._per_page())

    def requested_contacts(self, person: Person) -> list[Person]:
        return self.repository.requested_contacts(person.id)
