"""
Member lifecycle use cases: registration, profile edits and account flags.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from memberhub.db.models import Person
from memberhub.domain.people import identity_errors, normalize_email, password_errors
from memberhub.repositories.sql_repository import SQLRepository
from memberhub.services.activity_service import DESCRIPTION_CHANGED, ActivityRecorder
from memberhub.services.credential_service import CredentialStore

logger = logging.getLogger(__name__)


class PersonError(Exception):
    """Base class for member lifecycle exceptions."""

    def __init__(self, message: str, errors: Optional[list[str]] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or [message]


class RegistrationError(PersonError):
    pass


class ProfileError(PersonError):
    pass


class LastAdminError(PersonError):
    pass


@dataclass
class PersonService:
    credentials: CredentialStore
    repository: SQLRepository = field(default_factory=SQLRepository)
    activities: Optional[ActivityRecorder] = None

    def __post_init__(self):
        if self.activities is None:
            self.activities = ActivityRecorder(repository=self.repository)

    # -------------------------------------- registration --------------------------------------
    def register(
        self,
        email: str,
        name: str,
        password: str,
        password_confirmation: str,
        *,
        admin: bool = False,
    ) -> Person:
        email = normalize_email(email)
        name = (name or "").strip()
        errors = identity_errors(email, name) + password_errors(password, password_confirmation)
        if not errors and self.repository.get_person_by_email(email):
            errors.append("Email has already been taken")
        if errors:
            raise RegistrationError(errors[0], errors)
        person = self.repository.create_person(
            email,
            name,
            self.credentials.encrypt(password),
            admin=admin,
        )
        self._connect_to_admin(person)
        logger.info("registered person %s", person.id)
        return person

    def _connect_to_admin(self, person: Person) -> None:
        """Open a connection request from the new member to the first admin."""
        first_admin = self.repository.find_first_admin()
        if first_admin is None or first_admin.id == person.id:
            return
        self.repository.request_connection(person.id, first_admin.id)

    def find_first_admin(self) -> Optional[Person]:
        return self.repository.find_first_admin()

    # -------------------------------------- profile --------------------------------------
    def update_profile(self, person: Person, *, name: str | None = None, description: str | None = None) -> Person:
        new_name = person.name if name is None else name.strip()
        new_description = person.description if description is None else description
        errors = identity_errors(person.email, new_name, new_description)
        if errors:
            raise ProfileError(errors[0], errors)
        old_description = person.description
        self.repository.update_person_fields(person.id, name=new_name, description=new_description)
        person.name = new_name
        person.description = new_description
        if old_description != new_description and (new_description or "").strip():
            self.activities.record(person, person, DESCRIPTION_CHANGED)
        return person

    # -------------------------------------- flags --------------------------------------
    def set_deactivated(self, person: Person, deactivated: bool) -> Person:
        if deactivated and self.credentials.is_last_remaining_admin(person):
            raise LastAdminError("The last remaining admin can't be deactivated")
        self.repository.update_person_fields(person.id, deactivated=deactivated)
        person.deactivated = deactivated
        return person

    def verify_email(self, person: Person) -> Person:
        self.repository.update_person_fields(person.id, email_verified=True)
        person.email_verified = True
        return person
