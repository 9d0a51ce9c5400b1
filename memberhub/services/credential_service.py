"""
Authentication and credential use cases: login, password change and
remember-me tokens.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Optional

from memberhub.core.config import Settings, get_settings
from memberhub.core.security import (
    CredentialCipher,
    DecryptionFailure,
    passwords_match,
    remember_token_digest,
)
from memberhub.core.utils import as_utc, utcnow
from memberhub.db.models import Person
from memberhub.domain.people import normalize_email
from memberhub.repositories.sql_repository import SQLRepository

logger = logging.getLogger(__name__)


class AuthFailureReason(str, enum.Enum):
    NO_SUCH_ACCOUNT = "no_such_account"
    WRONG_PASSWORD = "wrong_password"


class PasswordChangeReason(str, enum.Enum):
    INCORRECT_CURRENT_PASSWORD = "incorrect_current_password"
    CONFIRMATION_MISMATCH = "confirmation_mismatch"


@dataclass
class AuthFailure:
    reason: AuthFailureReason
    email: str = ""


@dataclass
class LoginSuccess:
    person: Person
    remember_token: Optional[str] = None
    remember_token_expires_at: Optional[datetime] = None


@dataclass
class PasswordChanged:
    person: Person


@dataclass
class PasswordChangeRejected:
    reason: PasswordChangeReason

    @property
    def message(self) -> str:
        if self.reason is PasswordChangeReason.INCORRECT_CURRENT_PASSWORD:
            return "Password is incorrect"
        return "Password does not match confirmation"


@dataclass
class CredentialStore:
    """Protects stored passwords and handles login and remember-me tokens.

    The cipher is reversible: the current password can be recovered from the
    stored credential and is compared in plaintext.
    """

    cipher: CredentialCipher
    repository: SQLRepository = field(default_factory=SQLRepository)
    settings: Settings = field(default_factory=get_settings)
    clock: Callable[[], datetime] = utcnow

    # -------------------------------------- cipher --------------------------------------
    def encrypt(self, plaintext: str) -> str:
        return self.cipher.encrypt(plaintext)

    def decrypt(self, ciphertext: str) -> str:
        return self.cipher.decrypt(ciphertext)

    def unencrypted_password(self, person: Person) -> str:
        return self.decrypt(person.crypted_password or "")

    def _now(self) -> datetime:
        return as_utc(self.clock())

    # -------------------------------------- login --------------------------------------
    def authenticate(self, email: str, password: str) -> Person | AuthFailure:
        normalized = normalize_email(email)
        person = self.repository.get_person_by_email(normalized) if normalized else None
        if person is None:
            logger.info("login rejected: no matching account")
            return AuthFailure(AuthFailureReason.NO_SUCH_ACCOUNT, normalized)
        try:
            stored = self.unencrypted_password(person)
        except DecryptionFailure:
            logger.warning("stored credential for person %s could not be decrypted", person.id)
            return AuthFailure(AuthFailureReason.WRONG_PASSWORD, normalized)
        if not passwords_match(password, stored):
            logger.info("login rejected: wrong password for person %s", person.id)
            return AuthFailure(AuthFailureReason.WRONG_PASSWORD, normalized)
        return person

    def login(self, email: str, password: str, *, remember: bool = False) -> LoginSuccess | AuthFailure:
        result = self.authenticate(email, password)
        if isinstance(result, AuthFailure):
            return result
        person = result
        now = self._now()
        self.repository.update_person_fields(person.id, last_logged_in_at=now)
        person.last_logged_in_at = now
        if not remember:
            return LoginSuccess(person=person)
        token = self.issue_remember_token(person)
        return LoginSuccess(
            person=person,
            remember_token=token,
            remember_token_expires_at=person.remember_token_expires_at,
        )

    # -------------------------------------- password --------------------------------------
    def change_password(
        self,
        person: Person,
        current_password: str,
        new_password: str,
        password_confirmation: str,
    ) -> PasswordChanged | PasswordChangeRejected:
        try:
            stored = self.unencrypted_password(person)
        except DecryptionFailure:
            logger.warning("stored credential for person %s could not be decrypted", person.id)
            return PasswordChangeRejected(PasswordChangeReason.INCORRECT_CURRENT_PASSWORD)
        if not passwords_match(current_password, stored):
            return PasswordChangeRejected(PasswordChangeReason.INCORRECT_CURRENT_PASSWORD)
        if new_password != password_confirmation:
            return PasswordChangeRejected(PasswordChangeReason.CONFIRMATION_MISMATCH)
        crypted = self.encrypt(new_password)
        # Last writer wins when two changes race on the same person.
        self.repository.update_person_fields(person.id, crypted_password=crypted)
        person.crypted_password = crypted
        logger.info("password changed for person %s", person.id)
        return PasswordChanged(person=person)

    # -------------------------------------- remember me --------------------------------------
    def issue_remember_token(self, person: Person, duration: timedelta | None = None) -> str:
        if duration is None:
            duration = timedelta(days=self.settings.remember_token_days)
        return self.remember_until(person, self._now() + duration)

    def remember_until(self, person: Person, expires_at: datetime) -> str:
        expires_at = as_utc(expires_at)
        token = remember_token_digest(person.email, expires_at)
        self.repository.update_person_fields(
            person.id,
            remember_token=token,
            remember_token_expires_at=expires_at,
        )
        person.remember_token = token
        person.remember_token_expires_at = expires_at
        return token

    def validate_remember_token(self, person: Person) -> bool:
        expires_at = as_utc(person.remember_token_expires_at)
        return expires_at is not None and self._now() < expires_at

    def forget_token(self, person: Person) -> None:
        self.repository.update_person_fields(
            person.id,
            remember_token=None,
            remember_token_expires_at=None,
        )
        person.remember_token = None
        person.remember_token_expires_at = None

    def find_by_remember_token(self, token: str | None) -> Optional[Person]:
        """Return the person holding a still valid remember token."""
        token = (token or "").strip()
        if not token:
            return None
        person = self.repository.get_person_by_remember_token(token)
        if person is None or not self.validate_remember_token(person):
            return None
        return person

    # -------------------------------------- admins --------------------------------------
    def is_last_remaining_admin(self, person: Person) -> bool:
        return bool(person.admin) and self.repository.count_active_admins() == 1
