"""High-level data access helpers backed by SQLAlchemy."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Generic, Iterable, Optional, TypeVar

from sqlalchemy import case, delete, func, or_, select, update

from memberhub.core.utils import utcnow
from memberhub.db.models import (
    ACCEPTED,
    PENDING,
    REQUESTED,
    Activity,
    Connection,
    Feed,
    Person,
)
from memberhub.db.session import get_session

T = TypeVar("T")


@dataclass
class Page(Generic[T]):
    """One page of a stably ordered query."""

    items: list[T] = field(default_factory=list)
    page: int = 1
    per_page: int = 20
    total: int = 0

    @property
    def total_pages(self) -> int:
        if self.per_page <= 0:
            return 0
        return int(math.ceil(self.total / self.per_page))

    def __iter__(self):
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


def _offset(page: int, per_page: int) -> int:
    return (max(1, int(page or 1)) - 1) * per_page


def contact_is_eligible():
    """Contact rows that may appear in connection lists: not deactivated, not explicitly unverified."""
    return (Person.deactivated.is_(False)) & or_(Person.email_verified.is_(None), Person.email_verified.is_(True))


class SQLRepository:
    """CRUD helpers wrapping the SQLAlchemy session."""

    # -------------------------- people --------------------------
    def get_person(self, person_id: int) -> Optional[Person]:
        with get_session() as session:
            return session.get(Person, person_id)

    def get_person_by_email(self, email: str) -> Optional[Person]:
        with get_session() as session:
            stmt = select(Person).where(Person.email == email)
            return session.execute(stmt).scalar_one_or_none()

    def get_person_by_remember_token(self, token: str) -> Optional[Person]:
        if not token:
            return None
        with get_session() as session:
            stmt = select(Person).where(Person.remember_token == token)
            return session.execute(stmt).scalars().first()

    def create_person(
        self,
        email: str,
        name: str,
        crypted_password: str,
        *,
        description: str | None = None,
        admin: bool = False,
        email_verified: bool | None = None,
        created_at: datetime | None = None,
    ) -> Person:
        now = created_at or utcnow()
        entity = Person(
            email=email,
            name=name,
            description=description,
            crypted_password=crypted_password,
            admin=admin,
            deactivated=False,
            email_verified=email_verified,
            forum_posts_count=0,
            blog_post_comments_count=0,
            wall_comments_count=0,
            created_at=now,
            updated_at=now,
        )
        with get_session() as session:
            session.add(entity)
            session.commit()
            session.refresh(entity)
            return entity

    def update_person_fields(self, person_id: int, **values) -> None:
        """Single-row update of the given columns. No model validation runs here."""
        values.setdefault("updated_at", utcnow())
        with get_session() as session:
            session.execute(update(Person).where(Person.id == person_id).values(**values))
            session.commit()

    def count_people(self, *criteria) -> int:
        with get_session() as session:
            stmt = select(func.count(Person.id)).where(*criteria)
            return int(session.execute(stmt).scalar_one())

    def count_active_admins(self) -> int:
        return self.count_people(Person.admin.is_(True), Person.deactivated.is_(False))

    def find_first_admin(self) -> Optional[Person]:
        with get_session() as session:
            stmt = select(Person).where(Person.admin.is_(True)).order_by(Person.created_at, Person.id).limit(1)
            return session.execute(stmt).scalars().first()

    def list_people(self, *criteria) -> list[Person]:
        with get_session() as session:
            stmt = select(Person).where(*criteria).order_by(Person.id)
            return list(session.execute(stmt).scalars().all())

    def paginate_people(self, *criteria, page: int = 1, per_page: int = 20) -> Page[Person]:
        with get_session() as session:
            total = session.execute(select(func.count(Person.id)).where(*criteria)).scalar_one()
            stmt = (
                select(Person)
                .where(*criteria)
                .order_by(Person.id)
                .offset(_offset(page, per_page))
                .limit(per_page)
            )
            items = list(session.execute(stmt).scalars().all())
        return Page(items=items, page=max(1, int(page or 1)), per_page=per_page, total=int(total))

    # -------------------------- connections --------------------------
    def get_connection(self, person_id: int, contact_id: int) -> Optional[Connection]:
        with get_session() as session:
            stmt = select(Connection).where(
                Connection.person_id == person_id,
                Connection.contact_id == contact_id,
            )
            return session.execute(stmt).scalars().first()

    def request_connection(self, person_id: int, contact_id: int) -> bool:
        """Create the pending/requested pair. Returns False when a connection already exists."""
        if person_id == contact_id:
            return False
        now = utcnow()
        with get_session() as session:
            existing = session.execute(
                select(Connection.id).where(
                    Connection.person_id == person_id,
                    Connection.contact_id == contact_id,
                )
            ).first()
            if existing is not None:
                return False
            session.add_all(
                [
                    Connection(person_id=person_id, contact_id=contact_id, status=PENDING, created_at=now, updated_at=now),
                    Connection(person_id=contact_id, contact_id=person_id, status=REQUESTED, created_at=now, updated_at=now),
                ]
            )
            session.commit()
        return True

    def accept_connection(self, person_id: int, contact_id: int) -> None:
        now = utcnow()
        pair = or_(
            (Connection.person_id == person_id) & (Connection.contact_id == contact_id),
            (Connection.person_id == contact_id) & (Connection.contact_id == person_id),
        )
        with get_session() as session:
            stmt = update(Connection).where(pair).values(status=ACCEPTED, accepted_at=now, updated_at=now)
            session.execute(stmt)
            session.commit()

    def break_connection(self, person_id: int, contact_id: int) -> None:
        pair = or_(
            (Connection.person_id == person_id) & (Connection.contact_id == contact_id),
            (Connection.person_id == contact_id) & (Connection.contact_id == person_id),
        )
        with get_session() as session:
            session.execute(delete(Connection).where(pair))
            session.commit()

    def accepted_contact_ids(self, person_id: int) -> list[int]:
        with get_session() as session:
            stmt = select(Connection.contact_id).where(
                Connection.person_id == person_id,
                Connection.status == ACCEPTED,
            )
            return [row[0] for row in session.execute(stmt).all()]

    def contacts(self, person_id: int, *, page: int = 1, per_page: int = 20) -> Page[Person]:
        criteria = (
            Connection.person_id == person_id,
            Connection.status == ACCEPTED,
            contact_is_eligible(),
        )
        with get_session() as session:
            total = session.execute(
                select(func.count(Person.id))
                .select_from(Person)
                .join(Connection, Connection.contact_id == Person.id)
                .where(*criteria)
            ).scalar_one()
            stmt = (
                select(Person)
                .join(Connection, Connection.contact_id == Person.id)
                .where(*criteria)
                .order_by(Person.created_at.desc(), Person.id.desc())
                .offset(_offset(page, per_page))
                .limit(per_page)
            )
            items = list(session.execute(stmt).scalars().all())
        return Page(items=items, page=max(1, int(page or 1)), per_page=per_page, total=int(total))

    def requested_contacts(self, person_id: int) -> list[Person]:
        with get_session() as session:
            stmt = (
                select(Person)
                .join(Connection, Connection.contact_id == Person.id)
                .where(Connection.person_id == person_id, Connection.status == REQUESTED)
                .order_by(Connection.created_at.desc(), Connection.id.desc())
            )
            return list(session.execute(stmt).scalars().all())

    def mutual_connections(self, person_id: int, other_id: int, *, page: int = 1, per_page: int = 20) -> Page[Connection]:
        """Accepted edges grouped by contact, keeping contacts reached from both people.

        A contact qualifies when exactly two matching rows exist for it. Each
        group is represented by ``person_id``'s own edge to the contact, falling
        back to the lowest id when the pair is made of ``other_id`` rows only.
        """
        own_edge = func.min(case((Connection.person_id == person_id, Connection.id)))
        grouped = (
            select(
                Connection.contact_id.label("contact_id"),
                func.coalesce(own_edge, func.min(Connection.id)).label("connection_id"),
            )
            .join(Person, Connection.contact_id == Person.id)
            .where(
                Connection.person_id.in_([person_id, other_id]),
                Connection.status == ACCEPTED,
                contact_is_eligible(),
            )
            .group_by(Connection.contact_id)
            .having(func.count(Connection.contact_id) == 2)
            .subquery()
        )
        with get_session() as session:
            total = session.execute(select(func.count()).select_from(grouped)).scalar_one()
            stmt = (
                select(Connection)
                .join(grouped, Connection.id == grouped.c.connection_id)
                .order_by(Connection.contact_id)
                .offset(_offset(page, per_page))
                .limit(per_page)
            )
            items = list(session.execute(stmt).scalars().all())
        return Page(items=items, page=max(1, int(page or 1)), per_page=per_page, total=int(total))

    # -------------------------- activities --------------------------
    def create_activity(
        self,
        owner_id: int,
        item_type: str,
        item_id: int | None = None,
        *,
        feed_person_ids: Iterable[int] = (),
        created_at: datetime | None = None,
    ) -> Activity:
        entity = Activity(
            person_id=owner_id,
            item_type=item_type,
            item_id=item_id,
            created_at=created_at or utcnow(),
        )
        with get_session() as session:
            session.add(entity)
            session.flush()
            for pid in dict.fromkeys(feed_person_ids):
                session.add(Feed(person_id=pid, activity_id=entity.id))
            session.commit()
            session.refresh(entity)
            return entity

    def feed_activities(self, person_id: int, limit: int) -> list[Activity]:
        with get_session() as session:
            stmt = (
                select(Activity)
                .join(Feed, Feed.activity_id == Activity.id)
                .where(Feed.person_id == person_id)
                .order_by(Activity.created_at.desc(), Activity.id.desc())
                .limit(limit)
            )
            return list(session.execute(stmt).scalars().all())

    def activities_by_owner(self, person_id: int, limit: int) -> list[Activity]:
        with get_session() as session:
            stmt = (
                select(Activity)
                .where(Activity.person_id == person_id)
                .order_by(Activity.created_at.desc(), Activity.id.desc())
                .limit(limit)
            )
            return list(session.execute(stmt).scalars().all())

    def global_feed(self, limit: int) -> list[Activity]:
        if limit <= 0:
            return []
        with get_session() as session:
            stmt = select(Activity).order_by(Activity.created_at.desc(), Activity.id.desc()).limit(limit)
            return list(session.execute(stmt).scalars().all())
