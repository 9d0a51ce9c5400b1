"""Personalized activity feeds."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from memberhub.core.config import Settings, get_settings
from memberhub.db.models import Activity, Person
from memberhub.repositories.sql_repository import SQLRepository


def _newest_first(activity: Activity):
    return (activity.created_at, activity.id)


@dataclass
class FeedComposer:
    repository: SQLRepository = field(default_factory=SQLRepository)
    settings: Settings = field(default_factory=get_settings)

    def compose(self, person: Person, target_size: Optional[int] = None) -> list[Activity]:
        """Return the person's feed, padded with global activity when it is short.

        A personal feed that already reaches target_size is returned as is.
        Otherwise the global stream fills the gap, duplicates are dropped and
        the result is ordered newest first (ties broken by id).
        """
        target = self.settings.feed_size if target_size is None else target_size
        personal = self.repository.feed_activities(person.id, self.settings.feed_size)
        if len(personal) >= target:
            return personal
        wanted = min(target - len(personal), self.settings.global_feed_size)
        merged: dict[int, Activity] = {a.id: a for a in personal}
        for activity in self.repository.global_feed(wanted):
            merged.setdefault(activity.id, activity)
        return sorted(merged.values(), key=_newest_first, reverse=True)

    def recent_activity(self, person: Person) -> list[Activity]:
        return self.repository.activities_by_owner(person.id, self.settings.feed_size)
