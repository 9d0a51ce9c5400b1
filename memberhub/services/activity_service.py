"""Records activities and fans them out to the feeds that should show them."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from memberhub.db.models import Activity, Person
from memberhub.repositories.sql_repository import SQLRepository

logger = logging.getLogger(__name__)

DESCRIPTION_CHANGED = "Person"


@dataclass
class ActivityRecorder:
    repository: SQLRepository = field(default_factory=SQLRepository)

    def record(self, owner: Person, subject: Person, item_type: str, item_id: Optional[int] = None) -> Activity:
        """Append an activity owned by owner about subject.

        The owner's feed and the feeds of the owner's accepted contacts get a
        row pointing at it.
        """
        if item_id is None:
            item_id = subject.id
        recipients = [owner.id] + self.repository.accepted_contact_ids(owner.id)
        activity = self.repository.create_activity(owner.id, item_type, item_id, feed_person_ids=recipients)
        logger.debug("recorded %s activity %s for person %s", item_type, activity.id, owner.id)
        return activity
