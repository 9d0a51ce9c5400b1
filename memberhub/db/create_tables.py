"""Create the people, connections, activities and feeds tables if they are missing."""
from __future__ import annotations

import logging

from sqlalchemy import inspect
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from .session import Base, get_engine
from . import models  # noqa: F401  # registers the memberhub tables on Base.metadata

logger = logging.getLogger(__name__)


def create_all(engine: Engine | None = None) -> list[str]:
    """Create missing tables and return the names of the ones that were added."""
    engine = engine or get_engine()
    existing = set(inspect(engine).get_table_names())
    Base.metadata.create_all(bind=engine)
    created = [name for name in Base.metadata.tables if name not in existing]
    if created:
        logger.info("created tables: %s", ", ".join(created))
    return created


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    try:
        added = create_all()
    except SQLAlchemyError as exc:
        raise SystemExit(f"Failed to create the memberhub schema: {exc}") from exc
    print(f"Schema ready ({len(added)} table(s) added).")
