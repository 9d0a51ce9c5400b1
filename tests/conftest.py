from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Make the memberhub package importable when running tests from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from memberhub.core import config as core_config  # noqa: E402
from memberhub.core.security import RSACredentialCipher, generate_key_material  # noqa: E402
from memberhub.db import models  # noqa: E402
from memberhub.db import session as db_session  # noqa: E402

BASE_TIME = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Mutable UTC clock for services that take a `clock` callable."""

    def __init__(self, now: datetime = BASE_TIME):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture(scope="session")
def key_material():
    # 2048 bits keeps the suite fast; production keys default to 4096.
    return generate_key_material(2048)


@pytest.fixture()
def cipher(key_material):
    return RSACredentialCipher(key_material)


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def db_env(tmp_path, monkeypatch):
    """Configure a temporary SQLite database and reset the settings/engine caches."""
    db_file = tmp_path / "test.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_file}")
    core_config.get_settings.cache_clear()
    db_session.get_engine.cache_clear()
    db_session._get_sessionmaker.cache_clear()  # type: ignore[attr-defined]

    engine = db_session.get_engine()
    models.Base.metadata.drop_all(bind=engine)
    models.Base.metadata.create_all(bind=engine)

    yield db_file

    models.Base.metadata.drop_all(bind=engine)
    engine.dispose()
    db_session.get_engine.cache_clear()
    db_session._get_sessionmaker.cache_clear()  # type: ignore[attr-defined]
    core_config.get_settings.cache_clear()
