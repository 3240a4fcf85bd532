from __future__ import annotations

import os
import tempfile
from collections.abc import Iterator

_TMP_DIR = tempfile.mkdtemp(prefix="gym-backend-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{os.path.join(_TMP_DIR, 'test.db')}")
os.environ.setdefault("JWT_SECRET", "test-secret-with-enough-length-for-hs256")
os.environ.setdefault("LOG_FILE", os.path.join(_TMP_DIR, "app.log"))
os.environ.setdefault("APP_ENV", "testing")

import pytest  # noqa: E402

from gym_backend.infrastructure.db import ENGINE, Base  # noqa: E402
from gym_backend.infrastructure.db import models  # noqa: E402,F401


@pytest.fixture()
def reset_database() -> Iterator[None]:
    Base.metadata.drop_all(bind=ENGINE)
    Base.metadata.create_all(bind=ENGINE)
    yield
    Base.metadata.drop_all(bind=ENGINE)
