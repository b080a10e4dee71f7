from datetime import datetime, timedelta, timezone

import pytest

from recall.fsrs import database
from recall.fsrs.config import DEFAULT_PARAMETERS
from recall.fsrs.records import ReviewRecord
from recall.fsrs.recorder import record_review


@pytest.fixture
def now():
    """A fixed review instant (UTC)."""
    return datetime(2024, 1, 10, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def params():
    """Default, fuzz-free parameters."""
    return DEFAULT_PARAMETERS


@pytest.fixture
def tmp_db(tmp_path, monkeypatch):
    """Point the store at a temporary SQLite database with fresh tables."""
    db_path = tmp_path / "test_recall.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_path}")
    monkeypatch.setenv("TEST_MODE", "false")
    database.dispose_engines()
    database.init_db()
    yield str(db_path)
    database.dispose_engines()


@pytest.fixture
def build_history():
    """Record a sequence of (day_offset, score) reviews for one item."""

    def _build(item_id: str, start: datetime, reviews) -> list[ReviewRecord]:
        history: list[ReviewRecord] = []
        for day_offset, score in reviews:
            at = start + timedelta(days=day_offset)
            history.append(record_review(item_id, history, score, at))
        return history

    return _build
