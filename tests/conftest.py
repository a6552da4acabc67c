"""
Shared pytest fixtures for simpledb tests.

Every test gets a fresh in-memory SQLite session with an ``article`` table
seeded with six rows: ids 1-6, titles ``title1``..``title6``, bodies
``body1``..``body6``, and ``is_blind`` set on rows 4-6.
"""

from __future__ import annotations

import sys
from collections.abc import Iterator
from datetime import datetime
from pathlib import Path

import pytest
import structlog

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent))

from simpledb import SimpleDb  # noqa: E402

ARTICLE_DDL = """
CREATE TABLE article (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    created_date DATETIME NOT NULL,
    modified_date DATETIME NOT NULL,
    title VARCHAR(100) NOT NULL,
    body TEXT NOT NULL,
    is_blind BOOLEAN NOT NULL DEFAULT 0
)
"""


def create_article_table(db: SimpleDb) -> None:
    db.run("DROP TABLE IF EXISTS article")
    db.run(ARTICLE_DDL)


def seed_articles(db: SimpleDb, count: int = 6) -> None:
    now = datetime.now().replace(microsecond=0)
    for no in range(1, count + 1):
        db.run(
            "INSERT INTO article (created_date, modified_date, title, body, is_blind) "
            "VALUES (?, ?, ?, ?, ?)",
            now,
            now,
            f"title{no}",
            f"body{no}",
            no > 3,
        )


def count_articles(db: SimpleDb) -> int:
    return db.gen_sql().append("SELECT COUNT(*)").append("FROM article").select_long()


@pytest.fixture
def db() -> Iterator[SimpleDb]:
    """Session over an in-memory database with the seeded article table."""
    session = SimpleDb.sqlite()
    create_article_table(session)
    seed_articles(session)
    yield session
    session.close()


@pytest.fixture
def empty_db() -> Iterator[SimpleDb]:
    """Session over an in-memory database with no tables."""
    session = SimpleDb.sqlite()
    yield session
    session.close()


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    yield
    structlog.reset_defaults()
