"""Unit tests for src/db/database.py"""

from sqlalchemy.orm import Session

from src.db.database import SessionLocal, engine, get_db


def test_get_db_yields_a_session_bound_to_the_engine() -> None:
    generator = get_db()
    db = next(generator)
    assert isinstance(db, Session)
    assert db.get_bind() is engine

    # closing the generator closes the session
    generator.close()


def test_session_factory_does_not_autoflush() -> None:
    with SessionLocal() as db:
        assert db.autoflush is False
