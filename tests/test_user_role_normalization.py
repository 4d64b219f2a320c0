"""Role normalization tests for user creation and SQLite startup migration."""

from sqlalchemy import create_engine, select, text
from sqlalchemy.orm import Session

from wastelog.db.base import Base
from wastelog.db.migrations import ensure_sqlite_schema
from wastelog.models import Branch
from wastelog.models.user import User
from wastelog.services.user_service import count_elevated_users, create_user


def _build_session() -> Session:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    Base.metadata.create_all(bind=engine)
    return Session(engine)


def test_create_user_normalizes_lowercase_and_legacy_roles() -> None:
    with _build_session() as session:
        branch = Branch(name="North", location="Harbour Street 1")
        session.add(branch)
        session.commit()

        scoped = create_user(
            db=session,
            username="new-branch-admin",
            hashed_password="hash",
            role="branch_admin",
            branch_id=branch.id,
        )
        elevated = create_user(db=session, username="new-super", hashed_password="hash", role="elevated")

        assert scoped.role == "SCOPED"
        assert elevated.role == "ELEVATED"
        assert count_elevated_users(session) == 1


def test_create_user_rejects_unknown_role() -> None:
    with _build_session() as session:
        try:
            create_user(db=session, username="new-manager", hashed_password="hash", role="manager")
            assert False, "Expected ValueError for unknown role"
        except ValueError as exc:
            assert "Invalid role" in str(exc)


def test_scoped_user_requires_existing_branch() -> None:
    with _build_session() as session:
        try:
            create_user(db=session, username="floating", hashed_password="hash", role="SCOPED")
            assert False, "Expected ValueError for missing branch"
        except ValueError as exc:
            assert "Branch is required" in str(exc)

        try:
            create_user(db=session, username="lost", hashed_password="hash", role="SCOPED", branch_id=77)
            assert False, "Expected ValueError for unknown branch"
        except ValueError as exc:
            assert "Branch not found" in str(exc)


def test_elevated_user_cannot_have_branch() -> None:
    with _build_session() as session:
        branch = Branch(name="North", location="Harbour Street 1")
        session.add(branch)
        session.commit()

        try:
            create_user(db=session, username="boss", hashed_password="hash", role="ADMIN", branch_id=branch.id)
            assert False, "Expected ValueError for elevated user with branch"
        except ValueError as exc:
            assert "cannot be assigned" in str(exc)


def test_sqlite_migration_normalizes_legacy_lowercase_roles() -> None:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    Base.metadata.create_all(bind=engine)

    with engine.begin() as connection:
        connection.execute(
            text(
                """
                INSERT INTO users (username, password_hash, role, is_active, created_at)
                VALUES
                    ('legacy-admin', 'hash', 'admin', 1, CURRENT_TIMESTAMP),
                    ('legacy-scoped', 'hash', 'scoped', 1, CURRENT_TIMESTAMP)
                """
            )
        )

    ensure_sqlite_schema(engine)

    with Session(engine) as session:
        roles = set(session.scalars(select(User.role)).all())

    assert roles == {"ELEVATED", "SCOPED"}
