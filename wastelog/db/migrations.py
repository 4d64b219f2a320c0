"""Lightweight schema migrations for SQLite databases."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine

from wastelog.db.base import Base

LEGACY_ROLE_UPDATES: dict[str, tuple[str, ...]] = {
    "ELEVATED": ("elevated", "admin", "ADMIN", "super_admin", "SUPER_ADMIN"),
    "SCOPED": ("scoped", "branch_admin", "BRANCH_ADMIN"),
}

DUPLICATE_PENDING_NOTE: str = "Closed during migration: superseded by an older pending request for the same record."


def _sqlite_column_names(connection: Connection, table_name: str) -> set[str]:
    """Return column names for a SQLite table using PRAGMA table_info."""
    rows = connection.execute(text(f"PRAGMA table_info({table_name});")).mappings().all()
    return {str(row["name"]) for row in rows}


def _sqlite_index_names(connection: Connection, table_name: str) -> set[str]:
    """Return index names for a SQLite table using PRAGMA index_list."""
    rows = connection.execute(text(f"PRAGMA index_list({table_name});")).mappings().all()
    return {str(row["name"]) for row in rows}


def _sqlite_table_uses_autoincrement(connection: Connection, table_name: str) -> bool:
    table_sql = connection.execute(
        text("SELECT sql FROM sqlite_master WHERE type='table' AND name = :name"),
        {"name": table_name},
    ).scalar()
    return "AUTOINCREMENT" in str(table_sql or "").upper()


def _rebuild_waste_records_with_autoincrement(connection: Connection, table_names: set[str]) -> None:
    """Recreate waste_records with AUTOINCREMENT so deleted ids are never handed out again.

    The id sequence starts above every id still referenced by review requests or
    audit entries, including ids of records that were already deleted.
    """
    waste_table = Base.metadata.tables["waste_records"]
    column_list = ", ".join(waste_table.columns.keys())

    connection.execute(text("DROP INDEX IF EXISTS ix_waste_records_branch_id"))
    connection.execute(text("ALTER TABLE waste_records RENAME TO waste_records_legacy"))
    waste_table.create(connection)
    connection.execute(
        text(f"INSERT INTO waste_records ({column_list}) SELECT {column_list} FROM waste_records_legacy")
    )
    connection.execute(text("DROP TABLE waste_records_legacy"))

    high_water: list[str] = ["SELECT MAX(id) AS seq FROM waste_records"]
    if "review_requests" in table_names:
        high_water.append("SELECT MAX(target_record_id) AS seq FROM review_requests")
    if "audit_logs" in table_names:
        high_water.append("SELECT MAX(waste_record_id) AS seq FROM audit_logs")
    union_sql = " UNION ALL ".join(high_water)
    next_seq = connection.execute(text(f"SELECT MAX(seq) FROM ({union_sql})")).scalar()
    if next_seq:
        connection.execute(text("DELETE FROM sqlite_sequence WHERE name = 'waste_records'"))
        connection.execute(
            text("INSERT INTO sqlite_sequence (name, seq) VALUES ('waste_records', :seq)"),
            {"seq": int(next_seq)},
        )


def _close_duplicate_pending_requests(connection: Connection) -> int:
    """Reject every PENDING request except the oldest one per target record."""
    now_iso: str = datetime.now(timezone.utc).isoformat(sep=" ", timespec="seconds")
    result = connection.execute(
        text(
            """
            UPDATE review_requests
            SET status = 'REJECTED', decision_notes = :note, decided_at = :now, updated_at = :now
            WHERE status = 'PENDING'
              AND target_record_id IS NOT NULL
              AND id NOT IN (
                  SELECT MIN(id)
                  FROM review_requests
                  WHERE status = 'PENDING' AND target_record_id IS NOT NULL
                  GROUP BY target_record_id
              )
            """
        ),
        {"note": DUPLICATE_PENDING_NOTE, "now": now_iso},
    )
    return int(result.rowcount or 0)


def ensure_sqlite_schema(engine: Engine) -> None:
    """Apply lightweight schema updates for legacy SQLite databases."""
    if engine.dialect.name != "sqlite":
        return

    with engine.begin() as connection:
        table_rows = connection.execute(text("SELECT name FROM sqlite_master WHERE type='table';")).all()
        table_names: set[str] = {str(row[0]) for row in table_rows}

        if "users" in table_names:
            user_columns = _sqlite_column_names(connection, "users")
            if "branch_id" not in user_columns:
                connection.execute(text("ALTER TABLE users ADD COLUMN branch_id INTEGER"))
            for canonical, legacy_values in LEGACY_ROLE_UPDATES.items():
                for legacy in legacy_values:
                    connection.execute(
                        text("UPDATE users SET role = :canonical WHERE role = :legacy"),
                        {"canonical": canonical, "legacy": legacy},
                    )

        if "waste_records" in table_names:
            waste_columns = _sqlite_column_names(connection, "waste_records")
            if "photo_ref" not in waste_columns:
                connection.execute(text("ALTER TABLE waste_records ADD COLUMN photo_ref VARCHAR(500)"))
            if not _sqlite_table_uses_autoincrement(connection, "waste_records"):
                _rebuild_waste_records_with_autoincrement(connection, table_names)

        if "review_requests" in table_names:
            index_names = _sqlite_index_names(connection, "review_requests")
            if "uq_review_requests_pending_target" not in index_names:
                _close_duplicate_pending_requests(connection)
                connection.execute(
                    text(
                        "CREATE UNIQUE INDEX IF NOT EXISTS uq_review_requests_pending_target "
                        "ON review_requests(target_record_id) WHERE status = 'PENDING'"
                    )
                )
