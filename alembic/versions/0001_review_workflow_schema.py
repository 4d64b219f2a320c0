"""branches, users, waste records and review workflow

Revision ID: 0001_review_workflow_schema
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa

revision = "0001_review_workflow_schema"
down_revision = None
branch_labels = None
depends_on = None

USER_ROLE = sa.Enum("ELEVATED", "SCOPED", name="user_role")
WASTE_UNIT = sa.Enum("kg", "g", "pieces", "liters", "portions", name="waste_unit")
WASTE_REASON = sa.Enum("SPOILAGE", "OVERPRODUCTION", "PLATE_WASTE", "BUFFET_LEFTOVER", name="waste_reason")
REVIEW_ACTION = sa.Enum("CREATE", "UPDATE", "DELETE", name="review_action")


def upgrade() -> None:
    op.create_table(
        "branches",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("location", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_branches_name", "branches", ["name"], unique=True)

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("username", sa.String(length=128), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", USER_ROLE, nullable=False),
        sa.Column("branch_id", sa.Integer(), sa.ForeignKey("branches.id"), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_branch_id", "users", ["branch_id"])

    op.create_table(
        "waste_records",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("branch_id", sa.Integer(), sa.ForeignKey("branches.id"), nullable=False),
        sa.Column("item_name", sa.String(length=100), nullable=False),
        sa.Column("quantity", sa.Numeric(12, 3), nullable=False),
        sa.Column("unit", WASTE_UNIT, nullable=False),
        sa.Column("value", sa.Numeric(12, 2), nullable=False),
        sa.Column("reason_code", WASTE_REASON, nullable=False),
        sa.Column("photo_ref", sa.String(length=500), nullable=True),
        sa.Column("occurred_at", sa.Date(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_waste_records_branch_id", "waste_records", ["branch_id"])

    op.create_table(
        "review_requests",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("target_record_id", sa.Integer(), nullable=True),
        sa.Column("branch_id", sa.Integer(), sa.ForeignKey("branches.id"), nullable=False),
        sa.Column("action", REVIEW_ACTION, nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("original_snapshot", sa.JSON(), nullable=True),
        sa.Column("proposed_snapshot", sa.JSON(), nullable=True),
        sa.Column("justification", sa.String(length=500), nullable=True),
        sa.Column("requested_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("decided_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("decision_notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("decided_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_review_requests_target_record_id", "review_requests", ["target_record_id"])
    op.create_index("ix_review_requests_branch_id", "review_requests", ["branch_id"])
    op.create_index("ix_review_requests_status_created", "review_requests", ["status", "created_at"])
    op.create_index(
        "uq_review_requests_pending_target",
        "review_requests",
        ["target_record_id"],
        unique=True,
        sqlite_where=sa.text("status = 'PENDING'"),
        postgresql_where=sa.text("status = 'PENDING'"),
    )

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("actor_user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("actor_identifier", sa.String(length=128), nullable=False),
        sa.Column("action_type", sa.String(length=32), nullable=False),
        sa.Column("waste_record_id", sa.Integer(), nullable=True),
        sa.Column("review_request_id", sa.Integer(), nullable=True),
        sa.Column("before_snapshot", sa.JSON(), nullable=True),
        sa.Column("after_snapshot", sa.JSON(), nullable=True),
    )
    op.create_index("ix_audit_logs_waste_record", "audit_logs", ["waste_record_id", "id"])
    op.create_index("ix_audit_logs_review_request", "audit_logs", ["review_request_id"])


def downgrade() -> None:
    op.drop_index("ix_audit_logs_review_request", table_name="audit_logs")
    op.drop_index("ix_audit_logs_waste_record", table_name="audit_logs")
    op.drop_table("audit_logs")
    op.drop_index("uq_review_requests_pending_target", table_name="review_requests")
    op.drop_index("ix_review_requests_status_created", table_name="review_requests")
    op.drop_index("ix_review_requests_branch_id", table_name="review_requests")
    op.drop_index("ix_review_requests_target_record_id", table_name="review_requests")
    op.drop_table("review_requests")
    op.drop_index("ix_waste_records_branch_id", table_name="waste_records")
    op.drop_table("waste_records")
    op.drop_index("ix_users_branch_id", table_name="users")
    op.drop_index("ix_users_username", table_name="users")
    op.drop_table("users")
    op.drop_index("ix_branches_name", table_name="branches")
    op.drop_table("branches")
    bind = op.get_bind()
    for enum_type in (REVIEW_ACTION, WASTE_REASON, WASTE_UNIT, USER_ROLE):
        enum_type.drop(bind, checkfirst=True)
