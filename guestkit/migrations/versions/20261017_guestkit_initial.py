"""Initial schema: users, guest identities and guest-or-user owned notes.

Revision ID: 20261017_guestkit_initial
Revises:
Create Date: 2026-10-17
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261017_guestkit_initial"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    ]


def upgrade():
    op.create_table(
        "user",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("full_name", sa.String(length=255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_user_email", "user", ["email"], unique=True)

    op.create_table(
        "guest_identity",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("token", sa.String(length=128), nullable=False),
        sa.Column("last_seen_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("ip_address", sa.String(length=45), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("token", name="uq_guest_identity_token"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_guest_identity_last_seen_at", "guest_identity", ["last_seen_at"])

    op.create_table(
        "note",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=True),
        sa.Column(
            "guest_id",
            sa.Integer(),
            sa.ForeignKey("guest_identity.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("slug", sa.String(length=128), nullable=True),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("body", sa.Text(), nullable=False, server_default=""),
        *_timestamps(),
        sa.CheckConstraint("user_id IS NULL OR guest_id IS NULL", name="ck_note_single_owner"),
    )
    op.create_index("ix_note_user_id", "note", ["user_id"])
    op.create_index("ix_note_guest_id", "note", ["guest_id"])
    op.create_index("ix_note_user_slug", "note", ["user_id", "slug"])
    op.create_index("ix_note_guest_slug", "note", ["guest_id", "slug"])


def downgrade():
    op.drop_index("ix_note_guest_slug", table_name="note")
    op.drop_index("ix_note_user_slug", table_name="note")
    op.drop_index("ix_note_guest_id", table_name="note")
    op.drop_index("ix_note_user_id", table_name="note")
    op.drop_table("note")
    op.drop_index("ix_guest_identity_last_seen_at", table_name="guest_identity")
    op.drop_table("guest_identity")
    op.drop_index("ix_user_email", table_name="user")
    op.drop_table("user")
