"""Initial ScanPlant schema

Revision ID: 001
Revises: None
Create Date: 2025-09-18 00:00:00.000000+00:00

What:  Creates users, plants, comments, reminders and notifications.
How:   UUID primary keys for owned records, TIMESTAMP WITH TIME ZONE for every
       timestamp. Comments cascade with their plant; reminders and
       notifications keep their row with plant_id set to NULL.

Rollback: downgrade() drops every table (destructive).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.TIMESTAMP(timezone=True),
        server_default=sa.text("CURRENT_TIMESTAMP"),
        nullable=False,
    )


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(64), nullable=False, comment="Opaque user id issued by the identity provider"),
        sa.Column("username", sa.String(256), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "plants",
        sa.Column("id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("image_url", sa.String(512), nullable=False, comment="Blob store reference of the plant photo"),
        sa.Column("scientific_name", sa.String(255), nullable=False),
        sa.Column("common_name", sa.String(255), nullable=True),
        sa.Column("family", sa.String(255), nullable=True),
        sa.Column("genus", sa.String(255), nullable=True),
        sa.Column("wiki_description", sa.Text(), nullable=True),
        sa.Column("wiki_url", sa.String(512), nullable=True),
        sa.Column("care_instructions", sa.Text(), nullable=True),
        sa.Column("enhanced_description", sa.Text(), nullable=True),
        sa.Column("latitude", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("longitude", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("location_name", sa.String(255), nullable=True),
        sa.Column("city_name", sa.String(255), nullable=True),
        _created_at(),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_plants_created_at", "plants", ["created_at"])
    op.create_index("idx_plants_user_id", "plants", ["user_id"])

    op.create_table(
        "comments",
        sa.Column("id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("text", sa.String(500), nullable=False),
        _created_at(),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("plant_id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.ForeignKeyConstraint(["plant_id"], ["plants.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_comments_plant_id", "comments", ["plant_id"])
    op.create_index("idx_comments_user_id", "comments", ["user_id"])

    op.create_table(
        "reminders",
        sa.Column("id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("title", sa.String(100), nullable=False),
        sa.Column("description", sa.String(500), nullable=False, server_default=sa.text("''")),
        sa.Column("scheduled_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("completed", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("priority", sa.Integer(), nullable=False, server_default=sa.text("2")),
        sa.Column("category", sa.String(50), nullable=False, server_default=sa.text("''")),
        _created_at(),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("plant_id", sa.Uuid(as_uuid=True), nullable=True),
        sa.CheckConstraint("priority BETWEEN 1 AND 3", name="ck_reminders_priority"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["plant_id"], ["plants.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_reminders_user_scheduled", "reminders", ["user_id", "scheduled_at"])
    op.create_index("idx_reminders_plant_id", "reminders", ["plant_id"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("title", sa.String(120), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("type", sa.String(60), nullable=False, server_default=sa.text("'info'")),
        sa.Column("link_url", sa.String(300), nullable=True),
        _created_at(),
        sa.Column("sent_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("read_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("user_id", sa.String(64), nullable=False, comment="Recipient"),
        sa.Column("plant_id", sa.Uuid(as_uuid=True), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["plant_id"], ["plants.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_notifications_user_created", "notifications", ["user_id", "created_at"])


def downgrade() -> None:
    """Drop every table, children first."""
    op.drop_index("idx_notifications_user_created", table_name="notifications")
    op.drop_table("notifications")
    op.drop_index("idx_reminders_plant_id", table_name="reminders")
    op.drop_index("idx_reminders_user_scheduled", table_name="reminders")
    op.drop_table("reminders")
    op.drop_index("idx_comments_user_id", table_name="comments")
    op.drop_index("idx_comments_plant_id", table_name="comments")
    op.drop_table("comments")
    op.drop_index("idx_plants_user_id", table_name="plants")
    op.drop_index("idx_plants_created_at", table_name="plants")
    op.drop_table("plants")
    op.drop_table("users")
