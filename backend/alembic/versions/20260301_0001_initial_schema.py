"""Initial panel, breaker, room and circuit schema.

Breakers still describe their kind with the ``double_pole`` / ``tandem``
flags here; revision 0002 replaces them with ``breaker_type``.

Revision ID: 20260301_0001
Revises:
Create Date: 2026-03-01
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20260301_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "panels",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("size", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
        sa.CheckConstraint("length(name) > 0", name="ck_panels_name_not_empty"),
        sa.CheckConstraint("size >= 12 AND size <= 42", name="ck_panels_size"),
    )

    op.create_table(
        "rooms",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("level", sa.String(length=20), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
        sa.CheckConstraint("length(name) > 0", name="ck_rooms_name_not_empty"),
        sa.CheckConstraint(
            "level IN ('basement', 'main', 'upper', 'outside')", name="ck_rooms_level"
        ),
    )

    op.create_table(
        "breakers",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("panel_id", sa.Integer(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("slot", sa.String(length=10), nullable=False, server_default="single"),
        sa.Column("label", sa.Text(), nullable=True),
        sa.Column("amperage", sa.Integer(), nullable=True),
        sa.Column("double_pole", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("tandem", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("critical", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("monitor", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("confirmed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(["panel_id"], ["panels.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "panel_id", "position", "slot", name="uq_breakers_panel_position_slot"
        ),
        sa.CheckConstraint("position > 0", name="ck_breakers_position"),
        sa.CheckConstraint("slot IN ('single', 'A', 'B')", name="ck_breakers_slot"),
        sa.CheckConstraint(
            "amperage IS NULL OR (amperage > 0 AND amperage <= 200)",
            name="ck_breakers_amperage",
        ),
    )
    op.create_index("ix_breakers_panel_id", "breakers", ["panel_id"])

    op.create_table(
        "circuits",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("breaker_id", sa.Integer(), nullable=False),
        sa.Column("room_id", sa.Integer(), nullable=True),
        sa.Column("type", sa.String(length=20), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("subpanel_id", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(["breaker_id"], ["breakers.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["room_id"], ["rooms.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["subpanel_id"], ["panels.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "type IS NULL OR type IN "
            "('outlet', 'lighting', 'heating', 'appliance', 'subpanel')",
            name="ck_circuits_type",
        ),
    )
    op.create_index("ix_circuits_breaker_id", "circuits", ["breaker_id"])


def downgrade() -> None:
    op.drop_index("ix_circuits_breaker_id", table_name="circuits")
    op.drop_table("circuits")
    op.drop_index("ix_breakers_panel_id", table_name="breakers")
    op.drop_table("breakers")
    op.drop_table("rooms")
    op.drop_table("panels")
