"""Fold the double_pole / tandem flags into breaker_type.

A breaker flagged double-pole becomes ``double_pole``; one flagged tandem, or
sitting in an A/B slot, becomes ``tandem``; everything else is ``single``.
Tandem breakers left in the ``single`` slot move to half ``A``, or ``B``
when ``A`` is already taken at that position.

Revision ID: 20260315_0002
Revises: 20260301_0001
Create Date: 2026-03-15
"""

import logging

from alembic import op
import sqlalchemy as sa

logger = logging.getLogger("alembic.runtime.migration")

# revision identifiers, used by Alembic.
revision = "20260315_0002"
down_revision = "20260301_0001"
branch_labels = None
depends_on = None


def _breaker_columns() -> set[str]:
    inspector = sa.inspect(op.get_bind())
    return {col["name"] for col in inspector.get_columns("breakers")}


def upgrade() -> None:
    columns = _breaker_columns()

    if "breaker_type" not in columns:
        with op.batch_alter_table("breakers") as batch:
            batch.add_column(
                sa.Column(
                    "breaker_type",
                    sa.String(length=20),
                    nullable=False,
                    server_default="single",
                )
            )

    if {"double_pole", "tandem"} <= columns:
        op.execute(
            "UPDATE breakers SET breaker_type = CASE "
            "WHEN double_pole THEN 'double_pole' "
            "WHEN tandem OR slot IN ('A', 'B') THEN 'tandem' "
            "ELSE 'single' END"
        )
        for half in ("A", "B"):
            op.execute(
                f"UPDATE breakers SET slot = '{half}' "
                "WHERE breaker_type = 'tandem' AND slot = 'single' "
                "AND NOT EXISTS (SELECT 1 FROM breakers AS other "
                "WHERE other.panel_id = breakers.panel_id "
                "AND other.position = breakers.position "
                f"AND other.slot = '{half}')"
            )
        stranded = op.get_bind().execute(
            sa.text(
                "SELECT id, panel_id, position FROM breakers "
                "WHERE breaker_type = 'tandem' AND slot = 'single'"
            )
        )
        for row in stranded:
            logger.warning(
                "Tandem breaker %d at panel %d position %d has no free half; "
                "left in slot single",
                row.id,
                row.panel_id,
                row.position,
            )
        with op.batch_alter_table("breakers") as batch:
            batch.drop_column("double_pole")
            batch.drop_column("tandem")

    with op.batch_alter_table("breakers") as batch:
        batch.create_check_constraint(
            "ck_breakers_type",
            "breaker_type IN ('single', 'double_pole', 'tandem')",
        )


def downgrade() -> None:
    with op.batch_alter_table("breakers") as batch:
        batch.drop_constraint("ck_breakers_type", type_="check")
        batch.add_column(
            sa.Column("double_pole", sa.Boolean(), nullable=False, server_default=sa.false())
        )
        batch.add_column(
            sa.Column("tandem", sa.Boolean(), nullable=False, server_default=sa.false())
        )

    op.execute(
        "UPDATE breakers SET "
        "double_pole = (breaker_type = 'double_pole'), "
        "tandem = (breaker_type = 'tandem')"
    )

    with op.batch_alter_table("breakers") as batch:
        batch.drop_column("breaker_type")
