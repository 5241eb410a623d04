"""Operator continuity: operator_periods ledger and attribution columns.

Adds the operator_periods table, the building -> ACTIVE period pointer and
operator_period_id on issues and work orders. Every building that already has
a legacy current_management_id gets one ACTIVE PM period starting at the
building's creation time. Existing issues and work orders stay unattributed.

Revision ID: 002_operator_periods
Revises: 001_initial_schema
Create Date: 2024-03-04 10:30:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "002_operator_periods"
down_revision = "001_initial_schema"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "operator_periods",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("building_id", sa.Integer(), nullable=False),
        sa.Column("operator_type", sa.String(length=10), nullable=False),
        sa.Column("management_company_id", sa.Integer(), nullable=True),
        sa.Column("hoa_organization_id", sa.Integer(), nullable=True),
        sa.Column("start_date", sa.DateTime(), nullable=False),
        sa.Column("end_date", sa.DateTime(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="ACTIVE"),
        sa.Column("handoff_notes", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(),
            nullable=False,
            server_default=sa.func.current_timestamp(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(),
            nullable=False,
            server_default=sa.func.current_timestamp(),
        ),
        sa.ForeignKeyConstraint(["building_id"], ["buildings.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(
            ["management_company_id"], ["management_companies.id"], ondelete="RESTRICT"
        ),
        sa.ForeignKeyConstraint(
            ["hoa_organization_id"], ["hoa_organizations.id"], ondelete="RESTRICT"
        ),
        sa.CheckConstraint(
            "(operator_type = 'PM' AND management_company_id IS NOT NULL "
            "AND hoa_organization_id IS NULL) OR "
            "(operator_type = 'HOA' AND hoa_organization_id IS NOT NULL "
            "AND management_company_id IS NULL)",
            name="ck_operator_periods_single_operator",
        ),
        sa.CheckConstraint(
            "status <> 'ACTIVE' OR end_date IS NULL", name="ck_operator_periods_active_open"
        ),
        sa.CheckConstraint(
            "end_date IS NULL OR end_date > start_date",
            name="ck_operator_periods_end_after_start",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_operator_periods_building_id", "operator_periods", ["building_id"])
    op.create_index(
        "ix_operator_periods_management_company_id",
        "operator_periods",
        ["management_company_id"],
    )
    op.create_index(
        "ix_operator_periods_hoa_organization_id", "operator_periods", ["hoa_organization_id"]
    )
    op.create_index("ix_operator_periods_status", "operator_periods", ["status"])
    op.create_index(
        "ix_operator_periods_building_start", "operator_periods", ["building_id", "start_date"]
    )
    # At most one ACTIVE period per building
    op.create_index(
        "uq_operator_periods_one_active",
        "operator_periods",
        ["building_id"],
        unique=True,
        sqlite_where=sa.text("status = 'ACTIVE'"),
        postgresql_where=sa.text("status = 'ACTIVE'"),
    )

    # SQLite can't add foreign keys in place; batch mode recreates the tables
    with op.batch_alter_table("buildings") as batch_op:
        batch_op.add_column(
            sa.Column(
                "current_operator_period_id",
                sa.Integer(),
                nullable=True,
                comment="Cached id of the ACTIVE operator period",
            )
        )
        batch_op.create_foreign_key(
            "fk_buildings_current_operator_period_id",
            "operator_periods",
            ["current_operator_period_id"],
            ["id"],
            ondelete="SET NULL",
        )

    for table in ("issues", "work_orders"):
        with op.batch_alter_table(table) as batch_op:
            batch_op.add_column(sa.Column("operator_period_id", sa.Integer(), nullable=True))
            batch_op.create_foreign_key(
                f"fk_{table}_operator_period_id",
                "operator_periods",
                ["operator_period_id"],
                ["id"],
                ondelete="RESTRICT",
            )
            batch_op.create_index(f"ix_{table}_operator_period_id", ["operator_period_id"])
            batch_op.create_index(
                f"ix_{table}_building_period", ["building_id", "operator_period_id"]
            )

    # Backfill: legacy PM pointer becomes the building's first ACTIVE period
    op.execute(
        """
        INSERT INTO operator_periods
            (building_id, operator_type, management_company_id, start_date, status,
             handoff_notes, created_at, updated_at)
        SELECT id, 'PM', current_management_id, created_at, 'ACTIVE',
               'Backfilled from legacy management assignment',
               CURRENT_TIMESTAMP, CURRENT_TIMESTAMP
        FROM buildings
        WHERE current_management_id IS NOT NULL
        """
    )
    op.execute(
        """
        UPDATE buildings
        SET current_operator_period_id = (
            SELECT operator_periods.id
            FROM operator_periods
            WHERE operator_periods.building_id = buildings.id
              AND operator_periods.status = 'ACTIVE'
        )
        WHERE current_management_id IS NOT NULL
        """
    )


def downgrade() -> None:
    for table in ("work_orders", "issues"):
        with op.batch_alter_table(table) as batch_op:
            batch_op.drop_index(f"ix_{table}_building_period")
            batch_op.drop_index(f"ix_{table}_operator_period_id")
            batch_op.drop_constraint(f"fk_{table}_operator_period_id", type_="foreignkey")
            batch_op.drop_column("operator_period_id")

    with op.batch_alter_table("buildings") as batch_op:
        batch_op.drop_constraint("fk_buildings_current_operator_period_id", type_="foreignkey")
        batch_op.drop_column("current_operator_period_id")

    op.drop_index("uq_operator_periods_one_active", table_name="operator_periods")
    op.drop_index("ix_operator_periods_building_start", table_name="operator_periods")
    op.drop_index("ix_operator_periods_status", table_name="operator_periods")
    op.drop_index("ix_operator_periods_hoa_organization_id", table_name="operator_periods")
    op.drop_index("ix_operator_periods_management_company_id", table_name="operator_periods")
    op.drop_index("ix_operator_periods_building_id", table_name="operator_periods")
    op.drop_table("operator_periods")
