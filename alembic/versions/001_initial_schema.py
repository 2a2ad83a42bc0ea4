"""Initial schema - lxd, lxc and lxc_services tables.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "lxd",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("ip", sa.String(64), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
        sa.UniqueConstraint("ip"),
    )

    op.create_table(
        "lxc",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("alias", sa.String(255), nullable=False),
        sa.Column("lxd_id", sa.Uuid(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["lxd_id"], ["lxd.id"]),
    )
    op.create_index("ix_lxc_lxd_id", "lxc", ["lxd_id"])

    op.create_table(
        "lxc_services",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("service", sa.String(255), nullable=False),
        sa.Column("lxc_id", sa.Uuid(), nullable=False),
        sa.Column("lxc_port", sa.Integer(), nullable=False),
        sa.Column("lxd_id", sa.Uuid(), nullable=False),
        sa.Column("lxd_port", sa.Integer(), nullable=False),
        sa.Column("lxc_name", sa.String(255), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["lxc_id"], ["lxc.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["lxd_id"], ["lxd.id"]),
        sa.UniqueConstraint("lxc_port", "lxd_port", name="uq_lxc_services_ports"),
    )
    op.create_index("ix_lxc_services_lxc_id", "lxc_services", ["lxc_id"])


def downgrade() -> None:
    op.drop_index("ix_lxc_services_lxc_id", table_name="lxc_services")
    op.drop_table("lxc_services")
    op.drop_index("ix_lxc_lxd_id", table_name="lxc")
    op.drop_table("lxc")
    op.drop_table("lxd")
