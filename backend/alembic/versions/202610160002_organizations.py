"""organizations and their members

Revision ID: 202610160002
Revises: 202610160001
Create Date: 2026-10-16 00:00:02
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "202610160002"
down_revision: Union[str, None] = "202610160001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "organizations",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("customer_id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("theme", sa.JSON(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_organizations_customer_id", "organizations", ["customer_id"], unique=True)

    op.create_table(
        "user_organizations",
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("organization_id", sa.String(length=36), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("user_id", "organization_id"),
    )
    op.create_index("ix_user_organizations_user_id", "user_organizations", ["user_id"])
    op.create_index("ix_user_organizations_organization_id", "user_organizations", ["organization_id"])


def downgrade() -> None:
    op.drop_index("ix_user_organizations_organization_id", table_name="user_organizations")
    op.drop_index("ix_user_organizations_user_id", table_name="user_organizations")
    op.drop_table("user_organizations")

    op.drop_index("ix_organizations_customer_id", table_name="organizations")
    op.drop_table("organizations")
