"""Create template lifecycle tables.

Revision ID: 001
Revises:
Create Date: 2026-10-19

Tables: agent_templates, deployments, deployment_transitions
"""

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects.postgresql import JSONB

revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create lifecycle tables."""
    op.create_table(
        "agent_templates",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False, unique=True),
        sa.Column("version", sa.String(50), nullable=False),
        sa.Column("display_name", sa.String(255), nullable=False),
        sa.Column("category", sa.String(100), nullable=False),
        sa.Column("description", sa.Text),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="true"),
        sa.Column("is_default", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("member_configs", JSONB, nullable=False, server_default="[]"),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("NOW()")),
    )
    op.create_index("idx_agent_templates_category", "agent_templates", ["category"])

    op.create_table(
        "deployments",
        sa.Column("account_id", sa.String(64), primary_key=True),
        sa.Column("current_template_id", sa.String(64)),
        sa.Column("current_template_name", sa.String(255)),
        sa.Column("current_version", sa.String(50)),
        sa.Column("external_resource_id", sa.String(255)),
        sa.Column("deleted_resource_id", sa.String(255)),
        sa.Column("routing_binding_id", sa.String(255)),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("NOW()")),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("NOW()")),
    )
    op.create_index("idx_deployments_version", "deployments", ["current_version"])

    op.create_table(
        "deployment_transitions",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column(
            "account_id",
            sa.String(64),
            sa.ForeignKey("deployments.account_id"),
            nullable=False,
        ),
        sa.Column("position", sa.Integer, nullable=False),
        sa.Column("from_version", sa.String(50)),
        sa.Column("from_template_name", sa.String(255)),
        sa.Column("to_version", sa.String(50), nullable=False),
        sa.Column("to_template_name", sa.String(255), nullable=False),
        sa.Column("to_template_id", sa.String(64), nullable=False),
        sa.Column("old_resource_id", sa.String(255)),
        sa.Column("new_resource_id", sa.String(255), nullable=False),
        sa.Column("actor", sa.String(255), nullable=False),
        sa.Column("is_rollback", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("delete_failed", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("NOW()")),
        sa.UniqueConstraint("account_id", "position", name="uq_transition_position"),
    )


def downgrade() -> None:
    """Drop lifecycle tables."""
    op.drop_table("deployment_transitions")
    op.drop_table("deployments")
    op.drop_index("idx_agent_templates_category", table_name="agent_templates")
    op.drop_table("agent_templates")
