"""create api_configurations, field_mappings and fetched_users tables

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18 09:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "api_configurations",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("source_name", sa.String(length=120), nullable=False),
        sa.Column("endpoint_url", sa.String(length=1000), nullable=False),
        sa.Column("http_method", sa.String(length=10), nullable=False),
        sa.Column("auth_type", sa.String(length=32), nullable=False),
        sa.Column("auth_credentials", sa.String(length=1000), nullable=True),
        sa.Column("request_headers", sa.Text(), nullable=True),
        sa.Column("response_root_path", sa.String(length=500), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("source_name", name="uq_api_configurations_source_name"),
    )
    op.create_index("ix_api_configurations_is_active", "api_configurations", ["is_active"], unique=False)

    op.create_table(
        "field_mappings",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("api_configuration_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("internal_field_name", sa.String(length=120), nullable=False),
        sa.Column("json_path", sa.String(length=500), nullable=False),
        sa.Column("default_value", sa.String(length=100), nullable=True),
        sa.Column("required", sa.Boolean(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(
            ["api_configuration_id"],
            ["api_configurations.id"],
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_field_mappings_api_configuration_id",
        "field_mappings",
        ["api_configuration_id"],
        unique=False,
    )

    op.create_table(
        "fetched_users",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("source_name", sa.String(length=120), nullable=False),
        sa.Column("external_id", sa.String(length=500), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=True),
        sa.Column("first_name", sa.String(length=255), nullable=True),
        sa.Column("last_name", sa.String(length=255), nullable=True),
        sa.Column("timezone", sa.String(length=120), nullable=True),
        sa.Column("avatar_url", sa.String(length=1000), nullable=True),
        sa.Column("raw_data", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("fetched_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_seen_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("source_name", "external_id", name="uq_fetched_users_source_external_id"),
    )
    op.create_index("ix_fetched_users_source_name", "fetched_users", ["source_name"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_fetched_users_source_name", table_name="fetched_users")
    op.drop_table("fetched_users")
    op.drop_index("ix_field_mappings_api_configuration_id", table_name="field_mappings")
    op.drop_table("field_mappings")
    op.drop_index("ix_api_configurations_is_active", table_name="api_configurations")
    op.drop_table("api_configurations")
