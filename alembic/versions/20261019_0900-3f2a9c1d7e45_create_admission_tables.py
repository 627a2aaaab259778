"""create_admission_tables

Revision ID: 3f2a9c1d7e45
Revises:
Create Date: 2026-10-19 09:00:00.000000+00:00

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3f2a9c1d7e45"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create ip_abuse, api_usage and domain_searches tables."""
    op.create_table(
        "ip_abuse",
        # Primary key and timestamps from BaseMutableModel
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "ip_address",
            sa.String(length=45),
            nullable=False,
            comment="Client IP address",
        ),
        # Counters
        sa.Column("total_requests", sa.Integer(), server_default="0", nullable=False),
        sa.Column(
            "rate_limit_violations", sa.Integer(), server_default="0", nullable=False
        ),
        sa.Column(
            "invalid_input_attempts", sa.Integer(), server_default="0", nullable=False
        ),
        sa.Column(
            "suspicious_patterns", sa.Integer(), server_default="0", nullable=False
        ),
        # Block state
        sa.Column("is_blocked", sa.Boolean(), server_default="false", nullable=False),
        sa.Column("blocked_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "blocked_until",
            sa.DateTime(timezone=True),
            nullable=True,
            comment="Block end; NULL iff not blocked",
        ),
        sa.Column("block_reason", sa.Text(), nullable=True),
        sa.Column(
            "auto_block_count",
            sa.Integer(),
            server_default="0",
            nullable=False,
            comment="Automatic blocks applied (drives exponential backoff)",
        ),
        # Activity
        sa.Column("user_agent", sa.String(length=500), nullable=True),
        sa.Column(
            "first_seen",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "last_seen",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("last_violation", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_ip_abuse_ip_address"), "ip_abuse", ["ip_address"], unique=True
    )
    op.create_index(
        op.f("ix_ip_abuse_is_blocked"), "ip_abuse", ["is_blocked"], unique=False
    )

    op.create_table(
        "api_usage",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("ip_address", sa.String(length=45), nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=True),
        sa.Column("endpoint", sa.String(length=255), nullable=False),
        sa.Column("domain", sa.String(length=255), nullable=True),
        sa.Column("method", sa.String(length=10), nullable=False),
        sa.Column("user_agent", sa.String(length=500), nullable=True),
        sa.Column("referer", sa.String(length=500), nullable=True),
        sa.Column("status_code", sa.Integer(), nullable=False),
        sa.Column(
            "response_time_ms",
            sa.Integer(),
            nullable=False,
            comment="Handler latency in milliseconds",
        ),
        sa.Column("rate_limit_remaining", sa.Integer(), nullable=True),
        sa.Column("was_blocked", sa.Boolean(), server_default="false", nullable=False),
        sa.Column(
            "was_rate_limited", sa.Boolean(), server_default="false", nullable=False
        ),
        sa.Column(
            "was_invalid_input", sa.Boolean(), server_default="false", nullable=False
        ),
        sa.Column(
            "requested_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_api_usage_requested_at"), "api_usage", ["requested_at"], unique=False
    )
    # Daily quota lookups (authenticated and anonymous callers)
    op.create_index(
        "idx_api_usage_endpoint_user",
        "api_usage",
        ["endpoint", "user_id", "requested_at"],
        unique=False,
    )
    op.create_index(
        "idx_api_usage_endpoint_ip",
        "api_usage",
        ["endpoint", "ip_address", "requested_at"],
        unique=False,
    )

    op.create_table(
        "domain_searches",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("domain", sa.String(length=255), nullable=False),
        sa.Column("ip_address", sa.String(length=45), nullable=True),
        sa.Column("user_id", sa.String(length=255), nullable=True),
        sa.Column(
            "searched_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_domain_searches_domain"), "domain_searches", ["domain"], unique=False
    )
    op.create_index(
        op.f("ix_domain_searches_searched_at"),
        "domain_searches",
        ["searched_at"],
        unique=False,
    )


def downgrade() -> None:
    """Drop admission tables."""
    op.drop_index(op.f("ix_domain_searches_searched_at"), table_name="domain_searches")
    op.drop_index(op.f("ix_domain_searches_domain"), table_name="domain_searches")
    op.drop_table("domain_searches")

    op.drop_index("idx_api_usage_endpoint_ip", table_name="api_usage")
    op.drop_index("idx_api_usage_endpoint_user", table_name="api_usage")
    op.drop_index(op.f("ix_api_usage_requested_at"), table_name="api_usage")
    op.drop_table("api_usage")

    op.drop_index(op.f("ix_ip_abuse_is_blocked"), table_name="ip_abuse")
    op.drop_index(op.f("ix_ip_abuse_ip_address"), table_name="ip_abuse")
    op.drop_table("ip_abuse")
