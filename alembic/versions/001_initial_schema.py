"""initial schema

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-01 00:00:00.000000
"""
from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import ENUM, JSONB, UUID

from alembic import op

revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamp(name: str) -> sa.Column:  # type: ignore[type-arg]
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.text("now()"),
    )


def _provenance_columns() -> list[sa.Column]:  # type: ignore[type-arg]
    return [
        sa.Column("posted_by", sa.String(128), nullable=True),
        sa.Column("posted_by_role", sa.String(32), nullable=True),
        sa.Column("source_request_id", UUID(as_uuid=True), nullable=True),
    ]


def upgrade() -> None:
    # Types are created once here; columns reference them with create_type=False
    request_status = ENUM(
        "pending", "edited", "approved", "rejected", name="request_status", create_type=False
    )
    product_kind = ENUM("vehicle", "part", name="product_kind", create_type=False)
    request_status.create(op.get_bind(), checkfirst=True)
    product_kind.create(op.get_bind(), checkfirst=True)

    # Named counters behind reference numbers
    op.create_table(
        "sequence_counters",
        sa.Column("key", sa.String(64), primary_key=True),
        sa.Column("seq", sa.BigInteger(), nullable=False, server_default="0"),
    )

    op.create_table(
        "product_requests",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("request_type", product_kind, nullable=False),
        sa.Column("status", request_status, nullable=False),
        sa.Column("requester_id", sa.String(128), nullable=False),
        sa.Column("requester_name", sa.String(256), nullable=False, server_default=""),
        sa.Column("requester_role", sa.String(32), nullable=False),
        sa.Column("product_data", JSONB(), nullable=False, server_default="{}"),
        sa.Column("reviewed_by", sa.String(128), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("admin_notes", sa.Text(), nullable=True),
        sa.Column("approved_product_id", UUID(as_uuid=True), nullable=True),
        sa.Column("approved_product_kind", product_kind, nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )
    op.create_index("ix_product_requests_request_type", "product_requests", ["request_type"])
    op.create_index("ix_product_requests_status", "product_requests", ["status"])
    op.create_index("ix_product_requests_requester_id", "product_requests", ["requester_id"])
    op.create_index(
        "ix_product_requests_status_created", "product_requests", ["status", "created_at"]
    )

    op.create_table(
        "review_history",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "request_id",
            UUID(as_uuid=True),
            sa.ForeignKey("product_requests.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("from_status", request_status, nullable=True),
        sa.Column("to_status", request_status, nullable=False),
        sa.Column("action", sa.String(64), nullable=False),
        sa.Column("reviewed_by", sa.String(128), nullable=False),
        _timestamp("reviewed_at"),
        sa.Column("metadata", JSONB(), nullable=False, server_default="{}"),
    )
    op.create_index("ix_review_history_request_id", "review_history", ["request_id"])

    op.create_table(
        "vehicles",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("ref_no", sa.String(32), nullable=False, unique=True),
        sa.Column("reference_degraded", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("title", sa.String(512), nullable=False),
        sa.Column("price", sa.String(64), nullable=False),
        sa.Column("total_price", sa.String(64), nullable=False),
        sa.Column("condition", sa.Text(), nullable=False),
        sa.Column("category", sa.String(64), nullable=False),
        sa.Column("status", sa.String(32), nullable=False, server_default="available"),
        sa.Column("make", sa.String(128), nullable=False, server_default=""),
        sa.Column("model", sa.String(256), nullable=False, server_default=""),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("specs", JSONB(), nullable=False, server_default="{}"),
        sa.Column("features", JSONB(), nullable=False, server_default="[]"),
        sa.Column("images", JSONB(), nullable=False, server_default="[]"),
        sa.Column("image", sa.String(2048), nullable=False, server_default=""),
        sa.Column("video", sa.String(2048), nullable=False, server_default=""),
        *_provenance_columns(),
        sa.Column("is_approved", sa.Boolean(), nullable=False, server_default=sa.true()),
        _timestamp("created_at"),
    )
    op.create_index("ix_vehicles_category", "vehicles", ["category"])
    op.create_index("ix_vehicles_make", "vehicles", ["make"])

    op.create_table(
        "parts",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("ref_no", sa.String(32), nullable=False, unique=True),
        sa.Column("reference_degraded", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("name", sa.String(512), nullable=False),
        sa.Column("brand", sa.String(128), nullable=False, server_default=""),
        sa.Column("make", sa.String(128), nullable=False, server_default=""),
        sa.Column("custom_maker", sa.String(128), nullable=False, server_default=""),
        sa.Column("model", sa.String(256), nullable=False, server_default=""),
        sa.Column("category", sa.String(64), nullable=False),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        sa.Column("stock", sa.Integer(), nullable=False),
        sa.Column("images", JSONB(), nullable=False, server_default="[]"),
        sa.Column("video", sa.String(2048), nullable=False, server_default=""),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("model_code", sa.String(128), nullable=False, server_default=""),
        sa.Column("year", sa.String(16), nullable=False, server_default=""),
        sa.Column("condition", sa.String(16), nullable=False),
        sa.Column("compatible_vehicles", JSONB(), nullable=False, server_default="[]"),
        sa.Column("comments", sa.Text(), nullable=False, server_default=""),
        sa.Column("status", sa.String(32), nullable=False, server_default="available"),
        *_provenance_columns(),
        _timestamp("created_at"),
    )
    op.create_index("ix_parts_category", "parts", ["category"])


def downgrade() -> None:
    op.drop_table("parts")
    op.drop_table("vehicles")
    op.drop_table("review_history")
    op.drop_table("product_requests")
    op.drop_table("sequence_counters")
    sa.Enum(name="product_kind").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="request_status").drop(op.get_bind(), checkfirst=True)
