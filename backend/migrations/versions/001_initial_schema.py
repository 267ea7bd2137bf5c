"""Create the RestaunaX schema: users, accounts, orders, order items, tokens.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19

users.account_id and accounts.owner_id reference each other. Both tables
are created first and the owner FK is added afterwards.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "001_initial_schema"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("email_verified", sa.DateTime(timezone=True), nullable=True),
        sa.Column("account_id", sa.Uuid(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )
    op.create_index("ix_users_account_id", "users", ["account_id"])

    op.create_table(
        "accounts",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("owner_id", sa.Uuid(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_accounts_owner_id", "accounts", ["owner_id"])

    # Circular FKs: added once both tables exist
    op.create_foreign_key(
        "fk_users_account_id_accounts",
        "users",
        "accounts",
        ["account_id"],
        ["id"],
        ondelete="SET NULL",
    )
    op.create_foreign_key(
        "fk_accounts_owner_id_users",
        "accounts",
        "users",
        ["owner_id"],
        ["id"],
    )

    op.create_table(
        "orders",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "account_id",
            sa.Uuid(),
            sa.ForeignKey("accounts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("customer_name", sa.String(100), nullable=False),
        sa.Column("order_type", sa.String(20), nullable=False),
        sa.Column(
            "status", sa.String(20), nullable=False, server_default="pending"
        ),
        sa.Column("total", sa.Numeric(10, 2), nullable=False),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('pending', 'preparing', 'ready', 'delivered')",
            name="ck_orders_status",
        ),
        sa.CheckConstraint(
            "order_type IN ('pickup', 'delivery')",
            name="ck_orders_order_type",
        ),
        sa.CheckConstraint("total >= 0", name="ck_orders_total_nonneg"),
    )
    op.create_index("ix_orders_account_id", "orders", ["account_id"])
    # Newest-first listing per account
    op.create_index(
        "ix_orders_account_id_created_at", "orders", ["account_id", "created_at"]
    )

    op.create_table(
        "order_items",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "order_id",
            sa.Uuid(),
            sa.ForeignKey("orders.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.CheckConstraint("price > 0", name="ck_order_items_price_pos"),
        sa.CheckConstraint("quantity >= 1", name="ck_order_items_quantity_pos"),
    )
    op.create_index("ix_order_items_order_id", "order_items", ["order_id"])

    # Stores SHA-256 digests only, never plain tokens
    op.create_table(
        "verification_tokens",
        sa.Column("token", sa.String(64), primary_key=True),
        sa.Column("identifier", sa.String(255), nullable=False),
        sa.Column("expires", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "ix_verification_tokens_identifier", "verification_tokens", ["identifier"]
    )


def downgrade() -> None:
    op.drop_index("ix_verification_tokens_identifier")
    op.drop_table("verification_tokens")
    op.drop_index("ix_order_items_order_id")
    op.drop_table("order_items")
    op.drop_index("ix_orders_account_id_created_at")
    op.drop_index("ix_orders_account_id")
    op.drop_table("orders")
    op.drop_constraint("fk_accounts_owner_id_users", "accounts", type_="foreignkey")
    op.drop_constraint("fk_users_account_id_accounts", "users", type_="foreignkey")
    op.drop_index("ix_accounts_owner_id")
    op.drop_table("accounts")
    op.drop_index("ix_users_account_id")
    op.drop_table("users")
