# ruff: noqa: I001
"""CNAB core tables and the standard transaction type catalog.

Revision ID: 0001_cnab_core
Revises: None
Create Date: 2026-10-16
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0001_cnab_core"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

_BigId = sa.BigInteger().with_variant(sa.Integer(), "sqlite")


def upgrade() -> None:
    # cnab_transaction_types
    op.create_table(
        "cnab_transaction_types",
        sa.Column("id", _BigId, primary_key=True, autoincrement=True),
        sa.Column("code", sa.SmallInteger(), nullable=False),
        sa.Column("description", sa.String(20), nullable=False),
        sa.Column("nature", sa.String(20), nullable=False),
        sa.Column("sign", sa.String(2), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_by", sa.String(50), nullable=True),
        sa.CheckConstraint("sign in ('+','-')", name="ck_cnab_tx_type_sign"),
    )
    op.create_index(
        "ix_cnab_transaction_types_code", "cnab_transaction_types", ["code"], unique=False
    )

    # Seed the standard catalog (mirrored from
    # cnab_importer.ingest.seed_transaction_types.STANDARD_TYPES)
    standard_types = (
        (1, "Debit", "Inflow", "+"),
        (2, "Boleto", "Outflow", "-"),
        (3, "Financing", "Outflow", "-"),
        (4, "Credit", "Inflow", "+"),
        (5, "Loan Receipt", "Inflow", "+"),
        (6, "Sales", "Inflow", "+"),
        (7, "TED Receipt", "Inflow", "+"),
        (8, "DOC Receipt", "Inflow", "+"),
        (9, "Rent", "Outflow", "-"),
    )
    op.bulk_insert(
        sa.table(
            "cnab_transaction_types",
            sa.column("code", sa.SmallInteger()),
            sa.column("description", sa.String()),
            sa.column("nature", sa.String()),
            sa.column("sign", sa.String()),
            sa.column("is_active", sa.Boolean()),
        ),
        [
            {"code": c, "description": d, "nature": n, "sign": s, "is_active": True}
            for c, d, n, s in standard_types
        ],
    )

    # cnab_transactions
    op.create_table(
        "cnab_transactions",
        sa.Column("id", _BigId, primary_key=True, autoincrement=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("time", sa.Time(), nullable=False),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("cpf", sa.String(11), nullable=False),
        sa.Column("card", sa.String(12), nullable=False),
        sa.Column("owner", sa.String(14), nullable=False),
        sa.Column("store", sa.String(19), nullable=False),
        sa.Column("transaction_type_id", sa.BigInteger(), nullable=False),
        sa.Column("user_id", sa.BigInteger(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
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
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_by", sa.String(50), nullable=True),
        sa.ForeignKeyConstraint(
            ["transaction_type_id"],
            ["cnab_transaction_types.id"],
            name="fk_cnab_tx_transaction_type",
            ondelete="RESTRICT",
        ),
        sa.CheckConstraint("amount >= 0", name="ck_cnab_tx_amount_non_negative"),
    )
    op.create_index(
        "ix_cnab_transactions_transaction_type_id",
        "cnab_transactions",
        ["transaction_type_id"],
        unique=False,
    )
    op.create_index("ix_cnab_transactions_store", "cnab_transactions", ["store"], unique=False)

    # cnab_user_logs
    op.create_table(
        "cnab_user_logs",
        sa.Column("id", _BigId, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("log", sa.String(255), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index("ix_cnab_user_logs_user_id", "cnab_user_logs", ["user_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_cnab_user_logs_user_id", table_name="cnab_user_logs")
    op.drop_table("cnab_user_logs")
    op.drop_index("ix_cnab_transactions_store", table_name="cnab_transactions")
    op.drop_index("ix_cnab_transactions_transaction_type_id", table_name="cnab_transactions")
    op.drop_table("cnab_transactions")
    op.drop_index("ix_cnab_transaction_types_code", table_name="cnab_transaction_types")
    op.drop_table("cnab_transaction_types")
