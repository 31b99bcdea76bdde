from __future__ import annotations

import datetime as dt
from decimal import Decimal

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    SmallInteger,
    String,
    Time,
    func,
    true,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# SQLite only autoincrements an ``INTEGER PRIMARY KEY`` (rowid alias); Postgres
# gets a real BIGINT identity.
_BigId = BigInteger().with_variant(Integer, "sqlite")


class Base(DeclarativeBase):
    pass


# ---------------------------
# Reference: cnab_transaction_types
# ---------------------------


class CnabTransactionType(Base):
    __tablename__ = "cnab_transaction_types"

    id: Mapped[int] = mapped_column(_BigId, primary_key=True, autoincrement=True)
    # Business code found in column 0 of every CNAB line (1..9 in the standard
    # catalog). Not unique: duplicates are tolerated and resolved by the
    # importer's catalog (lowest id wins, with a warning).
    code: Mapped[int] = mapped_column(SmallInteger, nullable=False, index=True)
    description: Mapped[str] = mapped_column(String(20), nullable=False)
    nature: Mapped[str] = mapped_column(String(20), nullable=False)
    sign: Mapped[str] = mapped_column(String(2), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=true())
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    deleted_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    updated_by: Mapped[str | None] = mapped_column(String(50), nullable=True)

    __table_args__ = (
        CheckConstraint("sign in ('+','-')", name="ck_cnab_tx_type_sign"),
    )


# ---------------------------
# Core: cnab_transactions
# ---------------------------


class CnabTransaction(Base):
    __tablename__ = "cnab_transactions"

    id: Mapped[int] = mapped_column(_BigId, primary_key=True, autoincrement=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    time: Mapped[dt.time] = mapped_column(Time, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    # Payer CPF as printed in the file (no punctuation, not validated).
    cpf: Mapped[str] = mapped_column(String(11), nullable=False)
    card: Mapped[str] = mapped_column(String(12), nullable=False)
    owner: Mapped[str] = mapped_column(String(14), nullable=False)
    store: Mapped[str] = mapped_column(String(19), nullable=False, index=True)
    transaction_type_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("cnab_transaction_types.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    # Lifecycle fields owned by the CRUD side of the system.
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=true())
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    deleted_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    updated_by: Mapped[str | None] = mapped_column(String(50), nullable=True)

    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_cnab_tx_amount_non_negative"),
    )


# ---------------------------
# Audit: cnab_user_logs
# ---------------------------


class CnabUserLog(Base):
    __tablename__ = "cnab_user_logs"

    id: Mapped[int] = mapped_column(_BigId, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    log: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


__all__ = [
    "Base",
    "CnabTransaction",
    "CnabTransactionType",
    "CnabUserLog",
]
