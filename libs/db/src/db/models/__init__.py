"""Shared SQLAlchemy models registry for the workspace database.

Currently includes the CNAB import tables used by ``cnab_importer``.
"""

from .cnab import Base, CnabTransaction, CnabTransactionType, CnabUserLog

__all__ = [
    "Base",
    "CnabTransaction",
    "CnabTransactionType",
    "CnabUserLog",
]
