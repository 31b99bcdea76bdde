"""Public interface for the ``cnab_importer`` package.

This module exposes the import pipeline's entry points and public models as the
stable import surface. There is no runtime logic here, only symbol re-exports.
"""

from .catalog import TypeCatalog, load_type_catalog
from .collector import CollectedBatch, collect_batch
from .decoder import decode_line
from .importer import UploadedFile, import_file, import_transactions
from .models import (
    DecodedLine,
    DecodeResult,
    ImportIssue,
    ImportOutcome,
    ImportState,
    LineError,
    SkippedLine,
    TransactionRecord,
)
from .writer import BatchWriteError, write_batch

__all__ = [
    # API
    "import_transactions",
    "import_file",
    "collect_batch",
    "decode_line",
    "load_type_catalog",
    "write_batch",
    # Models / types
    "BatchWriteError",
    "CollectedBatch",
    "DecodeResult",
    "DecodedLine",
    "ImportIssue",
    "ImportOutcome",
    "ImportState",
    "LineError",
    "SkippedLine",
    "TransactionRecord",
    "TypeCatalog",
    "UploadedFile",
]
