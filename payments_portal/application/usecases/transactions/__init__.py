"""
===============================================================================
TRANSACTION USE CASES PACKAGE (Public API / Exports)
===============================================================================

Exporta los casos de uso del Transaction Authorization Engine y sus resultados.
===============================================================================
"""

from __future__ import annotations

from .get_transaction import GetTransactionUseCase
from .get_transaction_statistics import GetTransactionStatisticsUseCase
from .submit_batch import SubmitBatchUseCase
from .transaction_results import (
    BatchItem,
    BatchSubmissionResult,
    BatchSubmissionSummary,
    StatisticsResult,
    TransactionError,
    TransactionErrorCode,
    TransactionResult,
)
from .verify_transaction import VerifyTransactionUseCase

__all__ = [
    # Use cases
    "VerifyTransactionUseCase",
    "SubmitBatchUseCase",
    "GetTransactionStatisticsUseCase",
    "GetTransactionUseCase",
    # Results
    "BatchItem",
    "BatchSubmissionResult",
    "BatchSubmissionSummary",
    "StatisticsResult",
    "TransactionError",
    "TransactionErrorCode",
    "TransactionResult",
]
