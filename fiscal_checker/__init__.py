"""Reconciliation and classification of Brazilian fiscal documents."""
from fiscal_checker.application.use_cases import (
    AnnotateKeyUseCase,
    ValidateLedgerUseCase,
    ValidationContext,
)
from fiscal_checker.domain.keys import normalize_key
from fiscal_checker.domain.services import DocumentClassifier, KeySetReconciler
from fiscal_checker.infrastructure.storage.verification_store import (
    InMemoryVerificationStore,
    JsonFileVerificationStore,
)

__all__ = [
    "AnnotateKeyUseCase",
    "ValidateLedgerUseCase",
    "ValidationContext",
    "normalize_key",
    "DocumentClassifier",
    "KeySetReconciler",
    "InMemoryVerificationStore",
    "JsonFileVerificationStore",
]
