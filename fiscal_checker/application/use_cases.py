"""Application services orchestrating classification, ledger checks and annotations."""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Callable, Sequence

from fiscal_checker.config import SETTINGS
from fiscal_checker.domain.keys import normalize_key
from fiscal_checker.domain.ledger import ledger_keys, parse_ledger_header
from fiscal_checker.domain.models import VerificationRecord
from fiscal_checker.domain.repositories import StoreError, VerificationStore
from fiscal_checker.domain.results import ClassificationResult, OperationResult
from fiscal_checker.domain.services import (
    DocumentClassifier,
    KeySetReconciler,
    build_verification_record,
)

from .dto import ClassificationRequest, ValidationRequest, ValidationResponse

logger = logging.getLogger(__name__)

ISSUER_NOT_FOUND = "issuer not found"
KEY_NOT_FOUND = "key not found"
SAVE_FAILED = "failed to save verification"
LEDGER_SKIPPED = "ledger validation skipped"


def _utcnow() -> datetime:
    return datetime.now(SETTINGS.timezone)


class ClassifyDocumentsUseCase:
    def __init__(self, classifier: DocumentClassifier) -> None:
        self._classifier = classifier

    def execute(self, request: ClassificationRequest) -> ClassificationResult:
        return self._classifier.classify(
            request.documents,
            exceptions=request.exceptions,
            canceled=request.canceled,
            own_cnpj=request.own_cnpj,
            inbound_items=request.inbound_items,
            outbound_items=request.outbound_items,
        )


@dataclass(slots=True)
class ValidationContext:
    classifier: DocumentClassifier
    reconciler: KeySetReconciler
    store: VerificationStore
    clock: Callable[[], datetime] = _utcnow


class ValidateLedgerUseCase:
    """Classifies the documents, checks the valid keys against the ledger and saves a snapshot."""

    def __init__(self, context: ValidationContext) -> None:
        self._context = context

    def execute(self, request: ValidationRequest) -> ValidationResponse:
        classification = ClassifyDocumentsUseCase(self._context.classifier).execute(request.classification)
        if not request.ledger_text:
            return ValidationResponse(classification, None, None, OperationResult.failure(LEDGER_SKIPPED))

        key_check = self._context.reconciler.reconcile(
            classification.valid_key_sequence, ledger_keys(request.ledger_text)
        )
        logger.info(
            "Ledger check: %d only in sheet, %d only in ledger, %d/%d duplicates",
            len(key_check.only_in_tabular),
            len(key_check.only_in_ledger),
            len(key_check.duplicates_in_tabular),
            len(key_check.duplicates_in_ledger),
        )

        header = parse_ledger_header(request.ledger_text)
        if header is None:
            logger.warning("Ledger header record is missing or malformed; snapshot not saved")
            return ValidationResponse(classification, key_check, None, OperationResult.failure(LEDGER_SKIPPED))

        record = build_verification_record(header, key_check, classification.valid_keys, self._context.clock())
        try:
            self._context.store.upsert(record)
        except StoreError:
            logger.exception("Could not save verification for %s", header.cnpj)
            return ValidationResponse(classification, key_check, header, OperationResult.failure(SAVE_FAILED))
        return ValidationResponse(classification, key_check, header, OperationResult.ok("verification saved"))


class AnnotateKeyUseCase:
    """Attaches a free-text comment to one key of a stored verification.

    The read-modify-write below is not atomic. Two annotations racing on the
    same CNPJ can lose one update (last write wins); stores with a native
    transaction should wrap ``get`` and ``write_keys`` in it.
    """

    def __init__(self, store: VerificationStore) -> None:
        self._store = store

    def execute(self, cnpj: str, key: str, comment: str) -> OperationResult:
        target = normalize_key(key)
        try:
            record = self._store.get(cnpj)
        except StoreError:
            logger.exception("Could not read verification for %s", cnpj)
            return OperationResult.failure("failed to read verification")
        if record is None:
            return OperationResult.failure(ISSUER_NOT_FOUND)

        index = record.find_entry(target)
        if index is None:
            return OperationResult.failure(KEY_NOT_FOUND)

        keys = list(record.keys)
        keys[index] = replace(keys[index], comment=comment)
        try:
            self._store.write_keys(cnpj, keys)
        except StoreError:
            logger.exception("Could not update comment on %s for %s", target, cnpj)
            return OperationResult.failure("failed to save comment")
        return OperationResult.ok("comment saved")


class ListVerificationsUseCase:
    def __init__(self, store: VerificationStore) -> None:
        self._store = store

    def execute(self) -> Sequence[VerificationRecord]:
        records = self._store.list_records()
        return sorted(records, key=lambda record: record.verified_at, reverse=True)
