"""Domain services implementing reconciliation and classification rules."""
from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Callable, Iterable, Mapping, Sequence

from fiscal_checker.config import SETTINGS

from .cfop import CfopCatalog
from .keys import find_duplicates, is_canonical, normalize_key, unique_in_order
from .models import (
    DocumentRecord,
    ExceptionKeySets,
    KeyEntry,
    KeyOrigin,
    LedgerHeaderInfo,
    UploadOrigin,
    VerificationRecord,
    VerificationStats,
)
from .results import ClassificationResult, KeyCheckResult
from .values import clean_text, digits_only, parse_br_decimal

logger = logging.getLogger(__name__)

Stage = tuple[tuple[DocumentRecord, ...], tuple[DocumentRecord, ...]]


class KeySetReconciler:
    """Cross-checks spreadsheet access keys against the keys found in a ledger."""

    def reconcile(self, tabular_keys: Iterable[object], ledger_keys: Iterable[object]) -> KeyCheckResult:
        tabular_sequence = self._normalized(tabular_keys)
        ledger_sequence = self._normalized(ledger_keys)

        tabular_unique = unique_in_order(tabular_sequence)
        ledger_unique = unique_in_order(ledger_sequence)
        tabular_set = set(tabular_unique)
        ledger_set = set(ledger_unique)

        malformed = sum(1 for key in tabular_unique if not is_canonical(key))
        if malformed:
            logger.debug("%d spreadsheet keys are not 44 digits; comparing them as-is", malformed)

        return KeyCheckResult(
            only_in_tabular=tuple(key for key in tabular_unique if key not in ledger_set),
            only_in_ledger=tuple(key for key in ledger_unique if key not in tabular_set),
            duplicates_in_tabular=find_duplicates(tabular_sequence),
            duplicates_in_ledger=find_duplicates(ledger_sequence),
            tabular_keys=tabular_unique,
            ledger_keys=ledger_unique,
        )

    @staticmethod
    def _normalized(keys: Iterable[object]) -> list[str]:
        return [key for key in (normalize_key(raw) for raw in keys) if key]


class DocumentClassifier:
    """Splits a document pool into mutually exclusive categories.

    Stages run in a fixed order and each one only sees what the previous
    stages left behind: canceled, the three exception sheets, self-issued
    or returned documents, and finally the valid remainder. Records are
    never mutated; every stage allocates new tuples.
    """

    def __init__(
        self,
        catalog: CfopCatalog | None = None,
        fixed_asset_threshold: Decimal | None = None,
        return_cfop_prefixes: Sequence[str] | None = None,
    ) -> None:
        self._catalog = catalog or CfopCatalog()
        if fixed_asset_threshold is None:
            fixed_asset_threshold = SETTINGS.fixed_asset_threshold
        self._threshold = fixed_asset_threshold
        self._return_prefixes = tuple(return_cfop_prefixes or SETTINGS.return_cfop_prefixes)
        self._cfop_column = SETTINGS.cfop_column
        self._description_column = SETTINGS.cfop_description_column
        self._unit_value_column = SETTINGS.unit_value_column

    def classify(
        self,
        documents: Iterable[object],
        exceptions: ExceptionKeySets | None = None,
        canceled: Iterable[object] = (),
        own_cnpj: str | None = None,
        inbound_items: Iterable[object] = (),
        outbound_items: Iterable[object] = (),
    ) -> ClassificationResult:
        exceptions = exceptions or ExceptionKeySets()
        pool, skipped = self._records_only(documents, "documents", UploadOrigin.INBOUND)
        inbound_pool, _ = self._records_only(inbound_items, "inbound items", UploadOrigin.INBOUND)
        outbound_pool, _ = self._records_only(outbound_items, "outbound items", UploadOrigin.OUTBOUND)
        canceled_records, _ = self._records_only(canceled, "canceled notes", UploadOrigin.INBOUND)

        canceled_keys = self._keys_of(canceled_records)
        matched_canceled, pool = self._take_by_key(pool, canceled_keys)

        buckets: dict[str, tuple[DocumentRecord, ...]] = {}
        for name, keys in exceptions.buckets():
            buckets[name], pool = self._take_by_key(pool, keys)

        return_keys = self._return_keys(inbound_pool)
        own_digits = digits_only(own_cnpj)
        self_issued, valid = self._take(pool, lambda record: self._is_self_issued(record, own_digits, return_keys))

        valid_key_sequence = tuple(key for key in (r.normalized_key for r in valid) if key)
        valid_keys = unique_in_order(valid_key_sequence)
        self_issued_keys = unique_in_order(key for key in (r.normalized_key for r in self_issued) if key)

        valid_key_set = set(valid_keys)
        self_issued_key_set = set(self_issued_keys)
        kept_inbound = tuple(item for item in inbound_pool if item.normalized_key in valid_key_set)
        kept_outbound = tuple(item for item in outbound_pool if item.normalized_key in self_issued_key_set)

        enriched_inbound = self.enrich_cfop(kept_inbound)
        enriched_outbound = self.enrich_cfop(kept_outbound)
        fixed_assets = self.fixed_assets(enriched_inbound)

        result = ClassificationResult(
            canceled=matched_canceled,
            operation_not_performed=buckets["operation_not_performed"],
            recipient_unaware=buckets["recipient_unaware"],
            service_disagreement=buckets["service_disagreement"],
            self_issued=self_issued,
            valid=valid,
            valid_keys=valid_keys,
            self_issued_keys=self_issued_keys,
            valid_key_sequence=valid_key_sequence,
            inbound_items=enriched_inbound,
            outbound_items=enriched_outbound,
            fixed_assets=fixed_assets,
            skipped=skipped,
        )
        logger.debug("Classification summary: %s", result.summary())
        return result

    def fixed_assets(self, items: Sequence[DocumentRecord]) -> tuple[DocumentRecord, ...]:
        """Items whose unit value exceeds the fixed-asset threshold; items stay in their partition."""
        selected = []
        for item in items:
            value = parse_br_decimal(item.get(self._unit_value_column))
            if value is not None and value > self._threshold:
                selected.append(item)
        return tuple(selected)

    def enrich_cfop(self, items: Sequence[DocumentRecord]) -> tuple[DocumentRecord, ...]:
        enriched = []
        for item in items:
            if item.has_field(self._cfop_column) and not item.has_field(self._description_column):
                description = self._catalog.describe_raw(item.get(self._cfop_column))
                item = item.with_field_after(self._cfop_column, self._description_column, description)
            enriched.append(item)
        return tuple(enriched)

    def _is_self_issued(self, record: DocumentRecord, own_digits: str, return_keys: frozenset[str]) -> bool:
        if own_digits and record.issuer_digits == own_digits:
            return True
        if record.origin is not UploadOrigin.INBOUND:
            return False
        key = record.normalized_key
        return bool(key) and key in return_keys

    def _return_keys(self, items: Sequence[DocumentRecord]) -> frozenset[str]:
        keys = set()
        for item in items:
            cfop = clean_text(item.get(self._cfop_column))
            if cfop.startswith(self._return_prefixes):
                key = item.normalized_key
                if key:
                    keys.add(key)
        return frozenset(keys)

    @staticmethod
    def _take(pool: Sequence[DocumentRecord], predicate: Callable[[DocumentRecord], bool]) -> Stage:
        matched: list[DocumentRecord] = []
        remaining: list[DocumentRecord] = []
        for record in pool:
            (matched if predicate(record) else remaining).append(record)
        return tuple(matched), tuple(remaining)

    @classmethod
    def _take_by_key(cls, pool: Sequence[DocumentRecord], keys: frozenset[str] | set[str]) -> Stage:
        if not keys:
            return tuple(), tuple(pool)
        return cls._take(pool, lambda record: record.normalized_key in keys)

    @staticmethod
    def _keys_of(records: Iterable[DocumentRecord]) -> frozenset[str]:
        return frozenset(key for key in (record.normalized_key for record in records) if key)

    @staticmethod
    def _records_only(
        values: Iterable[object], label: str, origin: UploadOrigin
    ) -> tuple[tuple[DocumentRecord, ...], int]:
        """Keep records, adapt plain rows that carry a key column, skip everything else."""
        records = []
        skipped = 0
        for value in values:
            if isinstance(value, DocumentRecord):
                records.append(value)
            elif isinstance(value, Mapping) and SETTINGS.key_column in value:
                records.append(
                    DocumentRecord(
                        access_key=clean_text(value[SETTINGS.key_column]),
                        issuer_cnpj=clean_text(value.get(SETTINGS.issuer_column)),
                        origin=origin,
                        fields={str(column): cell for column, cell in value.items()},
                    )
                )
            else:
                skipped += 1
        if skipped:
            logger.warning("Skipped %d %s that are neither records nor keyed rows", skipped, label)
        return tuple(records), skipped


def build_verification_record(
    header: LedgerHeaderInfo,
    key_check: KeyCheckResult,
    valid_keys: Sequence[str],
    verified_at: datetime,
) -> VerificationRecord:
    """Assemble the snapshot persisted after a ledger validation run."""
    ledger_set = set(key_check.ledger_keys)
    tabular_keys = unique_in_order(key for key in (normalize_key(raw) for raw in valid_keys) if key)

    entries = [
        KeyEntry(key=key, origin=KeyOrigin.TABULAR, found_in_ledger=key in ledger_set)
        for key in tabular_keys
    ]
    entries.extend(
        KeyEntry(key=key, origin=KeyOrigin.LEDGER_ONLY, found_in_ledger=True)
        for key in key_check.only_in_ledger
    )

    found = sum(1 for entry in entries if entry.origin is KeyOrigin.TABULAR and entry.found_in_ledger)
    stats = VerificationStats(
        total_tabular=len(tabular_keys),
        total_ledger=len(ledger_set),
        found_in_both=found,
        only_in_tabular=len(tabular_keys) - found,
        only_in_ledger=len(key_check.only_in_ledger),
    )
    return VerificationRecord(
        cnpj=header.cnpj,
        company_name=header.company_name,
        competence=header.competence,
        keys=tuple(entries),
        stats=stats,
        verified_at=verified_at,
    )
