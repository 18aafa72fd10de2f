"""Domain-level results for reconciliation and classification."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Sequence

from .models import DocumentRecord


@dataclass(frozen=True)
class KeyCheckResult:
    only_in_tabular: Sequence[str] = field(default_factory=tuple)
    only_in_ledger: Sequence[str] = field(default_factory=tuple)
    duplicates_in_tabular: Sequence[str] = field(default_factory=tuple)
    duplicates_in_ledger: Sequence[str] = field(default_factory=tuple)
    tabular_keys: Sequence[str] = field(default_factory=tuple)
    ledger_keys: Sequence[str] = field(default_factory=tuple)

    @property
    def found_in_both(self) -> tuple[str, ...]:
        ledger = set(self.ledger_keys)
        return tuple(key for key in self.tabular_keys if key in ledger)

    def has_issues(self) -> bool:
        return any(
            [
                self.only_in_tabular,
                self.only_in_ledger,
                self.duplicates_in_tabular,
                self.duplicates_in_ledger,
            ]
        )


PARTITION_NAMES = (
    "canceled",
    "operation_not_performed",
    "recipient_unaware",
    "service_disagreement",
    "self_issued",
    "valid",
)


@dataclass(frozen=True)
class ClassificationResult:
    canceled: Sequence[DocumentRecord] = field(default_factory=tuple)
    operation_not_performed: Sequence[DocumentRecord] = field(default_factory=tuple)
    recipient_unaware: Sequence[DocumentRecord] = field(default_factory=tuple)
    service_disagreement: Sequence[DocumentRecord] = field(default_factory=tuple)
    self_issued: Sequence[DocumentRecord] = field(default_factory=tuple)
    valid: Sequence[DocumentRecord] = field(default_factory=tuple)
    valid_keys: Sequence[str] = field(default_factory=tuple)
    self_issued_keys: Sequence[str] = field(default_factory=tuple)
    # every valid key in record order, repeats kept for duplicate detection
    valid_key_sequence: Sequence[str] = field(default_factory=tuple)
    inbound_items: Sequence[DocumentRecord] = field(default_factory=tuple)
    outbound_items: Sequence[DocumentRecord] = field(default_factory=tuple)
    fixed_assets: Sequence[DocumentRecord] = field(default_factory=tuple)
    skipped: int = 0

    def partitions(self) -> Iterable[tuple[str, Sequence[DocumentRecord]]]:
        for name in PARTITION_NAMES:
            yield name, getattr(self, name)

    def summary(self) -> dict[str, int]:
        counts = {name: len(records) for name, records in self.partitions()}
        counts["inbound_items"] = len(self.inbound_items)
        counts["outbound_items"] = len(self.outbound_items)
        counts["fixed_assets"] = len(self.fixed_assets)
        return counts


@dataclass(frozen=True)
class OperationResult:
    """Outcome of an operation that touches the verification store."""

    success: bool
    message: str = ""

    @classmethod
    def ok(cls, message: str = "ok") -> "OperationResult":
        return cls(success=True, message=message)

    @classmethod
    def failure(cls, message: str) -> "OperationResult":
        return cls(success=False, message=message)
