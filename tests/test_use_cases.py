from datetime import datetime, timezone

import pytest

from fiscal_checker.application.dto import ClassificationRequest, ValidationRequest
from fiscal_checker.application.use_cases import (
    AnnotateKeyUseCase,
    ListVerificationsUseCase,
    ValidateLedgerUseCase,
    ValidationContext,
)
from fiscal_checker.domain.models import DocumentRecord, KeyOrigin
from fiscal_checker.domain.repositories import StoreError
from fiscal_checker.domain.services import DocumentClassifier, KeySetReconciler
from fiscal_checker.infrastructure.storage.verification_store import InMemoryVerificationStore

CNPJ = "12345678000199"
HEADER = f"|0000|017|0|01012024|31012024|ACME LTDA|{CNPJ}||SP|123456789|3550308|||A|1|"
NOW = datetime(2024, 2, 5, 9, 30, tzinfo=timezone.utc)


def make_key(n: int) -> str:
    return f"3524011234567800019955001{n:09d}{n:010d}"


def make_doc(n: int) -> DocumentRecord:
    return DocumentRecord(access_key=f"NFe{make_key(n)}", issuer_cnpj="99888777000166")


def ledger(*keys: str, header: str = HEADER) -> str:
    lines = [header] + [f"|C100|0|1||55|00|001|{n}|{key}|01012024|" for n, key in enumerate(keys)]
    return "\r\n".join(lines)


class FailingStore(InMemoryVerificationStore):
    def upsert(self, record):
        raise StoreError("disk full")


def make_use_case(store):
    context = ValidationContext(
        classifier=DocumentClassifier(),
        reconciler=KeySetReconciler(),
        store=store,
        clock=lambda: NOW,
    )
    return ValidateLedgerUseCase(context)


def test_validation_saves_snapshot():
    store = InMemoryVerificationStore()
    request = ValidationRequest(
        classification=ClassificationRequest(documents=[make_doc(1), make_doc(2)]),
        ledger_text=ledger(make_key(1), make_key(3), make_key(3)),
    )

    response = make_use_case(store).execute(request)

    assert response.saved.success
    assert response.header.competence == "01/2024"
    assert response.key_check.only_in_tabular == (make_key(2),)
    assert response.key_check.only_in_ledger == (make_key(3),)
    assert response.key_check.duplicates_in_ledger == (make_key(3),)

    record = store.get(CNPJ)
    assert record.verified_at == NOW
    assert [(e.key, e.origin, e.found_in_ledger) for e in record.keys] == [
        (make_key(1), KeyOrigin.TABULAR, True),
        (make_key(2), KeyOrigin.TABULAR, False),
        (make_key(3), KeyOrigin.LEDGER_ONLY, True),
    ]
    assert record.stats.total_tabular == 2
    assert record.stats.total_ledger == 2
    assert record.stats.found_in_both == 1
    assert record.stats.only_in_tabular == 1
    assert record.stats.only_in_ledger == 1
    assert record.stats.match_rate == 0.5


def test_repeated_valid_key_is_reported_as_sheet_duplicate():
    store = InMemoryVerificationStore()
    docs = [
        DocumentRecord(access_key=make_key(1), issuer_cnpj="99888777000166"),
        DocumentRecord(access_key=f"NFe{make_key(1)}", issuer_cnpj="99888777000166"),
    ]
    request = ValidationRequest(
        classification=ClassificationRequest(documents=docs),
        ledger_text=ledger(make_key(1)),
    )

    response = make_use_case(store).execute(request)

    assert len(response.classification.valid) == 2
    assert response.key_check.duplicates_in_tabular == (make_key(1),)
    assert store.get(CNPJ).stats.total_tabular == 1


def test_malformed_header_skips_save_but_keeps_key_check():
    store = InMemoryVerificationStore()
    request = ValidationRequest(
        classification=ClassificationRequest(documents=[make_doc(1)]),
        ledger_text=ledger(make_key(1), header="|0000|017|0|2024|"),
    )

    response = make_use_case(store).execute(request)

    assert not response.saved.success
    assert response.header is None
    assert response.key_check.found_in_both == (make_key(1),)
    assert store.list_records() == []


def test_without_ledger_only_classifies():
    response = make_use_case(InMemoryVerificationStore()).execute(
        ValidationRequest(classification=ClassificationRequest(documents=[make_doc(1)]))
    )

    assert response.key_check is None
    assert response.classification.valid_keys == (make_key(1),)
    assert not response.saved.success


def test_save_failure_is_reported():
    request = ValidationRequest(
        classification=ClassificationRequest(documents=[make_doc(1)]),
        ledger_text=ledger(make_key(1)),
    )

    response = make_use_case(FailingStore()).execute(request)

    assert not response.saved.success
    assert response.saved.message == "failed to save verification"


def test_empty_populations_produce_zero_stats():
    store = InMemoryVerificationStore()
    response = make_use_case(store).execute(
        ValidationRequest(classification=ClassificationRequest(documents=[]), ledger_text=HEADER)
    )

    assert response.saved.success
    stats = store.get(CNPJ).stats
    assert (stats.total_tabular, stats.total_ledger, stats.found_in_both) == (0, 0, 0)
    assert stats.match_rate == 0.0


@pytest.fixture
def annotated_store():
    store = InMemoryVerificationStore()
    make_use_case(store).execute(
        ValidationRequest(
            classification=ClassificationRequest(documents=[make_doc(1), make_doc(2)]),
            ledger_text=ledger(make_key(1)),
        )
    )
    return store


def test_annotate_matches_prefixed_key(annotated_store):
    result = AnnotateKeyUseCase(annotated_store).execute(CNPJ, f"NFe{make_key(2)}", "lançar em março")

    assert result.success
    keys = annotated_store.get(CNPJ).keys
    assert keys[1].comment == "lançar em março"
    assert keys[0].comment == ""


def test_annotate_matches_stored_prefixed_entry():
    store = InMemoryVerificationStore()
    store.seed(
        CNPJ,
        {
            "cnpj": CNPJ,
            "keys": [{"key": f"CTe{make_key(7)}", "origin": "planilha", "foundInSped": False, "comment": ""}],
            "verifiedAt": NOW.isoformat(),
        },
    )

    result = AnnotateKeyUseCase(store).execute(CNPJ, make_key(7), "frete")

    assert result.success
    assert store.raw_document(CNPJ)["keys"][0]["comment"] == "frete"


def test_annotate_unknown_issuer(annotated_store):
    result = AnnotateKeyUseCase(annotated_store).execute("00000000000000", make_key(1), "x")

    assert not result.success
    assert result.message == "issuer not found"


@pytest.mark.parametrize("cnpj", ["", "   ", "../"])
def test_annotate_unaddressable_issuer(annotated_store, cnpj):
    result = AnnotateKeyUseCase(annotated_store).execute(cnpj, make_key(1), "x")

    assert not result.success
    assert result.message == "issuer not found"


def test_annotate_reports_malformed_stored_document():
    store = InMemoryVerificationStore()
    store.seed(CNPJ, {"cnpj": CNPJ, "keys": [{"key": make_key(1), "origin": "planilha", "foundInSped": True}]})

    result = AnnotateKeyUseCase(store).execute(CNPJ, make_key(1), "x")

    assert not result.success
    assert result.message == "failed to read verification"


def test_in_memory_listing_wraps_malformed_documents():
    store = InMemoryVerificationStore()
    store.seed(CNPJ, {"cnpj": CNPJ, "keys": []})

    with pytest.raises(StoreError):
        store.list_records()


def test_annotate_unknown_key(annotated_store):
    result = AnnotateKeyUseCase(annotated_store).execute(CNPJ, make_key(9), "x")

    assert not result.success
    assert result.message == "key not found"


def test_history_is_newest_first():
    store = InMemoryVerificationStore()
    for cnpj, day in (("11111111000111", 1), ("22222222000122", 3), ("33333333000133", 2)):
        store.seed(cnpj, {"cnpj": cnpj, "keys": [], "verifiedAt": datetime(2024, 1, day, tzinfo=timezone.utc).isoformat()})

    records = ListVerificationsUseCase(store).execute()

    assert [record.cnpj for record in records] == ["22222222000122", "33333333000133", "11111111000111"]
