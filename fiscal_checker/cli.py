"""Command-line entrypoint for fiscal document validation."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from fiscal_checker.application.dto import ClassificationRequest, ValidationRequest
from fiscal_checker.application.use_cases import (
    AnnotateKeyUseCase,
    ListVerificationsUseCase,
    ValidateLedgerUseCase,
    ValidationContext,
)
from fiscal_checker.config import SETTINGS
from fiscal_checker.domain.models import DocumentKind, ExceptionKeySets, UploadOrigin
from fiscal_checker.domain.repositories import StoreError
from fiscal_checker.domain.services import DocumentClassifier, KeySetReconciler
from fiscal_checker.infrastructure.parsing.tabular import read_key_column
from fiscal_checker.infrastructure.parsing.utils import read_ledger_text
from fiscal_checker.infrastructure.repositories.excel_repositories import (
    CombinedDocumentRepository,
    ExcelDocumentRepository,
)
from fiscal_checker.infrastructure.storage.verification_store import JsonFileVerificationStore
from fiscal_checker.presentation.report import (
    build_workbook_bytes,
    classification_to_frames,
    format_cnpj,
    key_check_to_frame,
    render_key_check_csv,
)

logger = logging.getLogger(__name__)


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Classify NF-e/CT-e listings and check their keys against a SPED ledger")
    parser.add_argument("--store-dir", type=Path, default=SETTINGS.store_dir, help="Directory of verification snapshots")
    parser.add_argument("--log-level", default=SETTINGS.log_level)
    sub = parser.add_subparsers(dest="command", required=True)

    validate = sub.add_parser("validate", help="Classify documents and validate the ledger")
    validate.add_argument("--nfe", type=Path, action="append", default=[], help="Inbound NF-e listing")
    validate.add_argument("--cte", type=Path, action="append", default=[], help="Inbound CT-e listing")
    validate.add_argument("--outbound", type=Path, action="append", default=[], help="Outbound NF-e listing")
    validate.add_argument("--inbound-items", type=Path, action="append", default=[])
    validate.add_argument("--outbound-items", type=Path, action="append", default=[])
    validate.add_argument("--canceled", type=Path, action="append", default=[], help="Canceled notes sheet")
    validate.add_argument("--not-performed", type=Path, action="append", default=[])
    validate.add_argument("--unaware", type=Path, action="append", default=[])
    validate.add_argument("--disagreement", type=Path, action="append", default=[])
    validate.add_argument("--ledger", type=Path, help="SPED text file")
    validate.add_argument("--own-cnpj", type=str, help="CNPJ of the company being audited")
    validate.add_argument("--output", type=Path, help="Write partitions to this .xlsx file")
    validate.add_argument("--keys-csv", type=Path, help="Write the ledger key check to this .csv file")

    annotate = sub.add_parser("annotate", help="Comment on one key of a stored verification")
    annotate.add_argument("cnpj")
    annotate.add_argument("key")
    annotate.add_argument("comment")

    sub.add_parser("history", help="List stored verifications")
    return parser.parse_args(argv)


def _documents(paths: list[Path], kind: DocumentKind, origin: UploadOrigin) -> list[ExcelDocumentRepository]:
    return [ExcelDocumentRepository(path, kind=kind, origin=origin) for path in paths]


def _keys(paths: list[Path]) -> list[str]:
    keys: list[str] = []
    for path in paths:
        keys.extend(read_key_column(path))
    return keys


def run_validate(args: argparse.Namespace, store: JsonFileVerificationStore) -> int:
    documents = CombinedDocumentRepository(
        _documents(args.nfe, DocumentKind.NFE, UploadOrigin.INBOUND)
        + _documents(args.cte, DocumentKind.CTE, UploadOrigin.INBOUND)
        + _documents(args.outbound, DocumentKind.NFE, UploadOrigin.OUTBOUND)
    )
    request = ClassificationRequest(
        documents=documents.list_records(),
        exceptions=ExceptionKeySets.from_raw(
            operation_not_performed=_keys(args.not_performed),
            recipient_unaware=_keys(args.unaware),
            service_disagreement=_keys(args.disagreement),
        ),
        canceled=CombinedDocumentRepository(_documents(args.canceled, DocumentKind.NFE, UploadOrigin.INBOUND)).list_records(),
        own_cnpj=args.own_cnpj,
        inbound_items=CombinedDocumentRepository(
            _documents(args.inbound_items, DocumentKind.NFE, UploadOrigin.INBOUND)
        ).list_records(),
        outbound_items=CombinedDocumentRepository(
            _documents(args.outbound_items, DocumentKind.NFE, UploadOrigin.OUTBOUND)
        ).list_records(),
    )
    ledger_text = read_ledger_text(args.ledger) if args.ledger else ""

    context = ValidationContext(classifier=DocumentClassifier(), reconciler=KeySetReconciler(), store=store)
    response = ValidateLedgerUseCase(context).execute(ValidationRequest(classification=request, ledger_text=ledger_text))

    print("Classification Summary")
    print("======================")
    for name, count in response.classification.summary().items():
        print(f"{name}: {count}")

    if response.key_check is not None:
        key_check = response.key_check
        print("\nLedger Key Check")
        print("================")
        if response.header is not None:
            print(f"Company: {response.header.company_name} ({format_cnpj(response.header.cnpj)})")
            print(f"Competence: {response.header.competence}")
        print(f"Only in sheet: {len(key_check.only_in_tabular)}")
        print(f"Only in ledger: {len(key_check.only_in_ledger)}")
        print(f"Duplicates in sheet: {len(key_check.duplicates_in_tabular)}")
        print(f"Duplicates in ledger: {len(key_check.duplicates_in_ledger)}")
    print(f"\nSnapshot: {response.saved.message}")

    if args.output:
        frames = classification_to_frames(response.classification)
        if response.key_check is not None:
            frames["Verificação de Chaves"] = key_check_to_frame(response.key_check)
        args.output.write_bytes(build_workbook_bytes(frames))
        print(f"Workbook written to {args.output}")
    if args.keys_csv and response.key_check is not None:
        args.keys_csv.write_bytes(render_key_check_csv(response.key_check))
        print(f"Key check written to {args.keys_csv}")
    return 0


def run_annotate(args: argparse.Namespace, store: JsonFileVerificationStore) -> int:
    result = AnnotateKeyUseCase(store).execute(args.cnpj, args.key, args.comment)
    print(result.message)
    return 0 if result.success else 1


def run_history(store: JsonFileVerificationStore) -> int:
    records = ListVerificationsUseCase(store).execute()
    if not records:
        print("No verifications stored.")
    for record in records:
        stats = record.stats
        print(
            f"{record.verified_at:%Y-%m-%d %H:%M} {format_cnpj(record.cnpj)} {record.company_name} "
            f"{record.competence}: {stats.found_in_both}/{stats.total_tabular} found ({stats.match_rate:.0%})"
        )
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    store = JsonFileVerificationStore(args.store_dir)

    try:
        if args.command == "validate":
            return run_validate(args, store)
        if args.command == "annotate":
            return run_annotate(args, store)
        return run_history(store)
    except (ValueError, OSError, StoreError) as exc:
        logger.error("%s", exc)
        return 2


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
