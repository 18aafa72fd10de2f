"""Spreadsheet-backed repositories for document and item listings."""
from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import Sequence

from fiscal_checker.domain.models import DocumentKind, DocumentRecord, UploadOrigin
from fiscal_checker.domain.repositories import DocumentRepository
from fiscal_checker.infrastructure.parsing.tabular import dataframe_to_records, read_table
from fiscal_checker.infrastructure.parsing.utils import ensure_bytes, source_name


class ExcelDocumentRepository(DocumentRepository):
    def __init__(
        self,
        source: BytesIO | Path | bytes | str,
        kind: DocumentKind = DocumentKind.NFE,
        origin: UploadOrigin = UploadOrigin.INBOUND,
    ) -> None:
        self._name = source_name(source)
        self._source = ensure_bytes(source)
        self._kind = kind
        self._origin = origin

    def list_records(self) -> Sequence[DocumentRecord]:
        buffer = BytesIO(self._source)
        buffer.name = self._name
        return dataframe_to_records(read_table(buffer), kind=self._kind, origin=self._origin)


class CombinedDocumentRepository(DocumentRepository):
    """Concatenates several listings, e.g. the NF-e and CT-e exports."""

    def __init__(self, repositories: Sequence[DocumentRepository]) -> None:
        self._repositories = tuple(repositories)

    def list_records(self) -> Sequence[DocumentRecord]:
        records: list[DocumentRecord] = []
        for repository in self._repositories:
            records.extend(repository.list_records())
        return records
