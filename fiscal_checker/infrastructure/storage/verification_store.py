"""Document stores for verification snapshots, one document per issuer CNPJ."""
from __future__ import annotations

import json
import os
import re
import threading
from pathlib import Path
from typing import Any, Mapping, Sequence

from fiscal_checker.domain.keys import normalize_key
from fiscal_checker.domain.models import KeyEntry, VerificationRecord
from fiscal_checker.domain.repositories import StoreError


def _lookup_id(cnpj: str | None) -> str | None:
    """Document id for ``cnpj``: its digits, else its safe characters, else ``None``."""
    digits = re.sub(r"\D", "", cnpj or "")
    if digits:
        return digits
    return re.sub(r"[^0-9A-Za-z_-]+", "", (cnpj or "").strip()) or None


def _document_id(cnpj: str | None) -> str:
    doc_id = _lookup_id(cnpj)
    if doc_id is None:
        raise StoreError("verification record has no CNPJ")
    return doc_id


def _to_record(data: Mapping[str, Any]) -> VerificationRecord:
    try:
        return VerificationRecord.from_dict(data)
    except (KeyError, ValueError, TypeError) as exc:
        raise StoreError("Malformed verification document") from exc


def merge_documents(existing: Mapping[str, Any] | None, incoming: Mapping[str, Any]) -> dict[str, Any]:
    """Upsert with merge: unknown stored fields survive, known ones are replaced.

    Comments already written on a key are carried over when the new entry
    for the same normalized key arrives without one.
    """
    merged: dict[str, Any] = dict(existing or {})
    merged.update(incoming)
    if not existing:
        return merged

    previous_comments = {
        normalize_key(entry.get("key")): entry.get("comment")
        for entry in existing.get("keys", ())
        if entry.get("comment")
    }
    keys = []
    for entry in incoming.get("keys", ()):
        entry = dict(entry)
        if not entry.get("comment"):
            carried = previous_comments.get(normalize_key(entry.get("key")))
            if carried:
                entry["comment"] = carried
        keys.append(entry)
    merged["keys"] = keys
    return merged


class JsonFileVerificationStore:
    """Keeps each snapshot as ``<root>/<cnpj>.json``.

    Writers are serialized within one process; separate processes sharing
    the directory still race on annotate.
    """

    def __init__(self, root: Path) -> None:
        self._root = Path(root)
        self._lock = threading.Lock()

    def get(self, cnpj: str) -> VerificationRecord | None:
        doc_id = _lookup_id(cnpj)
        if doc_id is None:
            return None
        data = self._read(self._root / f"{doc_id}.json")
        if data is None:
            return None
        return _to_record(data)

    def upsert(self, record: VerificationRecord) -> None:
        path = self._path(record.cnpj)
        with self._lock:
            merged = merge_documents(self._read(path), record.to_dict())
            self._write(path, merged)

    def write_keys(self, cnpj: str, keys: Sequence[KeyEntry]) -> None:
        path = self._path(cnpj)
        with self._lock:
            data = self._read(path)
            if data is None:
                raise StoreError(f"No verification stored for {cnpj}")
            data["keys"] = [entry.to_dict() for entry in keys]
            self._write(path, data)

    def list_records(self) -> Sequence[VerificationRecord]:
        if not self._root.exists():
            return []
        records = []
        for path in sorted(self._root.glob("*.json")):
            data = self._read(path)
            if data is not None:
                records.append(_to_record(data))
        return records

    def _path(self, cnpj: str) -> Path:
        return self._root / f"{_document_id(cnpj)}.json"

    @staticmethod
    def _read(path: Path) -> dict[str, Any] | None:
        if not path.exists():
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise StoreError(f"Unreadable verification document {path.name}") from exc

    def _write(self, path: Path, data: Mapping[str, Any]) -> None:
        try:
            self._root.mkdir(parents=True, exist_ok=True)
            tmp_path = path.with_suffix(".json.tmp")
            tmp_path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
            os.replace(tmp_path, path)
        except OSError as exc:
            raise StoreError(f"Could not write verification document {path.name}") from exc


class InMemoryVerificationStore:
    """Dictionary-backed store with the same merge semantics, for tests and dry runs."""

    def __init__(self) -> None:
        self._documents: dict[str, dict[str, Any]] = {}

    def get(self, cnpj: str) -> VerificationRecord | None:
        data = self._documents.get(_lookup_id(cnpj))
        return _to_record(data) if data is not None else None

    def upsert(self, record: VerificationRecord) -> None:
        doc_id = _document_id(record.cnpj)
        self._documents[doc_id] = merge_documents(self._documents.get(doc_id), record.to_dict())

    def write_keys(self, cnpj: str, keys: Sequence[KeyEntry]) -> None:
        doc_id = _document_id(cnpj)
        if doc_id not in self._documents:
            raise StoreError(f"No verification stored for {cnpj}")
        self._documents[doc_id] = {**self._documents[doc_id], "keys": [entry.to_dict() for entry in keys]}

    def list_records(self) -> Sequence[VerificationRecord]:
        return [_to_record(data) for data in self._documents.values()]

    def raw_document(self, cnpj: str) -> dict[str, Any] | None:
        return self._documents.get(_lookup_id(cnpj))

    def seed(self, cnpj: str, document: Mapping[str, Any]) -> None:
        self._documents[_document_id(cnpj)] = dict(document)
