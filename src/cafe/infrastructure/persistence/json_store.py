"""JSON-document-backed unit of work.

All collections (menu items, inventory, orders) live in one JSON
document so a commit is a single atomic file replace: a reader sees
either the whole transaction or none of it.

A scope holds the store's lock from ``begin()`` until commit or
rollback and works on a private copy of the document.  That serializes
writers within one process; the JSON backend is not meant to be shared
by several processes (use the SQL backend for that).
"""

from __future__ import annotations

import json
import os
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from cafe.domain.exceptions import InfrastructureError
from cafe.domain.repository.unit_of_work import TransactionalScope, UnitOfWork

COLLECTIONS = ("menu_items", "inventory", "orders")


class JsonScope(TransactionalScope):

    def __init__(self, store: JsonDocumentStore, document: dict) -> None:
        self._store = store
        self.document = document
        self._open = True

    def commit(self) -> None:
        if not self._open:
            raise RuntimeError("Scope already finished")
        try:
            self._store._persist_raw(self.document)
        finally:
            self._finish()

    def rollback(self) -> None:
        if self._open:
            self._finish()

    def _finish(self) -> None:
        self._open = False
        self._store._release()


class JsonDocumentStore(UnitOfWork):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._lock = threading.RLock()
        self._ensure_file()

    # --- UnitOfWork interface -------------------------------------------------

    def begin(self) -> JsonScope:
        self._lock.acquire()
        try:
            document = self._load_raw()
        except BaseException:
            self._lock.release()
            raise
        return JsonScope(self, document)

    # --- Helpers for the repositories -----------------------------------------

    def read(self) -> dict:
        with self._lock:
            try:
                return self._load_raw()
            except (OSError, ValueError) as exc:
                raise InfrastructureError(f"Failed to read {self._file_path}: {exc}") from exc

    @contextmanager
    def transaction(self) -> Iterator[dict]:
        """Short write outside the order flow (menu/inventory commands)."""
        try:
            scope = self.begin()
        except (OSError, ValueError) as exc:
            raise InfrastructureError(f"Failed to read {self._file_path}: {exc}") from exc
        try:
            yield scope.document
        except BaseException:
            scope.rollback()
            raise
        try:
            scope.commit()
        except OSError as exc:
            raise InfrastructureError(
                f"Failed to write {self._file_path}: {exc}", outcome_unknown=True
            ) from exc

    @staticmethod
    def document_of(scope: TransactionalScope) -> dict:
        if not isinstance(scope, JsonScope):
            raise TypeError(f"Expected a JsonScope, got {type(scope).__name__}")
        return scope.document

    @staticmethod
    def next_id(document: dict, collection: str) -> int:
        sequences = document.setdefault("sequences", {})
        next_value = sequences.get(collection, 0) + 1
        sequences[collection] = next_value
        return next_value

    # --- File helpers ---------------------------------------------------------

    def _release(self) -> None:
        self._lock.release()

    def _load_raw(self) -> dict:
        document = json.loads(self._file_path.read_text(encoding="utf-8"))
        for name in COLLECTIONS:
            document.setdefault(name, [])
        document.setdefault("sequences", {})
        return document

    def _persist_raw(self, document: dict) -> None:
        tmp_path = self._file_path.with_name(self._file_path.name + ".tmp")
        tmp_path.write_text(json.dumps(document, indent=2) + "\n", encoding="utf-8")
        os.replace(tmp_path, self._file_path)

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._persist_raw({name: [] for name in COLLECTIONS} | {"sequences": {}})
