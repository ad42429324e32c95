"""
backend/trainerhub/database.py

Purpose:
    File-backed collection store. Each registered collection is one JSON file
    holding an array of documents; every operation loads the whole file,
    works on it in memory and writes the whole file back.

Dependencies:
    - fastapi (request-scoped dependency)
    - trainerhub.config
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import os
import tempfile
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from typing import Any, Optional, Union

from fastapi import Request

from trainerhub.config import settings

logger = logging.getLogger("trainerhub.database")

COLLECTIONS: tuple[str, ...] = ("users", "battles")

Record = dict[str, Any]
Predicate = Union[Callable[[Record], bool], Mapping[str, Any]]
Mutator = Callable[[Record], Optional[Mapping[str, Any]]]


class StoreError(Exception):
    """Base class for collection store failures."""


class UnknownCollectionError(StoreError):
    """Raised when an operation names a collection that was never registered."""

    def __init__(self, collection: str):
        super().__init__(f"Collection {collection} not found")
        self.collection = collection


class CorruptDataError(StoreError):
    """Raised when a collection file does not hold a JSON array."""

    def __init__(self, collection: str, path: Path, reason: str):
        super().__init__(f"Collection {collection} at {path} is corrupt: {reason}")
        self.collection = collection
        self.path = path


class DuplicateIdError(StoreError):
    """Raised when adding a document whose id is already present."""

    def __init__(self, collection: str, doc_id: Any):
        super().__init__(f"Duplicate id {doc_id!r} in collection {collection}")
        self.collection = collection
        self.doc_id = doc_id


def _matcher(predicate: Predicate) -> Callable[[Record], bool]:
    if callable(predicate):
        return predicate
    query = dict(predicate)
    return lambda doc: all(doc.get(key) == value for key, value in query.items())


def _first_index(items: list[Record], predicate: Predicate) -> int:
    match = _matcher(predicate)
    for index, doc in enumerate(items):
        if match(doc):
            return index
    return -1


class JSONStore:
    """Mapping from registered collection names to JSON files under ``data_dir``.

    With ``serialize_writes`` every operation holds a per-collection lock for
    its whole read-modify-write span. Without it, concurrent writers on one
    collection can overwrite each other's changes.
    """

    def __init__(
        self,
        data_dir: Union[str, Path],
        collections: Iterable[str] = COLLECTIONS,
        serialize_writes: bool = True,
    ):
        self.data_dir = Path(data_dir)
        self.files: dict[str, Path] = {
            name: self.data_dir / f"{name}.json" for name in collections
        }
        self.serialize_writes = serialize_writes
        self._locks: dict[str, asyncio.Lock] = {}

    def ensure_collections(self) -> None:
        """Create the data directory and seed missing collection files with ``[]``."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        for name, path in self.files.items():
            if not path.exists():
                path.write_text(json.dumps([], indent=2), encoding="utf-8")
                logger.info("Seeded empty collection %s at %s", name, path)

    def get_lock(self, collection: str) -> asyncio.Lock:
        if collection not in self._locks:
            self._locks[collection] = asyncio.Lock()
        return self._locks[collection]

    def _guard(self, collection: str):
        if self.serialize_writes:
            return self.get_lock(collection)
        return contextlib.nullcontext()

    def _path(self, collection: str) -> Path:
        path = self.files.get(collection)
        if path is None:
            raise UnknownCollectionError(collection)
        return path

    def _load(self, collection: str) -> list[Record]:
        path = self._path(collection)
        raw = path.read_text(encoding="utf-8")
        try:
            items = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise CorruptDataError(collection, path, str(exc)) from exc
        if not isinstance(items, list):
            raise CorruptDataError(collection, path, "top-level value is not an array")
        return items

    def _dump(self, collection: str, items: list[Record]) -> None:
        path = self._path(collection)
        payload = json.dumps(items, indent=2, ensure_ascii=False)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{collection}.", suffix=".tmp", dir=path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
            # mkstemp creates 0600; the replaced file keeps its previous mode
            with contextlib.suppress(FileNotFoundError):
                os.chmod(tmp_name, path.stat().st_mode & 0o7777)
            os.replace(tmp_name, path)
        except BaseException:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(tmp_name)
            raise

    async def _read_file(self, collection: str) -> list[Record]:
        return await asyncio.to_thread(self._load, collection)

    async def _write_file(self, collection: str, items: list[Record]) -> None:
        await asyncio.to_thread(self._dump, collection, items)

    async def read(self, collection: str) -> list[Record]:
        self._path(collection)
        async with self._guard(collection):
            return await self._read_file(collection)

    async def write(self, collection: str, items: list[Record]) -> None:
        self._path(collection)
        async with self._guard(collection):
            await self._write_file(collection, list(items))

    async def find_one(self, collection: str, predicate: Predicate) -> Optional[Record]:
        items = await self.read(collection)
        index = _first_index(items, predicate)
        return items[index] if index != -1 else None

    async def find(self, collection: str, predicate: Predicate) -> list[Record]:
        match = _matcher(predicate)
        return [doc for doc in await self.read(collection) if match(doc)]

    async def add(self, collection: str, item: Record) -> Record:
        return await self.add_from(collection, lambda _items: item)

    async def add_from(self, collection: str, factory: Callable[[list[Record]], Record]) -> Record:
        """Append the document built by ``factory(current_documents)``.

        The factory runs between the read and the write, so uniqueness checks
        it makes against the current documents hold when the append lands. If
        it raises, nothing is written.
        """
        self._path(collection)
        async with self._guard(collection):
            items = await self._read_file(collection)
            item = factory(items)
            doc_id = item.get("id")
            if doc_id is not None and any(doc.get("id") == doc_id for doc in items):
                raise DuplicateIdError(collection, doc_id)
            items.append(item)
            await self._write_file(collection, items)
        return item

    async def update(
        self, collection: str, predicate: Predicate, updates: Mapping[str, Any]
    ) -> Optional[Record]:
        """Shallow-merge ``updates`` into the first matching document."""
        return await self.modify(collection, predicate, lambda _doc: updates)

    async def modify(
        self, collection: str, predicate: Predicate, mutator: Mutator
    ) -> Optional[Record]:
        """Merge the patch returned by ``mutator(doc)`` into the first match.

        The mutator runs between the read and the write. If it raises, nothing
        is written. If it returns None the document is returned unchanged.
        """
        self._path(collection)
        async with self._guard(collection):
            items = await self._read_file(collection)
            index = _first_index(items, predicate)
            if index == -1:
                return None
            patch = mutator(items[index])
            if patch is None:
                return items[index]
            items[index] = {**items[index], **patch}
            await self._write_file(collection, items)
            return items[index]


def connect_db() -> JSONStore:
    """Build the process-wide store from settings and seed its files."""
    store = JSONStore(settings.DATA_DIR, serialize_writes=settings.STORE_SERIALIZE_WRITES)
    store.ensure_collections()
    logger.info(
        "JSON store ready at %s (collections=%s, serialized=%s)",
        store.data_dir, ",".join(store.files), store.serialize_writes,
    )
    return store


def get_db(request: Request) -> JSONStore:
    return request.app.state.db
