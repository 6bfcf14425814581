# recipebox/app/infra/storage/json_store.py
"""
Crash-safe JSON persistence for one homogeneous collection of records.

The whole collection lives in memory and is written as a single document
`{array_key: [...]}`. Writes go to `<path>.tmp` first and are renamed over the
original only after a complete write, so readers never see a half-written file
and a failed save leaves the last good file in place.

Every mutating call is persist-or-rollback: if `save_all()` fails, the
in-memory change is undone before returning.
"""
from __future__ import annotations

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any, Generic, Iterator, Optional, Protocol, TypeVar

from recipebox.app.domain.errors import RecordValidationError

logger = logging.getLogger(__name__)

TEMP_SUFFIX = ".tmp"


class HasId(Protocol):
    id: int


T = TypeVar("T", bound=HasId)


class RecordCodec(Protocol[T]):
    """Converts records to and from plain JSON objects."""

    def encode(self, record: T) -> dict[str, Any]:
        ...

    def decode(self, data: Any) -> T:
        """Build a record from one array element. Raises on invalid input."""
        ...


class JsonCollectionStore(Generic[T]):
    def __init__(self, path: Path | str, array_key: str, codec: RecordCodec[T]):
        self.path = Path(path)
        self.array_key = array_key
        self._codec = codec
        self._items: list[T] = []
        self._next_id = 1

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as error:
            logger.error("Could not create data directory %s: %s", self.path.parent, error)

    def __len__(self) -> int:
        return len(self._items)

    @property
    def temp_path(self) -> Path:
        return self.path.with_name(self.path.name + TEMP_SUFFIX)

    # -------------------------- load / save --------------------------
    def load(self) -> bool:
        """
        Replace the in-memory collection with the file contents.

        Returns:
            False only when the file exists but is not valid JSON.
        """
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info("No data file at %s, starting with empty %s", self.path, self.array_key)
            self._reset()
            return True
        except OSError as error:
            logger.warning("Could not read %s (%s), starting with empty %s", self.path, error, self.array_key)
            self._reset()
            return True

        try:
            document = json.loads(raw)
        except json.JSONDecodeError as error:
            logger.error("Failed to parse %s for %s: %s", self.path, self.array_key, error)
            self._reset()
            return False

        self._items = []
        elements = document.get(self.array_key) if isinstance(document, dict) else None
        if not isinstance(elements, list):
            logger.warning("No '%s' array in %s, starting empty", self.array_key, self.path)
            elements = []

        seen_ids: set[int] = set()
        for element in elements:
            record = self._decode_element(element)
            if record is None:
                continue
            if record.id <= 0:
                logger.warning("Skipping %s element with non-positive id: %r", self.array_key, element)
                continue
            if record.id in seen_ids:
                logger.warning("Skipping %s element with duplicate id %d", self.array_key, record.id)
                continue
            seen_ids.add(record.id)
            self._items.append(record)

        self.ensure_next_id_is_correct()
        logger.debug("Loaded %d %s from %s", len(self._items), self.array_key, self.path)
        return True

    def _decode_element(self, element: Any) -> Optional[T]:
        try:
            return self._codec.decode(element)
        except (RecordValidationError, ValueError, TypeError, KeyError) as error:
            logger.warning("Skipping invalid %s element %r: %s", self.array_key, element, error)
            return None

    def save_all(self) -> bool:
        """
        Write the whole collection through a temp file and rename it over the original.

        Returns:
            True if the new document is in place
        """
        try:
            payload = json.dumps(
                {self.array_key: [self._codec.encode(item) for item in self._items]},
                indent=2,
                ensure_ascii=False,
            )
        except (TypeError, ValueError) as error:
            logger.error("Failed to serialize %s: %s", self.array_key, error)
            return False

        temp_path = self.temp_path
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with temp_path.open("w", encoding="utf-8") as handle:
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
        except OSError as error:
            logger.error("Could not write temporary file %s: %s", temp_path, error)
            self._discard_temp(temp_path)
            return False

        try:
            os.replace(temp_path, self.path)
        except OSError as error:
            logger.error("Failed to replace %s with %s: %s", self.path, temp_path, error)
            self._discard_temp(temp_path)
            return False

        return True

    @staticmethod
    def _discard_temp(temp_path: Path) -> None:
        if not temp_path.is_file():
            return
        try:
            temp_path.unlink()
        except OSError as error:
            logger.warning("Could not remove temporary file %s: %s", temp_path, error)

    # -------------------------- queries --------------------------
    def find_by_id_internal(self, record_id: int) -> Optional[T]:
        for item in self._items:
            if item.id == record_id:
                return copy.deepcopy(item)
        return None

    def find_all_internal(self) -> list[T]:
        return copy.deepcopy(self._items)

    def iter_items(self) -> Iterator[T]:
        """Iterate over the live records. Callers must copy anything they hand out."""
        return iter(self._items)

    def contains_id(self, record_id: int) -> bool:
        return any(item.id == record_id for item in self._items)

    # -------------------------- mutations --------------------------
    def upsert(self, record: T, is_new: bool) -> bool:
        """
        Add or replace a record in memory and persist the collection.

        Args:
            record: Record carrying its final id
            is_new: Append when True, replace the record with the same id otherwise

        Returns:
            True if memory and disk both hold the change
        """
        stored = copy.deepcopy(record)
        index = self._index_of(record.id)

        if is_new:
            if index is not None:
                logger.error("Refusing to add %s with duplicate id %d", self.array_key, record.id)
                return False
            self._items.append(stored)
        else:
            if index is None:
                logger.warning("Cannot update %s id %d: not found", self.array_key, record.id)
                return False
            previous = self._items[index]
            self._items[index] = stored

        if self.save_all():
            return True

        if is_new:
            self._items.pop()
        else:
            self._items[index] = previous
        logger.error("Rolled back %s id %d after failed save", self.array_key, record.id)
        return False

    def remove_internal(self, record_id: int) -> bool:
        index = self._index_of(record_id)
        if index is None:
            return False

        removed = self._items.pop(index)
        if self.save_all():
            return True

        self._items.insert(index, removed)
        logger.error("Rolled back removal of %s id %d after failed save", self.array_key, record_id)
        return False

    def _index_of(self, record_id: int) -> Optional[int]:
        for index, item in enumerate(self._items):
            if item.id == record_id:
                return index
        return None

    # -------------------------- id management --------------------------
    def get_next_id(self) -> int:
        return self._next_id

    def set_next_id(self, next_id: int) -> None:
        self._next_id = next_id

    def max_id(self) -> int:
        return max((item.id for item in self._items), default=0)

    def ensure_next_id_is_correct(self) -> None:
        self._next_id = self.max_id() + 1

    def _reset(self) -> None:
        self._items = []
        self._next_id = 1
