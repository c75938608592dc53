"""Whole-file JSON record storage shared by the curation stores."""

from __future__ import annotations

import json
import os
import tempfile
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Generic, Iterator, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, SerializerFunctionWrapHandler, ValidationError, model_serializer
from pydantic.alias_generators import to_camel

from exceptions import StoreError


def utc_now() -> str:
    """Return the current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, treating naive values as UTC."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class RecordModel(BaseModel):
    """Base for persisted records: snake_case in Python, camelCase on disk."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_json_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class OpenRecordModel(RecordModel):
    """Record that other writers share.

    Unknown keys and explicit nulls survive a rewrite. Optional fields that
    were never set stay out of the output. Assignments are validated so a bad
    value fails before it reaches the file.
    """

    model_config = ConfigDict(extra="allow", validate_assignment=True)

    @model_serializer(mode="wrap")
    def drop_unset_nulls(self, handler: SerializerFunctionWrapHandler) -> Dict[str, Any]:
        data = handler(self)
        for name, field in type(self).model_fields.items():
            if name in self.model_fields_set:
                continue
            for key in {name, field.alias or name}:
                if key in data and data[key] is None:
                    del data[key]
        return data

    def to_json_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


R = TypeVar("R", bound=RecordModel)

_file_locks: Dict[Path, threading.RLock] = {}
_file_locks_guard = threading.Lock()


def lock_for(path: Path) -> threading.RLock:
    """Return the process-wide lock guarding one data file."""
    key = path.resolve()
    with _file_locks_guard:
        lock = _file_locks.get(key)
        if lock is None:
            lock = threading.RLock()
            _file_locks[key] = lock
        return lock


def read_json_array(path: Path) -> List[Dict[str, Any]]:
    """Read a JSON array file; a missing file reads as empty."""
    if not path.exists():
        return []
    try:
        with open(path, "r", encoding="utf-8") as file_obj:
            payload = json.load(file_obj)
    except (OSError, json.JSONDecodeError) as exc:
        raise StoreError(f"Cannot read data file {path}: {exc}") from exc
    if not isinstance(payload, list):
        raise StoreError(f"Data file {path} must contain a JSON array")
    return payload


def write_json_array(path: Path, payload: List[Dict[str, Any]]) -> None:
    """Replace a JSON array file atomically."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as file_obj:
            json.dump(payload, file_obj, indent=2, ensure_ascii=False)
            file_obj.flush()
        os.replace(temp_name, path)
    except BaseException:
        if os.path.exists(temp_name):
            os.unlink(temp_name)
        raise


class JsonRecordStore(Generic[R]):
    """A JSON file holding an array of records, read and written in full."""

    def __init__(self, path: Path, model: Type[R]):
        self.path = Path(path)
        self.model = model

    def _parse(self, payload: List[Dict[str, Any]]) -> List[R]:
        try:
            return [self.model.model_validate(item) for item in payload]
        except ValidationError as exc:
            raise StoreError(f"Invalid record in {self.path}: {exc}") from exc

    def read_all(self) -> List[R]:
        """Load every record from disk."""
        with lock_for(self.path):
            return self._parse(read_json_array(self.path))

    def write_all(self, records: List[R]) -> None:
        """Persist every record, replacing the file."""
        with lock_for(self.path):
            write_json_array(self.path, [record.to_json_dict() for record in records])

    def ensure_exists(self) -> None:
        """Initialise the file with an empty array if it is missing."""
        with lock_for(self.path):
            if not self.path.exists():
                write_json_array(self.path, [])

    @contextmanager
    def mutate(self) -> Iterator[List[R]]:
        """Hold the file lock across a read-modify-write cycle.

        The records are written back only when the block exits cleanly.
        """
        with lock_for(self.path):
            records = self._parse(read_json_array(self.path))
            yield records
            self.write_all(records)

    def find(self, record_id: str) -> Optional[R]:
        for record in self.read_all():
            if getattr(record, "id", None) == record_id:
                return record
        return None
