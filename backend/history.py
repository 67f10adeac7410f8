# file: backend/history.py

import json
import logging
import random
import string
from typing import Any, Iterable, List, Optional, Tuple, Union

from pydantic import BaseModel, TypeAdapter, ValidationError

from backend.models import MAX_HISTORY, Reading
from backend.storage import KeyValueStore
from backend.utils import format_reading_time, now_ms

STORAGE_KEY = "air-quality-history-v2"
_BASE36 = string.digits + string.ascii_lowercase
_readings_adapter = TypeAdapter(List[Reading])


class HistoryImportError(ValueError):
    """Raised when an import file cannot be turned into readings."""


class StoreResult(BaseModel):
    ok: bool
    message: str = ""


def to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))


def new_reading_id(timestamp_ms: Optional[int] = None) -> str:
    """Time based id with a short random suffix."""
    stamp = to_base36(timestamp_ms if timestamp_ms is not None else now_ms())
    return stamp + "".join(random.choices(_BASE36, k=4))


def _trim(collection: List[Reading]) -> List[Reading]:
    return collection[-MAX_HISTORY:]


def append_reading(collection: List[Reading], data: dict, room: str = "",
                   timestamp_ms: Optional[int] = None) -> Tuple[List[Reading], Reading]:
    """Stamp a new reading and append it, keeping the newest MAX_HISTORY."""
    timestamp = timestamp_ms if timestamp_ms is not None else now_ms()
    time_str, date_str = format_reading_time(timestamp)
    reading = Reading(
        id=new_reading_id(timestamp),
        data=dict(data),
        room=room or "",
        timestamp=timestamp,
        time=time_str,
        date=date_str,
    )
    return _trim([*collection, reading]), reading


def remove_reading(collection: List[Reading], reading_id: str) -> List[Reading]:
    return [r for r in collection if r.id != reading_id]


def clear_history() -> List[Reading]:
    return []


def _coerce(item: Union[Reading, Any]) -> Optional[Reading]:
    if isinstance(item, Reading):
        return item
    if not isinstance(item, dict) or not item.get("id") or not isinstance(item.get("data"), dict):
        return None
    try:
        return Reading.model_validate(item)
    except ValidationError as e:
        logging.warning(f"Skipping invalid reading {item.get('id')!r}: {e.error_count()} errors")
        return None


def merge_readings(collection: List[Reading], incoming: Iterable[Union[Reading, Any]]) -> List[Reading]:
    """Append incoming readings whose id is new; existing entries win."""
    seen = {r.id for r in collection}
    merged = list(collection)
    for item in incoming:
        reading = _coerce(item)
        if reading is None or reading.id in seen:
            continue
        seen.add(reading.id)
        merged.append(reading)
    return _trim(merged)


def find_reading(collection: List[Reading], reading_id: str) -> Optional[Reading]:
    return next((r for r in collection if r.id == reading_id), None)


def previous_reading(collection: List[Reading], reading_id: str) -> Optional[Reading]:
    """The reading stored right before the given one."""
    for index, reading in enumerate(collection):
        if reading.id == reading_id:
            return collection[index - 1] if index > 0 else None
    return None


def parse_import(content: Union[str, bytes]) -> List[Any]:
    """Decode an import file; the top level must be a JSON array."""
    try:
        data = json.loads(content)
    except (ValueError, UnicodeDecodeError) as e:
        raise HistoryImportError("Could not parse JSON file") from e
    if not isinstance(data, list):
        raise HistoryImportError("Invalid format: expected an array")
    return data


def export_json(collection: List[Reading]) -> str:
    return json.dumps(
        [r.model_dump(mode="json") for r in collection], indent=2, ensure_ascii=False
    )


class HistoryRepository:
    """Loads and persists the reading history through a key-value store."""

    def __init__(self, store: KeyValueStore, key: str = STORAGE_KEY):
        self.store = store
        self.key = key

    def load(self) -> List[Reading]:
        """Stored readings; entries that no longer validate are skipped."""
        try:
            raw = self.store.get(self.key)
            if not raw:
                return []
            items = json.loads(raw)
        except (OSError, ValueError) as e:
            logging.error(f"Error loading history from {self.key}: {e}")
            return []
        if not isinstance(items, list):
            logging.error(f"Error loading history from {self.key}: expected an array")
            return []
        collection = [reading for reading in map(_coerce, items) if reading is not None]
        if len(collection) < len(items):
            logging.warning(f"Skipped {len(items) - len(collection)} unreadable entries in {self.key}")
        return collection

    def persist(self, collection: List[Reading]) -> StoreResult:
        try:
            self.store.set(self.key, _readings_adapter.dump_json(collection).decode("utf-8"))
        except (OSError, TypeError, ValueError) as e:
            logging.error(f"Save error: {e}")
            return StoreResult(ok=False, message=f"Could not save history: {e}")
        return StoreResult(ok=True)

    def clear(self) -> StoreResult:
        try:
            self.store.delete(self.key)
        except (OSError, ValueError) as e:
            logging.error(f"Error clearing history: {e}")
            return StoreResult(ok=False, message=f"Could not clear history: {e}")
        return StoreResult(ok=True)
