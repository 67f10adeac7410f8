"""Shared fixtures for the test suite."""

from typing import Dict, Optional

import pytest

from backend.database import ShareStore
from backend.history import HistoryRepository, append_reading
from backend.models import Reading, SharePayload
from backend.storage import MemoryStore

SAMPLE_REPORT = """
Sensors
CO2\t812 ppm
DPS310 Pressure\t1013.2 hPa
PM <1µm Weight concentration\t3.1 µg/m³
PM <2.5µm Weight concentration\t8.4 µg/m³
PM <4µm Weight concentration\t9.9 µg/m³
PM <10µm Weight concentration\t10.6 µg/m³
RSSI\t-61 dBm
SEN55 Humidity\t44.2 %
SEN55 NOX\t1
SEN55 Temperature\t22.7 °C
SEN55 VOC\t101
Uptime\t7384 s
VOC Quality\tNormal
Debug
Logs enabled
"""


class MemoryShareStore(ShareStore):
    """In-memory share store used in place of InfluxDB."""

    def __init__(self):
        self.shares: Dict[str, SharePayload] = {}

    def save_share(self, share_id: str, payload: SharePayload) -> None:
        self.shares[share_id] = payload

    def get_share(self, share_id: str) -> Optional[SharePayload]:
        return self.shares.get(share_id)


@pytest.fixture
def sample_report() -> str:
    return SAMPLE_REPORT


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def repository(memory_store) -> HistoryRepository:
    return HistoryRepository(memory_store)


@pytest.fixture
def share_store() -> MemoryShareStore:
    return MemoryShareStore()


@pytest.fixture
def make_reading():
    """Factory for readings with fixed ids and timestamps."""

    def _make(reading_id: str, timestamp: int = 1_700_000_000_000, room: str = "", **data: str) -> Reading:
        return Reading(id=reading_id, data=data, room=room, timestamp=timestamp)

    return _make


@pytest.fixture
def history():
    """Three readings stored one minute apart."""
    collection = []
    for i, co2 in enumerate(["600", "900", "1200"]):
        collection, _ = append_reading(collection, {"co2": co2, "pm25": "10"}, "Office",
                                       timestamp_ms=1_700_000_000_000 + i * 60_000)
    return collection
