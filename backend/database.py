# file: backend/database.py

import os
import re
import logging
from datetime import datetime
from functools import lru_cache
from typing import Optional, Protocol

import pytz
from dotenv import load_dotenv
from influxdb_client import InfluxDBClient, Point
from influxdb_client.client.write_api import SYNCHRONOUS

from backend.models import SharePayload

load_dotenv()

INFLUXDB_URL = os.getenv("INFLUXDB_URL")
INFLUXDB_TOKEN = os.getenv("INFLUXDB_TOKEN")
INFLUXDB_ORG = os.getenv("INFLUXDB_ORG")
INFLUXDB_BUCKET = os.getenv("INFLUXDB_BUCKET")

SHARE_MEASUREMENT = "shares"
SHARE_TTL_SECONDS = 2592000  # 30 days
SHARE_ID_PATTERN = re.compile(r"^[0-9a-z]{8}$")


class ShareStore(Protocol):
    """Remote store for share payloads; entries expire after SHARE_TTL_SECONDS."""

    def save_share(self, share_id: str, payload: SharePayload) -> None: ...

    def get_share(self, share_id: str) -> Optional[SharePayload]: ...


class InfluxShareStore(ShareStore):

    def __init__(self, client: InfluxDBClient, bucket: str, ttl_seconds: int = SHARE_TTL_SECONDS):
        self.bucket = bucket
        self.ttl_seconds = ttl_seconds
        self.write_api = client.write_api(write_options=SYNCHRONOUS)
        self.query_api = client.query_api()

    def save_share(self, share_id: str, payload: SharePayload) -> None:
        """Write a share payload as a single point tagged with its id."""
        point = (
            Point(SHARE_MEASUREMENT)
            .tag("share_id", share_id)
            .field("payload", payload.model_dump_json())
            .field("readings", len(payload.readings))
            .time(datetime.now(pytz.utc))
        )
        try:
            self.write_api.write(bucket=self.bucket, record=[point])
        except Exception as e:
            logging.error(f"Error saving share {share_id} to InfluxDB: {e}")
            raise

    def get_share(self, share_id: str) -> Optional[SharePayload]:
        """Fetch a share written within the TTL window, None if unknown or expired."""
        if not SHARE_ID_PATTERN.match(share_id):
            return None
        query = f'''
            from(bucket: "{self.bucket}")
            |> range(start: -{self.ttl_seconds}s)
            |> filter(fn: (r) => r._measurement == "{SHARE_MEASUREMENT}")
            |> filter(fn: (r) => r["share_id"] == "{share_id}" and r._field == "payload")
            |> last()
        '''
        try:
            tables = self.query_api.query(query)
        except Exception as e:
            logging.error(f"Error fetching share {share_id} from InfluxDB: {e}")
            raise
        values = [record.get_value() for table in tables for record in table.records]
        if not values:
            return None
        return SharePayload.model_validate_json(values[-1])


@lru_cache(maxsize=1)
def get_share_store() -> ShareStore:
    """Build the InfluxDB share store from environment settings."""
    if not all([INFLUXDB_URL, INFLUXDB_TOKEN, INFLUXDB_ORG, INFLUXDB_BUCKET]):
        raise ValueError("Missing required InfluxDB environment variables")
    client = InfluxDBClient(url=INFLUXDB_URL, token=INFLUXDB_TOKEN, org=INFLUXDB_ORG)
    logging.info(f"Share store using InfluxDB bucket {INFLUXDB_BUCKET} at {INFLUXDB_URL}")
    return InfluxShareStore(client, INFLUXDB_BUCKET)
