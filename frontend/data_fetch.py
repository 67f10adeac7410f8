#file: frontend/data_fetch.py

import json
import os
import aiohttp
import logging

FASTAPI_URL = os.getenv("FASTAPI_URL", "http://localhost:8000")


async def fetch_readings():
    """Fetch the stored reading history from FastAPI asynchronously."""
    url = f"{FASTAPI_URL}/readings"
    try:
        async with aiohttp.ClientSession() as session:
            async with session.get(url) as response:
                response.raise_for_status()
                return await response.json()
    except aiohttp.ClientError as e:
        logging.error(f"Error fetching readings: {e}")
        return []


async def parse_report(text):
    """Send a pasted console dump to the parser. Returns the data dict or None."""
    url = f"{FASTAPI_URL}/parse"
    try:
        async with aiohttp.ClientSession() as session:
            async with session.post(url, json={"text": text}) as response:
                if response.status == 422:
                    return None
                response.raise_for_status()
                return (await response.json())["data"]
    except aiohttp.ClientError as e:
        logging.error(f"Error parsing report: {e}")
        return None


async def save_reading(data, room=""):
    """Store a reading. Returns the save result dict or None on network failure."""
    url = f"{FASTAPI_URL}/readings"
    try:
        async with aiohttp.ClientSession() as session:
            async with session.post(url, json={"data": data, "room": room}) as response:
                response.raise_for_status()
                return await response.json()
    except aiohttp.ClientError as e:
        logging.error(f"Error saving reading: {e}")
        return None


async def delete_reading(reading_id=None):
    """Delete one reading, or the whole history when no id is given."""
    url = f"{FASTAPI_URL}/readings/{reading_id}" if reading_id else f"{FASTAPI_URL}/readings"
    try:
        async with aiohttp.ClientSession() as session:
            async with session.delete(url) as response:
                response.raise_for_status()
                return await response.json()
    except aiohttp.ClientError as e:
        logging.error(f"Error deleting readings: {e}")
        return None


async def import_readings(readings):
    """Merge readings (a list of dicts) into the stored history."""
    url = f"{FASTAPI_URL}/readings/import"
    async with aiohttp.ClientSession() as session:
        try:
            async with session.post(url, data=json.dumps(readings), headers={"Content-Type": "application/json"}) as response:
                response.raise_for_status()
                return await response.json()
        except aiohttp.ClientResponseError as e:
            logging.error(f"[ERROR] HTTP {e.status}: {e.message}")
        except aiohttp.ClientError as e:
            logging.error(f"[ERROR] Network request failed: {e}")

    return None


async def fetch_analysis(reading_id, baseline=None):
    """Fetch classifications, verdict and deltas for a reading."""
    url = f"{FASTAPI_URL}/readings/{reading_id}/analysis"
    params = {"baseline": baseline} if baseline else None
    try:
        async with aiohttp.ClientSession() as session:
            async with session.get(url, params=params) as response:
                response.raise_for_status()
                return await response.json()
    except aiohttp.ClientError as e:
        logging.error(f"Error fetching analysis for {reading_id}: {e}")
        return None


async def create_short_link(label, readings):
    """Store readings on the server and return the short share URL, or None."""
    url = f"{FASTAPI_URL}/api/share"
    try:
        async with aiohttp.ClientSession() as session:
            async with session.post(url, json={"label": label, "readings": readings}) as response:
                if response.status == 400:
                    logging.warning(f"Share rejected: {(await response.json()).get('detail')}")
                    return None
                response.raise_for_status()
                return (await response.json())["url"]
    except aiohttp.ClientError as e:
        logging.error(f"Error creating share link: {e}")
        return None
