# file : backend/main.py

import json
import logging
import os
import secrets
from contextlib import asynccontextmanager
from typing import List, Optional

import uvicorn
from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import RedirectResponse, Response
from pydantic import ValidationError

from backend.analysis import analyze_reading
from backend.database import ShareStore, get_share_store
from backend.history import (
    HistoryImportError,
    HistoryRepository,
    append_reading,
    clear_history,
    export_json,
    find_reading,
    merge_readings,
    parse_import,
    previous_reading,
    remove_reading,
    to_base36,
)
from backend.models import (
    MAX_HISTORY,
    MAX_LABEL_LENGTH,
    NewReading,
    ParsedReport,
    Reading,
    ReadingAnalysis,
    SaveResult,
    ShareCreated,
    SharePayload,
    ReportText,
    utf16_length,
)
from backend.parser import parse_report
from backend.share_codec import encode_share_payload
from backend.storage import JsonFileStore
from backend.utils import export_filename

load_dotenv()

HISTORY_FILE = os.getenv("HISTORY_FILE", "air_quality_history.json")
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:8501")

# Configure logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log where history is kept on startup."""
    logging.info(f"Reading history stored in {HISTORY_FILE}")
    yield


app = FastAPI(
    title="Air Quality Snapshots",
    description="Parses sensor console dumps, keeps a bounded reading history and shares it.",
    version="0.2",
    lifespan=lifespan
)


def get_history_repository() -> HistoryRepository:
    return HistoryRepository(JsonFileStore(HISTORY_FILE))


def require_share_store() -> ShareStore:
    """The configured share store; an unconfigured store is reported as a bad gateway."""
    try:
        return get_share_store()
    except ValueError as e:
        logging.error(f"Share store unavailable: {e}")
        raise HTTPException(status_code=502, detail="Share store unavailable")


def load_share(store: ShareStore, share_id: str) -> SharePayload:
    try:
        payload = store.get_share(share_id)
    except Exception:
        raise HTTPException(status_code=502, detail="Failed to load share")
    if payload is None:
        raise HTTPException(status_code=404, detail="Share not found or expired")
    return payload


def new_share_id() -> str:
    """8 characters from 5 random bytes, each rendered as two base36 digits."""
    return "".join(to_base36(b).rjust(2, "0") for b in secrets.token_bytes(5))[:8]


@app.post("/parse", response_model=ParsedReport)
async def parse(report: ReportText):
    """Extract metric values from a pasted sensor console dump."""
    data = parse_report(report.text)
    if data is None:
        raise HTTPException(status_code=422, detail="Could not parse sensor data. Copy the full sensor page and paste again.")
    logging.info(f"Parsed {len(data)} metrics from report")
    return ParsedReport(data=data)


@app.get("/readings", response_model=List[Reading])
async def list_readings(repo: HistoryRepository = Depends(get_history_repository)):
    """Fetch the stored history, newest last."""
    return repo.load()


@app.post("/readings", response_model=SaveResult)
async def add_reading(new: NewReading, repo: HistoryRepository = Depends(get_history_repository)):
    """Store a reading; a failed write is reported but the reading is still returned."""
    collection, reading = append_reading(repo.load(), new.data, new.room)
    result = repo.persist(collection)
    logging.info(f"Added reading {reading.id} ({len(new.data)} metrics, room {new.room!r})")
    return SaveResult(reading=reading, history_size=len(collection), saved=result.ok, message=result.message)


@app.delete("/readings/{reading_id}", response_model=List[Reading])
async def delete_reading(reading_id: str, repo: HistoryRepository = Depends(get_history_repository)):
    collection = remove_reading(repo.load(), reading_id)
    result = repo.persist(collection)
    if not result.ok:
        raise HTTPException(status_code=500, detail=result.message)
    return collection


@app.delete("/readings", response_model=List[Reading])
async def clear_readings(repo: HistoryRepository = Depends(get_history_repository)):
    result = repo.clear()
    if not result.ok:
        raise HTTPException(status_code=500, detail=result.message)
    return clear_history()


@app.post("/readings/import", response_model=List[Reading])
async def import_readings(request: Request, repo: HistoryRepository = Depends(get_history_repository)):
    """Merge a JSON array of readings into the history, keeping existing ids."""
    try:
        incoming = parse_import(await request.body())
    except HistoryImportError as e:
        raise HTTPException(status_code=400, detail=str(e))
    existing = repo.load()
    merged = merge_readings(existing, incoming)
    result = repo.persist(merged)
    if not result.ok:
        raise HTTPException(status_code=500, detail=result.message)
    logging.info(f"Imported {len(incoming)} readings, history now {len(merged)}")
    return merged


@app.get("/readings/export")
async def export_readings(repo: HistoryRepository = Depends(get_history_repository)):
    """Download the full history as pretty-printed JSON."""
    return Response(
        content=export_json(repo.load()),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{export_filename()}"'},
    )


@app.get("/readings/{reading_id}/analysis", response_model=ReadingAnalysis)
async def reading_analysis(
    reading_id: str,
    baseline: Optional[str] = Query(None, description="Reading id to compare against (defaults to the previous one)"),
    repo: HistoryRepository = Depends(get_history_repository)
):
    collection = repo.load()
    reading = find_reading(collection, reading_id)
    if reading is None:
        raise HTTPException(status_code=404, detail="Reading not found")
    if baseline:
        baseline_reading = find_reading(collection, baseline)
        if baseline_reading is None:
            raise HTTPException(status_code=404, detail="Baseline reading not found")
    else:
        baseline_reading = previous_reading(collection, reading_id)
    return analyze_reading(reading, baseline_reading)


@app.post("/api/share", response_model=ShareCreated)
async def create_share(request: Request, store: ShareStore = Depends(require_share_store)):
    """Store a share payload for 30 days and return a short link to it."""
    try:
        body = json.loads(await request.body())
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid JSON")
    if not isinstance(body, dict):
        raise HTTPException(status_code=400, detail="Invalid JSON")

    label = body.get("label")
    if not label or not isinstance(label, str) or utf16_length(label) > MAX_LABEL_LENGTH:
        raise HTTPException(status_code=400, detail=f"Label required (max {MAX_LABEL_LENGTH} chars)")
    readings = body.get("readings")
    if not isinstance(readings, list) or not 1 <= len(readings) <= MAX_HISTORY:
        raise HTTPException(status_code=400, detail=f"Readings must be an array of 1-{MAX_HISTORY} items")
    try:
        payload = SharePayload(label=label.strip() or label, readings=readings)
    except ValidationError as e:
        logging.warning(f"Rejected share payload: {e.error_count()} validation errors")
        raise HTTPException(status_code=400, detail="Readings must be valid reading objects")

    share_id = new_share_id()
    try:
        store.save_share(share_id, payload)
    except Exception:
        raise HTTPException(status_code=502, detail="Failed to store share")
    url = f"{str(request.base_url).rstrip('/')}/s/{share_id}"
    logging.info(f"Created share {share_id} with {len(payload.readings)} readings")
    return ShareCreated(id=share_id, url=url)


@app.get("/api/share/{share_id}", response_model=SharePayload)
async def get_share(share_id: str, store: ShareStore = Depends(require_share_store)):
    return load_share(store, share_id)


@app.get("/s/{share_id}")
async def open_share(share_id: str, store: ShareStore = Depends(require_share_store)):
    """Redirect a short link to the dashboard with the payload as a share token."""
    payload = load_share(store, share_id)
    return RedirectResponse(f"{FRONTEND_URL}/?share={encode_share_payload(payload)}")


if __name__ == "__main__" :
    uvicorn.run(app, host = "0.0.0.0", port = 8000, log_level="info")
