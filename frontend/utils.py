#file: frontend/utils.py

import pandas as pd

from backend.classifier import parse_number
from backend.thresholds import LABELS, MANUAL_FIELDS, UNITS

CHART_METRICS = {"pm25": "PM2.5 (µg/m³)", "pm10": "PM10 (µg/m³)", "co2": "CO₂ (ppm)", "voc": "VOC index",
    "humidity": "Humidity (%)", "temperature": "Temperature (°C)"}


def history_to_frame(readings) :
    """Flatten readings into a DataFrame with one numeric column per metric."""
    if not readings :
        return pd.DataFrame()

    rows = []
    for reading in readings :
        row = {"id" : reading["id"], "room" : reading.get("room") or "", "timestamp" : reading["timestamp"]}
        row.update(reading.get("data", {}))
        rows.append(row)

    df = pd.DataFrame(rows)
    df["timestamp"] = pd.to_datetime(df["timestamp"], unit = "ms", utc = True)
    for column in CHART_METRICS :
        if column in df.columns :
            df[column] = pd.to_numeric(df[column], errors = "coerce")
    return df.sort_values(by = "timestamp")


def reading_options(readings) :
    """Labels for picking a reading, newest first, mapped to reading ids."""
    options = {}
    for reading in reversed(readings) :
        room = reading.get("room") or "—"
        label = f"{reading.get('date') or ''} {reading.get('time') or ''} · {room} · {reading['id']}".strip()
        options[label] = reading["id"]
    return options


def format_value(value, digits = 1) :
    """Display a raw value, or a dash when it was not observed."""
    if value is None or value == "" :
        return "—"
    try :
        return f"{float(value):.{digits}f}"
    except ValueError :
        return str(value)


def manual_fields() :
    """(key, label) pairs for the manual entry form, in display order."""
    fields = []
    for metric in MANUAL_FIELDS :
        unit = UNITS.get(metric, "")
        label = LABELS[metric]
        fields.append((metric.value, f"{label} ({unit})" if unit and unit != "index" else label))
    return fields


def manual_reading_data(values) :
    """Keep the numeric entries of a manual form, keyed by metric."""
    data = {}
    for key, _ in manual_fields() :
        value = str(values.get(key) or "").strip()
        if value and parse_number(value) is not None :
            data[key] = value
    return data
