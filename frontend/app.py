#file: frontend/app.py

import os
import sys

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import asyncio
import json
import pandas as pd
import streamlit as st
from pydantic import ValidationError

st.set_page_config(page_title="Air Quality Dashboard", page_icon="🌬️", layout="wide")
pd.options.display.float_format = "{:.2f}".format

from backend.models import SharePayload
from backend.share_codec import ShareDecodeError, decode_share_payload, encode_share_payload
from backend.utils import export_filename
from frontend.data_fetch import (create_short_link, delete_reading, fetch_analysis, fetch_readings, import_readings,
                                 parse_report, save_reading)
from frontend.ui_elements import display_history_chart, display_metrics, display_status
from frontend.utils import history_to_frame, manual_fields, manual_reading_data, reading_options

FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:8501")

st.title("Air Quality Dashboard")

# Shared readings arrive as ?share=<token>; preview them before importing
share_token = st.query_params.get("share")
if share_token :
    try :
        shared = decode_share_payload(share_token)
        st.info(f"Shared: **{shared.label}** · {len(shared.readings)} readings")
        if st.button("Import shared readings") :
            merged = asyncio.run(import_readings([r.model_dump(mode = "json") for r in shared.readings]))
            if merged is None :
                st.error("Import failed.")
            else :
                st.success(f"Imported. History now holds {len(merged)} readings.")
                st.query_params.clear()
    except ShareDecodeError :
        st.warning("This share link is invalid or corrupted.")

col1, col2 = st.columns([1, 2])
with col1 :
    room = st.text_input("Room label", placeholder = "Kitchen, Bedroom, etc.")
    text = st.text_area("Sensor page", height = 220, placeholder = "Select All → Copy from sensor web page, paste here.")
    if st.button("Parse & save", type = "primary") :
        data = asyncio.run(parse_report(text))
        if data is None :
            st.error("Could not parse sensor data. Copy the full sensor page and paste again.")
        else :
            result = asyncio.run(save_reading(data, room))
            if result is None :
                st.error("Service unavailable.")
            elif not result["saved"] :
                st.warning(result["message"])
            else :
                st.success(f"Saved {len(data)} metrics.")

    with st.expander("Manual entry") :
        with st.form("manual_entry") :
            form_columns = st.columns(2)
            values = {}
            for index, (key, field_label) in enumerate(manual_fields()) :
                values[key] = form_columns[index % 2].text_input(field_label, key = f"manual_{key}")
            submitted = st.form_submit_button("Save reading")
        if submitted :
            data = manual_reading_data(values)
            if not data :
                st.error("Enter at least one numeric value.")
            else :
                result = asyncio.run(save_reading(data, room))
                if result is None :
                    st.error("Service unavailable.")
                elif not result["saved"] :
                    st.warning(result["message"])
                else :
                    st.success(f"Saved {len(data)} metrics.")

readings = asyncio.run(fetch_readings())

with col2 :
    if not readings :
        st.warning("No readings yet.")
    else :
        options = reading_options(readings)
        selected = st.selectbox("Reading", list(options.keys()))
        compare_labels = ["Previous reading"] + [label for label in options if options[label] != options[selected]]
        compare = st.selectbox("Compare with", compare_labels)
        baseline = None if compare == "Previous reading" else options[compare]
        analysis = asyncio.run(fetch_analysis(options[selected], baseline))
        if analysis :
            display_status(analysis["assessment"])
            display_metrics(analysis)

if readings :
    st.subheader("History")
    df = history_to_frame(readings)
    display_history_chart(df)

    col1, col2, col3 = st.columns(3)
    with col1 :
        st.download_button("Export", json.dumps(readings, indent = 2), file_name = export_filename(),
                           mime = "application/json")
    with col2 :
        label = st.text_input("Share label", value = room or "Shared", max_chars = 100)
        if st.button("Create share link") :
            try :
                payload = SharePayload.model_validate({"label" : label or "Shared", "readings" : readings[-50:]})
            except ValidationError :
                st.error("Label too long (max 100 chars).")
            else :
                st.code(f"{FRONTEND_URL}/?share={encode_share_payload(payload)}")
                short_url = asyncio.run(create_short_link(payload.label, payload.model_dump(mode = "json")["readings"]))
                if short_url :
                    st.code(short_url)
    with col3 :
        to_delete = st.selectbox("Delete reading", [""] + list(reading_options(readings).keys()))
        if to_delete and st.button("Delete") :
            asyncio.run(delete_reading(reading_options(readings)[to_delete]))
            st.rerun()
        if st.button("Clear all") :
            asyncio.run(delete_reading())
            st.rerun()

uploaded = st.file_uploader("Import history", type = ["json"])
if uploaded is not None :
    try :
        incoming = json.loads(uploaded.getvalue())
    except ValueError :
        st.error("Could not parse JSON file")
    else :
        if not isinstance(incoming, list) :
            st.error("Invalid format: expected an array")
        else :
            merged = asyncio.run(import_readings(incoming))
            if merged is not None :
                st.success(f"History now holds {len(merged)} readings.")
