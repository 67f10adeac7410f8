#file: frontend/ui_elements.py

import streamlit as st
import plotly.express as px

from frontend.utils import CHART_METRICS, format_value

TILE_METRICS = ["pm25", "pm10", "co2", "voc", "humidity", "temperature"]


def display_status(assessment) :
    """Display the overall verdict and the advisory tips."""
    verdict = assessment["verdict"]
    st.markdown(
        f"<div style='border-left: 4px solid {verdict['color']}; padding-left: 10px'>"
        f"<span style='color: {verdict['color']}; font-size: 20px; font-weight: 700'>{verdict['icon']} {verdict['label']}</span>"
        f"<br/><span style='color: #94a3b8'>{verdict['message']}</span></div>",
        unsafe_allow_html = True
    )
    for tip in assessment["tips"] :
        prefix = "&nbsp;&nbsp;&nbsp;&nbsp;" if tip.get("indent") else ""
        icon = f"{tip['icon']} " if tip.get("icon") else ""
        st.markdown(f"{prefix}{icon}{tip['text']}", unsafe_allow_html = True)


def display_metrics(analysis) :
    """Display one tile per classified metric with the change against the baseline."""
    data = analysis["reading"]["data"]
    classifications = analysis["classifications"]
    deltas = analysis["deltas"]

    columns = st.columns(3)
    for index, metric in enumerate(TILE_METRICS) :
        with columns[index % 3] :
            result = classifications.get(metric)
            delta = deltas.get(metric)
            delta_text = None
            if delta :
                delta_text = f"{delta['percent_change']:+.0f}%"
            st.metric(
                label = CHART_METRICS.get(metric, metric),
                value = format_value(data.get(metric)),
                delta = delta_text,
                delta_color = "off" if not delta else ("inverse" if delta["is_worse"] == delta["increased"] else "normal"),
                help = result["tier"].get("advice") if result else None
            )
            if result :
                st.markdown(f"<span style='color: {result['tier']['color']}'>{result['tier']['label']}</span>",
                            unsafe_allow_html = True)

    particles = analysis.get("particles")
    if particles :
        st.caption("Particle size profile: " + " · ".join(
            f"{segment['label']} {segment['percent']:.0f}%" for segment in particles["segments"]) + f" · {particles['signature']}")
    for guideline in analysis.get("guidelines", []) :
        st.caption(f"{guideline['label']} vs WHO 24-hr guideline: {guideline['ratio']:.1f}× "
                   f"(yours {guideline['value']:.1f}, limit {guideline['limit']:g} {guideline['unit']})")
    signal = analysis.get("signal")
    if signal :
        st.caption(f"Signal: {'▮' * signal['bars']} {signal['label']}")
    voc_quality = analysis.get("voc_quality")
    if voc_quality :
        hint = f" ({voc_quality['hint']})" if voc_quality["hint"] else ""
        st.markdown(f"<span style='color: {voc_quality['color']}'>● VOC sensor: {voc_quality['label']}</span>"
                    f"<span style='color: #64748b'>{hint}</span>", unsafe_allow_html = True)


def display_history_chart(data_frame) :
    """Display line charts for the stored readings."""

    for metric, title in CHART_METRICS.items() :
        if metric in data_frame.columns and data_frame[metric].notna().any() :
            fig = px.line(
                data_frame,
                x = "timestamp",
                y = metric,
                color = "room",
                markers = True,
                title = title,
                labels = {
                    "room" : "Room",
                    "timestamp" : "Time",
                    metric : title
                }
            )
            fig.update_layout(
                legend=dict(
                    orientation="h",
                    yanchor="top",
                    y=-0.2,
                    xanchor="center",
                    x=0.5
                )
            )
            st.plotly_chart(fig)
