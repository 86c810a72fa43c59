import pandas as pd
import pydeck as pdk
import plotly.graph_objects as go

from .filters import Bounds

# ============ Constants / Theme ============
PLOTLY_CONFIG = {"displaylogo": False, "displayModeBar": False}
MAP_LAYER_ID = "countries"
MARKER_RADIUS_M = 100000

BAR_COLOR = "rgba(229, 9, 20, 0.7)"
PIE_COLORS = [
    "rgba(138, 17, 10, 0.7)",
    "rgba(236, 6, 10, 0.7)",
    "rgba(229, 9, 20, 1)",
    "rgba(128, 128, 128, 1)",
    "rgba(200, 0, 0, 0.7)",
]
DARK_LAYOUT = dict(
    paper_bgcolor="rgba(0, 0, 0, 1)",
    plot_bgcolor="rgba(0, 0, 0, 1)",
    font=dict(color="#FFFFFF"),
)


def _view_zoom(bounds: Bounds) -> float:
    lon_lo, lon_hi = bounds.lon_range
    span = max(lon_hi - lon_lo, 1e-6)
    # each zoom step halves the visible longitude span
    zoom = 1.0
    while span < 360 / 2 ** zoom and zoom < 12:
        zoom += 1
    return zoom


def country_map(country_data: pd.DataFrame, bounds: Bounds) -> pdk.Deck:
    """Red circle per country; click selection reports the picked row."""
    layer = pdk.Layer(
        "ScatterplotLayer",
        id=MAP_LAYER_ID,
        data=country_data,
        get_position=["lon", "lat"],
        get_radius=MARKER_RADIUS_M,
        get_fill_color=[255, 0, 0, 204],
        get_line_color=[255, 0, 0],
        line_width_min_pixels=1,
        stroked=True,
        pickable=True,
    )
    lat, lon = bounds.center()
    view = pdk.ViewState(latitude=lat, longitude=lon, zoom=_view_zoom(bounds))
    return pdk.Deck(
        map_style="dark",
        initial_view_state=view,
        layers=[layer],
        tooltip={"text": "{country}\nRevenue: ${total_revenue}"},
    )


def _money(x):
    x = float(x)
    return f"{x:,.0f}" if x.is_integer() else f"{x:,.2f}"


def popup_text(country: str, revenue) -> str:
    return f"**Country:** {country}  \n**Revenue :** ${_money(revenue)}"


def revenue_bar_chart(type_data: pd.DataFrame, country: str) -> go.Figure:
    fig = go.Figure(go.Bar(
        x=type_data["subscription_type"],
        y=type_data["total_revenue"],
        marker=dict(color=BAR_COLOR),
    ))
    fig.update_layout(
        title=f"<span style='color:red;'>{country}</span> Revenue Breakdown",
        xaxis=dict(title="Subscription Type"),
        yaxis=dict(title="Total Revenue"),
        margin=dict(l=40, r=40, t=50, b=40),
        **DARK_LAYOUT,
    )
    return fig


def device_pie_chart(device_data: pd.DataFrame) -> go.Figure:
    fig = go.Figure(go.Pie(
        labels=device_data["device"],
        values=device_data["count"],
        marker=dict(colors=PIE_COLORS),
        textinfo="label+percent",
        insidetextfont=dict(color="#FFFFFF"),
        hoverinfo="none",
    ))
    fig.update_layout(
        title=dict(text="Device Preference by Age and Gender", y=0.98),
        showlegend=True,
        **DARK_LAYOUT,
    )
    return fig
