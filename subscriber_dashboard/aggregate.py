import math

import numpy as np
import pandas as pd

from .filters import filter_by_subscription

TABLE_COLS = ["user_id", "subscription_type", "subscription_duration_days", "gender", "age_group"]
CLICK_TOLERANCE_DEG = 1e-4


# ============ Aggregates ============
def revenue_by_country(table: pd.DataFrame, subscription_type: str) -> pd.DataFrame:
    """Total monthly revenue per country (with its coordinates) for the map markers."""
    d = filter_by_subscription(table, subscription_type)
    return (d.groupby(["country", "lat", "lon"], as_index=False)
             .agg(total_revenue=("monthly_revenue", "sum")))


def revenue_by_type(table: pd.DataFrame, country: str) -> pd.DataFrame:
    # types with no rows for the country are left out, not zero-filled
    d = table[table["country"] == country]
    return (d.groupby("subscription_type", as_index=False)
             .agg(total_revenue=("monthly_revenue", "sum")))


def device_counts(table: pd.DataFrame) -> pd.DataFrame:
    return table.groupby("device").size().reset_index(name="count")


def country_revenue(table: pd.DataFrame, country: str):
    return table.loc[table["country"] == country, "monthly_revenue"].sum()


# ============ Map clicks ============
def resolve_click(table: pd.DataFrame, click, tolerance: float = CLICK_TOLERANCE_DEG):
    """Map a click payload back to a country present in ``table``.

    The payload is the picked map object. A ``country`` key is trusted when
    that country is in the table; otherwise the nearest country coordinate
    within ``tolerance`` degrees wins. Returns None when nothing matches.
    """
    if not click:
        return None
    country = click.get("country")
    if country is not None and (table["country"] == country).any():
        return country
    lat = click.get("lat")
    lon = click.get("lon", click.get("lng"))
    if lat is None or lon is None:
        return None
    pts = table[["country", "lat", "lon"]].drop_duplicates()
    if pts.empty:
        return None
    dist = np.hypot(pts["lat"] - float(lat), pts["lon"] - float(lon))
    i = dist.idxmin()
    if dist[i] > tolerance:
        return None
    return pts.at[i, "country"]


# ============ Table view ============
def table_projection(table: pd.DataFrame) -> pd.DataFrame:
    return table[TABLE_COLS].reset_index(drop=True)


def paginate(frame: pd.DataFrame, page: int, page_size: int):
    """Return (rows on page, page count). Pages are 1-based; out-of-range pages are clamped."""
    if page_size <= 0:
        raise ValueError("page_size must be positive")
    pages = max(1, math.ceil(len(frame) / page_size))
    page = min(max(1, int(page)), pages)
    start = (page - 1) * page_size
    return frame.iloc[start:start + page_size], pages
