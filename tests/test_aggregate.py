import pandas as pd
import pytest

from subscriber_dashboard.aggregate import (
    country_revenue, device_counts, paginate, resolve_click,
    revenue_by_country, revenue_by_type, table_projection,
)
from subscriber_dashboard.filters import filter_by_age_group_and_gender
from subscriber_dashboard.store import COUNTRY_COORDS, prepare


@pytest.fixture
def small_table(row):
    raw = pd.DataFrame([
        row(1, "Basic", 10, "United States"),
        row(2, "Premium", 20, "United States"),
        row(3, "Basic", 5, "Spain"),
    ])
    return prepare(raw).table


def _as_dict(frame, key, value):
    return dict(zip(frame[key], frame[value]))


def test_revenue_by_type_example(small_table):
    out = revenue_by_type(small_table, "United States")

    assert _as_dict(out, "subscription_type", "total_revenue") == {"Basic": 10, "Premium": 20}


def test_revenue_by_country_example(small_table):
    out = revenue_by_country(small_table, "All")

    assert _as_dict(out, "country", "total_revenue") == {"United States": 30, "Spain": 5}
    us = out[out["country"] == "United States"].iloc[0]
    assert (us["lat"], us["lon"]) == COUNTRY_COORDS["United States"]


def test_revenue_by_country_respects_subscription(small_table):
    out = revenue_by_country(small_table, "Premium")

    assert _as_dict(out, "country", "total_revenue") == {"United States": 20}


def test_revenue_by_type_partitions_country_total(sample_table):
    for country in sample_table["country"].unique():
        out = revenue_by_type(sample_table, country)
        rows = sample_table[sample_table["country"] == country]

        assert out["total_revenue"].sum() == rows["monthly_revenue"].sum()
        for _, r in out.iterrows():
            assert r["total_revenue"] == rows.loc[rows["subscription_type"] == r["subscription_type"], "monthly_revenue"].sum()


def test_revenue_by_type_unknown_country_is_empty(sample_table):
    assert revenue_by_type(sample_table, "Atlantis").empty


def test_device_counts_sum_to_rows(sample_table):
    out = device_counts(sample_table)

    assert out["count"].sum() == len(sample_table)
    assert _as_dict(out, "device", "count")["Smartphone"] == 2


def test_device_counts_on_empty_selection(sample_table):
    out = device_counts(filter_by_age_group_and_gender(sample_table, "46-60", "Male"))

    assert out.empty
    assert out["count"].sum() == 0


def test_country_revenue(small_table):
    assert country_revenue(small_table, "United States") == 30
    assert country_revenue(small_table, "Italy") == 0


def test_resolve_click_by_identifier(small_table):
    assert resolve_click(small_table, {"country": "Spain", "lat": 0.0, "lon": 0.0}) == "Spain"


def test_resolve_click_by_coordinates(small_table):
    lat, lon = COUNTRY_COORDS["Spain"]

    assert resolve_click(small_table, {"lat": lat, "lng": lon}) == "Spain"
    assert resolve_click(small_table, {"lat": lat + 1e-6, "lon": lon - 1e-6}) == "Spain"


def test_unmatched_click_is_none(small_table):
    lat, lon = COUNTRY_COORDS["Italy"]

    assert resolve_click(small_table, {"country": "Italy", "lat": lat, "lon": lon}) is None
    assert resolve_click(small_table, {"lat": 0.0, "lon": 0.0}) is None
    assert resolve_click(small_table, None) is None
    assert resolve_click(small_table.iloc[0:0], {"lat": lat, "lon": lon}) is None


def test_table_projection_columns(sample_table):
    out = table_projection(sample_table)

    assert list(out.columns) == ["user_id", "subscription_type", "subscription_duration_days", "gender", "age_group"]
    assert len(out) == len(sample_table)


def test_paginate(sample_table):
    rows = table_projection(sample_table)

    first, pages = paginate(rows, 1, 5)
    last, _ = paginate(rows, 2, 5)

    assert pages == 2
    assert list(first["user_id"]) == [1, 2, 3, 4, 5]
    assert list(last["user_id"]) == [6, 7]


def test_paginate_clamps_pages(sample_table):
    rows = table_projection(sample_table)

    assert list(paginate(rows, 99, 5)[0]["user_id"]) == [6, 7]
    assert list(paginate(rows, 0, 5)[0]["user_id"]) == [1, 2, 3, 4, 5]


def test_paginate_empty():
    shown, pages = paginate(pd.DataFrame({"user_id": []}), 3, 5)

    assert shown.empty
    assert pages == 1


def test_paginate_rejects_bad_size(sample_table):
    with pytest.raises(ValueError):
        paginate(sample_table, 1, 0)
