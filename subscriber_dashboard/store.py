"""Record store: reads the subscriber CSV and builds the canonical table.

The table is the raw CSV with snake_case column names, parsed dates, the
country coordinates joined in (inner join, unknown countries are dropped) and
two derived columns, ``age_group`` and ``subscription_duration_days``.
"""
import logging
import re
from typing import NamedTuple

import numpy as np
import pandas as pd

from .config import normalize_url

logger = logging.getLogger(__name__)

DATE_FORMAT = "%d-%m-%y"

REQUIRED_COLS = {
    "user_id", "subscription_type", "monthly_revenue", "join_date",
    "last_payment_date", "country", "age", "gender", "device",
}

COUNTRY_COORDS = {
    "United States": (37.0902, -95.7129),
    "Spain": (40.4637, -3.7492),
    "Canada": (56.1304, -106.3468),
    "United Kingdom": (55.3781, -3.4360),
    "Australia": (-25.2744, 133.7751),
    "Germany": (51.1657, 10.4515),
    "France": (46.6034, 2.2137),
    "Brazil": (-14.2350, -51.9253),
    "Mexico": (23.6345, -102.5528),
    "Italy": (41.8719, 12.5674),
}

AGE_BUCKETS = [((25, 35), "25-35"), ((36, 45), "36-45"), ((46, 60), "46-60")]
OTHER_AGE_GROUP = "Other"


class LoadError(Exception):
    """The source could not be read or a row could not be parsed."""


class LoadedTable(NamedTuple):
    table: pd.DataFrame
    dropped: pd.Series  # records removed by the coordinate join, per country

    @property
    def dropped_count(self) -> int:
        return int(self.dropped.sum())


def canonical_name(col: str) -> str:
    # "Subscription Type", "Subscription.Type" and "subscription_type" are the same column
    return re.sub(r"[\s._]+", "_", str(col).strip()).strip("_").lower()


def age_group(age) -> str:
    for (lo, hi), label in AGE_BUCKETS:
        if lo <= age <= hi:
            return label
    return OTHER_AGE_GROUP


def age_groups(ages: pd.Series) -> pd.Series:
    conds = [(ages >= lo) & (ages <= hi) for (lo, hi), _ in AGE_BUCKETS]
    labels = [label for _, label in AGE_BUCKETS]
    return pd.Series(np.select(conds, labels, default=OTHER_AGE_GROUP), index=ages.index, dtype=object)


def _parse_dates(s: pd.Series, col: str) -> pd.Series:
    text = s.astype(str).str.strip()
    out = pd.to_datetime(text, format=DATE_FORMAT, errors="coerce")
    bad = out.isna()
    if bad.any():
        first = s[bad].iloc[0]
        raise LoadError(f"{bad.sum()} unparsable value(s) in {col!r}, e.g. {first!r} (expected DD-MM-YY)")
    return out


def _parse_numeric(s: pd.Series, col: str) -> pd.Series:
    out = pd.to_numeric(s, errors="coerce")
    bad = out.isna()
    if bad.any():
        first = s[bad].iloc[0]
        raise LoadError(f"{bad.sum()} unparsable value(s) in {col!r}, e.g. {first!r}")
    if (out == np.floor(out)).all():
        out = out.astype("int64")
    return out


def prepare(raw: pd.DataFrame) -> LoadedTable:
    """Turn raw CSV rows into the canonical table. Raises LoadError on bad input."""
    d = raw.copy()
    d.columns = [canonical_name(c) for c in d.columns]
    missing = REQUIRED_COLS - set(d.columns)
    if missing:
        raise LoadError(f"CSV missing columns: {', '.join(sorted(missing))}")

    d["join_date"] = _parse_dates(d["join_date"], "join_date")
    d["last_payment_date"] = _parse_dates(d["last_payment_date"], "last_payment_date")
    d["age"] = _parse_numeric(d["age"], "age")
    d["monthly_revenue"] = _parse_numeric(d["monthly_revenue"], "monthly_revenue")

    d["country"] = d["country"].astype(object)
    known = d["country"].isin(list(COUNTRY_COORDS))
    dropped = d.loc[~known, "country"].value_counts(dropna=False)
    if len(dropped):
        logger.warning("Dropped %d record(s) with no coordinates: %s",
                       int(dropped.sum()), ", ".join(map(str, dropped.index)))

    # coordinates are attached row by row so the table stays in load order
    t = d[known].reset_index(drop=True)
    t["lat"] = t["country"].map(lambda c: COUNTRY_COORDS[c][0]).astype(float)
    t["lon"] = t["country"].map(lambda c: COUNTRY_COORDS[c][1]).astype(float)
    t["age_group"] = age_groups(t["age"])
    t["subscription_duration_days"] = (t["last_payment_date"] - t["join_date"]).dt.days.astype("int64")

    negative = int((t["subscription_duration_days"] < 0).sum())
    if negative:
        logger.warning("%d record(s) have a last payment before their join date", negative)
    return LoadedTable(t, dropped)


def _read_csv(src):
    if hasattr(src, "read"):  # uploaded file-like
        return pd.read_csv(src)
    return pd.read_csv(normalize_url(src))


def load_table(src) -> LoadedTable:
    try:
        raw = _read_csv(src)
    except (OSError, ValueError) as e:
        raise LoadError(f"Could not read {src!r}: {e}") from e
    loaded = prepare(raw)
    logger.info("Loaded %d of %d subscriber records from %s",
                len(loaded.table), len(raw), src if isinstance(src, str) else "upload")
    return loaded


def gender_choices(table: pd.DataFrame) -> list:
    return table["gender"].dropna().unique().tolist()
