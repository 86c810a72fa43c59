"""Row filters over the subscriber table.

Every filter returns a new frame holding a subsequence of the input rows in
their original order; the input is never modified. An empty result is an
ordinary zero-row frame.
"""
from dataclasses import dataclass

import pandas as pd

ALL = "All"
SUBSCRIPTION_TYPES = [ALL, "Basic", "Standard", "Premium"]
AGE_GROUP_CHOICES = ["25-35", "36-45", "46-60"]


@dataclass(frozen=True)
class Bounds:
    """Map viewport in degrees. north/south and east/west may arrive in either order."""
    north: float
    south: float
    east: float
    west: float

    @classmethod
    def world(cls) -> "Bounds":
        return cls(north=90.0, south=-90.0, east=180.0, west=-180.0)

    @property
    def lat_range(self):
        return min(self.north, self.south), max(self.north, self.south)

    @property
    def lon_range(self):
        return min(self.east, self.west), max(self.east, self.west)

    def center(self):
        (s, n), (w, e) = self.lat_range, self.lon_range
        return (s + n) / 2, (w + e) / 2


def _subscription_mask(table: pd.DataFrame, subscription_type: str) -> pd.Series:
    if subscription_type == ALL:
        return pd.Series(True, index=table.index)
    return table["subscription_type"] == subscription_type


def _demographic_mask(table: pd.DataFrame, age_group: str, gender: str) -> pd.Series:
    return (table["age_group"] == age_group) & (table["gender"] == gender)


def filter_by_subscription(table: pd.DataFrame, subscription_type: str) -> pd.DataFrame:
    return table[_subscription_mask(table, subscription_type)].copy()


def filter_by_bounds_and_subscription(table: pd.DataFrame, subscription_type: str, bounds: Bounds) -> pd.DataFrame:
    lat_lo, lat_hi = bounds.lat_range
    lon_lo, lon_hi = bounds.lon_range
    inside = table["lat"].between(lat_lo, lat_hi, inclusive="both") & \
        table["lon"].between(lon_lo, lon_hi, inclusive="both")
    return table[inside & _subscription_mask(table, subscription_type)].copy()


def filter_by_age_group_and_gender(table: pd.DataFrame, age_group: str, gender: str) -> pd.DataFrame:
    # "All" is not a wildcard here, only the listed age groups and genders are offered
    return table[_demographic_mask(table, age_group, gender)].copy()


def filter_by_all_criteria(table: pd.DataFrame, subscription_type: str, age_group: str, gender: str) -> pd.DataFrame:
    mask = _subscription_mask(table, subscription_type) & _demographic_mask(table, age_group, gender)
    return table[mask].copy()
