from .store import COUNTRY_COORDS, LoadError, LoadedTable, load_table, prepare
from .filters import (
    Bounds,
    filter_by_subscription,
    filter_by_bounds_and_subscription,
    filter_by_age_group_and_gender,
    filter_by_all_criteria,
)
from .aggregate import (
    revenue_by_country,
    revenue_by_type,
    device_counts,
    country_revenue,
    resolve_click,
    table_projection,
    paginate,
)

__version__ = "0.1.0"
