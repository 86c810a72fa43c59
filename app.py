import logging

import streamlit as st

from subscriber_dashboard import config
from subscriber_dashboard.aggregate import (
    country_revenue, device_counts, paginate, resolve_click,
    revenue_by_country, revenue_by_type, table_projection,
)
from subscriber_dashboard.charts import (
    MAP_LAYER_ID, PLOTLY_CONFIG, country_map, device_pie_chart,
    popup_text, revenue_bar_chart,
)
from subscriber_dashboard.filters import (
    AGE_GROUP_CHOICES, SUBSCRIPTION_TYPES, Bounds,
    filter_by_age_group_and_gender, filter_by_all_criteria,
    filter_by_bounds_and_subscription,
)
from subscriber_dashboard.store import LoadError, gender_choices, load_table

logging.basicConfig(
    level=config.log_level(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# ============ App config ============
st.set_page_config(
    page_title="Netflix User Analysis App",
    layout="wide",
)


@st.cache_data(show_spinner=True)
def load_data(src):
    return load_table(src)


def _source():
    return config.resolve_source(query_params=st.query_params, secrets=st.secrets)


# ============ Data ============
try:
    loaded = load_data(_source())
except LoadError as e:
    logger.exception("Dataset load failed")
    st.error(f"Could not load the subscriber dataset.\n{e}")
    st.link_button("Open dataset repo", config.DATA_REPO_URL)
    st.stop()

table = loaded.table
if "clicked_country" not in st.session_state:
    st.session_state["clicked_country"] = None

# ============ Header ============
st.title("Netflix User Analysis App")
st.write(
    "This app provides insights into Netflix user data, such as revenue by country, device preferences, "
    "and subscription durations. Use the filters to explore the data and understand different aspects of user behavior."
)
if loaded.dropped_count:
    st.caption(f"{loaded.dropped_count:,} record(s) from countries without map coordinates are excluded from every view.")


# ============ Sections ============
def section_map(sub_type, bounds):
    filtered = filter_by_bounds_and_subscription(table, sub_type, bounds)
    country_data = revenue_by_country(table, sub_type)

    c1, c2 = st.columns(2)
    with c1:
        event = st.pydeck_chart(
            country_map(country_data, bounds),
            on_select="rerun",
            selection_mode="single-object",
            key="mapOutput",
        )
        picked = event.selection.get("objects", {}).get(MAP_LAYER_ID, []) if event else []
        if picked:
            country = resolve_click(filtered, picked[0])
            if country is None:
                logger.debug("Map click %s matched no country in view", picked[0])
            else:
                st.session_state["clicked_country"] = country
                st.markdown(popup_text(country, country_revenue(filtered, country)))
    with c2:
        country = st.session_state["clicked_country"]
        if country is None:
            st.info("Click a country on the map to see its revenue breakdown.")
        else:
            st.plotly_chart(revenue_bar_chart(revenue_by_type(table, country), country),
                            width="stretch", config=PLOTLY_CONFIG)


def section_devices(age_group, gender):
    d = device_counts(filter_by_age_group_and_gender(table, age_group, gender))
    if d.empty:
        st.info("No data in view.")
        return
    st.plotly_chart(device_pie_chart(d), width="stretch", config=PLOTLY_CONFIG)


def section_table(sub_type, age_group, gender):
    rows = table_projection(filter_by_all_criteria(table, sub_type, age_group, gender))
    size = config.page_size()
    pages = paginate(rows, 1, size)[1]
    # a narrower filter can leave the stored page past the end
    st.session_state["table_page"] = min(max(1, int(st.session_state.get("table_page", 1))), pages)
    page = st.number_input("Page", min_value=1, max_value=pages, step=1, key="table_page")
    shown, pages = paginate(rows, page, size)
    st.dataframe(shown, width="stretch", hide_index=True)
    st.caption(f"{len(rows):,} rows • page {int(page)} of {pages}")


# ============ Visualization 1: map and bar chart ============
sub_type = st.selectbox("Subscription Type", SUBSCRIPTION_TYPES, index=0, key="subscription_type")
st.write(
    "Use the above dropdown to filter the data by subscription type and the countries. "
    "Click on a country to see its revenue breakdown in the bar graph on the right"
)
with st.expander("Map viewport"):
    lat_rng = st.slider("Latitude", -90.0, 90.0, (-90.0, 90.0))
    lon_rng = st.slider("Longitude", -180.0, 180.0, (-180.0, 180.0))
bounds = Bounds(north=lat_rng[1], south=lat_rng[0], east=lon_rng[1], west=lon_rng[0])
section_map(sub_type, bounds)

st.divider()

# ============ Visualization 2: device preference ============
c1, c2 = st.columns(2)
with c1:
    age_group = st.selectbox("Select Age Group", AGE_GROUP_CHOICES, index=0, key="age_group")
    st.write("Select an age group to see device usage preferences.")
with c2:
    genders = gender_choices(table)
    gender = st.selectbox("Select Gender", genders, index=genders.index("Female") if "Female" in genders else 0, key="gender")
    st.write("Select a gender to refine the device preference data.")
section_devices(age_group, gender)

st.divider()

# ============ Visualization 3: subscription durations ============
section_table(sub_type, age_group, gender)
st.write("The table above shows the filtered subscription duration based on subscription type, selected age and gender filters.")
