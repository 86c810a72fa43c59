import io

import pandas as pd
import pytest

from subscriber_dashboard.store import prepare

HEADER = "User ID,Subscription Type,Monthly Revenue,Join Date,Last Payment Date,Country,Age,Gender,Device,Plan Duration\n"


def csv_buffer(rows):
    return io.StringIO(HEADER + "".join(r + "\n" for r in rows))


def _row(uid, sub, rev, country, age=30, gender="Female", device="Smartphone",
         join="15-01-22", last="10-06-23"):
    return {
        "User ID": uid, "Subscription Type": sub, "Monthly Revenue": rev,
        "Join Date": join, "Last Payment Date": last, "Country": country,
        "Age": age, "Gender": gender, "Device": device, "Plan Duration": "1 Month",
    }


@pytest.fixture
def row():
    return _row


@pytest.fixture
def sample_table():
    raw = pd.DataFrame([
        _row(1, "Basic", 10, "United States", age=28, gender="Female", device="Smartphone"),
        _row(2, "Premium", 20, "United States", age=40, gender="Male", device="Tablet"),
        _row(3, "Basic", 5, "Spain", age=50, gender="Female", device="Smart TV"),
        _row(4, "Standard", 12, "Germany", age=33, gender="Female", device="Smartphone"),
        _row(5, "Premium", 15, "Australia", age=70, gender="Male", device="Laptop"),
        _row(6, "Standard", 11, "Brazil", age=36, gender="Male", device="Tablet"),
        _row(7, "Basic", 13, "Germany", age=29, gender="Female", device="Laptop"),
    ])
    return prepare(raw).table


@pytest.fixture
def csv_rows():
    return csv_buffer
