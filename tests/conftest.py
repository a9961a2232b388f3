import shutil
import tempfile
import uuid
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

ORDER_COLUMNS = [
    'ORDERNUMBER', 'QUANTITYORDERED', 'PRICEEACH', 'ORDERDATE',
    'STATUS', 'PRODUCTLINE', 'PRODUCTCODE'
]


def format_order_date(date) -> str:
    """Render a date the way the sales export does, e.g. '1/6/2003 0:00'"""
    return f"{date.month}/{date.day}/{date.year} 0:00"


def make_orders(rows) -> pd.DataFrame:
    """Build order records from (date, product_code, quantity) tuples"""
    records = []
    for i, (date, product_code, quantity) in enumerate(rows):
        date = pd.Timestamp(date)
        records.append({
            'ORDERNUMBER': 10100 + i,
            'QUANTITYORDERED': quantity,
            'PRICEEACH': 95.7,
            'ORDERDATE': format_order_date(date),
            'STATUS': 'Shipped',
            'PRODUCTLINE': 'Classic Cars',
            'PRODUCTCODE': product_code
        })
    return pd.DataFrame(records, columns=ORDER_COLUMNS)


@pytest.fixture(scope="function")
def test_dir():
    """Create a temporary directory for test data that will be cleaned up after the test."""
    test_dir = Path(tempfile.gettempdir()) / f"order_forecast_test_{uuid.uuid4().hex}"
    test_dir.mkdir(exist_ok=True, parents=True)
    yield test_dir
    if test_dir.exists():
        shutil.rmtree(test_dir)


@pytest.fixture(scope="function")
def sample_orders():
    """Two products ordered on every day from November 2004 to February 2005."""
    rng = np.random.RandomState(42)
    dates = pd.date_range(start='2004-11-01', end='2005-02-28')

    rows = []
    for date in dates:
        for product_code in ['S10_1678', 'S18_2248']:
            rows.append((date, product_code, int(rng.randint(20, 50))))

    return make_orders(rows)


@pytest.fixture(scope="function")
def sample_csv(test_dir, sample_orders):
    """The sample orders written to CSV."""
    csv_path = test_dir / "sales_data_sample.csv"
    sample_orders.to_csv(csv_path, index=False)
    return csv_path


@pytest.fixture(scope="function")
def daily_series():
    """A ready-made daily series covering the first 60 days of 2003."""
    dates = pd.date_range(start='2003-01-01', periods=60)
    quantities = (np.arange(60) % 7) * 10 + 5
    return pd.DataFrame({'date': dates, 'total_quantity': quantities.astype('int64')})
