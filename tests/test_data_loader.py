from datetime import datetime

import pandas as pd
import pytest

from order_forecast.data_loader import (
    DataLoader, load_orders, parse_date, parse_order_dates, aggregate_daily
)
from order_forecast.exceptions import FileError, ParseError, EmptySeriesError

from tests.conftest import make_orders, ORDER_COLUMNS


def test_load_orders_reads_all_rows(sample_csv, sample_orders):
    """Test that the loader returns one row per order line."""
    df = load_orders(sample_csv)

    assert len(df) == len(sample_orders), f"Expected {len(sample_orders)} rows, got {len(df)}"
    for col in ORDER_COLUMNS:
        assert col in df.columns, f"Missing column {col}"


def test_load_orders_missing_file(test_dir):
    """Test that a missing file raises FileError naming the path."""
    missing = test_dir / "does_not_exist.csv"

    with pytest.raises(FileError) as excinfo:
        load_orders(missing)

    assert excinfo.value.stage == 'load'
    assert excinfo.value.source == str(missing)
    assert isinstance(excinfo.value, OSError), "FileError should be an OSError"


def test_load_orders_empty_file(test_dir):
    """Test that an empty file raises FileError."""
    empty = test_dir / "empty.csv"
    empty.write_text("")

    with pytest.raises(FileError):
        load_orders(empty)


def test_load_orders_malformed_file(test_dir):
    """Test that inconsistent delimiters raise FileError."""
    malformed = test_dir / "malformed.csv"
    header = ",".join(ORDER_COLUMNS)
    malformed.write_text(
        header + "\n"
        "10100,30,95.7,1/6/2003 0:00,Shipped,Classic Cars,S10_1678\n"
        "10101,30,95.7,1/7/2003 0:00,Shipped,Classic Cars,S10_1678,extra,fields,here\n"
    )

    with pytest.raises(FileError, match="malformed"):
        load_orders(malformed)


def test_load_orders_missing_columns(test_dir):
    """Test that a file without the required columns raises FileError."""
    partial = test_dir / "partial.csv"
    partial.write_text("ORDERDATE,QUANTITYORDERED\n1/6/2003 0:00,30\n")

    with pytest.raises(FileError, match="PRODUCTCODE"):
        load_orders(partial)


@pytest.mark.parametrize("raw, expected", [
    ("1/6/2003 0:00", datetime(2003, 1, 6)),
    ("12/25/2004 13:45", datetime(2004, 12, 25, 13, 45)),
    ("02/24/2003 0:00", datetime(2003, 2, 24)),
])
def test_parse_date(raw, expected):
    """Test parsing of the export's order date format."""
    assert parse_date(raw) == expected


@pytest.mark.parametrize("raw", [
    "2003-01-06",
    "13/01/2003 0:00",
    "1/6/2003",
    "not a date",
])
def test_parse_date_rejects_other_formats(raw):
    """Test that no fallback format is attempted."""
    with pytest.raises(ParseError):
        parse_date(raw)


def test_parse_order_dates_vectorised():
    """Test that the column parser agrees with parse_date."""
    raw = ["1/6/2003 0:00", "11/30/2004 0:00"]
    parsed = parse_order_dates(raw)

    assert list(parsed) == [pd.Timestamp(parse_date(value)) for value in raw]


def test_parse_order_dates_rejects_bad_value():
    """Test that one bad value fails the whole column."""
    with pytest.raises(ParseError) as excinfo:
        parse_order_dates(["1/6/2003 0:00", "2003-01-07", "2003-01-08"])

    assert "'2003-01-07'" in str(excinfo.value), "The first bad value should be named"
    assert excinfo.value.source is None, "The column parser does not know the input file"


def test_aggregate_daily_sums_products_per_day():
    """Test the worked example: two products on one day, one on the next."""
    records = make_orders([
        ('2003-01-06', 'A', 10),
        ('2003-01-06', 'B', 5),
        ('2003-01-07', 'A', 3),
    ])

    df_daily = aggregate_daily(records)

    assert list(df_daily['date']) == [pd.Timestamp('2003-01-06'), pd.Timestamp('2003-01-07')]
    assert list(df_daily['total_quantity']) == [15, 3]


def test_aggregate_daily_sums_duplicates():
    """Test that repeated (date, product) rows are summed, not averaged."""
    records = make_orders([
        ('2003-01-06', 'A', 10),
        ('2003-01-06', 'A', 20),
    ])

    df_daily = aggregate_daily(records)

    assert len(df_daily) == 1
    assert df_daily['total_quantity'].iloc[0] == 30


def test_aggregate_daily_dates_strictly_increasing(sample_orders):
    """Test that output dates are unique and ascending regardless of input order."""
    shuffled = sample_orders.sample(frac=1.0, random_state=0)

    df_daily = aggregate_daily(shuffled)

    assert df_daily['date'].is_unique, "Dates should be unique"
    assert df_daily['date'].is_monotonic_increasing, "Dates should be ascending"
    assert df_daily.equals(aggregate_daily(sample_orders)), "Input order should not matter"


def test_aggregate_daily_conserves_quantity(sample_orders):
    """Test that aggregation neither loses nor invents quantity."""
    df_daily = aggregate_daily(sample_orders)

    assert df_daily['total_quantity'].sum() == sample_orders['QUANTITYORDERED'].sum()
    assert (df_daily['total_quantity'] >= 0).all()
    assert df_daily['total_quantity'].dtype == 'int64'


def test_aggregate_daily_empty_records():
    """Test that no records raise EmptySeriesError."""
    with pytest.raises(EmptySeriesError):
        aggregate_daily(make_orders([]))


@pytest.mark.parametrize("quantity", ["lots", -5, 2.5, "inf", float("inf")])
def test_aggregate_daily_rejects_bad_quantity(quantity):
    """Test that quantities must be non-negative integers."""
    records = make_orders([('2003-01-06', 'A', 10), ('2003-01-07', 'A', 1)])
    records['QUANTITYORDERED'] = records['QUANTITYORDERED'].astype(object)
    records.loc[1, 'QUANTITYORDERED'] = quantity

    with pytest.raises(ParseError):
        aggregate_daily(records)


@pytest.mark.parametrize("column", ['ORDERDATE', 'QUANTITYORDERED', 'PRODUCTCODE'])
def test_aggregate_daily_missing_column(column):
    """Test that records without a needed column raise ParseError naming it."""
    records = make_orders([('2003-01-06', 'A', 10)]).drop(columns=[column])

    with pytest.raises(ParseError, match=column) as excinfo:
        aggregate_daily(records)

    assert excinfo.value.stage == 'aggregate'


def test_aggregate_daily_rejects_bad_date():
    """Test that an unparseable order date raises ParseError."""
    records = make_orders([('2003-01-06', 'A', 10)])
    records.loc[0, 'ORDERDATE'] = '2003-01-06 00:00:00'

    with pytest.raises(ParseError):
        aggregate_daily(records)


def test_data_loader_pipeline(sample_csv, sample_orders):
    """Test the DataLoader load-and-aggregate pipeline."""
    loader = DataLoader(sample_csv)
    df_daily = loader.load_and_prepare_data()

    assert len(df_daily) == sample_orders['ORDERDATE'].nunique()
    assert loader.df_orders is not None
    assert loader.df_daily is df_daily
