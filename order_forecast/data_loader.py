"""
Data loading and aggregation module
Handles loading raw sales orders, order date parsing, and daily aggregation
"""

from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional, Union

import numpy as np
import pandas as pd

from order_forecast.config import (
    RAW_DATA_FILE, CSV_ENCODING, RAW_DATA_COLUMNS, REQUIRED_COLUMNS,
    ORDER_DATE_FORMAT, DATE_COLUMN, QUANTITY_COLUMN
)
from order_forecast.exceptions import FileError, ParseError, EmptySeriesError


def load_orders(path: Optional[Union[str, Path]] = None) -> pd.DataFrame:
    """
    Read the raw order file into a DataFrame

    Args:
        path: CSV file to read (default: from config)

    Returns:
        pd.DataFrame: One row per order line, columns as in the file
    """
    path = Path(path or RAW_DATA_FILE)

    if not path.exists():
        raise FileError(f"Order file not found: {path}", stage='load', source=str(path))

    try:
        df = pd.read_csv(path, encoding=CSV_ENCODING)
    except pd.errors.EmptyDataError as e:
        raise FileError(f"Order file is empty: {path}", stage='load', source=str(path)) from e
    except pd.errors.ParserError as e:
        raise FileError(f"Order file is malformed: {e}", stage='load', source=str(path)) from e
    except (OSError, UnicodeDecodeError) as e:
        raise FileError(f"Order file could not be read: {e}", stage='load', source=str(path)) from e

    missing = [col for col in REQUIRED_COLUMNS if col not in df.columns]
    if missing:
        raise FileError(
            f"Order file is missing required columns: {', '.join(missing)}",
            stage='load', source=str(path)
        )

    return df


def parse_date(raw: str) -> datetime:
    """
    Parse a single ORDERDATE value such as '2/24/2003 0:00'

    Only the one export format is accepted.
    """
    try:
        return datetime.strptime(str(raw).strip(), ORDER_DATE_FORMAT)
    except ValueError as e:
        raise ParseError(
            f"Order date {raw!r} does not match format {ORDER_DATE_FORMAT!r}",
            stage='aggregate', source=str(raw)
        ) from e


def parse_order_dates(values: Iterable) -> pd.Series:
    """Vectorised parse_date for a whole column"""
    values = pd.Series(values).astype(str).str.strip()
    try:
        return pd.to_datetime(values, format=ORDER_DATE_FORMAT)
    except ValueError as e:
        # Name the first offending value
        parsed = pd.to_datetime(values, format=ORDER_DATE_FORMAT, errors='coerce')
        first_bad = values[parsed.isna()].iloc[0] if parsed.isna().any() else None
        raise ParseError(
            f"Order date {first_bad!r} does not match format {ORDER_DATE_FORMAT!r}",
            stage='aggregate'
        ) from e


def parse_quantities(values: Iterable) -> pd.Series:
    """
    Convert QUANTITYORDERED values to non-negative integers

    Args:
        values: Raw quantity column

    Returns:
        pd.Series: int64 quantities
    """
    column = RAW_DATA_COLUMNS['quantity']
    quantities = pd.to_numeric(pd.Series(values), errors='coerce')

    bad = (
        quantities.isna() | ~np.isfinite(quantities)
        | (quantities < 0) | (quantities != np.floor(quantities))
    )
    if bad.any():
        examples = pd.Series(values)[bad.values].astype(str).head(3).tolist()
        raise ParseError(
            f"{int(bad.sum())} {column} values are not non-negative integers, e.g. {examples}",
            stage='aggregate'
        )

    return quantities.astype('int64')


def aggregate_daily(records: pd.DataFrame) -> pd.DataFrame:
    """
    Sum ordered quantity per calendar day

    Quantities are summed per (date, product code) first and then per date,
    so repeated dates are added together, never averaged.

    Args:
        records: Raw order records

    Returns:
        pd.DataFrame: Columns date and total_quantity, ascending by date
    """
    if records is None or len(records) == 0:
        raise EmptySeriesError("No order records to aggregate", stage='aggregate')

    date_col = RAW_DATA_COLUMNS['date']
    quantity_col = RAW_DATA_COLUMNS['quantity']
    product_col = RAW_DATA_COLUMNS['product_code']

    missing = [col for col in (date_col, quantity_col, product_col) if col not in records.columns]
    if missing:
        raise ParseError(
            f"Order records are missing required columns: {', '.join(missing)}",
            stage='aggregate'
        )

    df = pd.DataFrame({
        DATE_COLUMN: parse_order_dates(records[date_col].values).dt.normalize(),
        product_col: records[product_col].values,
        QUANTITY_COLUMN: parse_quantities(records[quantity_col].values).values
    })

    # Aggregate by date and product code
    df_product = df.groupby([DATE_COLUMN, product_col], dropna=False)[QUANTITY_COLUMN].sum().reset_index()

    # Collapse product codes into one daily total
    df_daily = df_product.groupby(DATE_COLUMN)[QUANTITY_COLUMN].sum().reset_index()
    df_daily = df_daily.sort_values(DATE_COLUMN).reset_index(drop=True)
    df_daily[QUANTITY_COLUMN] = df_daily[QUANTITY_COLUMN].astype('int64')

    return df_daily


class DataLoader:
    """
    Handles loading the order file and turning it into a daily series
    """

    def __init__(self, data_file: Optional[Union[str, Path]] = None):
        """
        Initialize the DataLoader

        Args:
            data_file: Path to the order CSV (default: from config)
        """
        self.data_file = Path(data_file or RAW_DATA_FILE)
        self.df_orders = None
        self.df_daily = None

    def load_sales_data(self) -> pd.DataFrame:
        """
        Load raw sales order data from CSV

        Returns:
            pd.DataFrame: Raw order records
        """
        print(f"Loading raw sales data from {self.data_file}...")
        df = load_orders(self.data_file)

        print(f"Loaded {len(df):,} order lines")
        print(f"Unique orders: {df[RAW_DATA_COLUMNS['order_number']].nunique():,}")
        print(f"Unique products: {df[RAW_DATA_COLUMNS['product_code']].nunique()}")

        self.df_orders = df
        return df

    def aggregate_to_daily(self, df: Optional[pd.DataFrame] = None) -> pd.DataFrame:
        """
        Aggregate order lines to a single daily series

        Args:
            df: Raw order records (default: the last loaded file)

        Returns:
            pd.DataFrame: Daily aggregated data
        """
        if df is None:
            if self.df_orders is None:
                self.load_sales_data()
            df = self.df_orders

        print("\nAggregating to daily time series...")
        df_daily = aggregate_daily(df)

        print(f"Daily aggregated data: {len(df_daily):,} days")
        print(f"Date range: {df_daily[DATE_COLUMN].min().date()} to {df_daily[DATE_COLUMN].max().date()}")
        print(f"Total quantity ordered: {df_daily[QUANTITY_COLUMN].sum():,}")

        self.df_daily = df_daily
        return df_daily

    def load_and_prepare_data(self) -> pd.DataFrame:
        """
        Complete pipeline: load and aggregate

        Returns:
            pd.DataFrame: Daily series ready for feature engineering
        """
        print("="*80)
        print("DATA LOADING AND AGGREGATION")
        print("="*80)

        df_orders = self.load_sales_data()
        df_daily = self.aggregate_to_daily(df_orders)

        print("\n" + "="*80)
        print("DATA PREPARATION COMPLETE")
        print("="*80)

        return df_daily

