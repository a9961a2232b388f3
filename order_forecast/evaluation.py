"""
Baseline evaluation module
Train/test split, trailing moving average, and persistence forecast scoring
"""

from datetime import datetime
from typing import Tuple, Union

import numpy as np
import pandas as pd
from sklearn import metrics

from order_forecast.config import DATE_COLUMN, QUANTITY_COLUMN, MOVING_AVERAGE_WINDOW
from order_forecast.exceptions import EmptySeriesError


def split(
    series: pd.DataFrame,
    cutoff_date: Union[str, datetime, pd.Timestamp]
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Partition the series at cutoff_date

    Args:
        series: Daily (or augmented) series
        cutoff_date: First date of the test period

    Returns:
        tuple: (train, test) with train dates < cutoff <= test dates
    """
    cutoff = pd.Timestamp(cutoff_date)

    if len(series) == 0:
        raise EmptySeriesError("Cannot split an empty series", stage='split', source=str(cutoff.date()))

    mask = series[DATE_COLUMN] < cutoff
    train = series[mask].reset_index(drop=True)
    test = series[~mask].reset_index(drop=True)

    if len(train) == 0:
        raise EmptySeriesError(
            f"No dates before cutoff {cutoff.date()}", stage='split', source=str(cutoff.date())
        )
    if len(test) == 0:
        raise EmptySeriesError(
            f"No dates on or after cutoff {cutoff.date()}", stage='split', source=str(cutoff.date())
        )

    return train, test


def trailing_mean(series: pd.DataFrame, window: int = MOVING_AVERAGE_WINDOW) -> pd.DataFrame:
    """
    Add a right-aligned rolling mean of total_quantity

    The value at row i averages rows i-window+1 through i. The first
    window-1 rows have no value (NaN).
    """
    if window < 1:
        raise ValueError(f"Moving-average window must be at least 1, got {window}")
    if len(series) == 0:
        raise EmptySeriesError("Cannot compute a moving average of an empty series", stage='evaluate')

    df = series.copy()
    df['moving_average'] = df[QUANTITY_COLUMN].astype(float).rolling(
        window=window, min_periods=window
    ).mean()
    return df


def forecast_test(train_ma: pd.DataFrame, test: pd.DataFrame) -> pd.DataFrame:
    """
    Carry the last defined training moving average over the test period

    Args:
        train_ma: Training series with a moving_average column
        test: Test series

    Returns:
        pd.DataFrame: Test series with a constant forecast column
    """
    defined = train_ma['moving_average'].dropna()
    if len(defined) == 0:
        raise EmptySeriesError(
            "Training series has no defined moving average (shorter than the window)",
            stage='evaluate'
        )
    if len(test) == 0:
        raise EmptySeriesError("Nothing to forecast: test series is empty", stage='evaluate')

    df = test.copy()
    df['forecast'] = float(defined.iloc[-1])
    return df


def mean_absolute_error(actual, forecast) -> float:
    """Average of |actual - forecast| over all points"""
    actual = np.asarray(actual, dtype=float)
    forecast = np.asarray(forecast, dtype=float)

    if actual.size == 0:
        raise EmptySeriesError("Mean absolute error is undefined for an empty series", stage='evaluate')
    if actual.shape != forecast.shape:
        raise ValueError(f"Length mismatch: {actual.size} actual vs {forecast.size} forecast values")

    return float(metrics.mean_absolute_error(actual, forecast))


def evaluate(
    series: pd.DataFrame,
    cutoff_date: Union[str, datetime, pd.Timestamp],
    window: int = MOVING_AVERAGE_WINDOW
) -> dict:
    """
    Score the persistence forecast for one cutoff and window

    Args:
        series: Daily (or augmented) series
        cutoff_date: First date of the test period
        window: Moving-average window

    Returns:
        dict: Moving-average table, forecast table, and MAE
    """
    train, test = split(series, cutoff_date)
    train_ma = trailing_mean(train, window)
    df_forecast = forecast_test(train_ma, test)
    mae = mean_absolute_error(df_forecast[QUANTITY_COLUMN], df_forecast['forecast'])

    return {
        'cutoff_date': pd.Timestamp(cutoff_date).strftime('%Y-%m-%d'),
        'window': window,
        'train_ma': train_ma,
        'forecast': df_forecast,
        'forecast_value': float(df_forecast['forecast'].iloc[0]),
        'mae': mae
    }
