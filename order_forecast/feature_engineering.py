"""
Feature engineering module
Adds calendar fields and exchange holiday flags to the daily series
"""

from datetime import date
from typing import Iterable, List, Set

import pandas as pd
from pandas.tseries.holiday import (
    AbstractHolidayCalendar, Holiday, nearest_workday, sunday_to_monday,
    USMartinLutherKingJr, USPresidentsDay, GoodFriday,
    USMemorialDay, USLaborDay, USThanksgivingDay
)

from order_forecast.config import DATE_COLUMN, CALENDAR_COLUMNS
from order_forecast.exceptions import EmptySeriesError


class ExchangeHolidayCalendar(AbstractHolidayCalendar):
    """
    US exchange holidays

    Independence Day and Christmas falling on a weekend are observed on the
    nearest workday: Saturday moves to Friday, Sunday to Monday. New Year's
    Day only moves forward from a Sunday; the exchange stays open on Dec 31.
    """
    rules = [
        Holiday("New Year's Day", month=1, day=1, observance=sunday_to_monday),
        USMartinLutherKingJr,
        USPresidentsDay,
        GoodFriday,
        USMemorialDay,
        Holiday('Independence Day', month=7, day=4, observance=nearest_workday),
        USLaborDay,
        USThanksgivingDay,
        Holiday('Christmas Day', month=12, day=25, observance=nearest_workday)
    ]


def build_holiday_set(years: Iterable[int]) -> Set[date]:
    """
    Compute the exchange holiday dates for the given years

    Args:
        years: Calendar years to cover

    Returns:
        set: Holiday dates
    """
    years = sorted(set(int(year) for year in years))
    if not years:
        return set()

    holidays = ExchangeHolidayCalendar().holidays(
        start=pd.Timestamp(year=years[0], month=1, day=1),
        end=pd.Timestamp(year=years[-1], month=12, day=31)
    )

    # Years need not be contiguous
    return {ts.date() for ts in holidays if ts.year in years}


def holiday_years(series: pd.DataFrame) -> List[int]:
    """Years spanned by the series, first to last"""
    if len(series) == 0:
        return []
    first = series[DATE_COLUMN].min().year
    last = series[DATE_COLUMN].max().year
    return list(range(first, last + 1))


class FeatureEngine:
    """
    Handles all feature creation for the daily series
    """

    @staticmethod
    def derive_calendar_fields(series: pd.DataFrame) -> pd.DataFrame:
        """
        Create calendar features from the date column

        Args:
            series: Daily series with a date column

        Returns:
            pd.DataFrame: New table with calendar features added
        """
        df = series.copy()
        dates = df[DATE_COLUMN]

        df['time_index'] = range(len(df))
        df['year'] = dates.dt.year
        df['half_year'] = (dates.dt.month > 6).astype(int) + 1
        df['quarter'] = dates.dt.quarter
        df['month'] = dates.dt.month_name().str[:3]
        df['day'] = dates.dt.day
        df['weekday'] = dates.dt.day_name()

        return df

    @staticmethod
    def flag_holidays(series: pd.DataFrame, holiday_set: Iterable[date]) -> pd.DataFrame:
        """
        Flag the dates found in holiday_set

        Args:
            series: Daily series with a date column
            holiday_set: Dates to flag

        Returns:
            pd.DataFrame: New table with is_holiday set to 0 or 1
        """
        df = series.copy()
        holiday_index = pd.DatetimeIndex(sorted(pd.Timestamp(d) for d in holiday_set))
        df['is_holiday'] = df[DATE_COLUMN].dt.normalize().isin(holiday_index).astype(int)
        return df

    def create_all_features(self, series: pd.DataFrame) -> pd.DataFrame:
        """
        Create all features in the correct order

        Args:
            series: Daily series

        Returns:
            pd.DataFrame: Augmented series
        """
        if len(series) == 0:
            raise EmptySeriesError("Cannot augment an empty series", stage='augment')

        print("\n" + "="*80)
        print("FEATURE ENGINEERING PIPELINE")
        print("="*80)

        print("Creating calendar features...")
        df = self.derive_calendar_fields(series)

        years = holiday_years(series)
        print(f"Building exchange holiday calendar for {years[0]}-{years[-1]}...")
        holiday_set = build_holiday_set(years)

        print("Flagging holidays...")
        df = self.flag_holidays(df, holiday_set)

        print(f"\nCalendar features: {', '.join(CALENDAR_COLUMNS)}")
        print(f"Holiday calendar: {len(holiday_set)} dates")
        print(f"Order days falling on a holiday: {int(df['is_holiday'].sum())}")
        print("="*80)

        return df


# Module-level access to the stage operations
derive_calendar_fields = FeatureEngine.derive_calendar_fields
flag_holidays = FeatureEngine.flag_holidays


# Convenience function
def augment_series(series: pd.DataFrame) -> pd.DataFrame:
    """
    Convenience function to create all features

    Args:
        series: Daily series

    Returns:
        pd.DataFrame: Augmented series
    """
    engine = FeatureEngine()
    return engine.create_all_features(series)
