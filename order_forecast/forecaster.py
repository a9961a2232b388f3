"""
Main analysis pipeline orchestrator
Combines data loading, feature engineering, diagnostics, and baseline evaluation
"""

from datetime import datetime
from pathlib import Path
from typing import Optional, Union

import pandas as pd

from order_forecast.config import (
    TRAIN_TEST_CUTOFF, MOVING_AVERAGE_WINDOW, ACF_LAGS
)
from order_forecast.data_loader import DataLoader
from order_forecast.evaluation import evaluate
from order_forecast.exceptions import PipelineError
from order_forecast.feature_engineering import FeatureEngine
from order_forecast.utils import calculate_autocorrelation, summarise_evaluation


class ForecastingPipeline:
    """
    Main orchestrator for the analysis pipeline
    Runs load -> aggregate -> augment -> evaluate and keeps every table
    """

    def __init__(
        self,
        data_file: Optional[Union[str, Path]] = None,
        cutoff_date: Optional[Union[str, datetime, pd.Timestamp]] = None,
        window: Optional[int] = None,
        acf_lags: Optional[int] = None
    ):
        """
        Initialize the pipeline

        Args:
            data_file: Order CSV (default: from config)
            cutoff_date: First test date (default: from config)
            window: Moving-average window (default: from config)
            acf_lags: Autocorrelation lags (default: from config)
        """
        self.data_loader = DataLoader(data_file)
        self.feature_engine = FeatureEngine()

        self.cutoff_date = pd.Timestamp(cutoff_date or TRAIN_TEST_CUTOFF)
        self.window = window if window is not None else MOVING_AVERAGE_WINDOW
        self.acf_lags = acf_lags if acf_lags is not None else ACF_LAGS

        self.df_orders = None
        self.df_daily = None
        self.df_features = None
        self.df_acf = None
        self.evaluation = None

    def _run_stage(self, stage: str, source: str, func, *args):
        """Run one stage, tagging any failure with the stage and its input"""
        try:
            return func(*args)
        except PipelineError as e:
            e.stage = e.stage or stage
            e.source = e.source or source
            print(f"\nPipeline halted at stage '{e.stage}' (input: {e.source})")
            raise

    def load(self) -> pd.DataFrame:
        """Load the raw order records"""
        self.df_orders = self._run_stage(
            'load', str(self.data_loader.data_file), self.data_loader.load_sales_data
        )
        return self.df_orders

    def aggregate(self) -> pd.DataFrame:
        """Aggregate the orders to a daily series"""
        if self.df_orders is None:
            self.load()
        self.df_daily = self._run_stage(
            'aggregate', str(self.data_loader.data_file),
            self.data_loader.aggregate_to_daily, self.df_orders
        )
        return self.df_daily

    def augment(self) -> pd.DataFrame:
        """Add calendar and holiday features"""
        if self.df_daily is None:
            self.aggregate()
        self.df_features = self._run_stage(
            'augment', str(self.data_loader.data_file),
            self.feature_engine.create_all_features, self.df_daily
        )
        return self.df_features

    def autocorrelation(self) -> pd.DataFrame:
        """Autocorrelation of the daily totals"""
        if self.df_daily is None:
            self.aggregate()
        print(f"\nCalculating autocorrelation ({self.acf_lags} lags)...")
        self.df_acf = self._run_stage(
            'autocorrelation', str(self.data_loader.data_file),
            calculate_autocorrelation, self.df_daily, self.acf_lags
        )
        return self.df_acf

    def evaluate(self) -> dict:
        """Score the moving-average persistence forecast"""
        if self.df_features is None:
            self.augment()

        print("\n" + "="*80)
        print("BASELINE EVALUATION")
        print("="*80)
        print(f"Train/Test Cutoff: {self.cutoff_date.date()}")
        print(f"Moving-Average Window: {self.window} days")

        self.evaluation = self._run_stage(
            'evaluate', str(self.cutoff_date.date()),
            evaluate, self.df_features, self.cutoff_date, self.window
        )

        print(f"Training days: {len(self.evaluation['train_ma']):,}")
        print(f"Test days: {len(self.evaluation['forecast']):,}")
        print(f"Forecast (last moving average): {self.evaluation['forecast_value']:.2f}")
        print(f"Mean Absolute Error: {self.evaluation['mae']:.2f}")

        return self.evaluation

    def run(self, use_cache: bool = True) -> dict:
        """
        Run every stage and collect the results

        Args:
            use_cache: If True, reuse tables already computed on this instance

        Returns:
            dict: Intermediate tables, autocorrelation, MAE and summary
        """
        if not use_cache:
            self.df_orders = None
            self.df_daily = None
            self.df_features = None
            self.df_acf = None
            self.evaluation = None

        if self.df_features is None:
            self.augment()
        if self.df_acf is None:
            self.autocorrelation()
        if self.evaluation is None:
            self.evaluate()

        summary = summarise_evaluation(self.evaluation)

        print("\n" + "="*80)
        print("ANALYSIS COMPLETE")
        print("="*80)

        return {
            'orders': self.df_orders,
            'daily': self.df_daily,
            'features': self.df_features,
            'acf': self.df_acf,
            'train_ma': self.evaluation['train_ma'],
            'forecast': self.evaluation['forecast'],
            'mae': self.evaluation['mae'],
            'summary': summary,
            'generated_at': datetime.now().isoformat()
        }


# Convenience function for a one-shot evaluation
def quick_evaluate(
    data_file: Optional[Union[str, Path]] = None,
    cutoff_date: Optional[str] = None,
    window: Optional[int] = None
) -> dict:
    """
    Convenience function for a full run

    Args:
        data_file: Order CSV
        cutoff_date: First test date (YYYY-MM-DD format)
        window: Moving-average window

    Returns:
        dict: Pipeline results
    """
    pipeline = ForecastingPipeline(data_file, cutoff_date, window)
    return pipeline.run()
