"""
Sales Order Forecasting Analysis

This package provides modular components for the daily sales-order analysis:
- Order loading and daily aggregation
- Calendar and exchange-holiday features
- Moving-average baseline evaluation
- Autocorrelation diagnostics and reporting
"""

__version__ = "1.0.0"
