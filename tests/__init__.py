"""
Test suite for the order forecast package.

Contains unit tests for:
- Order loading and daily aggregation
- Calendar and holiday features
- Baseline evaluation and the pipeline orchestrator
"""
