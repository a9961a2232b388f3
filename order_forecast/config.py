"""
Configuration file for the sales order analysis
Contains paths, column definitions, and evaluation parameters
"""

from pathlib import Path

# ============================================================================
# PATHS
# ============================================================================

# Base directories
BASE_DIR = Path(__file__).parent.parent
DATA_DIR = BASE_DIR / 'Data'

# Input data files
RAW_DATA_FILE = DATA_DIR / 'sales_data_sample.csv'

# The sample export is not valid UTF-8
CSV_ENCODING = 'latin-1'

# ============================================================================
# COLUMN DEFINITIONS
# ============================================================================

# Column mappings from raw data
RAW_DATA_COLUMNS = {
    'date': 'ORDERDATE',
    'order_number': 'ORDERNUMBER',
    'quantity': 'QUANTITYORDERED',
    'price': 'PRICEEACH',
    'product_line': 'PRODUCTLINE',
    'product_code': 'PRODUCTCODE',
    'status': 'STATUS'
}

# Every raw file must provide these columns
REQUIRED_COLUMNS = list(RAW_DATA_COLUMNS.values())

# ORDERDATE values look like '2/24/2003 0:00'
ORDER_DATE_FORMAT = '%m/%d/%Y %H:%M'

# Columns of the daily series
DATE_COLUMN = 'date'
QUANTITY_COLUMN = 'total_quantity'

# Calendar features added by the feature engine
CALENDAR_COLUMNS = [
    'time_index', 'year', 'half_year', 'quarter',
    'month', 'day', 'weekday', 'is_holiday'
]

# ============================================================================
# EVALUATION PARAMETERS
# ============================================================================

# Trailing moving-average window (days with orders)
MOVING_AVERAGE_WINDOW = 30

# First date of the test period
TRAIN_TEST_CUTOFF = '2005-01-01'

# Number of lags inspected in the autocorrelation diagnostic
ACF_LAGS = 40
