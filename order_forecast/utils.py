"""
Utility functions for the analysis pipeline
Includes metrics calculation, autocorrelation, data formatting, and reporting helpers
"""

import pandas as pd
import numpy as np

from order_forecast.config import DATE_COLUMN, QUANTITY_COLUMN
from order_forecast.exceptions import EmptySeriesError

WEEKDAY_ORDER = ['Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday', 'Sunday']
MONTH_ORDER = ['Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun', 'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec']


def calculate_wape(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    """
    Calculate Weighted Absolute Percentage Error

    Args:
        y_true: Actual values
        y_pred: Predicted values

    Returns:
        float: WAPE percentage (NaN when all actuals are zero)
    """
    denominator = np.sum(np.abs(y_true))
    if denominator == 0:
        return float('nan')
    return float(100 * np.sum(np.abs(y_true - y_pred)) / denominator)


def calculate_metrics(y_true: np.ndarray, y_pred: np.ndarray) -> dict:
    """
    Calculate evaluation metrics for a forecast

    Args:
        y_true: Actual values
        y_pred: Predicted values

    Returns:
        dict: Dictionary of metrics
    """
    from sklearn.metrics import mean_absolute_error, mean_squared_error

    y_true = np.asarray(y_true, dtype=float)
    y_pred = np.asarray(y_pred, dtype=float)

    if y_true.size == 0:
        raise EmptySeriesError("Metrics are undefined for an empty series", stage='evaluate')

    metrics = {}

    # Error metrics
    metrics['MAE'] = float(mean_absolute_error(y_true, y_pred))
    metrics['RMSE'] = float(np.sqrt(mean_squared_error(y_true, y_pred)))
    metrics['WAPE'] = calculate_wape(y_true, y_pred)

    return metrics


def calculate_autocorrelation(series: pd.DataFrame, nlags: int = 40) -> pd.DataFrame:
    """
    Autocorrelation of the daily total quantity

    Args:
        series: Daily series
        nlags: Number of lags (capped at len(series) - 1)

    Returns:
        pd.DataFrame: Columns lag and acf, lag 0 included
    """
    from statsmodels.tsa.stattools import acf

    values = series[QUANTITY_COLUMN].astype(float).values
    if len(values) < 2:
        raise EmptySeriesError("Autocorrelation needs at least two points", stage='autocorrelation')

    nlags = min(nlags, len(values) - 1)
    acfs = acf(values, nlags=nlags, fft=True)

    return pd.DataFrame({'lag': np.arange(len(acfs)), 'acf': acfs})


def format_forecast_table(df: pd.DataFrame) -> pd.DataFrame:
    """
    Format the forecast table for display

    Args:
        df: Forecast table from the evaluator

    Returns:
        pd.DataFrame: Formatted table
    """
    display_columns = {
        DATE_COLUMN: 'Date',
        'weekday': 'Weekday',
        'is_holiday': 'Holiday',
        QUANTITY_COLUMN: 'Actual Quantity',
        'forecast': 'Forecast',
        'abs_error': 'Absolute Error'
    }

    df_display = df.copy()
    df_display['abs_error'] = (df_display[QUANTITY_COLUMN] - df_display['forecast']).abs()

    columns = [col for col in display_columns if col in df_display.columns]
    df_display = df_display[columns]
    df_display.columns = [display_columns[col] for col in columns]

    # Format values
    df_display['Date'] = df_display['Date'].dt.strftime('%Y-%m-%d')
    if 'Holiday' in df_display.columns:
        df_display['Holiday'] = df_display['Holiday'].map({1: 'Yes', 0: ''})
    df_display['Forecast'] = df_display['Forecast'].apply(lambda x: f"{x:.1f}")
    df_display['Absolute Error'] = df_display['Absolute Error'].apply(lambda x: f"{x:.1f}")

    return df_display


def create_visualization_data(df: pd.DataFrame) -> dict:
    """
    Prepare data for the calendar breakdown charts

    Args:
        df: Augmented series

    Returns:
        dict: Dictionary with data for different charts
    """
    viz_data = {}

    # Demand by weekday
    by_weekday = df.groupby('weekday')[QUANTITY_COLUMN].agg(['mean', 'sum', 'count'])
    viz_data['by_weekday'] = by_weekday.reindex(
        [day for day in WEEKDAY_ORDER if day in by_weekday.index]
    ).reset_index()

    # Demand by month
    by_month = df.groupby('month')[QUANTITY_COLUMN].agg(['mean', 'sum', 'count'])
    viz_data['by_month'] = by_month.reindex(
        [month for month in MONTH_ORDER if month in by_month.index]
    ).reset_index()

    # Demand by year and quarter
    by_quarter = df.groupby(['year', 'quarter'])[QUANTITY_COLUMN].sum().reset_index()
    by_quarter['period'] = by_quarter['year'].astype(str) + '-Q' + by_quarter['quarter'].astype(str)
    viz_data['by_quarter'] = by_quarter

    # Holiday vs regular days
    by_holiday = df.groupby('is_holiday')[QUANTITY_COLUMN].agg(['mean', 'count']).reset_index()
    by_holiday['day_type'] = by_holiday['is_holiday'].map({1: 'Holiday', 0: 'Regular'})
    viz_data['by_holiday'] = by_holiday

    return viz_data


def summarise_evaluation(evaluation: dict) -> dict:
    """
    Create a summary of the baseline evaluation for display

    Args:
        evaluation: Result of evaluation.evaluate

    Returns:
        dict: Performance summary
    """
    train_ma = evaluation['train_ma']
    df_forecast = evaluation['forecast']

    summary = {
        'cutoff_date': evaluation['cutoff_date'],
        'window': evaluation['window'],
        'train_days': int(len(train_ma)),
        'test_days': int(len(df_forecast)),
        'train_start': train_ma[DATE_COLUMN].min().strftime('%Y-%m-%d'),
        'test_end': df_forecast[DATE_COLUMN].max().strftime('%Y-%m-%d'),
        'forecast_value': evaluation['forecast_value'],
        'test_total_quantity': int(df_forecast[QUANTITY_COLUMN].sum())
    }
    summary.update(calculate_metrics(df_forecast[QUANTITY_COLUMN].values, df_forecast['forecast'].values))

    return summary


def format_number(value: float, decimals: int = 0) -> str:
    """
    Format large numbers with thousands separators

    Args:
        value: Numeric value
        decimals: Number of decimal places

    Returns:
        str: Formatted number string
    """
    if decimals == 0:
        return f"{value:,.0f}"
    else:
        return f"{value:,.{decimals}f}"


def generate_pdf_report(summary: dict, df_forecast: pd.DataFrame) -> bytes:
    """
    Generate PDF report with the evaluation summary and forecast table

    Args:
        summary: Output of summarise_evaluation
        df_forecast: Forecast table (already formatted)

    Returns:
        bytes: PDF file content
    """
    from io import BytesIO
    from reportlab.lib import colors
    from reportlab.lib.pagesizes import A4
    from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
    from reportlab.lib.units import inch
    from reportlab.platypus import (
        SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
    )
    from reportlab.lib.enums import TA_CENTER

    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer, pagesize=A4,
        rightMargin=0.5*inch, leftMargin=0.5*inch,
        topMargin=0.5*inch, bottomMargin=0.5*inch
    )

    elements = []
    styles = getSampleStyleSheet()

    # Title
    title_style = ParagraphStyle(
        'CustomTitle', parent=styles['Heading1'],
        fontSize=18, textColor=colors.HexColor('#1f77b4'),
        alignment=TA_CENTER, spaceAfter=20
    )
    elements.append(Paragraph("Moving-Average Baseline Report", title_style))

    # Metadata
    meta_text = f"<b>Train/Test Cutoff:</b> {summary['cutoff_date']}<br/>"
    meta_text += f"<b>Window:</b> {summary['window']} days<br/>"
    meta_text += f"<b>Generated:</b> {pd.Timestamp.now().strftime('%Y-%m-%d %H:%M:%S')}"
    elements.append(Paragraph(meta_text, styles['Normal']))
    elements.append(Spacer(1, 0.3*inch))

    heading_style = ParagraphStyle(
        'CustomHeading', parent=styles['Heading2'],
        fontSize=14, textColor=colors.HexColor('#1f77b4'), spaceAfter=10
    )
    elements.append(Paragraph("Summary Statistics", heading_style))

    summary_data = [
        ['Metric', 'Value'],
        ['Training Days', format_number(summary['train_days'])],
        ['Test Days', format_number(summary['test_days'])],
        ['Forecast (last moving average)', format_number(summary['forecast_value'], 2)],
        ['Mean Absolute Error', format_number(summary['MAE'], 2)],
        ['Root Mean Squared Error', format_number(summary['RMSE'], 2)],
        ['WAPE', f"{summary['WAPE']:.1f}%"]
    ]

    summary_table = Table(summary_data, colWidths=[3.5*inch, 2*inch])
    summary_table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#1f77b4')),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
        ('ALIGN', (0, 0), (-1, -1), 'LEFT'),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, 0), 11),
        ('BOTTOMPADDING', (0, 0), (-1, 0), 12),
        ('BACKGROUND', (0, 1), (-1, -1), colors.beige),
        ('GRID', (0, 0), (-1, -1), 1, colors.black),
        ('FONTNAME', (0, 1), (-1, -1), 'Helvetica'),
        ('FONTSIZE', (0, 1), (-1, -1), 10),
    ]))
    elements.append(summary_table)
    elements.append(Spacer(1, 0.4*inch))

    # Detailed forecast table
    elements.append(Paragraph("Test Period Forecast", heading_style))
    elements.append(Paragraph(f"Showing {len(df_forecast)} days", styles['Normal']))
    elements.append(Spacer(1, 0.1*inch))

    max_rows = 100
    df_for_pdf = df_forecast.head(max_rows)

    if len(df_forecast) > max_rows:
        elements.append(Paragraph(
            f"<i>Note: Showing first {max_rows} of {len(df_forecast)} days. "
            f"Download CSV for complete data.</i>",
            styles['Normal']
        ))
        elements.append(Spacer(1, 0.1*inch))

    table_data = [[str(col) for col in df_for_pdf.columns]]
    for _, row in df_for_pdf.iterrows():
        table_data.append([str(val) for val in row.tolist()])

    forecast_table = Table(table_data, repeatRows=1)
    forecast_table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#1f77b4')),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
        ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, 0), 9),
        ('BOTTOMPADDING', (0, 0), (-1, 0), 8),
        ('BACKGROUND', (0, 1), (-1, -1), colors.white),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
        ('FONTNAME', (0, 1), (-1, -1), 'Helvetica'),
        ('FONTSIZE', (0, 1), (-1, -1), 8),
        ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.lightgrey]),
    ]))
    elements.append(forecast_table)

    doc.build(elements)
    pdf_bytes = buffer.getvalue()
    buffer.close()

    return pdf_bytes
