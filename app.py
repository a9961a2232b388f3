"""
Sales Order Analysis Dashboard
Interactive Streamlit application for exploring daily order volume and the moving-average baseline
"""

import streamlit as st
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from order_forecast.config import (
    RAW_DATA_FILE, TRAIN_TEST_CUTOFF, MOVING_AVERAGE_WINDOW, ACF_LAGS
)
from order_forecast.exceptions import PipelineError
from order_forecast.forecaster import ForecastingPipeline
from order_forecast.utils import (
    create_visualization_data,
    format_forecast_table,
    format_number,
    generate_pdf_report
)

# Page configuration
st.set_page_config(
    page_title="Sales Order Analysis",
    page_icon="📦",
    layout="wide",
    initial_sidebar_state="expanded"
)

st.markdown("""
<style>
    .main-header {
        font-size: 2.5rem;
        font-weight: bold;
        color: #1f77b4;
        text-align: center;
        margin-bottom: 2rem;
    }
</style>
""", unsafe_allow_html=True)


# Initialize session state
if 'analysis_results' not in st.session_state:
    st.session_state.analysis_results = None


@st.cache_data
def run_analysis(data_file: str, cutoff_date: str, window: int, acf_lags: int) -> dict:
    """Run and cache the full pipeline for one configuration"""
    pipeline = ForecastingPipeline(
        data_file=data_file,
        cutoff_date=cutoff_date,
        window=window,
        acf_lags=acf_lags
    )
    return pipeline.run()


def main():
    """Main application function"""

    st.markdown('<h1 class="main-header">📦 Sales Order Analysis Dashboard</h1>',
                unsafe_allow_html=True)

    # Sidebar controls
    st.sidebar.header("⚙️ Analysis Configuration")

    data_file = st.sidebar.text_input("Order file (CSV)", value=str(RAW_DATA_FILE))
    cutoff_date = st.sidebar.date_input(
        "Train/Test cutoff",
        value=pd.Timestamp(TRAIN_TEST_CUTOFF).date(),
        help="First date of the test period"
    )
    window = st.sidebar.number_input(
        "Moving-average window (days)", min_value=1, max_value=365,
        value=MOVING_AVERAGE_WINDOW
    )
    acf_lags = st.sidebar.number_input(
        "Autocorrelation lags", min_value=1, max_value=365, value=ACF_LAGS
    )

    if st.sidebar.button("▶️ Run Analysis", type="primary", use_container_width=True):
        with st.spinner("Running analysis..."):
            try:
                st.session_state.analysis_results = run_analysis(
                    data_file, str(cutoff_date), int(window), int(acf_lags)
                )
                st.success("✅ Analysis complete!")
            except PipelineError as e:
                st.session_state.analysis_results = None
                st.error(f"❌ Analysis failed at stage '{e.stage}' (input: {e.source}): {e.message}")

    with st.sidebar.expander("ℹ️ About This Dashboard"):
        st.markdown("""
        Daily ordered quantity is summed across all orders and products.

        **Baseline:** the trailing moving average at the end of the training period
        is carried forward unchanged over the whole test period, and scored with the
        mean absolute error.
        """)

    if st.session_state.analysis_results is not None:
        display_results(st.session_state.analysis_results)
    else:
        st.info("👈 Choose a configuration and click 'Run Analysis' in the sidebar to begin.")


def display_results(results):
    """Display analysis results in tabs"""

    tab1, tab2, tab3, tab4 = st.tabs([
        "📈 Daily Series",
        "📅 Calendar Patterns",
        "🔁 Autocorrelation",
        "🎯 Baseline Evaluation"
    ])

    with tab1:
        display_daily_series(results['features'])

    with tab2:
        display_calendar_patterns(results['features'])

    with tab3:
        display_autocorrelation(results['acf'])

    with tab4:
        display_evaluation(results)


def display_daily_series(df_features):
    """Daily total quantity with holidays highlighted"""

    st.subheader("📈 Daily Ordered Quantity")

    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Order Days", format_number(len(df_features)))
    with col2:
        st.metric("Total Quantity", format_number(df_features['total_quantity'].sum()))
    with col3:
        st.metric("Holiday Order Days", format_number(df_features['is_holiday'].sum()))

    holidays = df_features[df_features['is_holiday'] == 1]

    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=df_features['date'],
        y=df_features['total_quantity'],
        mode='lines',
        name='Daily Quantity',
        line=dict(color='steelblue')
    ))
    fig.add_trace(go.Scatter(
        x=holidays['date'],
        y=holidays['total_quantity'],
        mode='markers',
        name='Exchange Holiday',
        marker=dict(color='orange', size=9)
    ))
    fig.update_layout(xaxis_title="Date", yaxis_title="Quantity Ordered", height=450)
    st.plotly_chart(fig, use_container_width=True)


def display_calendar_patterns(df_features):
    """Breakdowns by weekday, month and quarter"""

    st.subheader("📅 Calendar Patterns")
    viz_data = create_visualization_data(df_features)

    col1, col2 = st.columns(2)

    with col1:
        st.markdown("#### Average Quantity by Weekday")
        fig = px.bar(viz_data['by_weekday'], x='weekday', y='mean',
                     labels={'mean': 'Average Quantity', 'weekday': 'Weekday'})
        st.plotly_chart(fig, use_container_width=True)

    with col2:
        st.markdown("#### Average Quantity by Month")
        fig = px.bar(viz_data['by_month'], x='month', y='mean',
                     labels={'mean': 'Average Quantity', 'month': 'Month'})
        st.plotly_chart(fig, use_container_width=True)

    st.markdown("#### Total Quantity by Quarter")
    fig = px.bar(viz_data['by_quarter'], x='period', y='total_quantity',
                 labels={'total_quantity': 'Total Quantity', 'period': 'Quarter'})
    st.plotly_chart(fig, use_container_width=True)

    st.markdown("#### Holiday vs Regular Days")
    st.dataframe(
        viz_data['by_holiday'][['day_type', 'mean', 'count']].rename(columns={
            'day_type': 'Day Type', 'mean': 'Average Quantity', 'count': 'Days'
        }),
        use_container_width=True,
        hide_index=True
    )


def display_autocorrelation(df_acf):
    """Autocorrelation bars by lag"""

    st.subheader("🔁 Autocorrelation of Daily Quantity")

    fig = go.Figure()
    fig.add_trace(go.Bar(x=df_acf['lag'], y=df_acf['acf'], marker_color='steelblue'))
    fig.update_layout(xaxis_title="Lag (order days)", yaxis_title="ACF", height=400)
    st.plotly_chart(fig, use_container_width=True)


def display_evaluation(results):
    """Moving-average baseline against the test period"""

    summary = results['summary']
    train_ma = results['train_ma']
    df_forecast = results['forecast']

    st.subheader("🎯 Moving-Average Baseline")

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("MAE", format_number(summary['MAE'], 2),
                  help="Mean absolute error over the test period")
    with col2:
        st.metric("RMSE", format_number(summary['RMSE'], 2))
    with col3:
        st.metric("WAPE", f"{summary['WAPE']:.1f}%")
    with col4:
        st.metric("Forecast", format_number(summary['forecast_value'], 2),
                  help="Last training moving average, carried forward")

    fig = go.Figure()
    fig.add_trace(go.Scatter(x=train_ma['date'], y=train_ma['total_quantity'],
                             mode='lines', name='Train', line=dict(color='steelblue')))
    fig.add_trace(go.Scatter(x=train_ma['date'], y=train_ma['moving_average'],
                             mode='lines', name=f"{summary['window']}-day Moving Average",
                             line=dict(color='orange')))
    fig.add_trace(go.Scatter(x=df_forecast['date'], y=df_forecast['total_quantity'],
                             mode='lines', name='Test', line=dict(color='green')))
    fig.add_trace(go.Scatter(x=df_forecast['date'], y=df_forecast['forecast'],
                             mode='lines', name='Forecast', line=dict(color='red', dash='dash')))
    fig.update_layout(xaxis_title="Date", yaxis_title="Quantity Ordered", height=450)
    st.plotly_chart(fig, use_container_width=True)

    df_display = format_forecast_table(df_forecast)

    with st.expander("📊 Test Period Detail", expanded=False):
        st.dataframe(df_display, use_container_width=True, height=400)

        col1, col2 = st.columns(2)

        with col1:
            st.download_button(
                label="📥 Download as CSV",
                data=df_display.to_csv(index=False),
                file_name=f"baseline_{summary['cutoff_date']}.csv",
                mime="text/csv"
            )

        with col2:
            st.download_button(
                label="📄 Download as PDF",
                data=generate_pdf_report(summary, df_display),
                file_name=f"baseline_{summary['cutoff_date']}.pdf",
                mime="application/pdf"
            )


if __name__ == "__main__":
    main()
