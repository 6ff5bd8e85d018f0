"""
NZ Banks API Fee Revenue Calculator
Interactive tool for estimating the Big 4 banks' open banking API fee revenue
"""

import logging
import math
from dataclasses import asdict

import streamlit as st
import numpy as np
import pandas as pd
import plotly.graph_objects as go

import config
from cost_analysis import (
    IMPLEMENTATION_COSTS,
    ONGOING_COSTS,
    TOTAL_BANK_PROFITS,
    analyze_costs,
    build_insights,
    is_meaningful_years
)
from logging_setup import setup_logging
from revenue_engine import (
    BANK_DATA,
    DATA_FEE_PER_CALL,
    AssumptionInputs,
    cost_per_customer,
    generate_sensitivity_data,
    project_bank_revenue,
    revenue_stream_table,
    total_annual_revenue
)

setup_logging(config.LOG_LEVEL)
logger = logging.getLogger(__name__)

STREAM_COLORS = {
    'API Calls (Under Cap)': '#2980b9',  # Blue
    'Capped Customers': '#f39c12',  # Orange
    'Payment Initiation': '#27ae60',  # Green
}


def format_nzd(value: float) -> str:
    """Whole dollars with thousands separators, e.g. $50,268,000"""
    return f"${value:,.0f}"


def escape_dollars(text: str) -> str:
    # Streamlit markdown renders $...$ as LaTeX
    return text.replace("$", "\\$")


def format_years(years: float) -> str:
    return f"{years:g}" if is_meaningful_years(years) else "Not reached"


def format_percent(value: float) -> str:
    return f"{value:g}%" if math.isfinite(value) else "n/a"


def cost_table(items, total_label: str) -> pd.DataFrame:
    """Cost items plus a totals row (NZ$ millions)"""
    cost_df = pd.DataFrame({
        'Category': [item.category for item in items],
        'Description': [item.description for item in items],
        'Low Est. (NZ$M)': [item.low_estimate for item in items],
        'High Est. (NZ$M)': [item.high_estimate for item in items],
    })
    totals = pd.DataFrame({
        'Category': [total_label],
        'Description': [''],
        'Low Est. (NZ$M)': [cost_df['Low Est. (NZ$M)'].sum()],
        'High Est. (NZ$M)': [cost_df['High Est. (NZ$M)'].sum()],
    })
    return pd.concat([cost_df, totals], ignore_index=True)


# Page configuration
st.set_page_config(
    page_title=config.PAGE_TITLE,
    page_icon=config.PAGE_ICON,
    layout="wide"
)

# Header
st.title(config.PAGE_TITLE)
st.markdown(
    "Estimate how much revenue the Big 4 banks could generate from open banking API fees "
    f"· [View on GitHub]({config.REPO_URL})"
)

# Sidebar inputs
st.sidebar.header("Adjust Parameters")
defaults = config.DEFAULT_INPUTS
ranges = config.CONTROL_RANGES

with st.sidebar.expander("**Data API Usage**", expanded=True):
    min_value, max_value, step = ranges['api_calls_per_customer']
    api_calls_per_customer = st.slider(
        "API Calls Per Customer Per Month",
        min_value=int(min_value),
        max_value=int(max_value),
        value=int(defaults.api_calls_per_customer),
        step=int(step),
        help="Monthly data API calls made on behalf of each active customer, per app"
    )
    per_customer_cost, capped = cost_per_customer(api_calls_per_customer)
    st.caption(escape_dollars(
        f"Cost per customer: ${api_calls_per_customer * DATA_FEE_PER_CALL:.2f}"
        + (f" (capped at ${per_customer_cost:.0f})" if capped else "")
    ))

    min_value, max_value, step = ranges['apps_per_customer']
    apps_per_customer = st.number_input(
        "Apps Per Customer",
        min_value=min_value,
        max_value=max_value,
        value=defaults.apps_per_customer,
        step=step,
        format="%.2f",
        help="Average number of open banking apps used by each customer"
    )

with st.sidebar.expander("**Adoption**", expanded=True):
    min_value, max_value, step = ranges['percentage_customers_using_api']
    percentage_customers_using_api = st.slider(
        "Cust % using Open Banking",
        min_value=min_value,
        max_value=max_value,
        value=defaults.percentage_customers_using_api,
        step=step,
        help="Percentage of each bank's customers using open banking apps"
    )

    min_value, max_value, step = ranges['percentage_reaching_cap']
    percentage_reaching_cap = st.slider(
        "User % hitting $5 cap",
        min_value=min_value,
        max_value=max_value,
        value=defaults.percentage_reaching_cap,
        step=step,
        help="Percentage of API users whose monthly data fees reach the $5 cap"
    )

with st.sidebar.expander("**Payments**", expanded=True):
    min_value, max_value, step = ranges['payment_initiations_per_customer']
    payment_initiations_per_customer = st.slider(
        "Payment Initiations Per Customer (per month)",
        min_value=int(min_value),
        max_value=int(max_value),
        value=int(defaults.payment_initiations_per_customer),
        step=int(step),
        help="Each payment initiation costs 5¢"
    )

inputs = config.clamp_inputs(AssumptionInputs(
    api_calls_per_customer=float(api_calls_per_customer),
    apps_per_customer=float(apps_per_customer),
    percentage_customers_using_api=float(percentage_customers_using_api),
    percentage_reaching_cap=float(percentage_reaching_cap),
    payment_initiations_per_customer=float(payment_initiations_per_customer),
))

# Calculate revenue for each bank
bank_revenue_data = project_bank_revenue(BANK_DATA, inputs)
combined_annual_revenue = total_annual_revenue(bank_revenue_data)
cost_result = analyze_costs(
    IMPLEMENTATION_COSTS,
    ONGOING_COSTS,
    combined_annual_revenue,
    TOTAL_BANK_PROFITS
)
logger.info(
    "Recalculated projection",
    extra={'inputs': asdict(inputs), 'total_annual_revenue': combined_annual_revenue}
)

# Total revenue impact
st.header("Total Revenue Impact")

col1, col2 = st.columns([1, 2])

with col1:
    st.metric(
        "Combined Annual Revenue",
        format_nzd(combined_annual_revenue),
        help="From API fees across all Big 4 banks"
    )
    st.metric(
        "Combined Monthly Revenue",
        format_nzd(sum(bank.total_monthly_revenue for bank in bank_revenue_data))
    )
    st.metric(
        "API Users (All Banks)",
        f"{sum(bank.customers_using_api for bank in bank_revenue_data):,}"
    )

with col2:
    revenue_fig = go.Figure(go.Bar(
        x=[bank.name for bank in bank_revenue_data],
        y=[bank.annual_revenue for bank in bank_revenue_data],
        marker=dict(color=[bank.color for bank in bank_revenue_data]),
        text=[format_nzd(bank.annual_revenue) for bank in bank_revenue_data],
        textposition="outside",
        name="Annual Revenue (NZD)",
        hovertemplate='<b>%{x}</b><br>$%{y:,.0f}<extra></extra>'
    ))
    revenue_fig.update_layout(
        title="Annual Revenue (NZD)",
        showlegend=False,
        height=350,
        margin=dict(t=60, b=40, l=50, r=30),
        yaxis_title="Annual Revenue ($)",
        yaxis_tickformat="$,.0f"
    )
    st.plotly_chart(revenue_fig, config={'displayModeBar': False}, use_container_width=True)

breakdown_tab, comparison_tab, cost_tab, sensitivity_tab, about_tab = st.tabs([
    "Revenue Breakdown",
    "Revenue Comparison",
    "Cost Analysis",
    "Sensitivity Analysis",
    "About API Fees"
])

# =================================================================
# REVENUE BREAKDOWN
# =================================================================
with breakdown_tab:
    bank_cols = st.columns(len(bank_revenue_data))

    for bank_col, bank in zip(bank_cols, bank_revenue_data):
        with bank_col:
            st.subheader(bank.name)
            st.caption(f"{bank.customer_count:,} customers")
            st.metric("Annual Revenue", format_nzd(bank.annual_revenue))

            st.markdown("**Monthly Breakdown:**")
            st.markdown(escape_dollars(
                f"Data API Revenue: **{format_nzd(bank.data_api_revenue)}**  \n"
                f"Payment API Revenue: **{format_nzd(bank.payment_initiation_revenue)}**"
            ))

            st.markdown("**Customer Stats:**")
            st.markdown(
                f"API Users: **{bank.customers_using_api:,}**  \n"
                f"Customers at Cap: **{bank.customers_hitting_cap:,}**  \n"
                f"Apps Per Customer: **{inputs.apps_per_customer:.2f}**"
            )

# =================================================================
# REVENUE COMPARISON
# =================================================================
with comparison_tab:
    st.subheader("Revenue Streams Comparison")

    stream_df = revenue_stream_table(bank_revenue_data)

    comparison_fig = go.Figure()
    for stream, color in STREAM_COLORS.items():
        comparison_fig.add_trace(go.Bar(
            x=stream_df['Bank'],
            y=stream_df[stream],
            name=stream,
            marker=dict(color=color),
            hovertemplate='<b>%{x}</b><br>' + stream + ': $%{y:,.0f}<extra></extra>'
        ))
    comparison_fig.update_layout(
        barmode='group',
        height=450,
        yaxis_title="Annual Revenue ($)",
        yaxis_tickformat="$,.0f",
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="left", x=0),
        hovermode='x unified'
    )
    st.plotly_chart(comparison_fig, config={'displayModeBar': False}, use_container_width=True)

    display_df = stream_df.copy()
    for column in display_df.columns[1:]:
        display_df[column] = display_df[column].map(format_nzd)
    st.dataframe(display_df, hide_index=True, width='stretch')

# =================================================================
# COST ANALYSIS
# =================================================================
with cost_tab:
    st.subheader("Cost vs. Revenue Analysis")

    col1, col2 = st.columns(2)

    with col1:
        st.write("**API Implementation Costs**")
        st.dataframe(cost_table(IMPLEMENTATION_COSTS, "Initial Total"), hide_index=True, width='stretch')

    with col2:
        st.write("**Annual Ongoing Costs & Revenue**")
        st.dataframe(cost_table(ONGOING_COSTS, "Ongoing Total"), hide_index=True, width='stretch')

        revenue_df = pd.DataFrame({
            'Line': ['API Fee Revenue', 'Net Annual Revenue'],
            'Low Est. (NZ$M)': [cost_result.revenue_in_millions, cost_result.net_annual_revenue_low],
            'High Est. (NZ$M)': [cost_result.revenue_in_millions, cost_result.net_annual_revenue_high],
        }).round(2)
        st.dataframe(revenue_df, hide_index=True, width='stretch')

    if cost_result.net_annual_revenue_high < 0:
        st.warning(
            "Net annual revenue is negative at the high ongoing-cost estimate: "
            "API fees do not cover running costs under these assumptions.",
            icon="⚠️"
        )

    col1, col2, col3 = st.columns(3)

    with col1:
        st.metric(
            "Years to Break Even",
            f"{format_years(cost_result.years_to_break_even_low)} - "
            f"{format_years(cost_result.years_to_break_even_high)}",
            help="Based on current API fee revenue"
        )
        st.progress(
            int(cost_result.break_even_progress),
            text="Under 5 years" if cost_result.breaks_even_quickly else "5 years or more"
        )

    with col2:
        st.metric(
            "Annual ROI After Break-Even",
            f"{format_percent(cost_result.roi_low)} - {format_percent(cost_result.roi_high)}",
            help="Return on initial investment"
        )

    with col3:
        st.metric(
            "% of Annual Bank Profits",
            f"{format_percent(cost_result.cost_percent_of_profit_low)} - "
            f"{format_percent(cost_result.cost_percent_of_profit_high)}",
            help=f"API implementation costs vs. NZ${cost_result.profit_benchmark / 1000:.1f}B annual profits"
        )
        st.progress(min(100, int(cost_result.cost_percent_of_profit_high)))

    st.markdown("---")
    st.subheader("Cost Analysis Insights")
    for title, text in build_insights(cost_result):
        st.markdown(f"**{title}**")
        st.markdown(escape_dollars(text))

# =================================================================
# SENSITIVITY ANALYSIS
# =================================================================
with sensitivity_tab:
    st.markdown("""
    These charts show how changing each assumption impacts **Combined Annual Revenue** while keeping all
    other parameters constant. The red dashed line marks the current projection.
    """)

    sensitivity_charts = [
        ('api_calls_per_customer', "API Calls Per Customer", np.arange(10, 510, 10)),
        ('apps_per_customer', "Apps Per Customer", np.linspace(1, 10, 37)),
        ('percentage_customers_using_api', "Cust % using Open Banking", np.arange(1, 101, 1)),
        ('percentage_reaching_cap', "User % hitting $5 cap", np.arange(0, 101, 1)),
        ('payment_initiations_per_customer', "Payment Initiations Per Customer", np.arange(0, 101, 1)),
    ]

    chart_cols = st.columns(2)
    for index, (parameter_name, label, parameter_range) in enumerate(sensitivity_charts):
        values, revenues = generate_sensitivity_data(parameter_name, parameter_range, inputs, BANK_DATA)

        fig = go.Figure()
        fig.add_trace(go.Scatter(
            x=values,
            y=revenues / 1_000_000,
            mode='lines',
            name='Combined Annual Revenue',
            line=dict(color='blue', width=2)
        ))
        fig.add_hline(
            y=combined_annual_revenue / 1_000_000,
            line_dash="dash",
            line_color="red",
            annotation_text="Current"
        )
        fig.update_layout(
            title=f"Annual Revenue vs {label}",
            xaxis_title=label,
            yaxis_title="Annual Revenue (NZ$M)",
            hovermode='x unified',
            height=300
        )

        with chart_cols[index % 2]:
            st.plotly_chart(fig, config={'displayModeBar': False})

# =================================================================
# ABOUT
# =================================================================
with about_tab:
    st.subheader("About NZ Open Banking API Fees")

    st.markdown("""
    **Fee Structure**

    Under the Customer and Product Data Act 2025, banks can charge:
    - Up to 1 cent per successful API call for data access
    - Maximum of \\$5 per customer per month for transaction data
    - 5 cents per transaction for payment initiation
    - Fees apply per app, so customers using multiple apps generate more revenue
    """)

    st.warning(
        "**International Comparison**: Unlike the UK, Australia, and Canada, which mandate free API access, "
        "New Zealand's approach allows banks to charge fees, which critics argue may stifle innovation and competition."
    )

    st.success(
        "**Timeline**: Major banks (ANZ, ASB, BNZ, Westpac) must comply with API standards by December 2025. "
        "Kiwibank follows in 2026."
    )
