"""Unit tests for the cost vs. revenue analysis"""

import math

import pytest

from cost_analysis import (
    IMPLEMENTATION_COSTS,
    ONGOING_COSTS,
    TOTAL_BANK_PROFITS,
    CostItem,
    analyze_costs,
    api_fee_markup,
    build_insights,
    is_meaningful_years,
)
from revenue_engine import BANK_DATA, project_bank_revenue, total_annual_revenue


@pytest.fixture
def default_analysis(default_inputs):
    revenue = total_annual_revenue(project_bank_revenue(BANK_DATA, default_inputs))
    return analyze_costs(IMPLEMENTATION_COSTS, ONGOING_COSTS, revenue, TOTAL_BANK_PROFITS)


def test_cost_table_totals(default_analysis):
    assert default_analysis.total_initial_low == 21
    assert default_analysis.total_initial_high == 63
    assert default_analysis.total_ongoing_low == 2
    assert default_analysis.total_ongoing_high == 8


def test_default_break_even_and_roi(default_analysis):
    """$50.268M fee revenue against $21M-$63M initial cost"""
    assert default_analysis.revenue_in_millions == pytest.approx(50.268)
    assert default_analysis.net_annual_revenue_low == pytest.approx(48.268)
    assert default_analysis.net_annual_revenue_high == pytest.approx(42.268)

    # 21 / 48.268 = 0.435 -> 0.4; 63 / 42.268 = 1.490 -> 1.5
    assert default_analysis.years_to_break_even_low == pytest.approx(0.4)
    assert default_analysis.years_to_break_even_high == pytest.approx(1.5)

    # 48.268 / 21 = 229.8% -> 230; 42.268 / 63 = 67.1% -> 67
    assert default_analysis.roi_low == 230
    assert default_analysis.roi_high == 67


def test_cost_percent_of_profit(default_analysis):
    # 21 / 6400 = 0.328% -> 0.3; 63 / 6400 = 0.984% -> 1.0
    assert default_analysis.cost_percent_of_profit_low == pytest.approx(0.3)
    assert default_analysis.cost_percent_of_profit_high == pytest.approx(1.0)
    assert default_analysis.profit_benchmark == 6400


def test_break_even_progress(default_analysis):
    assert default_analysis.break_even_is_meaningful
    assert default_analysis.breaks_even_quickly
    # 5 / 1.5 years caps at 100
    assert default_analysis.break_even_progress == 100.0


def test_slow_break_even_progress():
    # 6M revenue -> net high = -2, low = 4 -> low 5.3 years, high negative
    result = analyze_costs(IMPLEMENTATION_COSTS, ONGOING_COSTS, 6_000_000)

    assert result.years_to_break_even_low == pytest.approx(5.3)
    assert result.years_to_break_even_high < 0
    assert not result.break_even_is_meaningful
    assert result.break_even_progress == 0.0


def test_break_even_progress_partial():
    # net high = 20 - 8 = 12 -> 63 / 12 = 5.25 -> 5.3 years
    result = analyze_costs(IMPLEMENTATION_COSTS, ONGOING_COSTS, 20_000_000)

    assert result.years_to_break_even_high == pytest.approx(5.3)
    assert not result.breaks_even_quickly
    assert result.break_even_progress == pytest.approx(5 / 5.3 * 100)


def test_zero_net_revenue_is_infinite_not_an_error():
    # Revenue exactly equal to low ongoing cost
    result = analyze_costs(IMPLEMENTATION_COSTS, ONGOING_COSTS, 2_000_000)

    assert result.net_annual_revenue_low == 0
    assert result.years_to_break_even_low == math.inf
    assert result.roi_low == 0
    assert not result.break_even_is_meaningful


def test_negative_net_revenue_gives_negative_break_even():
    result = analyze_costs(IMPLEMENTATION_COSTS, ONGOING_COSTS, 0.0)

    assert result.net_annual_revenue_low == -2
    assert result.net_annual_revenue_high == -8
    # 21 / -2 = -10.5; 63 / -8 = -7.875 -> -7.9
    assert result.years_to_break_even_low == pytest.approx(-10.5)
    assert result.years_to_break_even_high == pytest.approx(-7.9)
    # -2 / 21 = -9.5% -> -10
    assert result.roi_low == -10
    assert result.roi_high == -13


def test_empty_cost_tables_do_not_raise():
    result = analyze_costs([], [], 1_000_000)

    assert result.total_initial_low == 0
    assert result.years_to_break_even_low == 0
    assert result.roi_low == math.inf
    assert result.cost_percent_of_profit_low == 0


def test_custom_cost_tables():
    implementation = [CostItem('Build', 1, 2, 'Build it'), CostItem('Test', 1, 2, 'Test it')]
    ongoing = [CostItem('Run', 0.5, 1, 'Run it')]
    result = analyze_costs(implementation, ongoing, 2_500_000, profit_benchmark=100)

    assert result.total_initial_low == 2
    assert result.total_initial_high == 4
    assert result.years_to_break_even_low == pytest.approx(1.0)
    assert result.years_to_break_even_high == pytest.approx(2.7)
    assert result.roi_low == 100
    assert result.roi_high == 38
    assert result.cost_percent_of_profit_low == pytest.approx(2.0)
    assert result.cost_percent_of_profit_high == pytest.approx(4.0)


@pytest.mark.parametrize("years, expected", [
    (1.5, True),
    (0.0, False),
    (-3.2, False),
    (math.inf, False),
    (math.nan, False),
])
def test_is_meaningful_years(years, expected):
    assert is_meaningful_years(years) is expected


def test_api_fee_markup():
    assert api_fee_markup() == pytest.approx(100)


def test_insights(default_analysis):
    insights = build_insights(default_analysis)
    titles = [title for title, _ in insights]

    assert titles == [
        "Implementation Costs vs. Fee Revenue",
        "Actual Operating Costs vs. Fee Charges",
        "International Comparison",
        "Scale of Investment",
    ]
    cost_text = insights[0][1]
    assert "NZ$21M to NZ$63M" in cost_text
    assert "NZ$50.27M" in cost_text
    assert "approximately 0.4 to 1.5 years" in cost_text
    assert "100x" in insights[1][1]
    assert "0.3% to 1.0%" in insights[3][1]
    assert "NZ$6.4B" in insights[3][1]


def test_insights_when_never_recouped():
    result = analyze_costs(IMPLEMENTATION_COSTS, ONGOING_COSTS, 0.0)
    cost_text = build_insights(result)[0][1]

    assert "not recouped" in cost_text
    assert "years" not in cost_text
