"""
Cost vs. Revenue Analysis - implementation costs, break-even and ROI for the Big 4
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np

from revenue_engine import DATA_FEE_PER_CALL, round_half_up

logger = logging.getLogger(__name__)

# Big 4 banks combined profit of NZ$6.4B in 2023, in millions
TOTAL_BANK_PROFITS = 6400.0

# Approximate cost to a bank of serving one API call (NZD)
API_CALL_OPERATING_COST = 0.0001

# Break-even horizon treated as "fast" by the progress bar
BREAK_EVEN_TARGET_YEARS = 5


@dataclass(frozen=True)
class CostItem:
    """A cost category with low/high estimates in NZ$ millions."""

    category: str
    low_estimate: float
    high_estimate: float
    description: str


# One-time API implementation costs (NZ$ millions)
IMPLEMENTATION_COSTS: Tuple[CostItem, ...] = (
    CostItem(
        category='API Development',
        low_estimate=5,
        high_estimate=15,
        description='Designing RESTful APIs, integrating with legacy core banking systems, testing'
    ),
    CostItem(
        category='Security & Compliance',
        low_estimate=3,
        high_estimate=10,
        description='Encryption, OAuth 2.0 implementation, fraud monitoring, regulatory audits'
    ),
    CostItem(
        category='Third-Party Support',
        low_estimate=2,
        high_estimate=5,
        description='Developer portals, sandbox environments, documentation, and SDKs'
    ),
    CostItem(
        category='Legacy System Upgrades',
        low_estimate=10,
        high_estimate=30,
        description='Modernizing outdated infrastructure to enable API connectivity'
    ),
    CostItem(
        category='Legal & Accreditation',
        low_estimate=1,
        high_estimate=3,
        description='Compliance with the Customer and Product Data Act 2025, legal reviews'
    ),
)

# Annual ongoing costs (NZ$ millions)
ONGOING_COSTS: Tuple[CostItem, ...] = (
    CostItem(
        category='Maintenance & Operations',
        low_estimate=2,
        high_estimate=8,
        description='Hosting (cloud), API monitoring, bug fixes, version updates'
    ),
)


@dataclass(frozen=True)
class CostAnalysisResult:
    """
    Derived cost/ROI metrics. All money values are NZ$ millions.

    Break-even and ROI figures follow IEEE division: when net annual revenue is
    zero the break-even is infinite, and when it is negative the break-even is
    negative. Use break_even_is_meaningful before presenting them.
    """

    total_initial_low: float
    total_initial_high: float
    total_ongoing_low: float
    total_ongoing_high: float

    revenue_in_millions: float
    net_annual_revenue_low: float
    net_annual_revenue_high: float

    years_to_break_even_low: float
    years_to_break_even_high: float
    roi_low: float
    roi_high: float
    cost_percent_of_profit_low: float
    cost_percent_of_profit_high: float

    profit_benchmark: float

    @property
    def break_even_is_meaningful(self) -> bool:
        return (is_meaningful_years(self.years_to_break_even_low)
                and is_meaningful_years(self.years_to_break_even_high))

    @property
    def break_even_progress(self) -> float:
        """Progress bar value (0-100): how far inside the target horizon the high estimate sits."""
        if not is_meaningful_years(self.years_to_break_even_high):
            return 0.0
        return min(100.0, BREAK_EVEN_TARGET_YEARS / self.years_to_break_even_high * 100)

    @property
    def breaks_even_quickly(self) -> bool:
        return (is_meaningful_years(self.years_to_break_even_high)
                and self.years_to_break_even_high < BREAK_EVEN_TARGET_YEARS)


def is_meaningful_years(years: float) -> bool:
    """A break-even period is meaningful only when finite and positive."""
    return math.isfinite(years) and years > 0


def _divide(numerator: float, denominator: float) -> float:
    # x/0 -> +/-inf and 0/0 -> nan instead of ZeroDivisionError
    with np.errstate(divide='ignore', invalid='ignore'):
        return float(np.divide(np.float64(numerator), np.float64(denominator)))


def _sum_estimates(items: Sequence[CostItem]) -> Tuple[float, float]:
    low = sum((item.low_estimate for item in items), 0.0)
    high = sum((item.high_estimate for item in items), 0.0)
    return low, high


def analyze_costs(
    implementation_costs: Sequence[CostItem],
    ongoing_costs: Sequence[CostItem],
    aggregate_annual_revenue: float,
    profit_benchmark: float = TOTAL_BANK_PROFITS
) -> CostAnalysisResult:
    """
    Compare implementation and running costs against projected API fee revenue.

    Formula:
    Net Annual Revenue = Fee Revenue ($M) - Ongoing Costs
    Years to Break Even = Initial Costs / Net Annual Revenue   (1 decimal)
    ROI = Net Annual Revenue / Initial Costs                    (whole %)
    Cost % of Profit = Initial Costs / Profit Benchmark         (1 decimal %)

    Each metric is computed at the low and the high cost estimate.

    Args:
        implementation_costs: One-time cost table (NZ$ millions)
        ongoing_costs: Recurring annual cost table (NZ$ millions)
        aggregate_annual_revenue: Combined annual API fee revenue (NZD, not millions)
        profit_benchmark: Combined annual bank profit (NZ$ millions)

    Returns:
        CostAnalysisResult. Degenerate denominators produce non-finite values,
        never exceptions.
    """
    total_initial_low, total_initial_high = _sum_estimates(implementation_costs)
    total_ongoing_low, total_ongoing_high = _sum_estimates(ongoing_costs)

    revenue_in_millions = aggregate_annual_revenue / 1_000_000

    net_annual_revenue_low = revenue_in_millions - total_ongoing_low
    net_annual_revenue_high = revenue_in_millions - total_ongoing_high

    # Simplified: ignores ramp-up and discounting
    years_to_break_even_low = round_half_up(_divide(total_initial_low, net_annual_revenue_low) * 10) / 10
    years_to_break_even_high = round_half_up(_divide(total_initial_high, net_annual_revenue_high) * 10) / 10

    roi_low = round_half_up(_divide(net_annual_revenue_low, total_initial_low) * 100)
    roi_high = round_half_up(_divide(net_annual_revenue_high, total_initial_high) * 100)

    cost_percent_of_profit_low = round_half_up(_divide(total_initial_low, profit_benchmark) * 1000) / 10
    cost_percent_of_profit_high = round_half_up(_divide(total_initial_high, profit_benchmark) * 1000) / 10

    result = CostAnalysisResult(
        total_initial_low=total_initial_low,
        total_initial_high=total_initial_high,
        total_ongoing_low=total_ongoing_low,
        total_ongoing_high=total_ongoing_high,
        revenue_in_millions=revenue_in_millions,
        net_annual_revenue_low=net_annual_revenue_low,
        net_annual_revenue_high=net_annual_revenue_high,
        years_to_break_even_low=years_to_break_even_low,
        years_to_break_even_high=years_to_break_even_high,
        roi_low=roi_low,
        roi_high=roi_high,
        cost_percent_of_profit_low=cost_percent_of_profit_low,
        cost_percent_of_profit_high=cost_percent_of_profit_high,
        profit_benchmark=profit_benchmark,
    )

    logger.debug(
        "Cost analysis complete",
        extra={
            'revenue_in_millions': revenue_in_millions,
            'years_to_break_even_low': years_to_break_even_low,
            'years_to_break_even_high': years_to_break_even_high,
        },
    )
    return result


def api_fee_markup() -> float:
    """How many times the per-call fee exceeds the per-call operating cost."""
    return DATA_FEE_PER_CALL / API_CALL_OPERATING_COST


def _format_millions(value: float) -> str:
    return f"{value:g}"


def build_insights(result: CostAnalysisResult) -> List[Tuple[str, str]]:
    """
    Narrative commentary for the cost analysis tab.

    Returns:
        List of (title, text) pairs in display order
    """
    initial_range = (f"NZ${_format_millions(result.total_initial_low)}M to "
                     f"NZ${_format_millions(result.total_initial_high)}M")

    if result.break_even_is_meaningful:
        recoup = (f"At current rates, banks would recoup their investment in approximately "
                  f"{result.years_to_break_even_low} to {result.years_to_break_even_high} years.")
    else:
        recoup = ("At current rates, fee revenue does not cover ongoing costs in every estimate, "
                  "so the investment is not recouped from API fees alone.")

    insights = [
        (
            "Implementation Costs vs. Fee Revenue",
            f"The initial API implementation costs for banks range from {initial_range}, "
            f"while projected annual revenue from API fees is NZ${result.revenue_in_millions:.2f}M. "
            f"{recoup}"
        ),
        (
            "Actual Operating Costs vs. Fee Charges",
            f"While the cost to process an API call is minimal (approximately NZ${API_CALL_OPERATING_COST:.4f} per call), "
            f"banks are charging {DATA_FEE_PER_CALL * 100:.0f} cent (NZ${DATA_FEE_PER_CALL:.2f}) per call - "
            f"a markup of roughly {api_fee_markup():.0f}x actual operating costs. "
            "Critics argue this exceeds cost recovery and represents a profit-seeking model."
        ),
        (
            "International Comparison",
            "Unlike New Zealand, the UK, Australia, and Canada have mandated fee-free API access, "
            "treating open banking infrastructure as a digital public utility similar to online banking platforms. "
            "These markets have seen faster innovation and adoption as a result."
        ),
        (
            "Scale of Investment",
            f"API implementation costs represent just {result.cost_percent_of_profit_low}% to "
            f"{result.cost_percent_of_profit_high}% of the NZ${result.profit_benchmark / 1000:.1f}B "
            "combined annual profits reported by New Zealand's major banks in 2023."
        ),
    ]
    return insights
