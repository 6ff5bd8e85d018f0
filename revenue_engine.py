"""
NZ Banks API Fee Revenue Engine - Core Calculation Functions
"""

import logging
import math
from dataclasses import dataclass, fields, replace
from typing import List, Sequence, Tuple

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

# Fee schedule (NZD)
DATA_FEE_PER_CALL = 0.01  # 1 cent per successful data API call, per app
MONTHLY_DATA_FEE_CAP = 5.0  # $5 per customer per app per month
PAYMENT_INITIATION_FEE = 0.05  # 5 cents per payment initiation, per app
MONTHS_PER_YEAR = 12


@dataclass(frozen=True)
class BankProfile:
    """A bank and its (approximate) retail customer base."""

    name: str
    customer_count: int
    color: str


@dataclass(frozen=True)
class AssumptionInputs:
    """
    User-adjustable assumptions driving the projection.

    Percentages are expressed on a 0-100 scale, e.g. 10 = 10% of customers.
    Call and initiation counts are monthly, per active customer.
    """

    api_calls_per_customer: float = 150.0
    apps_per_customer: float = 2.0
    percentage_customers_using_api: float = 10.0
    percentage_reaching_cap: float = 30.0
    payment_initiations_per_customer: float = 20.0


@dataclass(frozen=True)
class BankRevenueResult:
    """Projected monthly and annual API fee revenue for one bank."""

    name: str
    customer_count: int
    color: str

    # Customer segmentation
    customers_using_api: int
    customers_below_cap: int
    customers_hitting_cap: int

    # Monthly revenue by stream
    revenue_below_cap: float
    revenue_at_cap: float
    payment_initiation_revenue: float

    total_monthly_revenue: float
    annual_revenue: float

    @property
    def data_api_revenue(self) -> float:
        """Monthly data-access revenue (below cap + capped customers)."""
        return self.revenue_below_cap + self.revenue_at_cap

    @property
    def annual_revenue_below_cap(self) -> float:
        return self.revenue_below_cap * MONTHS_PER_YEAR

    @property
    def annual_revenue_at_cap(self) -> float:
        return self.revenue_at_cap * MONTHS_PER_YEAR

    @property
    def annual_payment_initiation_revenue(self) -> float:
        return self.payment_initiation_revenue * MONTHS_PER_YEAR


# Big 4 banks with their customer numbers (approximated)
BANK_DATA: Tuple[BankProfile, ...] = (
    BankProfile(name='ANZ', customer_count=2_000_000, color='#0072CE'),  # ANZ blue
    BankProfile(name='ASB', customer_count=1_400_000, color='#FFB600'),  # ASB gold
    BankProfile(name='BNZ', customer_count=1_200_000, color='#0075C9'),  # BNZ blue
    BankProfile(name='Westpac', customer_count=1_300_000, color='#D5002B'),  # Westpac red
)


def round_half_up(value: float, digits: int = 0) -> float:
    """
    Round half up to the given number of decimal places.

    Python's round() rounds half to even; the calculator has always shown
    figures rounded half up (2.5 -> 3, 0.25 -> 0.3 at one digit). Non-finite
    values are returned unchanged.
    """
    if not math.isfinite(value):
        return value
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def calculate_bank_revenue(bank: BankProfile, inputs: AssumptionInputs) -> BankRevenueResult:
    """
    Project API fee revenue for a single bank.

    Revenue Streams:
    1. Below cap: customers under the monthly cap pay 1c per call per app
    2. At cap: customers who would exceed the cap pay a flat $5 per app
    3. Payment initiation: 5c per initiation per app, for ALL API users
       (payment initiation is not subject to the data-access cap)

    Args:
        bank: Bank profile (name, customer count, display colour)
        inputs: Assumption inputs, already clamped to their control ranges

    Returns:
        BankRevenueResult with segmentation, monthly revenue by stream and
        annual revenue
    """
    # Customers using open banking APIs
    customers_using_api = int(round_half_up(
        bank.customer_count * (inputs.percentage_customers_using_api / 100)
    ))

    # Split API users around the monthly cap
    customers_below_cap = int(round_half_up(
        customers_using_api * (1 - inputs.percentage_reaching_cap / 100)
    ))
    customers_hitting_cap = customers_using_api - customers_below_cap

    # Linear rate: 1 cent per API call per app
    revenue_below_cap = (customers_below_cap * inputs.api_calls_per_customer
                         * inputs.apps_per_customer * DATA_FEE_PER_CALL)

    # Flat cap per app. Approximation: every capped customer is charged exactly
    # the cap, not min(linear rate, cap).
    revenue_at_cap = customers_hitting_cap * MONTHLY_DATA_FEE_CAP * inputs.apps_per_customer

    payment_initiation_revenue = (customers_using_api * inputs.payment_initiations_per_customer
                                  * inputs.apps_per_customer * PAYMENT_INITIATION_FEE)

    total_monthly_revenue = revenue_below_cap + revenue_at_cap + payment_initiation_revenue
    annual_revenue = total_monthly_revenue * MONTHS_PER_YEAR

    return BankRevenueResult(
        name=bank.name,
        customer_count=bank.customer_count,
        color=bank.color,
        customers_using_api=customers_using_api,
        customers_below_cap=customers_below_cap,
        customers_hitting_cap=customers_hitting_cap,
        revenue_below_cap=revenue_below_cap,
        revenue_at_cap=revenue_at_cap,
        payment_initiation_revenue=payment_initiation_revenue,
        total_monthly_revenue=total_monthly_revenue,
        annual_revenue=annual_revenue,
    )


def project_bank_revenue(
    banks: Sequence[BankProfile],
    inputs: AssumptionInputs
) -> List[BankRevenueResult]:
    """
    Project revenue for every bank, preserving input order.

    Results are recomputed from scratch on every call; nothing is cached.
    """
    results = [calculate_bank_revenue(bank, inputs) for bank in banks]
    logger.debug(
        "Projected bank revenue",
        extra={
            'banks': len(results),
            'total_annual_revenue': total_annual_revenue(results),
        },
    )
    return results


def total_annual_revenue(results: Sequence[BankRevenueResult]) -> float:
    """Combined annual revenue across all banks."""
    return sum((result.annual_revenue for result in results), 0.0)


def cost_per_customer(api_calls_per_customer: float) -> Tuple[float, bool]:
    """
    Monthly data-access charge for one customer on one app.

    Returns:
        Tuple of (charge, capped) where capped is True when the linear rate
        exceeds the monthly cap and the charge is the cap itself
    """
    linear_cost = api_calls_per_customer * DATA_FEE_PER_CALL
    if linear_cost > MONTHLY_DATA_FEE_CAP:
        return MONTHLY_DATA_FEE_CAP, True
    return linear_cost, False


def revenue_stream_table(results: Sequence[BankRevenueResult]) -> pd.DataFrame:
    """
    Annual revenue per stream per bank, one row per bank.

    Columns: Bank, API Calls (Under Cap), Capped Customers,
    Payment Initiation, Total Annual
    """
    return pd.DataFrame({
        'Bank': [result.name for result in results],
        'API Calls (Under Cap)': [result.annual_revenue_below_cap for result in results],
        'Capped Customers': [result.annual_revenue_at_cap for result in results],
        'Payment Initiation': [result.annual_payment_initiation_revenue for result in results],
        'Total Annual': [result.annual_revenue for result in results],
    })


def generate_sensitivity_data(
    parameter_name: str,
    parameter_range: np.ndarray,
    base_inputs: AssumptionInputs,
    banks: Sequence[BankProfile] = BANK_DATA
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Generate sensitivity analysis data by varying one assumption.

    Args:
        parameter_name: AssumptionInputs field to vary
        parameter_range: Array of values to test
        base_inputs: Assumptions held fixed for every other field
        banks: Banks to aggregate over

    Returns:
        Tuple of (parameter values, combined annual revenue at each value)
    """
    valid_names = {field.name for field in fields(AssumptionInputs)}
    if parameter_name not in valid_names:
        raise ValueError(
            f"Unknown assumption '{parameter_name}' "
            f"(expected one of: {', '.join(sorted(valid_names))})"
        )

    results = []

    for value in parameter_range:
        inputs = replace(base_inputs, **{parameter_name: float(value)})
        results.append(total_annual_revenue(project_bank_revenue(banks, inputs)))

    return parameter_range, np.array(results)
