"""Pytest fixtures for the revenue and cost models"""

import pytest

from revenue_engine import AssumptionInputs, BankProfile


@pytest.fixture
def default_inputs() -> AssumptionInputs:
    """The assumptions the calculator opens with"""
    return AssumptionInputs(
        api_calls_per_customer=150.0,
        apps_per_customer=2.0,
        percentage_customers_using_api=10.0,
        percentage_reaching_cap=30.0,
        payment_initiations_per_customer=20.0,
    )


@pytest.fixture
def anz() -> BankProfile:
    return BankProfile(name='ANZ', customer_count=2_000_000, color='#0072CE')
