"""
Calculator defaults, control ranges and environment settings
"""

import os
from dataclasses import fields, replace
from typing import Dict, Tuple

from dotenv import load_dotenv

from revenue_engine import AssumptionInputs

load_dotenv()

# Logging
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()

# Page
PAGE_TITLE = "NZ Banks API Fee Revenue Calculator"
PAGE_ICON = "🏦"
REPO_URL = "https://github.com/silverkiwi/bank-api-fee-calculator"

# Default assumptions shown when the page first loads
DEFAULT_INPUTS = AssumptionInputs(
    api_calls_per_customer=150.0,
    apps_per_customer=2.0,
    percentage_customers_using_api=10.0,
    percentage_reaching_cap=30.0,
    payment_initiations_per_customer=20.0,
)

# (min, max, step) for each assumption control
CONTROL_RANGES: Dict[str, Tuple[float, float, float]] = {
    'api_calls_per_customer': (10.0, 500.0, 10.0),
    'apps_per_customer': (1.0, 10.0, 0.01),
    'percentage_customers_using_api': (1.0, 100.0, 1.0),
    'percentage_reaching_cap': (0.0, 100.0, 1.0),
    'payment_initiations_per_customer': (0.0, 100.0, 1.0),
}


def clamp_inputs(inputs: AssumptionInputs) -> AssumptionInputs:
    """Clamp every assumption into its control range."""
    clamped = {}
    for field in fields(AssumptionInputs):
        min_value, max_value, _ = CONTROL_RANGES[field.name]
        value = getattr(inputs, field.name)
        clamped[field.name] = min(max(value, min_value), max_value)
    return replace(inputs, **clamped)
