"""
Core math modules для аллокатора

Целочисленные fixed-point примитивы и конверсия ставка/цена.
"""

# Numerical Safeguards
from src.core.math.numerical_safeguards import (
    # Constants
    SCALE,
    SECONDS_PER_YEAR,
    # Division
    ceil_div,
    mul_div,
    mul_div_up,
    # Utilities
    clamp,
    # Validation
    validate_in_range,
    validate_non_negative,
    validate_positive,
)

# Rate / Price conversion
from src.core.math.rate_price import (
    price_to_rate,
    rate_to_price,
    time_to_maturity,
)

__all__ = [
    # Numerical Safeguards: Constants
    "SCALE",
    "SECONDS_PER_YEAR",
    # Numerical Safeguards: Division
    "ceil_div",
    "mul_div",
    "mul_div_up",
    # Numerical Safeguards: Utilities
    "clamp",
    # Numerical Safeguards: Validation
    "validate_in_range",
    "validate_non_negative",
    "validate_positive",
    # Rate / Price
    "price_to_rate",
    "rate_to_price",
    "time_to_maturity",
]
