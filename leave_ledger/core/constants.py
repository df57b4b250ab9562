"""
Constants for the leave accrual engine
"""
from decimal import Decimal

SERVICE_NAME = "leave-ledger"

# Accrual curve anchors (days)
ACCRUAL_BASE_DAYS = Decimal("1.50")
ACCRUAL_FEBRUARY_END_DAYS = Decimal("3.00")
ACCRUAL_YEAR_END_DAYS = Decimal("18.00")

# Ramp lengths (calendar days)
FEBRUARY_RAMP_DAYS = 28
MARCH_TO_DECEMBER_RAMP_DAYS = 305

TWO_PLACES = Decimal("0.01")
ZERO_DAYS = Decimal("0.00")

# Returned by the balance summary when storage is unavailable
DEGRADED_BALANCE_MARKER = "Using default balance"
