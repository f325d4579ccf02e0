"""
Centralized default values for indicators, rules and numeric representation.

This is the SINGLE SOURCE OF TRUTH for parameter defaults.
All modules should import from here to ensure consistency.
"""

# Numeric representation
DEFAULT_NUM_FACTORY = "double"  # "double" (binary float) or "decimal"
DECIMAL_PRECISION = 32  # Significant digits for DecimalNum arithmetic

# Volatility indicators used by stop rules
ATR_BAR_COUNT = 14  # Wilder's standard period
VOLATILITY_BAR_COUNT = 20  # Rolling window for standard deviation

# Trade defaults
DEFAULT_TRADE_AMOUNT = 1

# Series construction
DEFAULT_BAR_PERIOD = "D"  # pandas frequency used by BarSeries.from_close_prices
DEFAULT_START_DATE = "2020-01-01"

# Strategy defaults
UNSTABLE_BARS = 0
