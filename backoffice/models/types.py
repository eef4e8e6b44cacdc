"""
Standard type definitions for database models.

Provides consistent types for monetary and percentage fields across all models.
"""

from sqlalchemy import DECIMAL

# Standard money type for order amounts, sales counters and commissions
# Precision: 12 digits total, 2 after decimal point
# Range: up to 9,999,999,999.99
MoneyType = DECIMAL(12, 2)

# Rate type for both percent (0-100) and legacy fraction (0-1) columns
# Precision: 7 digits total, 4 after decimal point
# Suitable for: 12.5000 (%), 0.0500 (fraction)
RateType = DECIMAL(7, 4)
