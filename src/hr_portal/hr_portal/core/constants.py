"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from decimal import Decimal

DEFAULT_LIST_LIMIT = 200
MAX_TITLE_LENGTH = 255

# Statutory payroll rates (monthly).
HRA_RATE = Decimal("0.40")
PF_RATE = Decimal("0.12")
ESI_RATE = Decimal("0.0075")
MAX_PF_AMOUNT = Decimal("1800")
ESI_SALARY_CEILING = Decimal("21000")
OVERTIME_MULTIPLIER = Decimal("1.5")
STANDARD_WORK_HOURS = 8

# Annual income tax slabs: (upper bound, rate). Last bound is open ended.
TAX_SLABS = (
    (Decimal("250000"), Decimal("0")),
    (Decimal("500000"), Decimal("0.05")),
    (Decimal("1000000"), Decimal("0.20")),
    (None, Decimal("0.30")),
)

MIN_PAYROLL_YEAR = 2000
MAX_PAYROLL_YEAR = 2100
