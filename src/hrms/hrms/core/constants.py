"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import date

STANDARD_HOURS_PER_DAY = 8
MINUTES_PER_DAY = 24 * 60

# Spreadsheet serial dates count days from this epoch.
SPREADSHEET_EPOCH = date(1899, 12, 30)

# Written to payroll_run.notes of individual runs for readers of the old convention.
INDIVIDUAL_RUN_TAG = "individual_employee:"

DEFAULT_CREATED_BY_USER_ID = 1
DEFAULT_POOL_SIZE = 5
DEFAULT_PAYROLL_REPORT_LIMIT = 100
PAYROLL_TREND_MONTHS = 6

# Attendance import layout (0-based column indexes, row 1 is a header).
IMPORT_COL_EMPLOYEE = 0
IMPORT_COL_DATE = 2
IMPORT_COL_TIME_IN = 3
IMPORT_COL_TIME_OUT = 4
