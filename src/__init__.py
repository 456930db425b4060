"""
Cash Book - Source Package

Bookkeeping for a small rental: a cash book of income and expenses,
reservations, and planned expenses, kept in a Google Sheets spreadsheet.

DESIGN PRINCIPLES:
1. Fail early, fail visibly
2. No silent corrections
3. Every change must be auditable
4. Storage layer is swappable
5. Amounts are shown in the currency of their own year
"""

__version__ = "0.1.0"
__author__ = "Cash Book Team"
