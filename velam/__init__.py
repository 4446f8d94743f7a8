"""
Velam Fund Ledger - Source Package

Ledger for a small rotating community fund: member contributions,
loans (principal + interest) and expenses, with the dashboards and
monthly rollups the members look at every festival season.

DESIGN PRINCIPLES:
1. Every figure is recomputed from the recorded entries
2. Fail early, fail visibly
3. No silent corrections
4. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Velam Fund Team"
