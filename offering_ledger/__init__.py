"""
Offering Ledger - Source Package

A single-user financial ledger for a recurring multi-day church assembly:
offerings counted per service, attendance, institutional and personal
expenses, bank records, and the settlement and reconciliation reports.

DESIGN PRINCIPLES:
1. One document holds every raw input; totals are derived on read
2. Every change is a command applied to a copy of the document
3. Linked entries move in lockstep or not at all
4. Report overrides never touch the books
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Offering Ledger Team"
