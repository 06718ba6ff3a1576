"""
Finledger - Source Package

A personal finance ledger: bank accounts, credit cards with monthly
invoices, bills that group spending over a period, and expenses shared
with other people.

DESIGN PRINCIPLES:
1. Money is exact (Decimal, cents, one currency per amount)
2. Fail early, fail visibly
3. Rejections leave state untouched
4. Every change must be auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Finledger Team"
