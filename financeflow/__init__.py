"""
FinanceFlow - Core Package

The ledger and debt-payoff core of a personal finance tracker.

DESIGN PRINCIPLES:
1. Every balance change goes through apply/reverse, and reverse undoes apply exactly
2. The core never blocks on funds; callers validate first
3. Malformed input fails loudly
4. Projections never touch real accounts
5. The store is passed in, never global
"""

__version__ = "1.0.0"
__author__ = "FinanceFlow Team"
