"""
BizBalance - Source Package

A small business-finance dashboard that turns receivables, payables,
credit-card balances and bank balances into a single "Business Net Exact"
(BNE) figure.

DESIGN PRINCIPLES:
1. State is a value - every edit replaces it, nothing mutates in place
2. Calculations are pure and recomputed from scratch
3. Bad input becomes zero at the boundary, never a crash
4. Persistence and logging observe state changes
5. The AI narrates numbers, it never computes them
"""

__version__ = "1.0.0"
__author__ = "BizBalance Team"
