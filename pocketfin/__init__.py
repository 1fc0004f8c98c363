"""
PocketFin - Source Package

A personal finance tracker: bank accounts, income/expense transactions,
installment purchases, summary statistics, and Gemini-assisted receipt
scanning and advice.

DESIGN PRINCIPLES:
1. Every derived number is recomputed from the full ledger
2. Ledger math is pure - no clock, no storage, no network
3. AI suggests -> Human confirms -> System saves
4. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "PocketFin Team"
