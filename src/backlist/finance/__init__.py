"""
Funds subsystem.

Components:
- bounty.py: monthly task estimate and per-task payout
- ledger.py: Transaction, balance and LedgerService
- ledger_store.py: SQLite transaction log
"""
