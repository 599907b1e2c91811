"""
Transfer Ledger

A minimal double-entry money-transfer ledger: accounts holding a balance in
a single currency, pure domain operations that validate transfers, and an
in-memory store that commits them atomically.
"""

__version__ = "1.0.0"
