"""genesis-audit - verify a one-time ledger migration against its legacy snapshot."""

__version__ = "0.3.0"
