"""LedgerKit: administrative command client for ledger nodes."""
