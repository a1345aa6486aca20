"""Reset, backup, restore and demo data for the whole ledger."""
