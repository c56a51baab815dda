"""Road Map student goals and points ledger service."""
