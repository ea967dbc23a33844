"""Workflows ("MateFlows"): model, store and executor."""
