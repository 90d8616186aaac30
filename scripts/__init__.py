"""Operator scripts for the training-hours ledger."""
