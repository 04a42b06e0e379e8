"""Titan payout reconciliation against the reference resource reward schedule."""
