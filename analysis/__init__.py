"""Reporting and analysis of reconciled payouts."""
