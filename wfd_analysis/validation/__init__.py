"""Validation utilities.

This package contains *non-interactive* tooling used to check the extractors
against analytic reference pulses whose features are known in closed form.
"""
