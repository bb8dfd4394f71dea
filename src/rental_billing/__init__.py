"""Rental Billing — pricing and settlement engine for vehicle rentals.

Turns a vehicle's tariff plus a requested time window into a quote, and
reconciles that quote against post-ride facts (odometer, late return) into a
final settlement.  Every surface that shows money calls into this package.
"""

__version__ = "1.0.0"
