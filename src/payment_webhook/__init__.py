"""Stripe → PlayFab payment webhook."""

__version__ = "0.1.0"
