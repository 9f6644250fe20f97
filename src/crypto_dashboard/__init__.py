"""Crypto dashboard: local-first watchlist and alerts with server sync."""
